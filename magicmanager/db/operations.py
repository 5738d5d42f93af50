"""
Database CRUD operations.

Provides async functions for the card cache and for collection entries.
Callers own the transaction; these functions only flush.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from magicmanager.models.db import CardCacheDB, CollectionCardDB
from magicmanager.models.scryfall import ScryfallCard

COLOR_ORDER = "WUBRG"


def color_key(colors: list[str]) -> str:
    """Canonical WUBRG-ordered letter string for a color list."""
    return "".join(c for c in COLOR_ORDER if c in colors)


# --- Card Cache Operations ---


def card_values_from_payload(card: ScryfallCard) -> dict[str, Any]:
    """Map a Scryfall card payload to card cache column values."""
    return {
        "name": card.name,
        "mana_cost": card.mana_cost,
        "cmc": card.cmc,
        "type_line": card.type_line,
        "oracle_text": card.oracle_text,
        "colors": list(card.colors),
        "color_identity": list(card.color_identity),
        "color_key": color_key(card.colors),
        "keywords": card.keywords,
        "power": card.power,
        "toughness": card.toughness,
        "image_uris": card.image_uris.model_dump() if card.image_uris else None,
        "prices": card.prices.model_dump(),
        "legalities": dict(card.legalities),
        "set_code": card.set,
        "set_name": card.set_name,
        "rarity": card.rarity,
    }


async def get_cached_card(session: AsyncSession, scryfall_id: str) -> CardCacheDB | None:
    """
    Get a cached card by Scryfall id.

    Returns None on a cache miss.
    """
    result = await session.execute(
        select(CardCacheDB).where(CardCacheDB.scryfall_id == scryfall_id)
    )
    return result.scalar_one_or_none()


async def upsert_card(session: AsyncSession, card: ScryfallCard) -> CardCacheDB:
    """
    Insert or update a cached card.

    If a row with the same Scryfall id exists, refreshes every column from
    the payload. Otherwise creates a new row.
    """
    values = card_values_from_payload(card)
    existing = await get_cached_card(session, card.id)

    if existing:
        for column, value in values.items():
            setattr(existing, column, value)
        await session.flush()
        return existing

    db_card = CardCacheDB(scryfall_id=card.id, **values)
    session.add(db_card)
    await session.flush()
    return db_card


async def get_cached_card_ids(session: AsyncSession, limit: int | None = None) -> list[str]:
    """Get cached Scryfall ids, least recently refreshed first."""
    query = select(CardCacheDB.scryfall_id).order_by(CardCacheDB.updated_at.asc())
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


# --- Collection Operations ---


async def get_ownership(session: AsyncSession, user_id: str, scryfall_id: str) -> tuple[bool, int]:
    """
    Check whether a user owns a card.

    Sums quantities across every condition/foil variant the user holds.

    Returns:
        Tuple of (in_collection, total_quantity)
    """
    result = await session.execute(
        select(
            func.count(CollectionCardDB.id),
            func.coalesce(func.sum(CollectionCardDB.quantity), 0),
        ).where(
            CollectionCardDB.user_id == user_id,
            CollectionCardDB.scryfall_id == scryfall_id,
        )
    )
    entries, quantity = result.one()
    return entries > 0, int(quantity)


async def get_collection_entry(
    session: AsyncSession,
    user_id: str,
    scryfall_id: str,
    condition: str,
    foil: bool,
) -> CollectionCardDB | None:
    """Get the entry matching an exact (user, card, condition, foil) variant."""
    result = await session.execute(
        select(CollectionCardDB)
        .where(
            CollectionCardDB.user_id == user_id,
            CollectionCardDB.scryfall_id == scryfall_id,
            CollectionCardDB.condition == condition,
            CollectionCardDB.foil == foil,
        )
        .options(joinedload(CollectionCardDB.card))
    )
    return result.scalar_one_or_none()


async def get_collection_entry_by_id(
    session: AsyncSession, user_id: str, entry_id: int
) -> CollectionCardDB | None:
    """
    Get a collection entry by id, scoped to its owner.

    Returns None if the entry does not exist or belongs to another user.
    """
    result = await session.execute(
        select(CollectionCardDB)
        .where(CollectionCardDB.id == entry_id, CollectionCardDB.user_id == user_id)
        .options(joinedload(CollectionCardDB.card))
    )
    return result.scalar_one_or_none()


async def get_user_entries(session: AsyncSession, user_id: str) -> list[CollectionCardDB]:
    """Get all of a user's collection entries with their cards."""
    result = await session.execute(
        select(CollectionCardDB)
        .where(CollectionCardDB.user_id == user_id)
        .options(joinedload(CollectionCardDB.card))
    )
    return list(result.scalars().all())
