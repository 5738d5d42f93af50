"""
Collection mutation and statistics service.

INVARIANTS:
- A user may only read or change their own entries
- (user, card, condition, foil) identifies one entry; adding an exact
  duplicate increases its quantity instead of creating a row
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.db.operations import (
    COLOR_ORDER,
    get_cached_card,
    get_collection_entry,
    get_collection_entry_by_id,
    get_user_entries,
)
from magicmanager.models.db import CardCacheDB, CollectionCardDB
from magicmanager.models.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def add_to_collection(
    session: AsyncSession,
    user_id: str,
    scryfall_id: str,
    quantity: int = 1,
    condition: str = "near_mint",
    foil: bool = False,
    notes: str | None = None,
) -> CollectionCardDB:
    """
    Add copies of a cached card to a user's collection.

    If the user already has an entry with the same condition and foil,
    its quantity grows by `quantity` and new notes (if any) replace the old.
    Otherwise a new entry is created.

    Raises:
        NotFoundError: If the card is not in the card cache
    """
    card = await get_cached_card(session, scryfall_id)
    if card is None:
        raise NotFoundError("Card not found in database", detail=scryfall_id)

    existing = await get_collection_entry(session, user_id, scryfall_id, condition, foil)

    if existing is None:
        entry = CollectionCardDB(
            user_id=user_id,
            card=card,
            quantity=quantity,
            condition=condition,
            foil=foil,
            notes=notes,
        )
        try:
            async with session.begin_nested():
                session.add(entry)
        except IntegrityError:
            # A concurrent add created this variant after our lookup
            existing = await get_collection_entry(session, user_id, scryfall_id, condition, foil)
            if existing is None:
                raise
        else:
            logger.info(
                "COLLECTION_ENTRY_CREATED",
                extra={"user_id": user_id, "scryfall_id": scryfall_id, "condition": condition},
            )
            return entry

    existing.quantity += quantity
    if notes:
        existing.notes = notes
    await session.flush()
    logger.info(
        "COLLECTION_QUANTITY_INCREASED",
        extra={"user_id": user_id, "scryfall_id": scryfall_id, "quantity": existing.quantity},
    )
    return existing


async def update_collection_entry(
    session: AsyncSession,
    user_id: str,
    entry_id: int,
    quantity: int | None = None,
    condition: str | None = None,
    foil: bool | None = None,
    notes: str | None = None,
) -> CollectionCardDB:
    """
    Change an entry's quantity, condition, foil flag, or notes.

    Only fields passed as non-None are changed. Quantity may drop to 0.

    Raises:
        ValidationError: If the change collides with another entry of the user
        NotFoundError: If the entry does not exist or is not the user's
    """
    entry = await get_collection_entry_by_id(session, user_id, entry_id)
    if entry is None:
        raise NotFoundError("Collection entry not found")

    try:
        async with session.begin_nested():
            if quantity is not None:
                entry.quantity = quantity
            if condition is not None:
                entry.condition = condition
            if foil is not None:
                entry.foil = foil
            if notes is not None:
                entry.notes = notes
    except IntegrityError as e:
        # Another entry already holds this (card, condition, foil) variant
        raise ValidationError(
            "An entry with this condition and foil already exists for this card"
        ) from e

    return entry


async def remove_from_collection(session: AsyncSession, user_id: str, entry_id: int) -> None:
    """
    Delete an entry from a user's collection.

    Raises:
        NotFoundError: If the entry does not exist or is not the user's
    """
    entry = await get_collection_entry_by_id(session, user_id, entry_id)
    if entry is None:
        raise NotFoundError("Collection entry not found")

    await session.delete(entry)
    await session.flush()


# --- Statistics ---


@dataclass
class CollectionStats:
    """Aggregate numbers for one user's collection."""

    total_cards: int = 0
    unique_cards: int = 0
    total_value: float = 0.0
    color_distribution: dict[str, int] = field(default_factory=dict)
    type_distribution: dict[str, int] = field(default_factory=dict)
    rarity_distribution: dict[str, int] = field(default_factory=dict)
    set_distribution: dict[str, int] = field(default_factory=dict)


def extract_primary_type(type_line: str) -> str:
    """Extract primary card type from type line."""
    if not type_line:
        return "Unknown"

    # Double-faced cards: take the front face
    type_line = type_line.split("//")[0].strip()

    # First match wins
    type_order = [
        "Creature",
        "Planeswalker",
        "Instant",
        "Sorcery",
        "Enchantment",
        "Artifact",
        "Land",
    ]

    for card_type in type_order:
        if card_type in type_line:
            return card_type

    return "Other"


def card_price(card: CardCacheDB, foil: bool) -> float:
    """USD price for one copy, 0.0 when Scryfall has no price."""
    prices = card.prices or {}
    raw = prices.get("usd_foil") if foil else prices.get("usd")
    if raw is None and foil:
        raw = prices.get("usd")
    try:
        return float(raw) if raw is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _add(counts: dict[str, int], key: str, quantity: int) -> None:
    counts[key] = counts.get(key, 0) + quantity


async def collection_stats(session: AsyncSession, user_id: str) -> CollectionStats:
    """
    Aggregate a user's collection.

    Colors count each copy once per color it has ("C" for colorless), so
    multicolor cards appear under several colors.
    """
    entries = await get_user_entries(session, user_id)
    stats = CollectionStats()
    unique_ids: set[str] = set()
    value = 0.0

    for entry in entries:
        card = entry.card
        qty = entry.quantity
        unique_ids.add(entry.scryfall_id)
        stats.total_cards += qty
        value += card_price(card, entry.foil) * qty

        colors = [c for c in COLOR_ORDER if c in (card.colors or [])]
        for color in colors or ["C"]:
            _add(stats.color_distribution, color, qty)

        _add(stats.type_distribution, extract_primary_type(card.type_line), qty)
        _add(stats.rarity_distribution, card.rarity, qty)
        _add(stats.set_distribution, card.set_code, qty)

    stats.unique_cards = len(unique_ids)
    stats.total_value = round(value, 2)
    return stats
