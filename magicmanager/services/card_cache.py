"""
Card cache and ownership enrichment for search results.

For each card in a Scryfall result page:
1. Read the cache row by Scryfall id; on a miss, upsert one from the payload
2. Look up how many copies the requesting user owns
3. Return the cached record annotated with in_collection / collection_quantity

INVARIANTS:
- Output has exactly one item per input card, in input order
- A failure enriching one card never fails the page; that card degrades to a
  record built from the payload with in_collection=False
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.db.operations import get_cached_card, get_ownership, upsert_card
from magicmanager.models.card import CardRecord, EnrichedCard
from magicmanager.models.scryfall import ScryfallCard

logger = logging.getLogger(__name__)


async def cache_card(session: AsyncSession, card: ScryfallCard) -> CardRecord:
    """Upsert a freshly fetched card and return its cached record."""
    db_card = await upsert_card(session, card)
    return CardRecord.model_validate(db_card)


async def enrich_card(session: AsyncSession, user_id: str, card: ScryfallCard) -> EnrichedCard:
    """
    Ensure one card is cached and annotate it with the user's ownership.

    Raises:
        SQLAlchemyError: If the cache or ownership lookup fails
    """
    cached = await get_cached_card(session, card.id)
    if cached is None:
        cached = await upsert_card(session, card)

    in_collection, quantity = await get_ownership(session, user_id, card.id)

    record = CardRecord.model_validate(cached)
    return EnrichedCard(
        **record.model_dump(),
        in_collection=in_collection,
        collection_quantity=quantity,
    )


def degraded_card(card: ScryfallCard) -> EnrichedCard:
    """Minimal record for a card whose enrichment failed."""
    record = CardRecord.from_payload(card)
    return EnrichedCard(**record.model_dump(), in_collection=False, collection_quantity=0)


async def enrich_search_results(
    session: AsyncSession,
    user_id: str,
    cards: list[ScryfallCard],
) -> list[EnrichedCard]:
    """
    Enrich a page of search results.

    Cards are processed one at a time on the request's session (an
    AsyncSession cannot be shared by concurrent tasks). Each card runs in its
    own SAVEPOINT so a database error rolls back only that card's writes.

    Args:
        session: Request-scoped database session
        user_id: Requesting user
        cards: Scryfall result page data

    Returns:
        One EnrichedCard per input card, same order
    """
    enriched: list[EnrichedCard] = []

    for card in cards:
        try:
            async with session.begin_nested():
                item = await enrich_card(session, user_id, card)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(
                "CARD_ENRICH_FAILED",
                extra={"scryfall_id": card.id, "card_name": card.name, "error": str(e)},
            )
            enriched.append(degraded_card(card))
            continue

        enriched.append(item)

    return enriched
