"""
Scheduled job to refresh the card cache.

Re-fetches cached cards from Scryfall so prices and legalities stay
current. Can be run as a standalone script or called from a scheduler.
"""

import asyncio
import logging
from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from magicmanager.api.dependencies import build_scryfall_client
from magicmanager.config import settings
from magicmanager.db.database import async_session_factory, session_scope
from magicmanager.db.operations import get_cached_card_ids, upsert_card
from magicmanager.models.errors import AppError, NotFoundError
from magicmanager.scryfall import ScryfallClient

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


@dataclass
class RefreshResult:
    refreshed: int = 0
    missing: int = 0
    failed: int = 0


async def refresh_batch(
    session: AsyncSession, scryfall: ScryfallClient, scryfall_ids: list[str]
) -> RefreshResult:
    """
    Re-fetch and upsert one batch of cached cards.

    A card Scryfall no longer knows is counted as missing and left as is.
    Other per-card failures are counted and skipped.
    """
    result = RefreshResult()
    for scryfall_id in scryfall_ids:
        try:
            card = await scryfall.get_card(scryfall_id)
        except NotFoundError:
            logger.warning("Card %s no longer exists on Scryfall", scryfall_id)
            result.missing += 1
            continue
        except (AppError, httpx.HTTPError) as e:
            logger.error("Error fetching card %s: %s", scryfall_id, e)
            result.failed += 1
            continue

        await upsert_card(session, card)
        result.refreshed += 1
    return result


async def run_card_refresh(
    scryfall: ScryfallClient,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
    limit: int | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> RefreshResult:
    """
    Refresh cached cards, least recently refreshed first.

    Args:
        scryfall: Gateway used for the lookups (rate limited)
        session_factory: Session factory for the cache database
        limit: Max number of cards to refresh. If None, refreshes all.
        batch_size: Cards upserted per transaction

    Returns:
        Counts of refreshed, missing, and failed cards
    """
    async with session_factory() as session:
        scryfall_ids = await get_cached_card_ids(session, limit=limit)
    logger.info("Refreshing %d cached cards...", len(scryfall_ids))

    total = RefreshResult()
    for start in range(0, len(scryfall_ids), batch_size):
        batch = scryfall_ids[start : start + batch_size]
        async with session_scope(session_factory) as session:
            result = await refresh_batch(session, scryfall, batch)

        total.refreshed += result.refreshed
        total.missing += result.missing
        total.failed += result.failed

    logger.info(
        "Card refresh complete. Refreshed %d, missing %d, failed %d",
        total.refreshed,
        total.missing,
        total.failed,
    )
    return total


async def run_refresh(limit: int | None = None) -> RefreshResult:
    """Open an HTTP client and refresh the cache with default settings."""
    async with httpx.AsyncClient(timeout=settings.scryfall_timeout) as http_client:
        return await run_card_refresh(build_scryfall_client(http_client), limit=limit)


def main() -> None:
    """CLI entry point for running the card refresh."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_refresh())


if __name__ == "__main__":
    main()
