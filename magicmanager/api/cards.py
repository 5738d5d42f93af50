"""
Card search API endpoints.

Searches Scryfall, caches every returned card, and marks which ones the
requesting user already owns.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.api.auth import CurrentUser
from magicmanager.api.dependencies import Scryfall
from magicmanager.config import MAX_QUERY_LENGTH, MAX_SEARCH_PAGE
from magicmanager.db.database import get_session
from magicmanager.db.operations import get_cached_card
from magicmanager.models.card import CardRecord, EnrichedCard
from magicmanager.models.scryfall import ScryfallList
from magicmanager.scryfall.query import SearchFilters
from magicmanager.services.card_cache import cache_card, enrich_search_results

UniqueMode = Literal["cards", "art", "prints"]

router = APIRouter(prefix="/api/cards", tags=["cards"])


class CardSearchResponse(BaseModel):
    """A Scryfall result page whose cards carry ownership info."""

    object: Literal["list"] = "list"
    total_cards: int = 0
    has_more: bool = False
    next_page: str | None = None
    data: list[EnrichedCard] = Field(default_factory=list)


class AutocompleteResponse(BaseModel):
    data: list[str] = Field(default_factory=list)


class AdvancedSearchRequest(BaseModel):
    """Request model for structured card search."""

    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int | None = Field(default=None, ge=1, le=MAX_SEARCH_PAGE)
    unique: UniqueMode | None = None


async def _enriched_response(
    session: AsyncSession, user_id: str, result: ScryfallList
) -> CardSearchResponse:
    data = await enrich_search_results(session, user_id, result.data)
    return CardSearchResponse(
        total_cards=result.total_cards,
        has_more=result.has_more,
        next_page=result.next_page,
        data=data,
    )


@router.get("/search", response_model=CardSearchResponse)
async def search_cards(
    user_id: CurrentUser,
    scryfall: Scryfall,
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str, Query(min_length=1, max_length=MAX_QUERY_LENGTH)],
    page: Annotated[int | None, Query(ge=1, le=MAX_SEARCH_PAGE)] = None,
    unique: UniqueMode | None = None,
) -> CardSearchResponse:
    """
    Search cards by Scryfall query.

    Every card in the page is cached and annotated with in_collection and
    collection_quantity for the requesting user. No matches is an empty
    page, not an error.
    """
    result = await scryfall.search(q, unique=unique, page=page)
    return await _enriched_response(session, user_id, result)


@router.post("/advanced", response_model=CardSearchResponse)
async def advanced_search(
    request: AdvancedSearchRequest,
    user_id: CurrentUser,
    scryfall: Scryfall,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardSearchResponse:
    """Search with structured filters instead of raw query syntax."""
    result = await scryfall.advanced_search(
        request.filters, page=request.page, unique=request.unique
    )
    return await _enriched_response(session, user_id, result)


@router.get("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    _user_id: CurrentUser,
    scryfall: Scryfall,
    q: Annotated[str, Query(min_length=1, max_length=MAX_QUERY_LENGTH)],
) -> AutocompleteResponse:
    """Card name suggestions. Returns an empty list when Scryfall fails."""
    return AutocompleteResponse(data=await scryfall.autocomplete(q))


@router.get("/{scryfall_id}", response_model=CardRecord)
async def get_card(
    scryfall_id: str,
    _user_id: CurrentUser,
    scryfall: Scryfall,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardRecord:
    """
    Get one card by Scryfall id.

    Served from the cache when present; otherwise fetched and cached.
    Returns 404 when Scryfall has no such card.
    """
    cached = await get_cached_card(session, scryfall_id)
    if cached is not None:
        return CardRecord.model_validate(cached)

    card = await scryfall.get_card(scryfall_id)
    return await cache_card(session, card)
