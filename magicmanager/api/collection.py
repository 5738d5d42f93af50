"""
Collection API endpoints.

Browse, add to, edit, and summarize the requesting user's collection.
Every endpoint is scoped to the authenticated user.
"""

from typing import Annotated
from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.api.auth import CurrentUser
from magicmanager.db.database import get_session
from magicmanager.models.card import CollectionEntry, Condition
from magicmanager.models.errors import ValidationError, validation_details
from magicmanager.services.collection import (
    add_to_collection,
    collection_stats,
    remove_from_collection,
    update_collection_entry,
)
from magicmanager.services.collection_search import (
    CollectionPage,
    CollectionSearchParams,
    search_collection,
)

router = APIRouter(prefix="/api/collection", tags=["collection"])


class AddToCollectionRequest(BaseModel):
    """Request model for adding copies of a card."""

    scryfall_id: UUID = Field(..., description="Scryfall id of a cached card")
    quantity: int = Field(default=1, ge=1, le=100)
    condition: Condition = "near_mint"
    foil: bool = False
    notes: str | None = Field(default=None, max_length=500)


class UpdateCollectionRequest(BaseModel):
    """Request model for editing an entry. Omitted fields are unchanged."""

    quantity: int | None = Field(default=None, ge=0, le=100)
    condition: Condition | None = None
    foil: bool | None = None
    notes: str | None = Field(default=None, max_length=500)


class DeleteResponse(BaseModel):
    id: int
    deleted: bool


class CollectionStatsResponse(BaseModel):
    """Response model for collection statistics."""

    total_cards: int = 0
    unique_cards: int = 0
    total_value: float = Field(default=0.0, description="Estimated USD value")
    color_distribution: dict[str, int] = Field(default_factory=dict)
    type_distribution: dict[str, int] = Field(default_factory=dict)
    rarity_distribution: dict[str, int] = Field(default_factory=dict)
    set_distribution: dict[str, int] = Field(default_factory=dict)


def _split(value: str | None) -> list[str]:
    """Split a comma-separated query value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def collection_search_params(
    q: str | None = None,
    colors: str | None = None,
    types: str | None = None,
    sets: str | None = None,
    cmc_min: str | None = None,
    cmc_max: str | None = None,
    rarity: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> CollectionSearchParams:
    """
    Dependency that parses collection search query parameters.

    List parameters are comma-separated (colors=R,G). Absent or empty values
    fall back to defaults.

    Raises:
        ValidationError: If any parameter is out of range or unknown
    """
    raw = {
        "q": q or None,
        "colors": _split(colors),
        "types": _split(types),
        "sets": _split(sets),
        "cmc_min": cmc_min or None,
        "cmc_max": cmc_max or None,
        "rarity": _split(rarity),
        "sort": sort or None,
        "order": order or None,
        "page": page or None,
        "limit": limit or None,
    }
    try:
        return CollectionSearchParams.model_validate(
            {key: value for key, value in raw.items() if value is not None}
        )
    except pydantic.ValidationError as e:
        raise ValidationError(details=validation_details(e.errors())) from e


@router.get("/search", response_model=CollectionPage)
async def search_user_collection(
    user_id: CurrentUser,
    params: Annotated[CollectionSearchParams, Depends(collection_search_params)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionPage:
    """
    Filter, sort, and page through the user's collection.

    Returns `{data, pagination: {page, limit, total, hasMore}}`.
    """
    return await search_collection(session, user_id, params)


@router.post("/add", response_model=CollectionEntry)
async def add_card(
    request: AddToCollectionRequest,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionEntry:
    """
    Add copies of a card to the collection.

    The card must already be cached (i.e. returned by a search). Adding the
    same condition and foil again increases the existing entry's quantity.
    """
    entry = await add_to_collection(
        session,
        user_id,
        str(request.scryfall_id),
        quantity=request.quantity,
        condition=request.condition,
        foil=request.foil,
        notes=request.notes,
    )
    return CollectionEntry.model_validate(entry)


@router.get("/stats", response_model=CollectionStatsResponse)
async def get_collection_stats(
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionStatsResponse:
    """Totals, estimated value, and color/type/rarity/set breakdowns."""
    stats = await collection_stats(session, user_id)
    return CollectionStatsResponse(
        total_cards=stats.total_cards,
        unique_cards=stats.unique_cards,
        total_value=stats.total_value,
        color_distribution=stats.color_distribution,
        type_distribution=stats.type_distribution,
        rarity_distribution=stats.rarity_distribution,
        set_distribution=stats.set_distribution,
    )


@router.patch("/{entry_id}", response_model=CollectionEntry)
async def update_entry(
    entry_id: int,
    request: UpdateCollectionRequest,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionEntry:
    """Edit quantity, condition, foil, or notes of one entry."""
    entry = await update_collection_entry(
        session,
        user_id,
        entry_id,
        quantity=request.quantity,
        condition=request.condition,
        foil=request.foil,
        notes=request.notes,
    )
    return CollectionEntry.model_validate(entry)


@router.delete("/{entry_id}", response_model=DeleteResponse)
async def delete_entry(
    entry_id: int,
    user_id: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Remove one entry from the collection."""
    await remove_from_collection(session, user_id, entry_id)
    return DeleteResponse(id=entry_id, deleted=True)
