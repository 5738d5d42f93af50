"""
Collection search service.

Filtered, sorted, paginated browsing of one user's collection.

Supports requests like:
- "My red and green cards"          -> colors=["R", "G"] (any overlap)
- "Creatures or artifacts"          -> types=["Creature", "Artifact"]
- "3-drops and cheaper from NEO"    -> cmc_max=3, sets=["neo"]
- "Anything mentioning 'draw'"      -> q="draw" (name, rules text, type line)

The page of rows and the total count come from two separate queries.
Both take their WHERE clause from build_collection_filters so the count
always describes the same row set the page is cut from.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from magicmanager.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from magicmanager.db.operations import COLOR_ORDER
from magicmanager.models.card import CollectionEntry, Rarity
from magicmanager.models.db import CardCacheDB, CollectionCardDB

SortKey = Literal["name", "cmc", "rarity", "set", "added_at"]
SortOrder = Literal["asc", "desc"]

SORT_COLUMNS = {
    "name": CardCacheDB.name,
    "cmc": CardCacheDB.cmc,
    "rarity": CardCacheDB.rarity,
    "set": CardCacheDB.set_code,
    "added_at": CollectionCardDB.added_at,
}


class CollectionSearchParams(BaseModel):
    """Validated collection search parameters."""

    q: str | None = None
    colors: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    sets: list[str] = Field(default_factory=list)
    cmc_min: float | None = Field(default=None, ge=0, le=20)
    cmc_max: float | None = Field(default=None, ge=0, le=20)
    rarity: list[Rarity] = Field(default_factory=list)
    sort: SortKey = "name"
    order: SortOrder = "asc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("colors")
    @classmethod
    def _check_colors(cls, colors: list[str]) -> list[str]:
        normalized = [c.strip().upper() for c in colors]
        invalid = [c for c in normalized if len(c) != 1 or c not in COLOR_ORDER]
        if invalid:
            raise ValueError(f"Unknown color code(s): {', '.join(invalid)}")
        return normalized

    @model_validator(mode="after")
    def _check_cmc_range(self) -> "CollectionSearchParams":
        if self.cmc_min is not None and self.cmc_max is not None and self.cmc_min > self.cmc_max:
            raise ValueError("cmc_min cannot exceed cmc_max")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    has_more: bool = Field(alias="hasMore")


class CollectionPage(BaseModel):
    """One page of collection entries plus pagination info."""

    data: list[CollectionEntry] = Field(default_factory=list)
    pagination: Pagination


def build_collection_filters(
    user_id: str, params: CollectionSearchParams
) -> list[ColumnElement[bool]]:
    """
    Build the WHERE predicates for a collection search.

    All predicates are ANDed. Card-level predicates assume the query joins
    collection_cards to cards_cache.

    Args:
        user_id: Owner whose collection is searched (always applied)
        params: Validated search parameters

    Returns:
        Predicates shared by the data query and the count query
    """
    filters: list[ColumnElement[bool]] = [CollectionCardDB.user_id == user_id]

    if params.q:
        filters.append(
            or_(
                CardCacheDB.name.icontains(params.q, autoescape=True),
                CardCacheDB.oracle_text.icontains(params.q, autoescape=True),
                CardCacheDB.type_line.icontains(params.q, autoescape=True),
            )
        )

    # Overlap: the card has at least one of the requested colors
    if params.colors:
        filters.append(or_(*(CardCacheDB.color_key.contains(c) for c in params.colors)))

    if params.types:
        filters.append(
            or_(*(CardCacheDB.type_line.icontains(t, autoescape=True) for t in params.types))
        )

    if params.sets:
        filters.append(CardCacheDB.set_code.in_([s.lower() for s in params.sets]))

    if params.cmc_min is not None:
        filters.append(CardCacheDB.cmc >= params.cmc_min)

    if params.cmc_max is not None:
        filters.append(CardCacheDB.cmc <= params.cmc_max)

    if params.rarity:
        filters.append(CardCacheDB.rarity.in_(params.rarity))

    return filters


async def search_collection(
    session: AsyncSession,
    user_id: str,
    params: CollectionSearchParams,
) -> CollectionPage:
    """
    Search a user's collection.

    Args:
        session: Database session
        user_id: Requesting user
        params: Validated search parameters

    Returns:
        CollectionPage with at most `params.limit` entries; has_more is
        True when entries exist beyond this page
    """
    filters = build_collection_filters(user_id, params)

    sort_column = SORT_COLUMNS[params.sort]
    ordering = sort_column.asc() if params.order == "asc" else sort_column.desc()

    data_query = (
        select(CollectionCardDB)
        .join(CollectionCardDB.card)
        .options(contains_eager(CollectionCardDB.card))
        .where(*filters)
        .order_by(ordering, CollectionCardDB.id.asc())
        .offset(params.offset)
        .limit(params.limit)
    )
    count_query = (
        select(func.count(CollectionCardDB.id))
        .select_from(CollectionCardDB)
        .join(CollectionCardDB.card)
        .where(*filters)
    )

    rows = (await session.execute(data_query)).scalars().all()
    total = (await session.execute(count_query)).scalar_one()

    return CollectionPage(
        data=[CollectionEntry.model_validate(row) for row in rows],
        pagination=Pagination(
            page=params.page,
            limit=params.limit,
            total=total,
            has_more=total > params.page * params.limit,
        ),
    )
