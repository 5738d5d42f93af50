"""
Scryfall card search gateway.

Executes search, autocomplete, and lookup requests through the
rate-limited fetcher and normalizes Scryfall error objects:
- search: not_found is an empty result, other errors raise ScryfallApiError
- autocomplete: any failure degrades to no suggestions
- single-card lookups: not_found raises NotFoundError
"""

import logging
from typing import TypeVar

import httpx

from magicmanager.config import settings
from magicmanager.models.errors import (
    AppError,
    NotFoundError,
    ScryfallApiError,
    UpstreamError,
)
from magicmanager.models.scryfall import (
    ScryfallCard,
    ScryfallCatalog,
    ScryfallErrorPayload,
    ScryfallList,
    ScryfallModel,
    ScryfallSet,
    ScryfallSetList,
    decode_payload,
    is_error_payload,
)
from magicmanager.scryfall.query import SearchFilters, build_query
from magicmanager.scryfall.rate_limit import RateLimitedClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=ScryfallModel)

UNIQUE_MODES = ("cards", "art", "prints")


def _flag(value: bool) -> str:
    return "true" if value else "false"


class ScryfallClient:
    """
    Card search gateway over the Scryfall REST API.

    Args:
        fetcher: Rate-limited fetcher shared by the whole process
        base_url: API root, e.g. https://api.scryfall.com
    """

    def __init__(self, fetcher: RateLimitedClient, base_url: str = settings.scryfall_api_base):
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    async def _get(
        self, path: str, model: type[M], params: dict[str, str] | None = None
    ) -> M | ScryfallErrorPayload:
        """
        GET an API path and decode the body.

        Scryfall sends error objects with 4xx statuses; those come back as a
        ScryfallErrorPayload instead of raising. Rate limiting and bodies that
        are not Scryfall errors still raise UpstreamError.
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self.fetcher.fetch(url, params=params)
        except UpstreamError as e:
            if e.status != 429 and is_error_payload(e.payload):
                return ScryfallErrorPayload.model_validate(e.payload)
            raise
        return decode_payload(response.json(), model)

    async def search(
        self,
        query: str,
        unique: str | None = None,
        page: int | None = None,
        include_extras: bool | None = None,
        include_multilingual: bool | None = None,
    ) -> ScryfallList:
        """
        Full-text card search.

        Args:
            query: Scryfall query string
            unique: "cards" (default), "art", or "prints"
            page: 1-based result page
            include_extras: Include tokens, emblems, and other extras
            include_multilingual: Include non-English printings

        Returns:
            One page of results; an empty list when nothing matches

        Raises:
            ScryfallApiError: If Scryfall reports any error other than not_found
        """
        params = {"q": query, "unique": unique or "cards"}
        if page:
            params["page"] = str(page)
        if include_extras is not None:
            params["include_extras"] = _flag(include_extras)
        if include_multilingual is not None:
            params["include_multilingual"] = _flag(include_multilingual)

        result = await self._get("/cards/search", ScryfallList, params)

        if isinstance(result, ScryfallErrorPayload):
            if result.is_not_found:
                return ScryfallList.empty()
            raise ScryfallApiError(result.code, result.details, result.status)

        return result

    async def autocomplete(self, query: str) -> list[str]:
        """
        Card name suggestions for a partial name.

        Never raises: backs live-typing UI, so failures yield no suggestions.
        """
        try:
            result = await self._get("/cards/autocomplete", ScryfallCatalog, {"q": query})
        except (AppError, httpx.HTTPError, ValueError) as e:
            logger.warning("Scryfall autocomplete failed for %r: %s", query, e)
            return []

        if isinstance(result, ScryfallErrorPayload):
            return []
        return result.data

    async def get_card(self, scryfall_id: str) -> ScryfallCard:
        """
        Get a card by Scryfall id.

        Raises:
            NotFoundError: If no card has this id
        """
        result = await self._get(f"/cards/{scryfall_id}", ScryfallCard)
        return self._card_or_raise(result)

    async def get_card_by_name(self, name: str, set_code: str | None = None) -> ScryfallCard:
        """
        Get a card by exact name, optionally within one set.

        Raises:
            NotFoundError: If no card has this exact name
        """
        params = {"exact": name}
        if set_code:
            params["set"] = set_code
        result = await self._get("/cards/named", ScryfallCard, params)
        return self._card_or_raise(result)

    async def get_card_by_fuzzy_name(self, name: str) -> ScryfallCard:
        """
        Get the card whose name best matches a misspelled or partial name.

        Raises:
            NotFoundError: If nothing matches, or the name is ambiguous
        """
        result = await self._get("/cards/named", ScryfallCard, {"fuzzy": name})
        return self._card_or_raise(result)

    async def get_sets(self) -> list[ScryfallSet]:
        """
        Get every set Scryfall knows about.

        Raises:
            ScryfallApiError: If Scryfall reports an error
        """
        result = await self._get("/sets", ScryfallSetList)
        if isinstance(result, ScryfallErrorPayload):
            raise ScryfallApiError(result.code, result.details or "Failed to fetch sets")
        return result.data

    async def advanced_search(
        self,
        filters: SearchFilters,
        page: int | None = None,
        unique: str | None = None,
    ) -> ScryfallList:
        """
        Compile structured filters to a query and search with it.

        Empty filters compile to an empty query, which is sent as-is; how
        Scryfall answers it decides the outcome.
        """
        query = build_query(filters)
        logger.debug("Advanced search compiled to %r", query)
        return await self.search(query, unique=unique, page=page)
