"""
Shared FastAPI dependencies for the Scryfall gateway.

One httpx client and one RateLimiter are created at startup and shared by
every request, so the dispatch interval holds across the whole process.
"""

from typing import Annotated

import httpx
from fastapi import Depends, Request

from magicmanager.config import settings
from magicmanager.scryfall import RateLimitedClient, RateLimiter, ScryfallClient


def build_scryfall_client(
    http_client: httpx.AsyncClient,
    limiter: RateLimiter | None = None,
) -> ScryfallClient:
    """Wire a gateway around an HTTP client and a (shared) rate limiter."""
    fetcher = RateLimitedClient(
        http_client,
        limiter or RateLimiter(interval=settings.request_interval),
        backoff=settings.rate_limit_backoff,
    )
    return ScryfallClient(fetcher, base_url=settings.scryfall_api_base)


def get_scryfall_client(request: Request) -> ScryfallClient:
    """Dependency returning the process-wide gateway created at startup."""
    client: ScryfallClient = request.app.state.scryfall
    return client


Scryfall = Annotated[ScryfallClient, Depends(get_scryfall_client)]
