"""
Rate-limited HTTP fetching for the Scryfall API.

Scryfall asks clients to keep 50-100ms between requests and answers 429
when they don't. This module enforces the interval and retries a 429 once.

INVARIANTS:
- Consecutive dispatches through one RateLimiter are at least `interval` apart,
  no matter how many coroutines share it
- Only dispatch timing is serialized; responses are awaited outside the lock
- A 429 is retried at most once; a second 429 is terminal
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from magicmanager.config import MAX_ATTEMPTS, settings
from magicmanager.models.errors import UpstreamError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class RateLimiter:
    """
    Minimum-interval throttle shared by every caller holding the instance.

    The timestamp of the last dispatch is guarded by an asyncio.Lock so
    concurrent callers queue up instead of all reading the same stale value.
    """

    def __init__(
        self,
        interval: float = settings.request_interval,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait for this caller's dispatch slot and claim it."""
        async with self._lock:
            if self._last_dispatch is not None:
                elapsed = self._clock() - self._last_dispatch
                if elapsed < self.interval:
                    await self._sleep(self.interval - elapsed)
            self._last_dispatch = self._clock()


def _json_body(response: httpx.Response) -> dict[str, Any] | None:
    """Decode a JSON object body, or None if the body is not JSON."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


class RateLimitedClient:
    """
    Wraps an httpx.AsyncClient with the rate limiter and 429 retry policy.

    Args:
        http_client: Client used for the actual requests
        limiter: Throttle shared across the process
        backoff: Seconds to wait after a 429 before the retry
        max_attempts: Total dispatches allowed per fetch (initial + retries)
        sleep: Awaitable sleep used for the backoff (injectable for tests)
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        limiter: RateLimiter,
        backoff: float = settings.rate_limit_backoff,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.http_client = http_client
        self.limiter = limiter
        self.backoff = backoff
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def fetch(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        GET a URL, respecting the rate limit.

        Returns:
            The successful (2xx) response

        Raises:
            UpstreamError: On any non-2xx status, or on a 429 that persists
                after the retry
            httpx.RequestError: On transport failures
        """
        request_headers = {
            "User-Agent": settings.scryfall_user_agent,
            "Accept": "application/json",
        }
        if headers:
            request_headers.update(headers)

        for attempt in range(1, self.max_attempts + 1):
            await self.limiter.acquire()
            response = await self.http_client.get(url, params=params, headers=request_headers)

            if response.is_success:
                return response

            if response.status_code == 429 and attempt < self.max_attempts:
                logger.warning(
                    "SCRYFALL_RATE_LIMITED",
                    extra={"url": url, "attempt": attempt, "backoff": self.backoff},
                )
                await self._sleep(self.backoff)
                continue

            raise UpstreamError(
                status=response.status_code,
                reason=response.reason_phrase,
                payload=_json_body(response),
            )

        # Unreachable while max_attempts >= 1
        raise RuntimeError("RateLimitedClient.fetch exhausted attempts without a response")
