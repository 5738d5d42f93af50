from magicmanager.scryfall.client import ScryfallClient
from magicmanager.scryfall.query import NumericRange, SearchFilters, build_query
from magicmanager.scryfall.rate_limit import RateLimitedClient, RateLimiter

__all__ = [
    "NumericRange",
    "RateLimitedClient",
    "RateLimiter",
    "ScryfallClient",
    "SearchFilters",
    "build_query",
]
