from magicmanager.services.card_cache import (
    cache_card,
    degraded_card,
    enrich_card,
    enrich_search_results,
)
from magicmanager.services.collection import (
    CollectionStats,
    add_to_collection,
    collection_stats,
    remove_from_collection,
    update_collection_entry,
)
from magicmanager.services.collection_search import (
    CollectionPage,
    CollectionSearchParams,
    build_collection_filters,
    search_collection,
)

__all__ = [
    "CollectionPage",
    "CollectionSearchParams",
    "CollectionStats",
    "add_to_collection",
    "build_collection_filters",
    "cache_card",
    "collection_stats",
    "degraded_card",
    "enrich_card",
    "enrich_search_results",
    "remove_from_collection",
    "search_collection",
    "update_collection_entry",
]
