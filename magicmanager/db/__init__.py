from magicmanager.db.database import get_session, init_db
from magicmanager.db.operations import (
    card_values_from_payload,
    color_key,
    get_cached_card,
    get_cached_card_ids,
    get_collection_entry,
    get_collection_entry_by_id,
    get_ownership,
    get_user_entries,
    upsert_card,
)

__all__ = [
    "card_values_from_payload",
    "color_key",
    "get_cached_card",
    "get_cached_card_ids",
    "get_collection_entry",
    "get_collection_entry_by_id",
    "get_ownership",
    "get_session",
    "get_user_entries",
    "init_db",
    "upsert_card",
]
