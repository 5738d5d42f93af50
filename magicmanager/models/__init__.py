from magicmanager.models.card import (
    CardRecord,
    CollectionEntry,
    Condition,
    EnrichedCard,
    Rarity,
)
from magicmanager.models.db import Base, CardCacheDB, CollectionCardDB
from magicmanager.models.errors import (
    GENERIC_ERROR_MESSAGE,
    AppError,
    ErrorKind,
    ErrorResponse,
    NotFoundError,
    ScryfallApiError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
    validation_details,
)
from magicmanager.models.scryfall import (
    ImageUris,
    Prices,
    ScryfallCard,
    ScryfallCatalog,
    ScryfallErrorPayload,
    ScryfallList,
    ScryfallSet,
    ScryfallSetList,
    decode_payload,
    is_error_payload,
)

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "AppError",
    "Base",
    "CardCacheDB",
    "CardRecord",
    "CollectionCardDB",
    "CollectionEntry",
    "Condition",
    "EnrichedCard",
    "ErrorKind",
    "ErrorResponse",
    "ImageUris",
    "NotFoundError",
    "Prices",
    "Rarity",
    "ScryfallApiError",
    "ScryfallCard",
    "ScryfallCatalog",
    "ScryfallErrorPayload",
    "ScryfallList",
    "ScryfallSet",
    "ScryfallSetList",
    "UnauthorizedError",
    "UpstreamError",
    "ValidationError",
    "decode_payload",
    "is_error_payload",
]
