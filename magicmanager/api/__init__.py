from magicmanager.api.cards import router as cards_router
from magicmanager.api.collection import router as collection_router
from magicmanager.api.health import router as health_router

__all__ = [
    "cards_router",
    "collection_router",
    "health_router",
]
