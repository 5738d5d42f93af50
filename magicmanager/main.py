from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from magicmanager.api import cards_router, collection_router, health_router
from magicmanager.api.dependencies import build_scryfall_client
from magicmanager.api.errors import register_error_handlers
from magicmanager.config import settings
from magicmanager.db.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables and open the shared Scryfall HTTP client."""
    await init_db()
    async with httpx.AsyncClient(timeout=settings.scryfall_timeout) as http_client:
        app.state.scryfall = build_scryfall_client(http_client)
        yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("magicmanager"),
    lifespan=lifespan,
)

app.include_router(cards_router)
app.include_router(collection_router)
app.include_router(health_router)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
