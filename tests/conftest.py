from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import respx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from magicmanager.api.auth import issue_access_token
from magicmanager.api.dependencies import build_scryfall_client, get_scryfall_client
from magicmanager.config import settings
from magicmanager.db.database import get_session, session_scope
from magicmanager.main import app
from magicmanager.models.db import Base
from magicmanager.models.scryfall import ScryfallCard
from magicmanager.scryfall import RateLimiter, ScryfallClient
from payloads import BOLT_ID, USER_ID, card_payload


@pytest.fixture
def make_card() -> Callable[..., ScryfallCard]:
    """Factory for decoded Scryfall cards."""

    def _make(scryfall_id: str = BOLT_ID, name: str = "Lightning Bolt", **overrides: Any):
        return ScryfallCard.model_validate(card_payload(scryfall_id, name, **overrides))

    return _make


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def scryfall_api() -> respx.MockRouter:
    """Mocked Scryfall API; routes are relative to the API root."""
    with respx.mock(base_url=settings.scryfall_api_base, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
async def scryfall(scryfall_api: respx.MockRouter) -> AsyncGenerator[ScryfallClient, None]:
    """Gateway wired to the mocked API with no dispatch interval."""
    async with httpx.AsyncClient() as http_client:
        yield build_scryfall_client(http_client, RateLimiter(interval=0))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_access_token(USER_ID)}"}


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    scryfall: ScryfallClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async test client with overridden session and gateway."""

    async def override_get_session():
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_scryfall_client] = lambda: scryfall

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
