"""Tests for health check endpoints."""

from collections.abc import AsyncGenerator

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.db.database import get_session
from magicmanager.main import app
from magicmanager.scryfall import ScryfallClient


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Health endpoint needs no token."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestReadyEndpoint:
    async def test_ready_when_database_and_gateway_available(
        self, client: AsyncClient, scryfall: ScryfallClient
    ) -> None:
        app.state.scryfall = scryfall
        try:
            response = await client.get("/ready")
        finally:
            del app.state.scryfall

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "database": "connected",
            "scryfall": "configured",
        }

    async def test_not_ready_without_gateway(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["scryfall"] == "missing"

    async def test_not_ready_when_database_down(
        self, client: AsyncClient, scryfall: ScryfallClient
    ) -> None:
        class BrokenSession:
            async def execute(self, *args, **kwargs):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        async def broken_session() -> AsyncGenerator[AsyncSession, None]:
            yield BrokenSession()  # type: ignore[misc]

        app.dependency_overrides[get_session] = broken_session
        app.state.scryfall = scryfall
        try:
            response = await client.get("/ready")
        finally:
            del app.state.scryfall

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"
