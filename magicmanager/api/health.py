"""
Health check endpoints.

/health is a liveness probe. /ready also checks that the database answers
and that the Scryfall gateway was wired at startup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from magicmanager.db.database import get_session

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    scryfall: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch dependencies."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    request: Request,
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 when the database is unreachable or the gateway is missing.
    Scryfall itself is not called.
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except (SQLAlchemyError, OSError):
        database = "disconnected"

    scryfall = "configured" if getattr(request.app.state, "scryfall", None) else "missing"

    if database == "connected" and scryfall == "configured":
        return HealthResponse(status="ready", database=database, scryfall=scryfall)

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="not ready", database=database, scryfall=scryfall)
