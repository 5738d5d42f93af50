"""
Database engine and session management.

Provides the async SQLAlchemy engine, the session factory, and the
transaction scope shared by request handlers and background jobs.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from magicmanager.config import settings
from magicmanager.models.db import Base
from magicmanager.models.errors import AppError


def engine_options(database_url: str, debug: bool = False) -> dict[str, Any]:
    """
    Keyword arguments for create_async_engine.

    Server databases (Postgres via asyncpg) get connection liveness checks.
    SQLite via aiosqlite runs in-process and has nothing to ping.
    """
    options: dict[str, Any] = {"echo": debug}
    if make_url(database_url).get_backend_name() != "sqlite":
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(
    settings.database_url,
    **engine_options(settings.database_url, settings.debug),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    One unit of work.

    Commits when the block exits normally. Database errors and AppErrors
    (a 404 or 400 raised after some writes were flushed) roll back first.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except (SQLAlchemyError, AppError):
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session for one request."""
    async with session_scope(async_session_factory) as session:
        yield session


async def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
