"""Database engine and session management (SQLAlchemy async)."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from outbox_service.core.database import UnitOfWork
from outbox_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Fallback used when the database integration is disabled (tests, local runs)
LOCAL_DATABASE_URL = "sqlite+aiosqlite:///./outbox-service.db"

db_settings = get_db_settings()
app_settings = get_app_settings()


def _database_url() -> str:
    return db_settings.get_sqlalchemy_url() if db_settings.is_configured else LOCAL_DATABASE_URL


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to the configured database)."""
    url = url or _database_url()
    kwargs = db_settings.sqlalchemy_engine_kwargs() if url.startswith("postgresql") else {}
    kwargs["echo"] = db_settings.echo or app_settings.debug
    return create_async_engine(url, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by request handlers and the outbox worker."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Yields:
        Database session that is automatically closed.

    Example:
            async with get_async_session() as session:
            result = await session.execute(select(Product))
    """
    async with AsyncSessionLocal() as session:
        yield session


def get_unit_of_work() -> UnitOfWork:
    """Unit of work over the application session factory."""
    return UnitOfWork(AsyncSessionLocal)


async def _ensure_local_schema() -> None:
    """Create tables on the local SQLite fallback, where migrations don't run."""
    from outbox_service.core.database import Base
    from outbox_service.infra.database.models import import_models

    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database() -> None:
    """Verify database connectivity at startup.

    Raises:
        SQLAlchemyError: If the database cannot be reached.
    """
    url = engine.url.render_as_string(hide_password=True)
    logger.info("Initializing database connection", extra={"url": url})

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        if not db_settings.is_configured:
            await _ensure_local_schema()
    except Exception as e:
        logger.error("Failed to connect to database", extra={"url": url, "error": str(e)})
        raise

    logger.info("Database connection established successfully", extra={"url": url})


async def close_database() -> None:
    """Dispose of the engine's connection pool at shutdown."""
    logger.info("Closing database connection")
    await engine.dispose()
    logger.info("Database connection closed successfully")


__all__ = [
    "AsyncSessionLocal",
    "LOCAL_DATABASE_URL",
    "build_engine",
    "build_session_factory",
    "close_database",
    "engine",
    "get_async_session",
    "get_unit_of_work",
    "init_database",
]
