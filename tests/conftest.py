"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - Database Fixtures: in-memory SQLite engine, session factory, unit of work
    - Outbox Fixtures: publisher doubles and event helpers
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
import os
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from outbox_service.core.database import UnitOfWork

# Ensure tests run without external infrastructure
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("RABBIT_ENABLED", "false")
os.environ.setdefault("OUTBOX_ENABLED", "false")
os.environ.setdefault("LOG_JSON_LOGS", "false")


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Reload settings for every test so env overrides apply."""
    from outbox_service.core.settings import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Async engine over one shared in-memory SQLite connection, with all tables.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.

    Yields:
        Async SQLAlchemy engine with the schema created.
    """
    from outbox_service.core.database import Base
    from outbox_service.infra.database import import_models

    import_models()
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    from outbox_service.infra.database import build_session_factory

    return build_session_factory(db_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Plain session for assertions on committed state.

    Example:
        async def test_rows(db_session):
            count = await db_session.scalar(select(func.count()).select_from(Product))
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def unit_of_work(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWork:
    """Unit of work over the in-memory database."""
    from outbox_service.core.database import UnitOfWork

    return UnitOfWork(session_factory)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(unit_of_work: UnitOfWork) -> FastAPI:
    """FastAPI application wired to the in-memory database.

    The lifespan does not run under ASGITransport, so neither the broker
    nor the outbox worker is started.
    """
    from outbox_service.app.main import create_app
    from outbox_service.core.dependencies.database import get_unit_of_work

    application = create_app()
    application.dependency_overrides[get_unit_of_work] = lambda: unit_of_work
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the application.

    Example:
        async def test_health(client):
            response = await client.get("/api/v1/health")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# Outbox Fixtures
# ============================================================================


@pytest.fixture
def publisher() -> AsyncMock:
    """Publisher double that always succeeds."""
    mock = AsyncMock()
    mock.publish = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def failing_publisher() -> AsyncMock:
    """Publisher double whose every publish raises."""
    mock = AsyncMock()
    mock.publish = AsyncMock(side_effect=ConnectionError("broker unavailable"))
    return mock
