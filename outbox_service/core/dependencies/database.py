"""Database dependencies for FastAPI route handlers.

Two ways into the database exist:

1. ``get_unit_of_work()`` (this module) - FastAPI dependency
   - Use in route handlers with ``Depends(get_unit_of_work)``
   - Write paths open ``async with uow.transaction() as tx`` so entity
     writes and outbox events commit together

2. ``get_async_session()`` (infra.database) - general context manager
   - Use in CLI commands, health checks and scripts
   - Framework-agnostic, caller manages the session lifecycle

Tests override ``get_unit_of_work`` with a unit of work over an
in-memory SQLite session factory.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from outbox_service.core.database import UnitOfWork
from outbox_service.infra.database import get_async_session
from outbox_service.infra.database import get_unit_of_work as _default_unit_of_work


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for a plain database session.

    Yields:
        Database session that is automatically closed after request.
    """
    async with get_async_session() as session:
        yield session


def get_unit_of_work() -> UnitOfWork:
    """FastAPI dependency for the application unit of work."""
    return _default_unit_of_work()


__all__ = ["get_db_session", "get_unit_of_work"]
