"""Database infrastructure: async engine, session factory, lifecycle.

Example:
    from outbox_service.infra.database import get_unit_of_work

    async with get_unit_of_work().transaction() as tx:
        ...
"""

from .models import import_models
from .session import (
    AsyncSessionLocal,
    build_engine,
    build_session_factory,
    close_database,
    engine,
    get_async_session,
    get_unit_of_work,
    init_database,
)

__all__ = [
    "AsyncSessionLocal",
    "build_engine",
    "build_session_factory",
    "close_database",
    "engine",
    "get_async_session",
    "get_unit_of_work",
    "import_models",
    "init_database",
]
