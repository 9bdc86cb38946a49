"""Database foundation: declarative base, repository, transaction boundary.

Base Classes and Mixins:
    - Base: Declarative base with constraint naming convention
    - UUIDPKMixin: UUID v4 primary key
    - CreatedAtMixin / TimestampMixin: creation and update timestamps

Repository:
    - BaseRepository[T]: create/get/find_by_id/delete_by_id/list bound to a session

Transactions:
    - UnitOfWork: opens scoped transactions
    - TransactionScope: hands out repositories bound to one transaction

Errors:
    - RepositoryError, NotFoundError, UniqueConstraintError,
      InvalidFilterError, TransactionError
"""

from .base import Base, CreatedAtMixin, TimestampMixin, UUIDPKMixin, utcnow
from .exceptions import (
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
    TransactionError,
    UniqueConstraintError,
)
from .repository import BaseRepository
from .transaction import TransactionScope, UnitOfWork

__all__ = [
    "Base",
    "BaseRepository",
    "CreatedAtMixin",
    "InvalidFilterError",
    "NotFoundError",
    "RepositoryError",
    "TimestampMixin",
    "TransactionError",
    "TransactionScope",
    "UUIDPKMixin",
    "UniqueConstraintError",
    "UnitOfWork",
    "utcnow",
]
