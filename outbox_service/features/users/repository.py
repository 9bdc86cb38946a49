"""Repository for the users feature."""
from __future__ import annotations

from outbox_service.core.database.repository import BaseRepository
from outbox_service.core.pagination.query import ID_FIELD, NAME_FIELD, REGION_FIELD, STATUS_FIELD
from outbox_service.features.users.models import User


class UserRepository(BaseRepository[User]):
    """Data access for users.

    Creating a user with an email that already exists raises
    ``UniqueConstraintError``.
    """

    model = User
    filterable_fields = frozenset({ID_FIELD, NAME_FIELD, REGION_FIELD, STATUS_FIELD})


__all__ = ["UserRepository"]
