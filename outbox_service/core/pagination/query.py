"""Repository list queries: equality filters, page size and cursor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from outbox_service.core.pagination.cursor import CursorCodec, PageCursor

if TYPE_CHECKING:
    from outbox_service.core.settings.pagination import PaginationSettings

# Field names shared by the repositories' filter whitelists
ID_FIELD = "id"
NAME_FIELD = "name"
REGION_FIELD = "region"
STATUS_FIELD = "status"
CREATED_AT_FIELD = "created_at"


@dataclass(slots=True)
class Query:
    """Parameters for ``BaseRepository.list``.

    Attributes:
        filters: Column name to required value (ANDed equality predicates).
        limit: Maximum rows to return.
        cursor: Resume after this position, if set.
        descending: Order by ``(created_at, id)`` descending (listing) or
            ascending (FIFO draining).

    Example:
        query = Query().with_filter(NAME_FIELD, "Laptop").apply_pagination(20, token)
    """

    filters: dict[str, Any] = field(default_factory=dict)
    limit: int = 50
    cursor: PageCursor | None = None
    descending: bool = True

    def with_filter(self, name: str, value: Any) -> Query:
        """Add an equality filter and return the query for chaining."""
        self.filters[name] = value
        return self

    def apply_pagination(
        self,
        limit: int | None,
        page_token: str | None,
        *,
        settings: PaginationSettings | None = None,
    ) -> Query:
        """Set the page size and cursor from raw request values.

        A missing or non-positive ``limit`` selects the default page size and
        larger values are capped at the configured maximum.

        Raises:
            InvalidPaginationTokenError: If ``page_token`` cannot be decoded.
        """
        if settings is None:
            from outbox_service.core.settings import get_pagination_settings

            settings = get_pagination_settings()

        self.limit = settings.clamp(limit)
        self.cursor = CursorCodec.decode(page_token) if page_token else None
        return self


__all__ = [
    "CREATED_AT_FIELD",
    "ID_FIELD",
    "NAME_FIELD",
    "Query",
    "REGION_FIELD",
    "STATUS_FIELD",
]
