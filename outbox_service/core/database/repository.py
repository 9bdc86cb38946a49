"""Generic repository for SQLAlchemy models, bound to one session.

A repository instance wraps the session of the transaction that created
it, so every call made through it commits or rolls back together. Obtain
one from ``TransactionScope.repository`` rather than constructing it around
an ad-hoc session.

Example:
    class ProductRepository(BaseRepository[Product]):
        model = Product
        filterable_fields = frozenset({"id", "name"})

    async with unit_of_work.transaction() as tx:
        products = tx.repository(ProductRepository)
        product = await products.create(Product(name="Laptop", price=1299.99))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar
import uuid

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.types import Uuid

from outbox_service.core.database.exceptions import (
    InvalidFilterError,
    NotFoundError,
    translate_integrity_error,
)
from outbox_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from outbox_service.core.pagination import PageCursor, Query


class BaseRepository[T]:
    """Create/find/list/delete for one model, scoped to one session.

    Provides:
        - create(instance) -> T (raises UniqueConstraintError)
        - get(id) -> T | None
        - find_by_id(id) -> T (raises NotFoundError)
        - delete_by_id(id) -> None (raises NotFoundError)
        - list(query) -> list[T], keyset-paginated on (created_at, id)

    Subclasses set ``model`` and, optionally, ``filterable_fields``; when the
    latter is empty every mapped column may be filtered on.
    """

    model: ClassVar[type[Any]]
    filterable_fields: ClassVar[frozenset[str]] = frozenset()

    __slots__ = ("_session", "_logger", "_lazy")

    def __init__(self, session: AsyncSession) -> None:
        """Bind the repository to a session.

        Args:
            session: Session of the enclosing transaction
        """
        self._session = session
        name = self.model.__name__
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{name}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"repository.{name}")

    @property
    def session(self) -> AsyncSession:
        """Session this repository is bound to."""
        return self._session

    async def create(self, instance: T) -> T:
        """Insert a new entity.

        Flushes immediately so generated values (id, timestamps) are
        available to the caller before the transaction commits.

        Args:
            instance: Transient model instance

        Returns:
            The persisted instance with generated fields populated

        Raises:
            UniqueConstraintError: If a unique constraint is violated.
            RepositoryError: For any other integrity violation.
        """
        self._session.add(instance)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise translate_integrity_error(e, self.model.__name__) from e
        await self._session.refresh(instance)

        self._lazy.debug(lambda: f"create({self.model.__name__}) -> id={instance.id}")  # type: ignore[attr-defined]
        return instance

    async def get(self, id: Any) -> T | None:  # noqa: A002
        """Get entity by primary key, or None when absent."""
        return await self._session.get(self.model, id)

    async def find_by_id(self, id: Any) -> T:  # noqa: A002
        """Get entity by primary key.

        Raises:
            NotFoundError: If no row has this id.
        """
        instance = await self.get(id)
        if instance is None:
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def delete_by_id(self, id: Any) -> None:  # noqa: A002
        """Delete the row with this primary key.

        Raises:
            NotFoundError: If no row was deleted.
        """
        stmt = delete(self.model).where(self.model.id == id)
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError(self.model.__name__, {"id": id})

        self._lazy.debug(lambda: f"delete_by_id({self.model.__name__}, {id})")

    async def list(self, query: Query) -> Sequence[T]:
        """List entities matching ``query``.

        Rows are ordered by ``(created_at, id)`` (descending unless the query
        asks otherwise) so the order is total and usable as a cursor key.

        Raises:
            InvalidFilterError: If a filter names an unknown field or has a
                value that cannot be coerced to the column type.
        """
        stmt = self._apply_filters(select(self.model), query.filters)

        created_at = self.model.created_at
        row_id = self.model.id
        if query.cursor is not None:
            stmt = stmt.where(self._seek_past(query.cursor, descending=query.descending))

        if query.descending:
            stmt = stmt.order_by(created_at.desc(), row_id.desc())
        else:
            stmt = stmt.order_by(created_at.asc(), row_id.asc())

        result = await self._session.execute(stmt.limit(query.limit))
        items: Sequence[T] = result.scalars().all()

        self._lazy.debug(
            lambda: f"list({self.model.__name__}, filters={query.filters}, "
            f"limit={query.limit}, cursor={query.cursor is not None}) -> {len(items)} items"
        )
        return list(items)

    # ------------------------------------------------------------------
    # Query building helpers
    # ------------------------------------------------------------------

    def _apply_filters(self, stmt: Select[Any], filters: dict[str, Any]) -> Select[Any]:
        columns = self.model.__table__.columns
        allowed = self.filterable_fields or frozenset(columns.keys())

        for name, value in filters.items():
            if name not in allowed or name not in columns:
                raise InvalidFilterError(
                    f"Cannot filter {self.model.__name__} by '{name}'", filter_name=name
                )
            column = columns[name]
            if isinstance(column.type, Uuid) and isinstance(value, str):
                try:
                    value = uuid.UUID(value)
                except ValueError as e:
                    raise InvalidFilterError(f"Invalid UUID for '{name}'", filter_name=name) from e
            stmt = stmt.where(getattr(self.model, name) == value)
        return stmt

    def _seek_past(self, cursor: PageCursor, *, descending: bool) -> ColumnElement[bool]:
        """Predicate selecting rows strictly after ``cursor`` in list order."""
        created_at = self.model.created_at
        row_id = self.model.id
        if descending:
            return or_(
                created_at < cursor.created_at,
                and_(created_at == cursor.created_at, row_id < cursor.id),
            )
        return or_(
            created_at > cursor.created_at,
            and_(created_at == cursor.created_at, row_id > cursor.id),
        )


__all__ = ["BaseRepository"]
