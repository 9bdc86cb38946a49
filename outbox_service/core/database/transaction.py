"""Scoped transaction boundary.

``UnitOfWork.transaction()`` is the only sanctioned way to make several
repository calls atomic: it opens one session, begins a transaction, and
hands out repositories bound to it. Leaving the block normally commits;
an exception rolls back and propagates.

Example:
    uow = UnitOfWork(AsyncSessionLocal)

    async with uow.transaction() as tx:
        product = await tx.repository(ProductRepository).create(product)
        await tx.repository(OutboxRepository).create_event("product.created", message)
    # committed here

    # Callable form
    product = await uow.within_transaction(lambda tx: create(tx, payload))
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from outbox_service.core.database.exceptions import (
    TransactionError,
    translate_integrity_error,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from outbox_service.core.database.repository import BaseRepository

logger = logging.getLogger(__name__)


class TransactionScope:
    """Handle to one open transaction.

    Repositories obtained here share the transaction's session; asking
    twice for the same repository type returns the same instance.
    """

    __slots__ = ("_repositories", "session")

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._repositories: dict[type[Any], Any] = {}

    def repository[R: BaseRepository[Any]](self, repository_type: type[R]) -> R:
        """Get a repository of ``repository_type`` bound to this transaction."""
        repo = self._repositories.get(repository_type)
        if repo is None:
            repo = repository_type(self.session)
            self._repositories[repository_type] = repo
        return repo


class UnitOfWork:
    """Factory of scoped transactions over a session factory."""

    __slots__ = ("_session_factory",)

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[TransactionScope]:
        """Run the enclosed block in one database transaction.

        Yields:
            TransactionScope bound to the new transaction.

        Raises:
            TransactionError: If begin, commit or rollback fails. A rollback
                failure keeps the error that caused the rollback in
                ``original_error``.
            UniqueConstraintError: If a deferred unique check fails at commit.
        """
        async with self._session_factory() as session:
            try:
                # Acquires a connection and begins the transaction
                await session.connection()
            except SQLAlchemyError as e:
                raise TransactionError("failed to begin transaction") from e

            try:
                yield TransactionScope(session)
            except Exception as exc:
                try:
                    await session.rollback()
                except SQLAlchemyError as rollback_error:
                    logger.error(
                        "Rollback failed",
                        extra={"error": str(rollback_error), "original_error": repr(exc)},
                    )
                    raise TransactionError(
                        "failed to rollback transaction", original_error=exc
                    ) from rollback_error
                raise

            try:
                await session.commit()
            except IntegrityError as e:
                raise translate_integrity_error(e) from e
            except SQLAlchemyError as e:
                raise TransactionError("failed to commit transaction") from e

    async def within_transaction[R](
        self, fn: Callable[[TransactionScope], Awaitable[R]]
    ) -> R:
        """Call ``fn`` inside ``transaction()`` and return its result.

        The result is returned only after the commit succeeded.
        """
        async with self.transaction() as tx:
            return await fn(tx)


__all__ = ["TransactionScope", "UnitOfWork"]
