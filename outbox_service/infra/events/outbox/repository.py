"""Repository for outbox events.

Beyond the generic create/find/list/delete it provides what the
transactional writer and the worker need:
- staging a pending event from a message model
- listing pending events oldest-first
- the pending-only status transition
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from sqlalchemy import func, select, update

from outbox_service.core.database.base import utcnow
from outbox_service.core.database.repository import BaseRepository
from outbox_service.core.pagination import Query
from outbox_service.core.pagination.query import STATUS_FIELD
from outbox_service.infra.events.outbox.models import (
    EventStatus,
    InvalidStatusTransitionError,
    OutboxEvent,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


class OutboxRepository(BaseRepository[OutboxEvent]):
    """Repository for outbox event operations."""

    model = OutboxEvent
    filterable_fields = frozenset({"id", "event_type", STATUS_FIELD})

    async def create_event(
        self,
        event_type: str,
        payload: BaseModel | Mapping[str, Any],
    ) -> OutboxEvent:
        """Stage a pending event in the current transaction.

        Args:
            event_type: Event type identifier (e.g., "product.created")
            payload: Message model or mapping, stored as JSON

        Returns:
            The inserted event with id and created_at populated
        """
        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json")
        else:
            data = dict(payload)

        event = await self.create(
            OutboxEvent(
                event_type=event_type,
                event_data=data,
                status=EventStatus.PENDING.value,
            )
        )
        self._logger.debug(
            "Outbox event staged",
            extra={"event_id": str(event.id), "event_type": event_type},
        )
        return event

    async def list_pending(self, limit: int) -> Sequence[OutboxEvent]:
        """List up to ``limit`` pending events, oldest first."""
        query = Query(limit=limit, descending=False).with_filter(
            STATUS_FIELD, EventStatus.PENDING.value
        )
        return await self.list(query)

    async def update_status(self, event_id: UUID, status: EventStatus) -> bool:
        """Move a pending event to a terminal status.

        The update only matches rows that are still pending, so a terminal
        event is never changed again.

        Args:
            event_id: Event to transition
            status: PROCESSED or FAILED

        Returns:
            True if the event transitioned, False if it was not pending
            (already terminal or missing)

        Raises:
            InvalidStatusTransitionError: If ``status`` is pending.
        """
        if not status.is_terminal:
            raise InvalidStatusTransitionError(EventStatus.PENDING, status)

        stmt = (
            update(OutboxEvent)
            .where(
                OutboxEvent.id == event_id,
                OutboxEvent.status == EventStatus.PENDING.value,
            )
            .values(status=status.value, processed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        transitioned = result.rowcount == 1

        self._lazy.debug(
            lambda: f"update_status({event_id}, {status.value}) -> transitioned={transitioned}"
        )
        return transitioned

    async def count_by_status(self) -> dict[EventStatus, int]:
        """Count events per status; absent statuses count as zero."""
        stmt = select(OutboxEvent.status, func.count()).group_by(OutboxEvent.status)
        result = await self._session.execute(stmt)

        counts = dict.fromkeys(EventStatus, 0)
        for status, count in result.all():
            counts[EventStatus(status)] = count
        return counts

    async def count_pending(self) -> int:
        """Count events waiting to be published."""
        stmt = (
            select(func.count())
            .select_from(OutboxEvent)
            .where(OutboxEvent.status == EventStatus.PENDING.value)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()


__all__ = ["OutboxRepository"]
