"""OutboxEvent model for the transactional outbox pattern.

The events table stores a description of every business mutation that must
reach the message broker. Rows are written in the same transaction as the
mutation they describe, so either both exist or neither does.

The worker reads pending rows and moves each one exactly once to a
terminal status:

    pending --publish success--> processed
    pending --publish failure--> failed

No transition leads back to ``pending``; failed events are not retried.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from outbox_service.core.database.base import Base, CreatedAtMixin, UUIDPKMixin, utcnow


class EventStatus(str, Enum):
    """Lifecycle status of an outbox event."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not EventStatus.PENDING

    def can_transition_to(self, target: EventStatus) -> bool:
        """Only pending events move, and only to a terminal status."""
        return self is EventStatus.PENDING and target.is_terminal


class InvalidStatusTransitionError(Exception):
    """An event was asked to leave a terminal status or re-enter pending."""

    def __init__(self, current: EventStatus, target: EventStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(f"cannot transition event from {current.value} to {target.value}")


class OutboxEvent(Base, UUIDPKMixin, CreatedAtMixin):
    """Durable record of a business event awaiting publication.

    Attributes:
        id: UUID primary key
        event_type: Event type identifier (e.g., "product.created")
        event_data: JSON payload; self-sufficient, never joined back to the
            resource it describes
        status: pending, processed or failed
        created_at: When the event was staged
        processed_at: When a terminal status was reached (unset while pending)
    """

    __tablename__ = "events"

    event_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Event type identifier",
    )
    event_data: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        comment="Serialized event payload",
    )
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=EventStatus.PENDING.value,
        server_default=EventStatus.PENDING.value,
        comment="pending, processed or failed",
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the event reached a terminal status",
    )

    __table_args__ = (
        # Polling index, restricted to rows the worker still has to handle
        Index(
            "ix_events_status_created_at",
            "status",
            "created_at",
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_events_created_at_id", "created_at", "id"),
    )

    @property
    def event_status(self) -> EventStatus:
        return EventStatus(self.status)

    @property
    def is_pending(self) -> bool:
        return self.event_status is EventStatus.PENDING

    def transition_to(self, target: EventStatus) -> None:
        """Move to a terminal status and stamp ``processed_at``.

        Raises:
            InvalidStatusTransitionError: If the event is already terminal or
                ``target`` is pending.
        """
        current = self.event_status
        if not current.can_transition_to(target):
            raise InvalidStatusTransitionError(current, target)
        self.status = target.value
        self.processed_at = utcnow()

    def mark_processed(self) -> None:
        self.transition_to(EventStatus.PROCESSED)

    def mark_failed(self) -> None:
        self.transition_to(EventStatus.FAILED)

    def __repr__(self) -> str:
        return f"OutboxEvent(id={self.id}, event_type={self.event_type!r}, status={self.status})"


__all__ = ["EventStatus", "InvalidStatusTransitionError", "OutboxEvent"]
