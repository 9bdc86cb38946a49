"""Tests for the outbox event model and its status state machine."""
from __future__ import annotations

import pytest

from outbox_service.infra.events.outbox import (
    EventStatus,
    InvalidStatusTransitionError,
    OutboxEvent,
)


def _event(status: EventStatus = EventStatus.PENDING) -> OutboxEvent:
    return OutboxEvent(event_type="product.created", event_data={"k": "v"}, status=status.value)


class TestEventStatus:
    def test_values(self):
        assert [s.value for s in EventStatus] == ["pending", "processed", "failed"]

    def test_only_pending_is_non_terminal(self):
        assert EventStatus.PENDING.is_terminal is False
        assert EventStatus.PROCESSED.is_terminal is True
        assert EventStatus.FAILED.is_terminal is True

    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            (EventStatus.PENDING, EventStatus.PROCESSED, True),
            (EventStatus.PENDING, EventStatus.FAILED, True),
            (EventStatus.PENDING, EventStatus.PENDING, False),
            (EventStatus.PROCESSED, EventStatus.FAILED, False),
            (EventStatus.PROCESSED, EventStatus.PENDING, False),
            (EventStatus.FAILED, EventStatus.PROCESSED, False),
            (EventStatus.FAILED, EventStatus.PENDING, False),
        ],
    )
    def test_transitions(self, current: EventStatus, target: EventStatus, allowed: bool):
        """Pending moves to a terminal status; terminal statuses never move."""
        assert current.can_transition_to(target) is allowed


class TestOutboxEvent:
    def test_mark_processed_stamps_processed_at(self):
        event = _event()
        assert event.processed_at is None

        event.mark_processed()

        assert event.event_status is EventStatus.PROCESSED
        assert event.processed_at is not None
        assert event.is_pending is False

    def test_mark_failed(self):
        event = _event()

        event.mark_failed()

        assert event.status == "failed"
        assert event.processed_at is not None

    def test_terminal_event_cannot_move(self):
        event = _event(EventStatus.FAILED)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            event.mark_processed()

        assert exc_info.value.current is EventStatus.FAILED
        assert exc_info.value.target is EventStatus.PROCESSED
        assert event.status == "failed"

    def test_cannot_return_to_pending(self):
        with pytest.raises(InvalidStatusTransitionError, match="pending to pending"):
            _event().transition_to(EventStatus.PENDING)

    def test_table_and_indexes(self):
        """Events live in "events" with a pending-only polling index."""
        table = OutboxEvent.__table__
        indexes = {index.name: index for index in table.indexes}

        assert table.name == "events"
        assert set(indexes) >= {"ix_events_status_created_at", "ix_events_created_at_id"}
        polling = indexes["ix_events_status_created_at"]
        assert [c.name for c in polling.columns] == ["status", "created_at"]
        assert polling.dialect_options["postgresql"]["where"] is not None
