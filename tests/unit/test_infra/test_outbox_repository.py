"""Tests for OutboxRepository against the in-memory database."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
import uuid

from pydantic import BaseModel
import pytest

from outbox_service.core.database import UnitOfWork
from outbox_service.infra.events.outbox import (
    EventStatus,
    InvalidStatusTransitionError,
    OutboxEvent,
    OutboxRepository,
)

BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


class Greeting(BaseModel):
    id: uuid.UUID
    text: str


async def _seed(uow: UnitOfWork, statuses: list[EventStatus]) -> list[OutboxEvent]:
    """Insert one event per status, one second apart, oldest first."""
    async with uow.transaction() as tx:
        repo = tx.repository(OutboxRepository)
        return [
            await repo.create(
                OutboxEvent(
                    event_type="greeting.sent",
                    event_data={"n": i},
                    status=status.value,
                    created_at=BASE_TIME + timedelta(seconds=i),
                )
            )
            for i, status in enumerate(statuses)
        ]


async def _fetch(uow: UnitOfWork, event_id: uuid.UUID) -> OutboxEvent:
    async with uow.transaction() as tx:
        return await tx.repository(OutboxRepository).find_by_id(event_id)


class TestCreateEvent:
    async def test_stages_pending_event_from_model(self, unit_of_work: UnitOfWork):
        """Model payloads are stored in JSON mode (UUIDs as strings)."""
        message_id = uuid.uuid4()

        async with unit_of_work.transaction() as tx:
            event = await tx.repository(OutboxRepository).create_event(
                "greeting.sent", Greeting(id=message_id, text="hi")
            )

        stored = await _fetch(unit_of_work, event.id)
        assert stored.event_type == "greeting.sent"
        assert stored.event_data == {"id": str(message_id), "text": "hi"}
        assert stored.event_status is EventStatus.PENDING
        assert stored.processed_at is None

    async def test_stages_event_from_mapping(self, unit_of_work: UnitOfWork):
        async with unit_of_work.transaction() as tx:
            event = await tx.repository(OutboxRepository).create_event(
                "greeting.sent", {"text": "hello"}
            )

        assert (await _fetch(unit_of_work, event.id)).event_data == {"text": "hello"}


class TestListPending:
    async def test_oldest_first_pending_only(self, unit_of_work: UnitOfWork):
        events = await _seed(
            unit_of_work,
            [EventStatus.PENDING, EventStatus.PROCESSED, EventStatus.PENDING, EventStatus.FAILED],
        )

        async with unit_of_work.transaction() as tx:
            pending = await tx.repository(OutboxRepository).list_pending(10)

        assert [e.id for e in pending] == [events[0].id, events[2].id]

    async def test_respects_limit(self, unit_of_work: UnitOfWork):
        events = await _seed(unit_of_work, [EventStatus.PENDING] * 5)

        async with unit_of_work.transaction() as tx:
            pending = await tx.repository(OutboxRepository).list_pending(2)

        assert [e.id for e in pending] == [events[0].id, events[1].id]

    async def test_empty(self, unit_of_work: UnitOfWork):
        async with unit_of_work.transaction() as tx:
            assert await tx.repository(OutboxRepository).list_pending(10) == []


class TestUpdateStatus:
    @pytest.mark.parametrize("target", [EventStatus.PROCESSED, EventStatus.FAILED])
    async def test_pending_transitions(self, unit_of_work: UnitOfWork, target: EventStatus):
        (event,) = await _seed(unit_of_work, [EventStatus.PENDING])

        async with unit_of_work.transaction() as tx:
            transitioned = await tx.repository(OutboxRepository).update_status(event.id, target)

        stored = await _fetch(unit_of_work, event.id)
        assert transitioned is True
        assert stored.event_status is target
        assert stored.processed_at is not None

    async def test_terminal_event_is_left_alone(self, unit_of_work: UnitOfWork):
        """A processed event is never changed again."""
        (event,) = await _seed(unit_of_work, [EventStatus.PROCESSED])

        async with unit_of_work.transaction() as tx:
            transitioned = await tx.repository(OutboxRepository).update_status(
                event.id, EventStatus.FAILED
            )

        assert transitioned is False
        assert (await _fetch(unit_of_work, event.id)).event_status is EventStatus.PROCESSED

    async def test_missing_event(self, unit_of_work: UnitOfWork):
        async with unit_of_work.transaction() as tx:
            transitioned = await tx.repository(OutboxRepository).update_status(
                uuid.uuid4(), EventStatus.PROCESSED
            )

        assert transitioned is False

    async def test_pending_target_is_rejected(self, unit_of_work: UnitOfWork):
        (event,) = await _seed(unit_of_work, [EventStatus.PENDING])

        with pytest.raises(InvalidStatusTransitionError):
            async with unit_of_work.transaction() as tx:
                await tx.repository(OutboxRepository).update_status(event.id, EventStatus.PENDING)


class TestCounts:
    async def test_count_by_status_includes_zeroes(self, unit_of_work: UnitOfWork):
        await _seed(unit_of_work, [EventStatus.PENDING, EventStatus.PENDING, EventStatus.FAILED])

        async with unit_of_work.transaction() as tx:
            repo = tx.repository(OutboxRepository)
            counts = await repo.count_by_status()
            pending = await repo.count_pending()

        assert counts == {
            EventStatus.PENDING: 2,
            EventStatus.PROCESSED: 0,
            EventStatus.FAILED: 1,
        }
        assert pending == 2
