"""Background outbox worker for reliable event publishing.

The worker runs as one asyncio task that, every ``poll_interval`` seconds:
1. Lists up to ``batch_size`` pending events, oldest first
2. Publishes them one at a time through the ``Publisher``
3. Marks each one processed or failed, committing each update on its own

A publish failure is terminal for that event: it is logged, counted and
marked failed, and never retried. Failures never leave ``run_once`` or
stop the loop.

Shutdown is an explicit, awaited signal. ``stop()`` sets a cancellation
event; the loop finishes the event in flight and exits instead of
sleeping. Only if it overruns ``shutdown_timeout`` is the task cancelled.

Running more than one worker against the same table can publish an event
twice: pending rows are listed without being claimed or locked.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING, Protocol

from outbox_service.infra.events.outbox.messages import message_registry
from outbox_service.infra.events.outbox.models import EventStatus
from outbox_service.infra.events.outbox.repository import OutboxRepository
from outbox_service.infra.logging import get_lazy_logger, log_context
from outbox_service.infra.metrics.business import (
    outbox_events_failed_total,
    outbox_events_published_total,
    outbox_pending_events,
    outbox_publish_duration_seconds,
)

if TYPE_CHECKING:
    from pydantic import BaseModel

    from outbox_service.core.database import UnitOfWork
    from outbox_service.infra.events.outbox.messages import MessageRegistry
    from outbox_service.infra.events.outbox.models import OutboxEvent

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class Publisher(Protocol):
    """Capability that sends one message to its destination.

    Any exception means the message was not delivered.
    """

    async def publish(self, message: BaseModel) -> None: ...


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Outcome of one worker tick."""

    processed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.failed


class OutboxWorker:
    """Drains pending outbox events to a publisher on a fixed interval.

    Attributes:
        poll_interval: Seconds to wait between ticks
        batch_size: Maximum events handled per tick
        shutdown_timeout: Seconds ``stop()`` waits before cancelling the task
    """

    def __init__(
        self,
        unit_of_work: UnitOfWork,
        publisher: Publisher,
        *,
        poll_interval: float = 2.0,
        batch_size: int = 100,
        shutdown_timeout: float = 30.0,
        registry: MessageRegistry | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            unit_of_work: Source of transactions for listing and updating events
            publisher: Where decoded messages are sent
            poll_interval: Seconds between ticks
            batch_size: Events to fetch per tick
            shutdown_timeout: Grace period for ``stop()``
            registry: Event type to message model mapping (process-wide
                registry by default)
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self.shutdown_timeout = shutdown_timeout

        self._uow = unit_of_work
        self._publisher = publisher
        self._registry = registry if registry is not None else message_registry
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the polling task."""
        if self.is_running:
            logger.warning("Outbox worker already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(), name="outbox-worker")
        logger.info(
            "Outbox worker started",
            extra={"interval": self.poll_interval, "batch_size": self.batch_size},
        )

    async def stop(self) -> None:
        """Signal the loop to exit and wait for it.

        The event being published when the signal fires is allowed to
        finish. The task is cancelled only after ``shutdown_timeout``.
        """
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=self.shutdown_timeout)
        except TimeoutError:
            logger.warning("Outbox worker shutdown timed out, cancelling")
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        finally:
            self._task = None

        logger.info("Outbox worker stopped")

    async def _run_loop(self) -> None:
        """Tick, then wait for the interval or the stop signal."""
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Error in outbox worker loop")

            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)

    async def run_once(self) -> BatchResult:
        """Handle one batch of pending events.

        Returns:
            Counts of events marked processed and failed in this tick
        """
        async with self._uow.transaction() as tx:
            events = await tx.repository(OutboxRepository).list_pending(self.batch_size)

        if not events:
            await self._record_pending()
            return BatchResult()

        lazy_logger.debug(lambda: f"Processing outbox batch of {len(events)} events")

        processed = failed = 0
        for event in events:
            if self._stop_event.is_set():
                # Remaining events stay pending for the next run
                break
            with log_context(event_id=str(event.id), event_type=event.event_type):
                status = await self._handle(event)
            if status is EventStatus.PROCESSED:
                processed += 1
            elif status is EventStatus.FAILED:
                failed += 1

        await self._record_pending()

        if processed or failed:
            logger.info(
                "Outbox batch processed",
                extra={"processed": processed, "failed": failed, "fetched": len(events)},
            )
        return BatchResult(processed=processed, failed=failed)

    async def _handle(self, event: OutboxEvent) -> EventStatus | None:
        """Publish one event and record the outcome.

        Returns:
            The status the event transitioned to, or None if the status
            update did not apply (the event stays as it was)
        """
        started = time.perf_counter()
        try:
            message = self._registry.parse(event)
            await self._publisher.publish(message)
        except Exception as e:
            logger.warning(
                "Failed to publish outbox event",
                extra={
                    "event_id": str(event.id),
                    "event_type": event.event_type,
                    "error": str(e),
                },
            )
            status = EventStatus.FAILED
        else:
            outbox_publish_duration_seconds.labels(event_type=event.event_type).observe(
                time.perf_counter() - started
            )
            status = EventStatus.PROCESSED

        try:
            async with self._uow.transaction() as tx:
                transitioned = await tx.repository(OutboxRepository).update_status(
                    event.id, status
                )
        except Exception as e:
            logger.error(
                "Failed to update outbox event status",
                extra={
                    "event_id": str(event.id),
                    "status": status.value,
                    "error": str(e),
                },
            )
            return None

        if not transitioned:
            logger.warning(
                "Outbox event was no longer pending",
                extra={"event_id": str(event.id), "status": status.value},
            )
            return None

        if status is EventStatus.PROCESSED:
            outbox_events_published_total.labels(event_type=event.event_type).inc()
            logger.info("Event processed successfully", extra={"event_id": str(event.id)})
        else:
            outbox_events_failed_total.labels(event_type=event.event_type).inc()
        return status

    async def _record_pending(self) -> None:
        async with self._uow.transaction() as tx:
            pending = await tx.repository(OutboxRepository).count_pending()
        outbox_pending_events.set(pending)


__all__ = ["BatchResult", "OutboxWorker", "Publisher"]
