"""Transactional outbox: event model, repository, message registry, worker.

Example:
    async with uow.transaction() as tx:
        product = await tx.repository(ProductRepository).create(product)
        await tx.repository(OutboxRepository).create_event("product.created", message)

    worker = OutboxWorker(uow, publisher, poll_interval=2.0, batch_size=100)
    await worker.start()
    ...
    await worker.stop()
"""

from .messages import MessageDecodeError, MessageRegistry, message_registry
from .models import EventStatus, InvalidStatusTransitionError, OutboxEvent
from .repository import OutboxRepository
from .worker import BatchResult, OutboxWorker, Publisher
from .writer import create_with_event

__all__ = [
    "BatchResult",
    "EventStatus",
    "InvalidStatusTransitionError",
    "MessageDecodeError",
    "MessageRegistry",
    "OutboxEvent",
    "OutboxRepository",
    "OutboxWorker",
    "Publisher",
    "create_with_event",
    "message_registry",
]
