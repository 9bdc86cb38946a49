"""Outbox publisher backed by a FastStream RabbitMQ broker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from outbox_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker
    from pydantic import BaseModel

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class RabbitPublisher:
    """Publish messages to one RabbitMQ queue.

    Implements the outbox worker's ``Publisher`` protocol. Broker errors
    propagate so the worker can mark the event failed.

    Example:
        publisher = RabbitPublisher(broker, "outbox-service.product-events")
        await publisher.publish(ProductMessage(...))
    """

    def __init__(self, broker: RabbitBroker, queue: str) -> None:
        self._broker = broker
        self.queue = queue

    async def publish(self, message: BaseModel) -> None:
        """Send ``message`` as JSON to the configured queue."""
        await self._broker.publish(message.model_dump(mode="json"), queue=self.queue)
        lazy_logger.debug(lambda: f"Published {type(message).__name__} to {self.queue}")


__all__ = ["RabbitPublisher"]
