"""Consumer for product notifications published by the outbox worker.

Runs as a separate FastStream application:

    faststream run outbox_service.infra.messaging.handlers:app
"""

from __future__ import annotations

import logging

from faststream import FastStream
from faststream.rabbit import RabbitRouter

from outbox_service.core.settings import get_rabbit_settings
from outbox_service.features.products.schemas import ProductMessage
from outbox_service.infra.logging import log_context
from outbox_service.infra.messaging.broker import create_broker

logger = logging.getLogger(__name__)

rabbit_settings = get_rabbit_settings()
PRODUCT_EVENTS_QUEUE = rabbit_settings.product_events_destination

router = RabbitRouter()


@router.subscriber(PRODUCT_EVENTS_QUEUE)
async def handle_product_event(message: ProductMessage) -> None:
    """Log each product notification.

    Args:
        message: Validated product message
    """
    with log_context(product_id=str(message.product_id)):
        logger.info(
            "Received product event",
            extra={
                "action": message.action,
                "product_id": str(message.product_id),
                "product_name": message.name,
                "price": message.price,
            },
        )


broker = create_broker(rabbit_settings)
broker.include_router(router)

app = FastStream(broker, logger=logger)


__all__ = ["PRODUCT_EVENTS_QUEUE", "app", "broker", "handle_product_event", "router"]
