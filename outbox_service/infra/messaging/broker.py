"""RabbitMQ broker configuration using FastStream.

The API process publishes outbox messages through a module-level
``RabbitBroker`` created on first use. When RabbitMQ is disabled the
broker stays ``None`` and callers (the lifespan, the outbox worker
wiring) skip messaging.
"""

from __future__ import annotations

import asyncio
import logging

from faststream.rabbit import RabbitBroker

from outbox_service.core.settings import get_rabbit_settings
from outbox_service.core.settings.rabbit import RabbitSettings

logger = logging.getLogger(__name__)

broker: RabbitBroker | None = None
_not_configured_logged = False


def create_broker(settings: RabbitSettings | None = None) -> RabbitBroker:
    """Build an unconnected broker from settings."""
    settings = settings or get_rabbit_settings()
    return RabbitBroker(
        settings.url,
        graceful_timeout=settings.graceful_timeout,
        logger=logger,
    )


def get_broker() -> RabbitBroker | None:
    """Get the shared broker, or None if RabbitMQ is not configured."""
    global broker, _not_configured_logged

    if broker is not None:
        return broker

    rabbit_settings = get_rabbit_settings()
    if not rabbit_settings.is_configured:
        if not _not_configured_logged:
            logger.warning("RabbitMQ not configured - messaging features disabled")
            _not_configured_logged = True
        return None

    broker = create_broker(rabbit_settings)
    return broker


async def start_broker() -> RabbitBroker | None:
    """Connect the shared broker.

    The connection attempt is bounded by ``connection_timeout`` so an
    unreachable RabbitMQ fails startup instead of hanging it.

    Returns:
        The connected broker, or None if RabbitMQ is not configured

    Raises:
        ConnectionError: If the connection timed out.
    """
    rabbit_broker = get_broker()
    if rabbit_broker is None:
        logger.warning("RabbitMQ not configured, skipping broker startup")
        return None

    rabbit_settings = get_rabbit_settings()
    logger.info(
        "Starting RabbitMQ broker",
        extra={
            "host": rabbit_settings.host,
            "port": rabbit_settings.port,
            "connection_timeout": rabbit_settings.connection_timeout,
        },
    )

    try:
        await asyncio.wait_for(rabbit_broker.start(), timeout=rabbit_settings.connection_timeout)
    except TimeoutError:
        error_msg = f"RabbitMQ connection timeout after {rabbit_settings.connection_timeout}s"
        logger.error(error_msg, extra={"host": rabbit_settings.host})
        raise ConnectionError(error_msg) from None

    logger.info("RabbitMQ broker started successfully")
    return rabbit_broker


async def stop_broker() -> None:
    """Close the shared broker connection, if one was created."""
    if broker is None:
        logger.debug("RabbitMQ not configured, skipping broker shutdown")
        return

    logger.info("Stopping RabbitMQ broker")
    try:
        await broker.close()
        logger.info("RabbitMQ broker stopped successfully")
    except Exception as e:
        logger.exception("Error stopping RabbitMQ broker", extra={"error": str(e)})


__all__ = ["broker", "create_broker", "get_broker", "start_broker", "stop_broker"]
