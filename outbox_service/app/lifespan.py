"""Application lifespan management.

Startup Order:
1. Core (logging)
2. Database - verify connectivity
3. Messaging (RabbitMQ) - conditional on configuration
4. Outbox worker - requires messaging and OUTBOX_ENABLED

Shutdown Order: Reverse of startup. The worker is stopped (and awaited)
before the broker it publishes through is closed.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from outbox_service.core.settings import (
    get_app_settings,
    get_logging_settings,
    get_outbox_settings,
    get_rabbit_settings,
)
from outbox_service.infra.logging.config import setup_logging

# Lazy imports to avoid circular dependencies
# These are imported within functions when needed:
# - outbox_service.infra.database.session
# - outbox_service.infra.messaging.broker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI
    from faststream.rabbit import RabbitBroker

    from outbox_service.infra.events.outbox import OutboxWorker

logger = logging.getLogger(__name__)


# =============================================================================
# Startup functions - organized by service
# =============================================================================


async def _startup_core() -> None:
    """Configure logging."""
    app = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment},
    )


async def _startup_database() -> None:
    """Verify the database is reachable; startup fails if it is not."""
    from outbox_service.infra.database import import_models
    from outbox_service.infra.database.session import init_database

    import_models()
    await init_database()


async def _startup_messaging() -> RabbitBroker | None:
    """Connect the RabbitMQ broker if configured."""
    from outbox_service.infra.messaging.broker import start_broker

    return await start_broker()


async def _startup_outbox(broker: RabbitBroker | None) -> OutboxWorker | None:
    """Start the outbox worker publishing through ``broker``."""
    from outbox_service.infra.database import get_unit_of_work
    from outbox_service.infra.events.outbox import OutboxWorker
    from outbox_service.infra.messaging import RabbitPublisher

    outbox = get_outbox_settings()
    if not outbox.enabled:
        logger.info("Outbox worker disabled by configuration")
        return None
    if broker is None:
        logger.warning("RabbitMQ not configured, outbox worker not started")
        return None

    rabbit = get_rabbit_settings()
    worker = OutboxWorker(
        get_unit_of_work(),
        RabbitPublisher(broker, rabbit.product_events_destination),
        poll_interval=outbox.poll_interval,
        batch_size=outbox.batch_size,
        shutdown_timeout=outbox.shutdown_timeout,
    )
    await worker.start()
    return worker


# =============================================================================
# Main lifespan context manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    The running worker is exposed as ``app.state.outbox_worker`` (None when
    it was not started).

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    from outbox_service.infra.database.session import close_database
    from outbox_service.infra.messaging.broker import stop_broker

    # =========================================================================
    # STARTUP PHASE
    # =========================================================================
    await _startup_core()
    await _startup_database()
    broker = await _startup_messaging()
    worker = await _startup_outbox(broker)
    app.state.outbox_worker = worker

    app_settings = get_app_settings()
    logger.info(
        "Application startup complete - listening on %s:%s",
        app_settings.host,
        app_settings.port,
        extra={
            "service": app_settings.service_name,
            "messaging_enabled": broker is not None,
            "outbox_worker_enabled": worker is not None,
        },
    )

    yield

    # =========================================================================
    # SHUTDOWN PHASE - reverse order
    # =========================================================================
    logger.info("Application shutting down")

    if worker is not None:
        await worker.stop()
    await stop_broker()
    await close_database()

    logger.info("Application shutdown complete")


__all__ = ["lifespan"]
