"""Outbox maintenance commands.

Example:bash
    # Event counts per status
    outbox-service outbox stats

    # Publish one batch of pending events and exit
    outbox-service outbox drain

    # Run the worker without the API until interrupted
    outbox-service outbox worker
"""

import asyncio
import contextlib
import signal
import sys
from typing import TYPE_CHECKING

import click

from outbox_service.cli.utils import coro, error, header, info, success, warning
from outbox_service.core.settings import get_outbox_settings, get_rabbit_settings

if TYPE_CHECKING:
    from outbox_service.infra.events.outbox import OutboxWorker

# Upper bound shared with OutboxSettings.batch_size
MAX_BATCH_SIZE = 1000


@click.group(name="outbox")
def outbox() -> None:
    """Transactional outbox commands."""


@outbox.command()
@coro
async def stats() -> None:
    """Show the number of events in each status."""
    from outbox_service.infra.database import close_database, get_unit_of_work
    from outbox_service.infra.events.outbox import OutboxRepository

    header("Outbox events")
    try:
        async with get_unit_of_work().transaction() as tx:
            counts = await tx.repository(OutboxRepository).count_by_status()
    finally:
        await close_database()

    for status, count in counts.items():
        click.echo(f"  {status.value:<10} {count}")


async def _build_worker(batch_size: int | None) -> "OutboxWorker | None":
    """Connect the broker and build a worker publishing through it.

    Returns None when RabbitMQ is not configured. An unreachable broker
    is reported and exits with status 1.
    """
    import outbox_service.features.products.events  # noqa: F401
    from outbox_service.infra.database import get_unit_of_work
    from outbox_service.infra.events.outbox import OutboxWorker
    from outbox_service.infra.messaging import RabbitPublisher, start_broker

    try:
        broker = await start_broker()
    except ConnectionError as e:
        error(f"Cannot connect to RabbitMQ: {e}")
        sys.exit(1)
    if broker is None:
        return None

    settings = get_outbox_settings()
    publisher = RabbitPublisher(broker, get_rabbit_settings().product_events_destination)
    return OutboxWorker(
        get_unit_of_work(),
        publisher,
        poll_interval=settings.poll_interval,
        batch_size=batch_size or settings.batch_size,
        shutdown_timeout=settings.shutdown_timeout,
    )


@outbox.command()
@click.option(
    "--batch-size",
    type=click.IntRange(1, MAX_BATCH_SIZE),
    default=None,
    help="Events to handle (default: from settings)",
)
@coro
async def drain(batch_size: int | None) -> None:
    """Publish one batch of pending events."""
    from outbox_service.infra.database import close_database
    from outbox_service.infra.messaging import stop_broker

    try:
        worker = await _build_worker(batch_size)
        if worker is None:
            error("RabbitMQ is not configured")
            sys.exit(1)

        result = await worker.run_once()
    finally:
        await stop_broker()
        await close_database()

    if result.failed:
        warning(f"{result.processed} processed, {result.failed} failed")
    else:
        success(f"{result.processed} processed")


@outbox.command()
@coro
async def worker() -> None:
    """Run the outbox worker until SIGINT/SIGTERM."""
    from outbox_service.infra.database import close_database
    from outbox_service.infra.messaging import stop_broker

    try:
        outbox_worker = await _build_worker(None)
        if outbox_worker is None:
            error("RabbitMQ is not configured")
            sys.exit(1)

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop.set)

        await outbox_worker.start()
        info("Outbox worker running, press Ctrl+C to stop")
        try:
            await stop.wait()
        finally:
            await outbox_worker.stop()
    finally:
        await stop_broker()
        await close_database()
    success("Outbox worker stopped")
