"""Tests for the outbox CLI commands.

Testing approach:
- Uses Click's CliRunner for command invocation
- Replaces the unit of work, broker and worker so no database or
  RabbitMQ is needed
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

from click.testing import CliRunner
import pytest

from outbox_service.cli.commands import outbox as outbox_commands
from outbox_service.cli.main import cli
from outbox_service.infra.events.outbox import BatchResult, EventStatus

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def fake_unit_of_work():
    """Unit of work whose outbox repository reports fixed counts."""
    repository = MagicMock()
    repository.count_by_status = AsyncMock(
        return_value={EventStatus.PENDING: 4, EventStatus.PROCESSED: 10, EventStatus.FAILED: 1}
    )
    tx = MagicMock()
    tx.repository.return_value = repository

    @asynccontextmanager
    async def transaction():
        yield tx

    uow = MagicMock()
    uow.transaction = transaction
    return uow


@pytest.fixture
def no_infra(monkeypatch: pytest.MonkeyPatch):
    """Stub out database and broker shutdown."""
    monkeypatch.setattr("outbox_service.infra.database.close_database", AsyncMock())
    monkeypatch.setattr("outbox_service.infra.messaging.stop_broker", AsyncMock())


# =============================================================================
# outbox stats
# =============================================================================


def test_stats_prints_counts(cli_runner, fake_unit_of_work, no_infra, monkeypatch):
    monkeypatch.setattr("outbox_service.infra.database.get_unit_of_work", lambda: fake_unit_of_work)

    result = cli_runner.invoke(cli, ["outbox", "stats"])

    assert result.exit_code == 0, result.output
    assert "Outbox events" in result.output
    lines = {line.split()[0]: line.split()[1] for line in result.output.splitlines()[2:] if line}
    assert lines == {"pending": "4", "processed": "10", "failed": "1"}


# =============================================================================
# outbox drain
# =============================================================================


def test_drain_without_rabbit_fails(cli_runner, no_infra, monkeypatch):
    monkeypatch.setattr(outbox_commands, "_build_worker", AsyncMock(return_value=None))

    result = cli_runner.invoke(cli, ["outbox", "drain"])

    assert result.exit_code == 1
    assert "RabbitMQ is not configured" in result.output


@pytest.mark.parametrize(
    ("batch", "expected"),
    [
        (BatchResult(processed=3), "3 processed"),
        (BatchResult(processed=2, failed=1), "2 processed, 1 failed"),
    ],
)
def test_drain_reports_batch_result(cli_runner, no_infra, monkeypatch, batch, expected):
    worker = MagicMock()
    worker.run_once = AsyncMock(return_value=batch)
    build = AsyncMock(return_value=worker)
    monkeypatch.setattr(outbox_commands, "_build_worker", build)

    result = cli_runner.invoke(cli, ["outbox", "drain", "--batch-size", "5"])

    assert result.exit_code == 0, result.output
    assert expected in result.output
    build.assert_awaited_once_with(5)


@pytest.mark.parametrize("batch_size", ["0", "-1", "5000"])
def test_drain_rejects_out_of_range_batch_size(cli_runner, no_infra, monkeypatch, batch_size):
    build = AsyncMock()
    monkeypatch.setattr(outbox_commands, "_build_worker", build)

    result = cli_runner.invoke(cli, ["outbox", "drain", "--batch-size", batch_size])

    assert result.exit_code == 2
    assert "--batch-size" in result.output
    build.assert_not_awaited()


def test_drain_reports_unreachable_broker(cli_runner, monkeypatch):
    """A broker connection failure prints an error and exits 1 after cleanup."""
    close_database = AsyncMock()
    stop_broker = AsyncMock()
    monkeypatch.setattr("outbox_service.infra.database.close_database", close_database)
    monkeypatch.setattr("outbox_service.infra.messaging.stop_broker", stop_broker)
    monkeypatch.setattr(
        "outbox_service.infra.messaging.start_broker",
        AsyncMock(side_effect=ConnectionError("RabbitMQ connection timeout after 10s")),
    )

    result = cli_runner.invoke(cli, ["outbox", "drain"])

    assert result.exit_code == 1
    assert "Cannot connect to RabbitMQ: RabbitMQ connection timeout after 10s" in result.output
    assert not isinstance(result.exception, ConnectionError)
    stop_broker.assert_awaited_once()
    close_database.assert_awaited_once()


def test_version(cli_runner):
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "outbox-service" in result.output
