"""Tests for structured logging: JSON formatter, context propagation, lazy logger."""
from __future__ import annotations

import asyncio
import json
import logging
import sys

import pytest

from outbox_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    get_lazy_logger,
    get_log_context,
    log_context,
    set_log_context,
)


def _record(msg: str = "hello %s", args: tuple = ("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="outbox_service.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


# ──────────────────────────────────────────────────────────────
# JSONFormatter
# ──────────────────────────────────────────────────────────────


class TestJSONFormatter:
    def test_default_keys_and_timestamp(self):
        payload = json.loads(JSONFormatter().format(_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "outbox_service.test"
        assert payload["message"] == "hello world"
        assert payload["timestamp"].endswith("Z")

    def test_static_and_extra_fields(self):
        formatter = JSONFormatter(static={"service": "outbox-service"})

        payload = json.loads(formatter.format(_record(event_id="abc", batch_size=10)))

        assert payload["service"] == "outbox-service"
        assert payload["event_id"] == "abc"
        assert payload["batch_size"] == 10
        assert "args" not in payload
        assert "pathname" not in payload

    def test_non_serializable_extra_uses_str(self):
        class Opaque:
            def __str__(self) -> str:
                return "opaque"

        payload = json.loads(JSONFormatter().format(_record(thing=Opaque())))

        assert payload["thing"] == "opaque"

    def test_exception_is_single_line(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        line = JSONFormatter().format(record)

        assert "\n" not in line
        assert "ValueError: bad" in json.loads(line)["exception"]


# ──────────────────────────────────────────────────────────────
# Context
# ──────────────────────────────────────────────────────────────


class TestLogContext:
    def test_set_and_get(self):
        set_log_context(request_id="r-1")
        set_log_context(event_id="e-1")

        assert get_log_context() == {"request_id": "r-1", "event_id": "e-1"}

    def test_log_context_restores_on_exit(self):
        set_log_context(request_id="r-1")

        with pytest.raises(RuntimeError), log_context(event_id="e-1"):
            assert get_log_context() == {"request_id": "r-1", "event_id": "e-1"}
            raise RuntimeError

        assert get_log_context() == {"request_id": "r-1"}

    def test_filter_injects_without_overwriting(self):
        record = _record(event_id="explicit")

        with log_context(event_id="from-context", request_id="r-9"):
            assert ContextInjectingFilter().filter(record) is True

        assert record.event_id == "explicit"
        assert record.request_id == "r-9"

    async def test_context_is_isolated_per_task(self):
        async def bind(value: str) -> dict:
            set_log_context(task=value)
            await asyncio.sleep(0)
            return get_log_context()

        first, second = await asyncio.gather(bind("a"), bind("b"))

        assert first == {"task": "a"}
        assert second == {"task": "b"}
        assert get_log_context() == {}


# ──────────────────────────────────────────────────────────────
# Lazy logger
# ──────────────────────────────────────────────────────────────


class TestLazyLogger:
    def test_callable_not_evaluated_when_disabled(self):
        logger = get_lazy_logger("outbox_service.test.lazy")
        logger.logger.setLevel(logging.INFO)
        calls: list[int] = []

        logger.debug(lambda: calls.append(1) or "expensive")

        assert calls == []

    def test_callable_evaluated_when_enabled(self, caplog):
        logger = get_lazy_logger("outbox_service.test.lazy", component="worker")

        with caplog.at_level(logging.DEBUG, logger="outbox_service.test.lazy"):
            logger.debug(lambda: "computed", extra={"batch": 3})

        (record,) = caplog.records
        assert record.getMessage() == "computed"
        assert record.component == "worker"
        assert record.batch == 3
