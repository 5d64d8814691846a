"""Tests for the structured logging system (pricing_kernel/logging_config.py)."""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest

from pricing_kernel.exceptions import QuoteFrozenError
from pricing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "pricing_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("quote_reconciled", extra={"quote_count": 3, "closing_source": "price"})

        record = _parse_log(stream)
        assert record["quote_count"] == 3
        assert record["closing_source"] == "price"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        promise_id = str(uuid4())
        LogContext.set(studio_id="demo-studio", promise_id=promise_id)
        logger.info("with_context")

        record = _parse_log(stream)
        assert record["studio_id"] == "demo-studio"
        assert record["promise_id"] == promise_id
        assert "quote_id" not in record

    def test_uuid_and_decimal_serialized(self):
        from decimal import Decimal

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("typed", extra={"promise_uuid": uid, "amount": Decimal("1993.33")})

        record = _parse_log(stream)
        assert record["promise_uuid"] == str(uid)
        assert record["amount"] == "1993.33"

    def test_kernel_error_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise QuoteFrozenError(quote_id="q-1", operation="set_discount")
        except QuoteFrozenError:
            logger.exception("mutation_failed")

        record = _parse_log(stream)
        assert record["level"] == "ERROR"
        assert record["exc_type"] == "QuoteFrozenError"
        assert record["exc_code"] == "QUOTE_FROZEN"
        assert record["exc_quote_id"] == "q-1"
        assert record["exc_operation"] == "set_discount"
        assert "traceback" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for request-scoped context propagation."""

    def test_set_only_updates_non_none(self):
        LogContext.set(studio_id="s1")
        LogContext.set(quote_id="q1")
        ctx = LogContext.get_all()
        assert ctx == {"studio_id": "s1", "quote_id": "q1"}

    def test_clear(self):
        LogContext.set(correlation_id="c", actor_id="a")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_values(self):
        LogContext.set(studio_id="outer")
        with LogContext.bind(studio_id="inner", promise_id="p1"):
            ctx = LogContext.get_all()
            assert ctx["studio_id"] == "inner"
            assert ctx["promise_id"] == "p1"
        ctx = LogContext.get_all()
        assert ctx == {"studio_id": "outer"}

    def test_bind_skips_none(self):
        with LogContext.bind(quote_id=None, studio_id="s"):
            assert LogContext.get_all() == {"studio_id": "s"}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            studio_id="s",
            promise_id="p",
            quote_id="q",
            actor_id="a",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 5
        assert ctx["correlation_id"] == "c"
        assert ctx["actor_id"] == "a"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("pricing_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("engines.composition")
        assert logger.name == "pricing_kernel.engines.composition"

    def test_logger_hierarchy(self):
        """Child loggers inherit the pricing_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "pricing_kernel.deep.nested.module"

    def test_level_filters_records(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.WARNING)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        records = _parse_all_logs(stream)
        assert [r["message"] for r in records] == ["kept"]
