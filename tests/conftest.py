"""
Pytest fixtures for the pricing engine test suite.

Provides:
- In-memory SQLite sessions for selector and service tests
- A deterministic clock
- Structured log capture
- Quote and promise builders
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from pricing_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from pricing_kernel.domain.clock import DeterministicClock
from pricing_kernel.domain.quote import LineItem, Quote
from pricing_kernel.domain.values import Money
from pricing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from pricing_kernel.models.promise import PromiseModel, PromiseQuoteModel

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture pricing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "composition_calculated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("pricing_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    init_engine_from_url("sqlite://")
    create_tables()
    db_session = get_session()
    try:
        yield db_session
    finally:
        db_session.close()
        drop_tables()
        reset_engine()


# Clock fixtures


@pytest.fixture
def deterministic_clock():
    """Deterministic clock at 2025-06-15 12:00 UTC (inside the 2025 config set)."""
    return DeterministicClock(datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc))


# Builders


def mxn(amount) -> Money:
    return Money.of(str(amount), "MXN")


@pytest.fixture
def make_quote():
    """Build a DRAFT MXN quote from plain numbers."""

    def _make(price="10000", line_items=(), **overrides) -> Quote:
        items = tuple(
            item if isinstance(item, LineItem) else LineItem(
                price=mxn(item[0]),
                quantity=item[1],
                is_courtesy=item[2] if len(item) > 2 else False,
            )
            for item in line_items
        )
        return Quote(price=mxn(price), line_items=items, **overrides)

    return _make


@pytest.fixture
def add_promise(session):
    """Insert a promise with quotes and return its id."""

    def _add(
        quotes=(),
        studio_slug="demo-studio",
        sales_agent_id="agent-1",
        referrer_id=None,
        referrer_type=None,
        currency="MXN",
    ):
        promise = PromiseModel(
            studio_slug=studio_slug,
            currency=currency,
            sales_agent_id=sales_agent_id,
            referrer_id=referrer_id,
            referrer_type=referrer_type,
        )
        session.add(promise)
        session.flush()
        for quote_fields in quotes:
            fields = dict(quote_fields)
            fields["price"] = Decimal(str(fields["price"]))
            if fields.get("discount") is not None:
                fields["discount"] = Decimal(str(fields["discount"]))
            session.add(PromiseQuoteModel(promise_id=promise.id, **fields))
        session.commit()
        return promise.id

    return _add
