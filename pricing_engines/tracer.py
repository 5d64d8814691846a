"""
pricing_engines.tracer -- Engine invocation tracer emitting PRICING_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    engine invocations with structured trace logging.  The trace captures
    engine_name, engine_version, input_fingerprint (deterministic SHA-256
    hash of selected inputs), and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Does NOT introduce I/O into engines; emits a log record only.

Invariants enforced:
    - Fingerprint computation is deterministic: _canonicalize produces
      stable string representations of values; dict keys are sorted; the
      hash is SHA-256 truncated to 16 hex chars.
    - The decorator only reads kwargs and emits a log record; it does not
      mutate inputs.

Failure modes:
    - If fingerprint_fields reference kwargs that are not present, the
      missing field is recorded as "null".

Usage:
    from pricing_engines.tracer import traced_engine

    @traced_engine("composition", "1.0", fingerprint_fields=("cost", "expense"))
    def compose(self, cost, expense, ...):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import logging
import time
from collections.abc import Callable
from decimal import Decimal
from enum import Enum
from typing import Any

_logger = logging.getLogger("pricing_kernel.engines.tracer")


def _canonicalize(value: Any) -> str:
    """Produce a stable string representation of a value for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (bool, int, Decimal)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        items = sorted(value.items())
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """Compute a deterministic SHA-256 fingerprint of selected input fields.

    Only the fields listed in fingerprint_fields are included. Missing
    fields are recorded as "null". The result is a hex digest prefix (16 chars).
    """
    parts: list[str] = []
    for name in fingerprint_fields:
        parts.append(f"{name}={_canonicalize(kwargs.get(name))}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits PRICING_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "composition").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Keyword argument names to include in
            the input fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "PRICING_ENGINE_TRACE",
                extra={
                    "trace_type": "PRICING_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
