"""Tests for the engine invocation tracer."""

from decimal import Decimal

from pricing_engines.composition import PriceCompositionCalculator
from pricing_engines.tracer import compute_input_fingerprint, traced_engine
from pricing_kernel.domain.policy import RewardType
from pricing_kernel.domain.values import Money


class TestInputFingerprint:

    def test_deterministic(self):
        kwargs = {"cost": Decimal("1000"), "kind": RewardType.FIXED, "tags": {"b": 2, "a": 1}}
        first = compute_input_fingerprint(("cost", "kind", "tags"), kwargs)
        second = compute_input_fingerprint(("cost", "kind", "tags"), dict(kwargs))
        assert first == second
        assert len(first) == 16

    def test_sensitive_to_values(self):
        a = compute_input_fingerprint(("cost",), {"cost": Decimal("1000")})
        b = compute_input_fingerprint(("cost",), {"cost": Decimal("1001")})
        assert a != b

    def test_missing_field_is_null(self):
        missing = compute_input_fingerprint(("cost",), {})
        explicit = compute_input_fingerprint(("cost",), {"cost": None})
        assert missing == explicit


class TestTracedEngine:

    def test_trace_emitted(self, captured_logs):
        @traced_engine("sample", "2.1", fingerprint_fields=("x",))
        def double(x):
            return x * 2

        assert double(x=21) == 42

        traces = [r for r in captured_logs() if r["message"] == "PRICING_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["input_fingerprint"] == compute_input_fingerprint(("x",), {"x": 21})
        assert "duration_ms" in trace

    def test_composition_is_traced(self, captured_logs):
        PriceCompositionCalculator().compose(
            cost=Money.of("1000", "MXN"),
            expense=Money.of("200", "MXN"),
            profit_percent=Decimal("30"),
            commission_percent=Decimal("10"),
            overprice_percent=Decimal("15"),
        )
        traces = [r for r in captured_logs() if r.get("trace_type") == "PRICING_ENGINE_TRACE"]
        assert [t["engine_name"] for t in traces] == ["composition"]
        assert traces[0]["function"] == "PriceCompositionCalculator.compose"
