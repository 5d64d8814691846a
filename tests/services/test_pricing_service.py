"""
Tests for PricingService.

Covers:
- List price composition with the studio's published policy
- Configuration failures surfaced as outcomes
- Quote closing: breakdown plus payment schedule
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from pricing_engines.commercial_terms import TotalSource
from pricing_engines.reconciliation import ClosingSource
from pricing_kernel.domain.clock import DeterministicClock
from pricing_kernel.domain.policy import CostBasis, ItemKind
from pricing_kernel.domain.quote import AdvanceType, CommercialCondition, Discount
from pricing_kernel.domain.values import Money
from pricing_services.pricing_service import PricingService


def mxn(amount) -> Money:
    return Money.of(str(amount), "MXN")


BASIS = CostBasis.of("1000", "200", "MXN")

HALF_DOWN = CommercialCondition(
    name="contado",
    discount_percent=Decimal("10"),
    advance_type=AdvanceType.PERCENTAGE,
    advance_percent=Decimal("50"),
)


class TestComposePrice:

    def test_service_price(self, deterministic_clock):
        service = PricingService("demo-studio", clock=deterministic_clock)
        outcome = service.compose_price(BASIS)

        assert outcome.is_success
        assert outcome.value.rounded().precio_final == mxn("1993.33")

    def test_product_price(self, deterministic_clock):
        service = PricingService("demo-studio", clock=deterministic_clock)
        result = service.compose_price(BASIS, ItemKind.PRODUCT).unwrap()
        assert result.rounded().precio_final == mxn("2146.67")

    def test_no_configuration_for_date(self):
        clock = DeterministicClock(datetime(2023, 3, 1, tzinfo=timezone.utc))
        outcome = PricingService("demo-studio", clock=clock).compose_price(BASIS)

        assert not outcome.is_success
        assert outcome.error_code == "CONFIG_NOT_FOUND"

    def test_negative_cost(self, deterministic_clock):
        service = PricingService("demo-studio", clock=deterministic_clock)
        outcome = service.compose_price(CostBasis.of("-1", "0", "MXN"))
        assert outcome.error_code == "INVALID_POLICY"

    def test_invalid_configuration(self, deterministic_clock, tmp_path):
        set_dir = tmp_path / "broken"
        set_dir.mkdir()
        (set_dir / "pricing.yaml").write_text(
            "config_id: broken\n"
            "version: 1\n"
            "status: published\n"
            "studio: demo-studio\n"
            "currency: MXN\n"
            "effective_from: '2025-01-01'\n"
            "pricing_policy:\n"
            "  profit_percent: '30'\n"
            "  commission_percent: '100'\n"
            "commission_policy:\n"
            "  sales_commission_rate: '0.05'\n"
        )
        service = PricingService("demo-studio", clock=deterministic_clock, config_dir=tmp_path)
        outcome = service.compose_price(BASIS)
        assert outcome.error_code == "CONFIGURATION_ERROR"

    def test_missing_configuration_directory(self, deterministic_clock, tmp_path):
        service = PricingService(
            "demo-studio", clock=deterministic_clock, config_dir=tmp_path / "nope"
        )
        outcome = service.compose_price(BASIS)
        assert outcome.error_code == "CONFIG_NOT_FOUND"

    def test_unparseable_configuration(self, deterministic_clock, tmp_path):
        set_dir = tmp_path / "broken"
        set_dir.mkdir()
        (set_dir / "pricing.yaml").write_text("config_id: [unclosed\n")
        service = PricingService("demo-studio", clock=deterministic_clock, config_dir=tmp_path)

        outcome = service.compose_price(BASIS)
        assert outcome.error_code == "CONFIGURATION_ERROR"
        assert "broken" in outcome.message


class TestCloseQuote:

    def setup_method(self):
        self.clock = DeterministicClock(datetime(2025, 6, 15, 12, tzinfo=timezone.utc))
        self.service = PricingService("demo-studio", clock=self.clock)

    def test_condition_discount_on_base(self, make_quote):
        quote = make_quote(price="10000", discount=Discount.percent("10"), condition=HALF_DOWN)
        closing = self.service.close_quote(quote).unwrap()

        assert closing.breakdown.base_for_commercial_condition == mxn("9000")
        assert closing.breakdown.closing_source == ClosingSource.PRICE
        assert closing.schedule.source == TotalSource.CONDITION_PERCENT
        assert closing.schedule.total_to_pay == mxn("8100")
        assert closing.schedule.advance == mxn("4050")
        assert closing.schedule.deferred == mxn("4050")
        assert closing.composition is None

    def test_negotiated_total(self, make_quote):
        quote = make_quote(
            price="10000",
            discount=Discount.percent("10"),
            negotiated_price=mxn("8500"),
            condition=HALF_DOWN,
        )
        closing = self.service.close_quote(quote).unwrap()

        assert closing.breakdown.final_closing_price == mxn("8500")
        assert closing.schedule.source == TotalSource.NEGOTIATED
        assert closing.schedule.total_to_pay == mxn("8500")
        assert closing.schedule.savings == mxn("1500")
        assert closing.schedule.advance == mxn("4250")

    def test_composed_fallback(self, make_quote):
        closing = self.service.close_quote(make_quote(price="2000"), cost_basis=BASIS).unwrap()

        assert closing.composition is not None
        assert closing.breakdown.closing_source == ClosingSource.FALLBACK
        assert closing.breakdown.final_closing_price == mxn("1993")

    def test_no_condition(self, make_quote):
        closing = self.service.close_quote(make_quote(price="10000")).unwrap()
        assert closing.schedule.source == TotalSource.NO_DISCOUNT
        assert closing.schedule.advance == Money.zero("MXN")

    def test_composition_failure_propagates(self, make_quote):
        self.clock.set_time(datetime(2023, 3, 1, tzinfo=timezone.utc))
        outcome = self.service.close_quote(make_quote(), cost_basis=BASIS)
        assert outcome.error_code == "CONFIG_NOT_FOUND"

    @pytest.mark.parametrize("include_courtesy", [True, False])
    def test_courtesy_flag(self, make_quote, include_courtesy):
        quote = make_quote(price="10000", line_items=[("6000", 1), ("2000", 2, True)])
        closing = self.service.close_quote(quote, include_courtesy_in_bonus=include_courtesy).unwrap()

        expected_base = mxn("6000") if include_courtesy else mxn("10000")
        assert closing.breakdown.base_for_commercial_condition == expected_base
        assert closing.schedule.total_to_pay == expected_base
