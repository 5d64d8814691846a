"""Tests for the payment schedule at closing."""

from decimal import Decimal

from pricing_engines.commercial_terms import TotalSource, calculate_payment_schedule
from pricing_kernel.domain.quote import AdvanceType, CommercialCondition
from pricing_kernel.domain.values import Money


def mxn(amount) -> Money:
    return Money.of(str(amount), "MXN")


TEN_OFF_THIRTY_DOWN = CommercialCondition(
    name="contado",
    discount_percent=Decimal("10"),
    advance_type=AdvanceType.PERCENTAGE,
    advance_percent=Decimal("30"),
)


class TestConditionDiscount:

    def test_percent_discount_and_advance(self):
        schedule = calculate_payment_schedule(
            base_price=mxn("10000"), condition=TEN_OFF_THIRTY_DOWN
        )
        assert schedule.source == TotalSource.CONDITION_PERCENT
        assert schedule.discount_applied == mxn("1000")
        assert schedule.discount_percent == Decimal("10")
        assert schedule.total_to_pay == mxn("9000")
        assert schedule.advance == mxn("2700")
        assert schedule.deferred == mxn("6300")
        assert schedule.savings is None

    def test_condition_applies_to_real_base(self):
        schedule = calculate_payment_schedule(
            base_price=mxn("9500"),
            condition=TEN_OFF_THIRTY_DOWN,
            existing_discount=mxn("500"),
        )
        assert schedule.base_price == mxn("10000")
        assert schedule.total_to_pay == mxn("9000")

    def test_fixed_advance_capped_at_total(self):
        condition = CommercialCondition(
            name="apartado",
            advance_type=AdvanceType.FIXED_AMOUNT,
            advance_amount=Decimal("20000"),
        )
        schedule = calculate_payment_schedule(base_price=mxn("10000"), condition=condition)
        assert schedule.advance == mxn("10000")
        assert schedule.deferred == Money.zero("MXN")

    def test_fixed_advance(self):
        condition = CommercialCondition(
            name="apartado",
            advance_type=AdvanceType.FIXED_AMOUNT,
            advance_amount=Decimal("2000"),
        )
        schedule = calculate_payment_schedule(base_price=mxn("10000"), condition=condition)
        assert schedule.advance == mxn("2000")
        assert schedule.deferred == mxn("8000")


class TestNegotiatedTotal:

    def test_negotiated_price_wins(self):
        schedule = calculate_payment_schedule(
            base_price=mxn("10000"),
            condition=TEN_OFF_THIRTY_DOWN,
            negotiated_price=mxn("8000"),
        )
        assert schedule.source == TotalSource.NEGOTIATED
        assert schedule.total_to_pay == mxn("8000")
        assert schedule.discount_applied == Money.zero("MXN")
        assert schedule.savings == mxn("2000")
        assert schedule.advance == mxn("2400")

    def test_savings_against_original_price(self):
        schedule = calculate_payment_schedule(
            base_price=mxn("9000"),
            negotiated_price=mxn("8500"),
            original_price=mxn("10000"),
        )
        assert schedule.comparison_price == mxn("10000")
        assert schedule.savings == mxn("1500")

    def test_zero_negotiated_ignored(self):
        schedule = calculate_payment_schedule(
            base_price=mxn("10000"), negotiated_price=mxn("0")
        )
        assert schedule.source == TotalSource.NO_DISCOUNT


class TestWithoutCondition:

    def test_existing_discount(self):
        schedule = calculate_payment_schedule(
            base_price=mxn("9500"), existing_discount=mxn("500")
        )
        assert schedule.source == TotalSource.DISCOUNT_AMOUNT
        assert schedule.total_to_pay == mxn("9500")
        assert schedule.discount_applied == mxn("500")
        assert schedule.base_price == mxn("10000")

    def test_no_discount(self):
        schedule = calculate_payment_schedule(base_price=mxn("10000"))
        assert schedule.source == TotalSource.NO_DISCOUNT
        assert schedule.total_to_pay == mxn("10000")
        assert schedule.advance == Money.zero("MXN")
        assert schedule.deferred == mxn("10000")
