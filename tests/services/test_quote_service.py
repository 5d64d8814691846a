"""
Tests for QuoteNegotiationService.

Covers:
- Applying negotiation changes with a fresh breakdown
- Frozen quotes yielding QUOTE_FROZEN outcomes
- Courtesy selection by item id
- Negotiation review (margin, health, courtesy impact)
"""

from decimal import Decimal

from pricing_engines.negotiation import HealthState, MarginLevel
from pricing_engines.reconciliation import ClosingSource
from pricing_kernel.domain.quote import (
    BillingType,
    CommercialCondition,
    Discount,
    LineItem,
    Quote,
)
from pricing_kernel.domain.values import Money
from pricing_services.quote_service import QuoteMutation, QuoteNegotiationService


def mxn(amount) -> Money:
    return Money.of(str(amount), "MXN")


def _package_quote(**overrides) -> Quote:
    items = (
        LineItem(
            price=mxn("1000"), quantity=2, item_id="a",
            cost=mxn("300"), expense=mxn("100"), billing_type=BillingType.SERVICE,
        ),
        LineItem(
            price=mxn("500"), quantity=1, item_id="b",
            cost=mxn("100"), expense=mxn("50"), billing_type=BillingType.HOUR,
        ),
    )
    params = dict(price=mxn("2500"), quote_id="q-1", line_items=items)
    params.update(overrides)
    return Quote(**params)


class TestApply:

    def setup_method(self):
        self.service = QuoteNegotiationService()

    def test_negotiated_price(self, make_quote):
        quote = make_quote(price="10000", discount=Discount.percent("10"))
        outcome = self.service.apply(quote, QuoteMutation(negotiated_price=mxn("8500")))

        assert outcome.is_success
        update = outcome.value
        assert update.quote.negotiated_price == mxn("8500")
        assert update.breakdown.final_closing_price == mxn("8500")
        assert update.breakdown.closing_adjustment == mxn("-500")
        assert update.breakdown.closing_source == ClosingSource.NEGOTIATED
        assert quote.negotiated_price is None

    def test_several_changes(self, make_quote):
        quote = make_quote(price="10000")
        mutation = QuoteMutation(
            discount=Discount.amount("500"),
            special_bonus=mxn("300"),
            closing_total=mxn("9000"),
        )
        update = self.service.apply(quote, mutation).unwrap()

        assert update.breakdown.bonus_amount_only == mxn("800")
        assert update.breakdown.final_closing_price == mxn("9000")
        assert update.breakdown.closing_source == ClosingSource.CLOSING_TOTAL

    def test_courtesy_items(self):
        update = self.service.apply(
            _package_quote(), QuoteMutation(courtesy_item_ids=("b",))
        ).unwrap()

        assert update.breakdown.courtesy_savings == mxn("500")
        assert [i.is_courtesy for i in update.quote.line_items] == [False, True]

    def test_fallback_price_passed_through(self, make_quote):
        update = self.service.apply(
            make_quote(price="2000"),
            QuoteMutation(special_bonus=mxn("100")),
            fallback_price=mxn("1993.33"),
        ).unwrap()
        assert update.breakdown.closing_source == ClosingSource.FALLBACK

    def test_empty_mutation_on_draft(self, make_quote):
        quote = make_quote()
        update = self.service.apply(quote, QuoteMutation()).unwrap()
        assert update.quote == quote


class TestFrozenQuotes:

    def setup_method(self):
        self.service = QuoteNegotiationService()

    def test_mutation_rejected(self, make_quote):
        frozen = self.service.freeze(make_quote(quote_id="q-9"))
        outcome = self.service.apply(frozen, QuoteMutation(negotiated_price=mxn("1")))

        assert not outcome.is_success
        assert outcome.error_code == "QUOTE_FROZEN"
        assert "q-9" in outcome.message

    def test_empty_mutation_rejected(self, make_quote):
        frozen = self.service.freeze(make_quote())
        outcome = self.service.apply(frozen, QuoteMutation())
        assert outcome.error_code == "QUOTE_FROZEN"

    def test_rejection_logged(self, make_quote, captured_logs):
        frozen = self.service.freeze(make_quote(quote_id="q-9"))
        self.service.apply(frozen, QuoteMutation(discount=Discount.percent("5")))

        rejected = [r for r in captured_logs() if r["message"] == "quote_mutation_rejected"]
        assert rejected[0]["operation"] == "set_discount"
        assert rejected[0]["quote_id"] == "q-9"

    def test_freeze_idempotent(self, make_quote):
        frozen = self.service.freeze(make_quote())
        assert self.service.freeze(frozen) is frozen
        assert frozen.is_frozen


class TestReview:

    def setup_method(self):
        self.service = QuoteNegotiationService()

    def test_catalog_price_review(self):
        outcome = self.service.review(
            _package_quote(),
            commission_rate=Decimal("0.10"),
            event_duration_hours=Decimal("4"),
        )

        assert outcome.is_success
        review = outcome.value
        assert review.result.net_profit == mxn("850")
        assert review.margin.level == MarginLevel.ACCEPTABLE
        assert review.health.state == HealthState.HEALTHY
        assert review.courtesy.total_courtesy == Money.zero("MXN")
        assert outcome.message == review.margin.message

    def test_condition_discount_from_quote(self):
        condition = CommercialCondition(name="contado", discount_percent=Decimal("10"))
        review = self.service.review(
            _package_quote(condition=condition),
            commission_rate=Decimal("0.10"),
            custom_price=mxn("2000"),
            extra_discount=mxn("100"),
            event_duration_hours=Decimal("4"),
        ).unwrap()

        assert review.result.final_price == mxn("1700")

    def test_below_cost_review(self):
        review = self.service.review(
            _package_quote(),
            commission_rate=Decimal("0.10"),
            custom_price=mxn("1200"),
            event_duration_hours=Decimal("4"),
        ).unwrap()

        assert not review.result.is_viable
        assert not review.margin.is_valid
        assert review.health.state == HealthState.DANGER

    def test_courtesy_review(self):
        review = self.service.review(
            _package_quote(),
            commission_rate=Decimal("0.10"),
            courtesy_item_ids=("a",),
        ).unwrap()

        assert review.courtesy.total_courtesy == mxn("2000")
        assert review.courtesy.profit_impact == mxn("-1200")
