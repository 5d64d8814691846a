"""
pricing_engines.reconciliation -- Quote financial breakdown at closing.

Responsibility:
    Turn a quote (list price, discount, special bonus, courtesy items and
    negotiated overrides) into the named buckets shown at commercial
    closing, and the adjustment that explains any gap between the final
    closing price and the arithmetic of those buckets.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes pricing_kernel.domain.quote.Quote; optionally the composition
    calculator's ``precio_final`` as the fallback closing price.

Invariants enforced:
    - ``final_closing_price == list_price - courtesy_savings
      - bonus_amount_only + closing_adjustment`` exactly.
    - ``base_for_commercial_condition >= 0`` even when discounts exceed the
      list price.
    - The final closing price is rounded half-up to whole currency units;
      every other bucket is exact.

Failure modes:
    - None for partial data: missing line items, discount, bonus or
      overrides degrade to zero buckets or to the raw quote price.  The
      reconciler always produces a displayable breakdown and is not a
      validator.
    - A fallback price in another currency is ignored with a warning and
      the quote price is used.

Usage:
    from pricing_engines.reconciliation import QuoteReconciler

    breakdown = QuoteReconciler().reconcile(quote)
    print(breakdown.final_closing_price, breakdown.closing_adjustment)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pricing_engines.tracer import traced_engine
from pricing_kernel.domain.quote import Quote
from pricing_kernel.domain.values import Money
from pricing_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")


class ClosingSource(str, Enum):
    """Which quote field supplied the final closing price."""

    CLOSING_TOTAL = "closing_total"
    NEGOTIATED = "negotiated"
    FALLBACK = "fallback"
    PRICE = "price"


@dataclass(frozen=True)
class FinancialBreakdown:
    """
    Named closing buckets of one quote.

    ``bonus_amount`` is the special bonus alone; ``bonus_amount_only`` is
    the discount plus the special bonus, never courtesy.
    ``bonus_and_discounts_total`` folds courtesy in when
    ``courtesy_included`` is True.
    """

    discount_in_money: Money
    list_price: Money
    courtesy_savings: Money
    bonus_amount: Money
    bonus_amount_only: Money
    bonus_and_discounts_total: Money
    base_for_commercial_condition: Money
    final_closing_price: Money
    closing_adjustment: Money
    closing_source: ClosingSource
    courtesy_included: bool

    @property
    def arithmetic_price(self) -> Money:
        """list_price - courtesy_savings - bonus_amount_only."""
        return self.list_price - self.courtesy_savings - self.bonus_amount_only

    @property
    def is_adjusted(self) -> bool:
        return not self.closing_adjustment.is_zero


class QuoteReconciler:
    """
    Pure reconciler for quote closing figures.

    Contract:
        No I/O, never raises for missing data, deterministic.
    Guarantees:
        - Discount is resolved through the quote's explicit ``Discount``.
        - List price is the catalog value of all line items (courtesy
          included), or the quote price when there are no line items.
        - Final closing price order: closing_total, negotiated_price,
          fallback_price, price; the first positive one wins.
    Non-goals:
        - Does not validate the quote.
        - Does not mutate or freeze the quote.
    """

    @traced_engine(
        "reconciliation",
        "1.0",
        fingerprint_fields=("quote", "fallback_price", "include_courtesy_in_bonus"),
    )
    def reconcile(
        self,
        quote: Quote,
        fallback_price: Money | None = None,
        include_courtesy_in_bonus: bool = True,
    ) -> FinancialBreakdown:
        """
        Reconcile a quote into its closing buckets.

        Args:
            quote: The quote to reconcile.
            fallback_price: Closing price used when the quote carries no
                positive closing total or negotiated price, typically the
                composition calculator's ``precio_final``.
            include_courtesy_in_bonus: Fold courtesy savings into
                ``bonus_and_discounts_total``.

        Returns:
            FinancialBreakdown with exact buckets and a whole-unit final
            closing price.
        """
        currency = quote.currency
        zero = Money.zero(currency)

        discount_in_money = quote.discount_in_money()

        if quote.line_items:
            list_price = Money.total(
                [item.catalog_value for item in quote.line_items], currency
            )
        else:
            list_price = quote.price

        courtesy_savings = Money.total(
            [item.catalog_value for item in quote.line_items if item.is_courtesy],
            currency,
        )

        bonus_amount = (quote.special_bonus or zero).floor_zero()
        bonus_amount_only = discount_in_money + bonus_amount

        bonus_and_discounts_total = bonus_amount_only
        if include_courtesy_in_bonus:
            bonus_and_discounts_total = bonus_and_discounts_total + courtesy_savings

        base_for_commercial_condition = (
            list_price - bonus_and_discounts_total
        ).floor_zero()

        closing, source = self._select_closing_price(quote, fallback_price)
        final_closing_price = closing.round_whole()

        closing_adjustment = final_closing_price - (
            list_price - courtesy_savings - bonus_amount_only
        )

        breakdown = FinancialBreakdown(
            discount_in_money=discount_in_money,
            list_price=list_price,
            courtesy_savings=courtesy_savings,
            bonus_amount=bonus_amount,
            bonus_amount_only=bonus_amount_only,
            bonus_and_discounts_total=bonus_and_discounts_total,
            base_for_commercial_condition=base_for_commercial_condition,
            final_closing_price=final_closing_price,
            closing_adjustment=closing_adjustment,
            closing_source=source,
            courtesy_included=include_courtesy_in_bonus,
        )

        logger.info("quote_reconciled", extra={
            "quote_id": quote.quote_id,
            "list_price": str(list_price.amount),
            "bonus_and_discounts_total": str(bonus_and_discounts_total.amount),
            "final_closing_price": str(final_closing_price.amount),
            "closing_adjustment": str(closing_adjustment.amount),
            "closing_source": source.value,
            "courtesy_included": include_courtesy_in_bonus,
        })

        return breakdown

    @staticmethod
    def _select_closing_price(
        quote: Quote,
        fallback_price: Money | None,
    ) -> tuple[Money, ClosingSource]:
        if quote.closing_total is not None and quote.closing_total.is_positive:
            return quote.closing_total, ClosingSource.CLOSING_TOTAL
        if quote.negotiated_price is not None and quote.negotiated_price.is_positive:
            return quote.negotiated_price, ClosingSource.NEGOTIATED
        if fallback_price is not None and fallback_price.is_positive:
            if fallback_price.currency == quote.currency:
                return fallback_price, ClosingSource.FALLBACK
            logger.warning("reconcile_fallback_currency_mismatch", extra={
                "quote_id": quote.quote_id,
                "quote_currency": str(quote.currency),
                "fallback_currency": str(fallback_price.currency),
            })
        return quote.price, ClosingSource.PRICE
