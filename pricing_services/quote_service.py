"""
pricing_services.quote_service -- Negotiation changes on a quote.

Responsibility:
    Apply negotiation changes (negotiated price, discount, special bonus,
    courtesy items, closing total) to a DRAFT quote and return the changed
    quote with its fresh financial breakdown; review a proposed negotiation
    (margin, financial health, courtesy impact) before it is applied;
    freeze a quote when its contract is signed.

Architecture position:
    Services -- imperative shell over the reconciler and the negotiation
    engine.  Works on domain Quote values; persistence is the caller's.

Invariants enforced:
    - A FROZEN quote never changes: any mutation yields a FAILED outcome
      with error code QUOTE_FROZEN and the quote is returned untouched.
    - Every successful change is followed by a reconciliation, so the
      caller always receives a breakdown consistent with the new quote.

Failure modes:
    - FAILED / QUOTE_FROZEN on mutation of a frozen quote.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pricing_engines.negotiation import (
    CourtesyImpact,
    FinancialHealth,
    MarginValidation,
    NegotiationResult,
    assess_financial_health,
    courtesy_impact,
    evaluate_negotiation,
    validate_margin,
)
from pricing_engines.reconciliation import FinancialBreakdown, QuoteReconciler
from pricing_kernel.domain.quote import Discount, Quote
from pricing_kernel.domain.values import Money
from pricing_kernel.exceptions import QuoteFrozenError
from pricing_kernel.logging_config import LogContext, get_logger
from pricing_services.outcomes import ServiceOutcome

logger = get_logger("services.quote")


@dataclass(frozen=True)
class QuoteMutation:
    """
    Requested negotiation changes.  ``None`` leaves a field unchanged.

    ``courtesy_item_ids`` replaces the courtesy set: exactly the given
    item ids become courtesy.
    """

    negotiated_price: Money | None = None
    discount: Discount | None = None
    special_bonus: Money | None = None
    courtesy_item_ids: tuple[str, ...] | None = None
    closing_total: Money | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.negotiated_price,
                self.discount,
                self.special_bonus,
                self.courtesy_item_ids,
                self.closing_total,
            )
        )


@dataclass(frozen=True)
class QuoteUpdate:
    quote: Quote
    breakdown: FinancialBreakdown


@dataclass(frozen=True)
class NegotiationReview:
    """Analysis of a proposed negotiation; nothing is applied."""

    result: NegotiationResult
    margin: MarginValidation
    health: FinancialHealth
    courtesy: CourtesyImpact


class QuoteNegotiationService:
    """Negotiation workflow on domain quotes."""

    def __init__(self, reconciler: QuoteReconciler | None = None):
        self._reconciler = reconciler or QuoteReconciler()

    def apply(
        self,
        quote: Quote,
        mutation: QuoteMutation,
        fallback_price: Money | None = None,
        include_courtesy_in_bonus: bool = True,
    ) -> ServiceOutcome[QuoteUpdate]:
        """
        Apply a negotiation change and reconcile the result.

        Returns:
            SUCCESS with the changed quote and its breakdown, or FAILED
            with error code QUOTE_FROZEN.
        """
        with LogContext.bind(quote_id=quote.quote_id or None):
            try:
                updated = self._apply_mutation(quote, mutation)
            except QuoteFrozenError as exc:
                logger.warning("quote_mutation_rejected", extra={
                    "quote_id": exc.quote_id,
                    "operation": exc.operation,
                })
                return ServiceOutcome.from_error(exc)

            breakdown = self._reconciler.reconcile(
                quote=updated,
                fallback_price=fallback_price,
                include_courtesy_in_bonus=include_courtesy_in_bonus,
            )
            logger.info("quote_mutation_applied", extra={
                "quote_id": updated.quote_id,
                "final_closing_price": str(breakdown.final_closing_price.amount),
            })
            return ServiceOutcome.success(QuoteUpdate(quote=updated, breakdown=breakdown))

    @staticmethod
    def _apply_mutation(quote: Quote, mutation: QuoteMutation) -> Quote:
        if mutation.is_empty and quote.is_frozen:
            # Even a no-op request is a mutation request.
            raise QuoteFrozenError(quote_id=quote.quote_id, operation="update")

        updated = quote
        if mutation.negotiated_price is not None:
            updated = updated.with_negotiated_price(mutation.negotiated_price)
        if mutation.discount is not None:
            updated = updated.with_discount(mutation.discount)
        if mutation.special_bonus is not None:
            updated = updated.with_special_bonus(mutation.special_bonus)
        if mutation.courtesy_item_ids is not None:
            updated = updated.with_courtesy_items(mutation.courtesy_item_ids)
        if mutation.closing_total is not None:
            updated = updated.with_closing_total(mutation.closing_total)
        return updated

    def review(
        self,
        quote: Quote,
        commission_rate: Decimal,
        custom_price: Money | None = None,
        extra_discount: Money | None = None,
        courtesy_item_ids: tuple[str, ...] | None = None,
        event_duration_hours: Decimal | None = None,
    ) -> ServiceOutcome[NegotiationReview]:
        """
        Analyse a proposed negotiation on a quote without applying it.

        The condition discount comes from the quote's commercial condition
        snapshot; the profit impact is measured against the quote price.
        """
        condition_percent = quote.condition.discount_percent if quote.condition else None

        result = evaluate_negotiation(
            items=quote.line_items,
            courtesy_ids=courtesy_item_ids,
            commission_rate=commission_rate,
            custom_price=custom_price,
            extra_discount=extra_discount,
            condition_discount_percent=condition_percent,
            original_price=quote.price,
            event_duration_hours=event_duration_hours,
            currency=quote.currency,
        )
        margin = validate_margin(
            result.margin_percent,
            result.final_price,
            result.total_cost,
            result.total_expense,
        )
        health = assess_financial_health(
            result.total_cost,
            result.total_expense,
            result.final_price,
            commission_rate,
        )
        courtesy = courtesy_impact(quote.line_items, courtesy_item_ids, quote.currency)

        return ServiceOutcome.success(
            NegotiationReview(result=result, margin=margin, health=health, courtesy=courtesy),
            message=margin.message,
        )

    @staticmethod
    def freeze(quote: Quote) -> Quote:
        """Snapshot a quote when its contract is signed."""
        frozen = quote.freeze()
        logger.info("quote_frozen", extra={"quote_id": quote.quote_id})
        return frozen
