"""
pricing_services.pricing_service -- List prices and quote closing for a studio.

Responsibility:
    Select the studio's published pricing policy for the current date and
    compose list prices with it; close a quote by reconciling it (with the
    composed price as fallback closing price) and resolving its payment
    schedule under the quote's commercial condition.

Architecture position:
    Services -- imperative shell over the composition, reconciliation and
    commercial terms engines.  Reads configuration through
    pricing_config.get_active_config; no database access.

Invariants enforced:
    - Composition always runs before reconciliation when its output feeds
      the fallback closing price.
    - Engine and configuration errors become FAILED outcomes carrying the
      error code (INVALID_POLICY, CONFIG_NOT_FOUND, CONFIGURATION_ERROR).

Usage:
    service = PricingService("demo-studio", clock=SystemClock())
    outcome = service.compose_price(CostBasis.of("1000", "200", "MXN"))
    closing = service.close_quote(quote, cost_basis=basis).unwrap()
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pricing_config import StudioPricingConfig, get_active_config
from pricing_engines.commercial_terms import PaymentSchedule, calculate_payment_schedule
from pricing_engines.composition import PriceCompositionCalculator, PriceCompositionResult
from pricing_engines.reconciliation import (
    ClosingSource,
    FinancialBreakdown,
    QuoteReconciler,
)
from pricing_kernel.domain.clock import Clock, SystemClock
from pricing_kernel.domain.policy import CostBasis, ItemKind
from pricing_kernel.domain.quote import Quote
from pricing_kernel.exceptions import (
    ConfigNotFoundError,
    ConfigurationError,
    InvalidPolicyError,
)
from pricing_kernel.logging_config import LogContext, get_logger
from pricing_services.outcomes import ServiceOutcome

logger = get_logger("services.pricing")


@dataclass(frozen=True)
class QuoteClosing:
    """Closing figures of a quote."""

    breakdown: FinancialBreakdown
    schedule: PaymentSchedule
    composition: PriceCompositionResult | None = None


class PricingService:
    """
    Studio-scoped pricing operations.

    Contract:
        Holds only the studio slug, clock and configuration directory.
        Configuration is selected per call by the clock's date.
    """

    def __init__(
        self,
        studio: str,
        clock: Clock | None = None,
        config_dir: Path | None = None,
        calculator: PriceCompositionCalculator | None = None,
        reconciler: QuoteReconciler | None = None,
    ):
        self._studio = studio
        self._clock = clock or SystemClock()
        self._config_dir = config_dir
        self._calculator = calculator or PriceCompositionCalculator()
        self._reconciler = reconciler or QuoteReconciler()

    def _active_config(self) -> StudioPricingConfig:
        return get_active_config(self._studio, self._clock.today(), self._config_dir)

    def compose_price(
        self,
        cost_basis: CostBasis,
        item_kind: ItemKind = ItemKind.SERVICE,
    ) -> ServiceOutcome[PriceCompositionResult]:
        """
        Compose a list price with the studio's active pricing policy.

        Returns:
            SUCCESS with the exact composition, or FAILED with
            INVALID_POLICY / CONFIG_NOT_FOUND / CONFIGURATION_ERROR.
        """
        with LogContext.bind(studio_id=self._studio):
            try:
                config = self._active_config()
                result = self._calculator.compose_for_policy(
                    cost_basis, config.pricing_policy, item_kind
                )
            except (InvalidPolicyError, ConfigNotFoundError) as exc:
                logger.warning("compose_price_failed", extra={
                    "error_code": exc.code,
                    "error": str(exc),
                })
                return ServiceOutcome.from_error(exc)
            except ConfigurationError as exc:
                logger.error("compose_price_config_invalid", extra={
                    "error_code": exc.code,
                    "error": str(exc),
                })
                return ServiceOutcome.from_error(exc)

            return ServiceOutcome.success(result)

    def close_quote(
        self,
        quote: Quote,
        cost_basis: CostBasis | None = None,
        item_kind: ItemKind = ItemKind.SERVICE,
        include_courtesy_in_bonus: bool = True,
    ) -> ServiceOutcome[QuoteClosing]:
        """
        Reconcile a quote and resolve its payment schedule.

        When ``cost_basis`` is given the composed ``precio_final`` is the
        fallback closing price; otherwise the quote price is.  The payment
        schedule applies the quote's commercial condition to
        ``base_for_commercial_condition``; a closing total or negotiated
        price is the total to pay.
        """
        composition: PriceCompositionResult | None = None
        if cost_basis is not None:
            composed = self.compose_price(cost_basis, item_kind)
            if not composed.is_success:
                return ServiceOutcome.failed(composed.error_code, composed.message)
            composition = composed.value

        with LogContext.bind(studio_id=self._studio, quote_id=quote.quote_id or None):
            breakdown = self._reconciler.reconcile(
                quote=quote,
                fallback_price=composition.precio_final if composition else None,
                include_courtesy_in_bonus=include_courtesy_in_bonus,
            )

            negotiated = None
            if breakdown.closing_source in (ClosingSource.CLOSING_TOTAL, ClosingSource.NEGOTIATED):
                negotiated = breakdown.final_closing_price

            schedule = calculate_payment_schedule(
                base_price=breakdown.base_for_commercial_condition,
                condition=quote.condition,
                negotiated_price=negotiated,
                original_price=breakdown.list_price,
            )

            logger.info("quote_closed", extra={
                "quote_id": quote.quote_id,
                "closing_source": breakdown.closing_source.value,
                "total_to_pay": str(schedule.total_to_pay.amount),
                "advance": str(schedule.advance.amount),
            })

            return ServiceOutcome.success(
                QuoteClosing(breakdown=breakdown, schedule=schedule, composition=composition)
            )
