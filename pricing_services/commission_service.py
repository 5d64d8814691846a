"""
pricing_services.commission_service -- Commission distribution for a promise.

Responsibility:
    Look up a promise with its quotes and attribution, select the studio's
    published commission policy for the current date, and run the pure
    commission distribution calculator.

Architecture position:
    Services -- imperative shell over the commission engine.
    Reads through PromiseSelector (SQLAlchemy, read-only) and
    pricing_config.get_active_config.  Never writes or commits.

Invariants enforced:
    - A missing promise, a promise with no quotes, or a studio without a
      published configuration yields a FAILED outcome with error code
      NOT_FOUND.  No exception escapes for these cases.
    - A promise whose quotes are all inactive yields a zero pool, not a
      failure.

Failure modes:
    - FAILED / NOT_FOUND as described above.
    - FAILED / CONFIGURATION_ERROR when a configuration set cannot be
      parsed or the selected one does not pass validation.

Usage:
    service = CommissionService(session, clock=SystemClock())
    outcome = service.distribute(promise_id)
    if outcome.is_success:
        print(outcome.value.sales_agent_amount)
"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

from sqlalchemy.orm import Session

from pricing_config import get_active_config
from pricing_engines.commission import (
    CommissionDistribution,
    CommissionDistributionCalculator,
)
from pricing_kernel.domain.clock import Clock, SystemClock
from pricing_kernel.exceptions import (
    ConfigNotFoundError,
    ConfigurationError,
    NotFoundError,
)
from pricing_kernel.logging_config import LogContext, get_logger
from pricing_kernel.selectors.promise_selector import PromiseSelector
from pricing_services.outcomes import ServiceOutcome

logger = get_logger("services.commission")


class CommissionService:
    """
    Computes the commission split of a promise on demand.

    Contract:
        Stateless apart from the injected session, clock and configuration
        directory.  Each call is an independent read-and-compute.
    Non-goals:
        - Does not persist payouts.
        - Does not retry; outcomes are deterministic.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config_dir: Path | None = None,
        calculator: CommissionDistributionCalculator | None = None,
    ):
        self._selector = PromiseSelector(session)
        self._clock = clock or SystemClock()
        self._config_dir = config_dir
        self._calculator = calculator or CommissionDistributionCalculator()

    def distribute(self, promise_id: UUID | str) -> ServiceOutcome[CommissionDistribution]:
        """
        Compute the commission distribution of a promise.

        Returns:
            SUCCESS with a CommissionDistribution, or FAILED with
            error_code NOT_FOUND / CONFIGURATION_ERROR.
        """
        with LogContext.bind(promise_id=str(promise_id)):
            inputs = self._selector.get_commission_inputs(promise_id)
            if inputs is None:
                return self._not_found(
                    NotFoundError("Promise", str(promise_id))
                )
            if not inputs.has_quotes:
                return self._not_found(
                    NotFoundError("Promise", str(promise_id), reason="promise has no quotes")
                )

            as_of = self._clock.today()
            try:
                config = get_active_config(inputs.studio_slug, as_of, self._config_dir)
            except ConfigNotFoundError as exc:
                # Surfaced under the generic not-found code.
                return self._not_found(exc)
            except ConfigurationError as exc:
                logger.error("commission_config_invalid", extra={
                    "studio_slug": inputs.studio_slug,
                    "error_code": exc.code,
                    "error": str(exc),
                })
                return ServiceOutcome.from_error(exc)

            if config.currency != inputs.currency:
                logger.warning("commission_currency_mismatch", extra={
                    "config_currency": config.currency,
                    "promise_currency": inputs.currency,
                })

            with LogContext.bind(studio_id=inputs.studio_slug):
                distribution = self._calculator.distribute(
                    quotes=inputs.quotes,
                    attribution=inputs.attribution,
                    policy=config.commission_policy,
                    currency=inputs.currency,
                )

            logger.info("commission_service_completed", extra={
                "config_id": config.config_id,
                "config_version": config.version,
                "commission_pool": str(distribution.commission_pool.amount),
            })
            return ServiceOutcome.success(distribution)

    @staticmethod
    def _not_found(error: NotFoundError) -> ServiceOutcome[CommissionDistribution]:
        logger.warning("commission_not_found", extra={
            "entity_type": error.entity_type,
            "entity_id": error.entity_id,
            "reason": error.reason,
        })
        return ServiceOutcome.failed(NotFoundError.code, str(error))
