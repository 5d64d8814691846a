"""
pricing_engines.commission -- Commission pool and its split between agent and referrer.

Responsibility:
    Aggregate the net value of a promise's active quotes, derive the sales
    commission pool from the studio commission policy, and split the pool
    between the sales agent and an optional referrer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The promise lookup and configuration selection live in
    pricing_services.commission_service; this module only sees plain
    domain values.

Invariants enforced:
    - Only active quotes count: not archived and not REJECTED/CANCELLED.
    - ``sales_agent_amount + referrer_amount == commission_pool`` exactly.
    - A FIXED referral reward is capped at the pool; the referrer can never
      be paid more than the pool holds.
    - CONTACT referrers are acknowledged but receive 0.

Failure modes:
    - ValueError if quotes mix currencies, or if no currency can be
      determined (no quotes and no explicit currency).
    - A missing sales agent is not an error; the pool is unattributed.

Usage:
    from pricing_engines.commission import CommissionDistributionCalculator

    distribution = CommissionDistributionCalculator().distribute(
        quotes=quotes, attribution=attribution, policy=policy,
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pricing_engines.tracer import traced_engine
from pricing_kernel.domain.attribution import Attribution, ReferrerType
from pricing_kernel.domain.policy import CommissionPolicy, RewardType
from pricing_kernel.domain.quote import Quote
from pricing_kernel.domain.values import Currency, Money, to_decimal
from pricing_kernel.logging_config import get_logger

logger = get_logger("engines.commission")


class DistributionRule(str, Enum):
    """Branch of the split that applied."""

    STAFF_PERCENTAGE = "staff_percentage"
    STAFF_FIXED = "staff_fixed"
    CONTACT = "contact"
    NO_REFERRER = "no_referrer"


@dataclass(frozen=True)
class CommissionDistribution:
    """Commission pool of a promise and its split."""

    total_quote_amount: Money
    commission_pool: Money
    sales_agent_amount: Money
    referrer_amount: Money
    rule: DistributionRule
    promise_id: str = ""
    sales_agent_id: str | None = None
    referrer_id: str | None = None
    referrer_type: ReferrerType | None = None
    active_quote_count: int = 0

    @property
    def is_attributed(self) -> bool:
        """False when no sales agent is recorded for the promise."""
        return self.sales_agent_id is not None


class CommissionDistributionCalculator:
    """
    Pure calculator for the commission split of a promise.

    Contract:
        Receives the promise's quotes, its attribution and the studio
        commission policy.  Never reads configuration or the database.
    Guarantees:
        - ``total_quote_amount`` = sum of ``max(0, price - discount)`` over
          active quotes.
        - ``commission_pool`` = ``total_quote_amount * commission_ratio``.
        - Conservation of the pool across every branch.
    Non-goals:
        - Does not persist payouts or schedule payments.
    """

    @traced_engine(
        "commission",
        "1.0",
        fingerprint_fields=("quotes", "attribution", "policy"),
    )
    def distribute(
        self,
        quotes: Sequence[Quote],
        attribution: Attribution,
        policy: CommissionPolicy,
        currency: Currency | str | None = None,
    ) -> CommissionDistribution:
        """
        Compute the commission distribution.

        Args:
            quotes: All quotes of the promise; inactive ones are skipped.
            attribution: Sales agent and referrer of the promise.
            policy: Studio commission policy.
            currency: Currency of the result when the promise has no
                quotes; otherwise taken from the quotes.

        Raises:
            ValueError: If the currency cannot be determined or quotes
                mix currencies.
        """
        if currency is None:
            if not quotes:
                raise ValueError(
                    f"Cannot determine currency for promise {attribution.promise_id}: "
                    "no quotes and no currency given"
                )
            currency = quotes[0].currency

        active = [quote for quote in quotes if quote.is_active]
        total_quote_amount = Money.total(
            [quote.net_price() for quote in active], currency
        )
        commission_pool = total_quote_amount * policy.commission_ratio

        referrer_amount, rule = self._referrer_share(
            commission_pool, attribution, policy
        )
        sales_agent_amount = commission_pool - referrer_amount

        if attribution.sales_agent_id is None:
            logger.warning("commission_pool_unattributed", extra={
                "promise_id": attribution.promise_id,
                "commission_pool": str(commission_pool.amount),
            })

        logger.info("commission_distributed", extra={
            "promise_id": attribution.promise_id,
            "active_quote_count": len(active),
            "skipped_quote_count": len(quotes) - len(active),
            "total_quote_amount": str(total_quote_amount.amount),
            "commission_pool": str(commission_pool.amount),
            "sales_agent_amount": str(sales_agent_amount.amount),
            "referrer_amount": str(referrer_amount.amount),
            "rule": rule.value,
        })

        return CommissionDistribution(
            total_quote_amount=total_quote_amount,
            commission_pool=commission_pool,
            sales_agent_amount=sales_agent_amount,
            referrer_amount=referrer_amount,
            rule=rule,
            promise_id=attribution.promise_id,
            sales_agent_id=attribution.sales_agent_id,
            referrer_id=attribution.referrer_id,
            referrer_type=attribution.referrer_type,
            active_quote_count=len(active),
        )

    @staticmethod
    def _referrer_share(
        pool: Money,
        attribution: Attribution,
        policy: CommissionPolicy,
    ) -> tuple[Money, DistributionRule]:
        zero = Money.zero(pool.currency)

        if attribution.referrer_type is None:
            return zero, DistributionRule.NO_REFERRER
        if attribution.referrer_type == ReferrerType.CONTACT:
            return zero, DistributionRule.CONTACT

        if policy.referral_reward_type == RewardType.FIXED:
            reward = to_decimal(policy.referral_reward_value)
            if reward <= Decimal("0"):
                return zero, DistributionRule.STAFF_FIXED
            capped = min(Money(amount=reward, currency=pool.currency), pool)
            return capped, DistributionRule.STAFF_FIXED

        ratio = min(policy.reward_ratio, Decimal("1"))
        return pool * ratio, DistributionRule.STAFF_PERCENTAGE
