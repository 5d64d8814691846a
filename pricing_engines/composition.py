"""
pricing_engines.composition -- List price composition from cost basis and policy.

Responsibility:
    Derive the list price (``precio_final``) of a catalog item or package
    from its cost basis and the studio pricing policy, and verify that the
    sales commission is fully absorbed by the price.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import pricing_kernel domain values, exceptions and logging.
    Its output feeds the reconciler's fallback closing price.

Invariants enforced:
    - Utility is applied to the cost basis; commission and overprice are
      applied to the commission-inclusive base price.  Overprice is layered
      on top of ``precio_base``, never on the subtotal; swapping the order
      changes ``real_profit_percent``.
    - ``subtotal == precio_base - commission_amount`` within one cent for
      every policy with ``commission_percent < 100``.
    - No intermediate rounding.  ``PriceCompositionResult.rounded()`` is the
      display boundary (half-up to currency precision).
    - Determinism: identical inputs produce identical outputs.

Failure modes:
    - InvalidPolicyError if commission_percent >= 100 (the base price is
      undefined) or any percent is outside [0, 100).
    - InvalidPolicyError if cost or expense is negative.
    - ValueError if cost and expense currencies differ.

Usage:
    from pricing_engines.composition import PriceCompositionCalculator
    from pricing_kernel.domain.values import Money

    result = PriceCompositionCalculator().compose(
        cost=Money.of("1000", "MXN"),
        expense=Money.of("200", "MXN"),
        profit_percent=Decimal("30"),
        commission_percent=Decimal("10"),
        overprice_percent=Decimal("15"),
    )
    print(result.rounded().precio_final)  # 1993.33 MXN
"""

from __future__ import annotations

import time
from dataclasses import dataclass, fields, replace
from decimal import ROUND_HALF_UP, Decimal

from pricing_engines.tracer import traced_engine
from pricing_kernel.domain.policy import CostBasis, ItemKind, PricingPolicy
from pricing_kernel.domain.values import HUNDRED, Money, to_decimal
from pricing_kernel.exceptions import InvalidPolicyError
from pricing_kernel.logging_config import get_logger

logger = get_logger("engines.composition")

_PERCENT_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class PriceCompositionResult:
    """
    Result of a price composition.

    All Money fields hold exact (unrounded) amounts.  Use ``rounded()`` for
    display.
    """

    cost: Money
    expense: Money
    profit_percent: Decimal
    commission_percent: Decimal
    overprice_percent: Decimal
    utility_base: Money
    subtotal: Money
    precio_base: Money
    commission_amount: Money
    overprice_amount: Money
    precio_final: Money
    real_profit_percent: Decimal

    @property
    def cost_total(self) -> Money:
        return self.cost + self.expense

    @property
    def commission_absorbed(self) -> bool:
        """subtotal == precio_base - commission_amount within one cent."""
        return self.subtotal.is_close_to(self.precio_base - self.commission_amount)

    def rounded(self) -> PriceCompositionResult:
        """Copy with money rounded half-up to the currency precision."""
        changes: dict[str, object] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Money):
                changes[f.name] = value.round()
        changes["real_profit_percent"] = self.real_profit_percent.quantize(
            _PERCENT_PLACES, rounding=ROUND_HALF_UP
        )
        return replace(self, **changes)


def _check_percent(name: str, value: Decimal) -> None:
    if value < Decimal("0") or value >= HUNDRED:
        raise InvalidPolicyError(field=name, value=value, reason="must be in [0, 100)")


class PriceCompositionCalculator:
    """
    Pure function calculator for list prices.

    Contract:
        No I/O, no database access, fully deterministic.
        All policy data passed as parameters.
    Guarantees:
        - ``utility_base = (cost + expense) * profit% / 100``
        - ``subtotal = cost + expense + utility_base``
        - ``precio_base = subtotal / (1 - commission% / 100)``
        - ``commission_amount = precio_base * commission% / 100``
        - ``overprice_amount = precio_base * overprice% / 100``
        - ``precio_final = precio_base + overprice_amount``
    Non-goals:
        - Does not round intermediate values.
        - Does not persist prices.
    """

    @traced_engine(
        "composition",
        "1.0",
        fingerprint_fields=(
            "cost",
            "expense",
            "profit_percent",
            "commission_percent",
            "overprice_percent",
        ),
    )
    def compose(
        self,
        cost: Money,
        expense: Money,
        profit_percent: Decimal,
        commission_percent: Decimal,
        overprice_percent: Decimal,
    ) -> PriceCompositionResult:
        """
        Compose the list price for a cost basis.

        Preconditions:
            cost and expense are non-negative Money in the same currency.
            All percents are Decimal in [0, 100).

        Postconditions:
            Returns an exact PriceCompositionResult whose commission is
            fully absorbed (``commission_absorbed`` is True).

        Raises:
            InvalidPolicyError: If a percent is out of range; in particular
                commission_percent >= 100.
            InvalidPolicyError: If cost or expense is negative.
            ValueError: If cost and expense currencies differ.
        """
        t0 = time.monotonic()
        profit_percent = to_decimal(profit_percent)
        commission_percent = to_decimal(commission_percent)
        overprice_percent = to_decimal(overprice_percent)

        logger.info("composition_started", extra={
            "cost": str(cost.amount),
            "expense": str(expense.amount),
            "profit_percent": str(profit_percent),
            "commission_percent": str(commission_percent),
            "overprice_percent": str(overprice_percent),
            "currency": cost.currency.code,
        })

        if cost.currency != expense.currency:
            raise ValueError(
                f"Currency mismatch: cost {cost.currency.code}, "
                f"expense {expense.currency.code}"
            )
        try:
            if cost.is_negative:
                raise InvalidPolicyError(
                    field="cost", value=cost.amount, reason="must not be negative"
                )
            if expense.is_negative:
                raise InvalidPolicyError(
                    field="expense", value=expense.amount, reason="must not be negative"
                )
            _check_percent("commission_percent", commission_percent)
            _check_percent("profit_percent", profit_percent)
            _check_percent("overprice_percent", overprice_percent)
        except InvalidPolicyError as exc:
            logger.error("composition_invalid_policy", extra={
                "field": exc.field,
                "value": str(exc.value),
            })
            raise

        cost_total = cost + expense
        utility_base = cost_total * (profit_percent / HUNDRED)
        subtotal = cost_total + utility_base

        commission_ratio = commission_percent / HUNDRED
        precio_base = subtotal / (Decimal("1") - commission_ratio)
        commission_amount = precio_base * commission_ratio

        overprice_amount = precio_base * (overprice_percent / HUNDRED)
        precio_final = precio_base + overprice_amount

        if cost_total.is_zero:
            real_profit_percent = Decimal("0")
        else:
            real_profit_percent = (
                (precio_base - commission_amount - cost_total).amount
                / cost_total.amount
                * HUNDRED
            )

        result = PriceCompositionResult(
            cost=cost,
            expense=expense,
            profit_percent=profit_percent,
            commission_percent=commission_percent,
            overprice_percent=overprice_percent,
            utility_base=utility_base,
            subtotal=subtotal,
            precio_base=precio_base,
            commission_amount=commission_amount,
            overprice_amount=overprice_amount,
            precio_final=precio_final,
            real_profit_percent=real_profit_percent,
        )

        if not result.commission_absorbed:
            logger.warning("composition_commission_not_absorbed", extra={
                "subtotal": str(subtotal.amount),
                "precio_base": str(precio_base.amount),
                "commission_amount": str(commission_amount.amount),
            })

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("composition_calculated", extra={
            "precio_base": str(precio_base.amount),
            "precio_final": str(precio_final.amount),
            "real_profit_percent": str(real_profit_percent),
            "duration_ms": duration_ms,
        })

        return result

    @staticmethod
    def verify_commission_absorbed(result: PriceCompositionResult) -> bool:
        """Check |subtotal - (precio_base - commission_amount)| <= one cent."""
        return result.commission_absorbed

    def compose_for_policy(
        self,
        cost_basis: CostBasis,
        policy: PricingPolicy,
        item_kind: ItemKind = ItemKind.SERVICE,
    ) -> PriceCompositionResult:
        """Compose using the percents of a studio pricing policy."""
        return self.compose(
            cost=cost_basis.cost,
            expense=cost_basis.expense,
            profit_percent=policy.profit_percent_for(item_kind),
            commission_percent=policy.commission_percent,
            overprice_percent=policy.overprice_percent,
        )
