"""
Policy -- Studio pricing and commission policy value objects.

Responsibility:
    Immutable inputs to the composition and commission engines: the cost
    basis of a catalog item, the studio's pricing policy (profit, sales
    commission and overprice percents) and its commission policy (sales
    commission rate and referral reward).

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Produced by
    ``pricing_config`` from a versioned configuration set and passed
    explicitly into the engines; engines never fetch configuration.

Invariants enforced:
    - Percent fields are Decimal; floats are rejected.
    - Rates are exposed as normalized ratios in [0, 1].
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pricing_kernel.domain.values import Money, normalize_ratio, to_decimal


class ItemKind(str, Enum):
    """Catalog item kind; selects the profit margin that applies."""

    SERVICE = "service"
    PRODUCT = "product"


class RewardType(str, Enum):
    """How a staff referrer is rewarded out of the commission pool."""

    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


@dataclass(frozen=True)
class CostBasis:
    """Cost and operating expense of a catalog item or package."""

    cost: Money
    expense: Money

    def __post_init__(self) -> None:
        if self.cost.currency != self.expense.currency:
            raise ValueError(
                f"Cost basis currency mismatch: {self.cost.currency} "
                f"and {self.expense.currency}"
            )

    @classmethod
    def of(
        cls,
        cost: Decimal | str | int,
        expense: Decimal | str | int,
        currency: str,
    ) -> CostBasis:
        return cls(cost=Money.of(cost, currency), expense=Money.of(expense, currency))

    @property
    def total(self) -> Money:
        return self.cost + self.expense


@dataclass(frozen=True)
class PricingPolicy:
    """
    Studio pricing policy, percentages in [0, 100).

    ``profit_percent`` is the default margin.  When the studio distinguishes
    service and product margins, ``profit_percent_for`` returns the one that
    applies to the item kind.
    """

    profit_percent: Decimal
    commission_percent: Decimal
    overprice_percent: Decimal
    service_profit_percent: Decimal | None = None
    product_profit_percent: Decimal | None = None

    def __post_init__(self) -> None:
        for name in (
            "profit_percent",
            "commission_percent",
            "overprice_percent",
            "service_profit_percent",
            "product_profit_percent",
        ):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_decimal(value))

    def profit_percent_for(self, kind: ItemKind) -> Decimal:
        if kind == ItemKind.SERVICE and self.service_profit_percent is not None:
            return self.service_profit_percent
        if kind == ItemKind.PRODUCT and self.product_profit_percent is not None:
            return self.product_profit_percent
        return self.profit_percent


@dataclass(frozen=True)
class CommissionPolicy:
    """
    Studio commission configuration used by the distribution calculator.

    ``sales_commission_rate`` and a PERCENTAGE ``referral_reward_value`` are
    ratios (``0.05``, ``0.5``); whole-number percents are accepted and
    normalized.  A FIXED reward value is an amount in the studio currency.
    """

    sales_commission_rate: Decimal
    referral_reward_type: RewardType = RewardType.PERCENTAGE
    referral_reward_value: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "sales_commission_rate", to_decimal(self.sales_commission_rate)
        )
        object.__setattr__(
            self, "referral_reward_value", to_decimal(self.referral_reward_value)
        )
        if not isinstance(self.referral_reward_type, RewardType):
            object.__setattr__(
                self, "referral_reward_type", RewardType(self.referral_reward_type)
            )

    @property
    def commission_ratio(self) -> Decimal:
        return normalize_ratio(self.sales_commission_rate)

    @property
    def reward_ratio(self) -> Decimal:
        """Referral reward as a ratio of the pool (PERCENTAGE rewards only)."""
        return normalize_ratio(self.referral_reward_value)
