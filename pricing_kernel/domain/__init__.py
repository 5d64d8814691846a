"""
Pure domain layer.

This module contains immutable value objects and domain types with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- Configuration files
- I/O

All domain objects are immutable and deterministic.
"""

from pricing_kernel.domain.attribution import Attribution, ReferrerType
from pricing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from pricing_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from pricing_kernel.domain.policy import (
    CommissionPolicy,
    CostBasis,
    ItemKind,
    PricingPolicy,
    RewardType,
)
from pricing_kernel.domain.quote import (
    TERMINAL_REJECTED_STATUSES,
    AdvanceType,
    BillingType,
    CommercialCondition,
    Discount,
    DiscountKind,
    LineItem,
    Quote,
    QuoteLifecycle,
    QuoteStatus,
)
from pricing_kernel.domain.values import Currency, Money, normalize_ratio, to_decimal

__all__ = [
    # Values
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
    "normalize_ratio",
    "to_decimal",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Policy
    "CostBasis",
    "ItemKind",
    "PricingPolicy",
    "CommissionPolicy",
    "RewardType",
    # Quote
    "Discount",
    "DiscountKind",
    "LineItem",
    "BillingType",
    "Quote",
    "QuoteStatus",
    "QuoteLifecycle",
    "TERMINAL_REJECTED_STATUSES",
    "CommercialCondition",
    "AdvanceType",
    # Attribution
    "Attribution",
    "ReferrerType",
]
