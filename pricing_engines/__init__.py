"""
Module: pricing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for pricing_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import pricing_kernel.domain, pricing_kernel.exceptions and
    pricing_kernel.logging_config.  MUST NOT import pricing_config or
    pricing_services.

Invariants enforced:
    - Purity: engines never read the clock, configuration or database.
    - Decimal-only arithmetic; floats are rejected at the Money boundary.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine``, emitting
    PRICING_ENGINE_TRACE records with engine name, version, input
    fingerprint and duration.

Usage:
    from pricing_engines import PriceCompositionCalculator, QuoteReconciler
    from pricing_engines import CommissionDistributionCalculator
"""

from pricing_kernel.logging_config import get_logger

logger = get_logger("engines")

from pricing_engines.commercial_terms import (
    PaymentSchedule,
    TotalSource,
    calculate_payment_schedule,
)
from pricing_engines.commission import (
    CommissionDistribution,
    CommissionDistributionCalculator,
    DistributionRule,
)
from pricing_engines.composition import (
    PriceCompositionCalculator,
    PriceCompositionResult,
)
from pricing_engines.negotiation import (
    CourtesyImpact,
    FinancialHealth,
    HealthState,
    MarginLevel,
    MarginValidation,
    NegotiatedItem,
    NegotiationResult,
    assess_financial_health,
    courtesy_impact,
    evaluate_negotiation,
    validate_margin,
)
from pricing_engines.reconciliation import (
    ClosingSource,
    FinancialBreakdown,
    QuoteReconciler,
)
from pricing_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Composition
    "PriceCompositionCalculator",
    "PriceCompositionResult",
    # Reconciliation
    "QuoteReconciler",
    "FinancialBreakdown",
    "ClosingSource",
    # Commission
    "CommissionDistributionCalculator",
    "CommissionDistribution",
    "DistributionRule",
    # Commercial terms
    "calculate_payment_schedule",
    "PaymentSchedule",
    "TotalSource",
    # Negotiation
    "evaluate_negotiation",
    "validate_margin",
    "assess_financial_health",
    "courtesy_impact",
    "NegotiationResult",
    "NegotiatedItem",
    "MarginValidation",
    "MarginLevel",
    "FinancialHealth",
    "HealthState",
    "CourtesyImpact",
    # Tracing
    "traced_engine",
    "compute_input_fingerprint",
]
