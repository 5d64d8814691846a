"""
pricing_engines.commercial_terms -- Total to pay, advance and deferred balance.

Responsibility:
    Resolve what the client pays at closing under a commercial condition:
    the total to pay (negotiated price, condition discount, or the quote's
    existing absolute discount), the advance payment and the deferred
    balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Fed by the reconciler's closing figures and the quote's commercial
    condition snapshot.

Invariants enforced:
    - ``advance + deferred == total_to_pay`` exactly.
    - A positive negotiated price wins; any discount is ignored.
    - A FIXED_AMOUNT advance never exceeds the total to pay.

Failure modes:
    - ValueError when amounts are in different currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pricing_engines.tracer import traced_engine
from pricing_kernel.domain.quote import AdvanceType, CommercialCondition
from pricing_kernel.domain.values import Money, percent_of
from pricing_kernel.logging_config import get_logger

logger = get_logger("engines.commercial_terms")


class TotalSource(str, Enum):
    NEGOTIATED = "negotiated"
    CONDITION_PERCENT = "condition_percent"
    DISCOUNT_AMOUNT = "discount_amount"
    NO_DISCOUNT = "no_discount"


@dataclass(frozen=True)
class PaymentSchedule:
    """
    What the client pays and when.

    ``base_price`` is the price before any discount: the quote price plus
    an existing absolute discount when the stored price is already net.
    ``savings`` is only set for negotiated totals.
    """

    total_to_pay: Money
    base_price: Money
    discount_applied: Money
    discount_percent: Decimal | None
    source: TotalSource
    advance: Money
    deferred: Money
    comparison_price: Money
    savings: Money | None = None


@traced_engine(
    "commercial_terms",
    "1.0",
    fingerprint_fields=("base_price", "condition", "negotiated_price", "existing_discount"),
)
def calculate_payment_schedule(
    base_price: Money,
    condition: CommercialCondition | None = None,
    negotiated_price: Money | None = None,
    existing_discount: Money | None = None,
    original_price: Money | None = None,
) -> PaymentSchedule:
    """
    Resolve the payment schedule of a quote at closing.

    Args:
        base_price: Quote price.  When ``existing_discount`` is positive the
            price is already net of it.
        condition: Commercial condition (snapshot) with discount percent and
            advance terms.
        negotiated_price: Negotiated total; used when positive.
        existing_discount: Absolute discount already applied to the price.
        original_price: Price the negotiation started from, for savings.

    Returns:
        PaymentSchedule with ``advance + deferred == total_to_pay``.
    """
    currency = base_price.currency
    zero = Money.zero(currency)

    discount_existing = (existing_discount or zero).floor_zero()
    real_base = base_price + discount_existing if discount_existing.is_positive else base_price

    condition_percent = condition.discount_percent if condition else None
    comparison_price = real_base
    savings: Money | None = None
    discount_percent: Decimal | None = None

    if negotiated_price is not None and negotiated_price.is_positive:
        total = negotiated_price
        discount_applied = zero
        source = TotalSource.NEGOTIATED
        comparison_price = original_price if original_price is not None else real_base
        savings = comparison_price - negotiated_price
    elif condition_percent is not None and condition_percent > Decimal("0"):
        discount_applied = percent_of(real_base, condition_percent)
        total = real_base - discount_applied
        discount_percent = condition_percent
        source = TotalSource.CONDITION_PERCENT
    elif discount_existing.is_positive:
        total = base_price
        discount_applied = discount_existing
        source = TotalSource.DISCOUNT_AMOUNT
    else:
        total = base_price
        discount_applied = zero
        source = TotalSource.NO_DISCOUNT

    advance = _advance_for(total, condition)
    deferred = total - advance

    logger.info("payment_schedule_calculated", extra={
        "source": source.value,
        "total_to_pay": str(total.amount),
        "discount_applied": str(discount_applied.amount),
        "advance": str(advance.amount),
        "deferred": str(deferred.amount),
    })

    return PaymentSchedule(
        total_to_pay=total,
        base_price=real_base,
        discount_applied=discount_applied,
        discount_percent=discount_percent,
        source=source,
        advance=advance,
        deferred=deferred,
        comparison_price=comparison_price,
        savings=savings,
    )


def _advance_for(total: Money, condition: CommercialCondition | None) -> Money:
    zero = Money.zero(total.currency)
    if condition is None or condition.advance_type is None:
        return zero

    if condition.advance_type == AdvanceType.PERCENTAGE:
        percent = condition.advance_percent
        if percent is None or percent <= Decimal("0"):
            return zero
        return percent_of(total, percent)

    amount = condition.advance_amount
    if amount is None or amount <= Decimal("0"):
        return zero
    advance = Money(amount=amount, currency=total.currency)
    return min(advance, total.floor_zero())
