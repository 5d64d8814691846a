"""
pricing_engines.negotiation -- Negotiated price analysis.

Responsibility:
    Evaluate a negotiation on a quote before it is applied: the resulting
    price, net profit after sales commission, margin, the profit impact
    against the original price, and the cost of courtesy items.  Classify
    the margin and the financial health of a negotiated price and suggest
    the rescue price that restores a healthy margin.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Called by pricing_services.quote_service before a negotiated price is
    written to a quote.

Invariants enforced:
    - Cost and expense scale with the effective quantity (HOUR items times
      the event duration); the item price scales with the plain quantity.
    - A negotiated price below cost + expense is never viable.
    - Commission rates greater than 1 are whole percents and are divided
      by 100.

Failure modes:
    - ValueError when no currency can be determined or amounts mix
      currencies.  A non-viable negotiation is a result, not an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pricing_engines.tracer import traced_engine
from pricing_kernel.domain.quote import LineItem
from pricing_kernel.domain.values import (
    HUNDRED,
    Currency,
    Money,
    normalize_ratio,
    percent_of,
)
from pricing_kernel.logging_config import get_logger

logger = get_logger("engines.negotiation")

ACCEPTABLE_MARGIN_PERCENT = Decimal("20")
CRITICAL_MARGIN_PERCENT = Decimal("10")
WARNING_MARGIN_PERCENT = Decimal("15")
TARGET_MARGIN_RATIO = Decimal("0.20")


class MarginLevel(str, Enum):
    ACCEPTABLE = "acceptable"
    LOW = "low"
    CRITICAL = "critical"


class HealthState(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    DANGER = "danger"


@dataclass(frozen=True)
class NegotiatedItem:
    item_id: str | None
    original_value: Money
    negotiated_value: Money
    is_courtesy: bool


@dataclass(frozen=True)
class NegotiationResult:
    """
    Outcome of a negotiation analysis.

    ``is_viable`` is False when ``final_price`` does not cover
    ``total_cost + total_expense``; the figures are still reported.
    """

    final_price: Money
    base_price: Money
    total_discount: Money
    total_cost: Money
    total_expense: Money
    commission_amount: Money
    commission_ratio: Decimal
    net_profit: Money
    margin_percent: Decimal
    profit_impact: Money
    items: tuple[NegotiatedItem, ...]
    is_viable: bool

    @property
    def minimum_price(self) -> Money:
        return self.total_cost + self.total_expense


@dataclass(frozen=True)
class MarginValidation:
    is_valid: bool
    level: MarginLevel
    message: str


@dataclass(frozen=True)
class FinancialHealth:
    """Margin after commission, with the price that reaches a 20% margin."""

    state: HealthState
    margin_percent: Decimal
    rescue_price: Money
    shortfall: Money

    @property
    def is_healthy(self) -> bool:
        return self.state == HealthState.HEALTHY


@dataclass(frozen=True)
class CourtesyImpact:
    total_courtesy: Money
    profit_impact: Money


def _resolve_currency(
    items: Sequence[LineItem],
    currency: Currency | str | None,
) -> Currency:
    if currency is not None:
        return currency if isinstance(currency, Currency) else Currency(currency)
    if not items:
        raise ValueError("Cannot determine currency: no items and no currency given")
    return items[0].price.currency


def _is_courtesy(item: LineItem, courtesy_ids: frozenset[str] | None) -> bool:
    if courtesy_ids is None:
        return item.is_courtesy
    return item.item_id is not None and item.item_id in courtesy_ids


@traced_engine(
    "negotiation",
    "1.0",
    fingerprint_fields=(
        "items",
        "courtesy_ids",
        "commission_rate",
        "custom_price",
        "extra_discount",
        "condition_discount_percent",
        "original_price",
        "event_duration_hours",
    ),
)
def evaluate_negotiation(
    items: Sequence[LineItem],
    courtesy_ids: Iterable[str] | None,
    commission_rate: Decimal,
    custom_price: Money | None = None,
    extra_discount: Money | None = None,
    condition_discount_percent: Decimal | None = None,
    original_price: Money | None = None,
    event_duration_hours: Decimal | None = None,
    currency: Currency | str | None = None,
) -> NegotiationResult:
    """
    Analyse a negotiated price for a set of quote items.

    Args:
        items: Quote line items with cost and expense.
        courtesy_ids: Item ids given as courtesy.  None uses the items'
            own courtesy flags.
        commission_rate: Sales commission as a ratio (``0.05``) or whole
            percent (``5``).
        custom_price: Negotiated base price replacing the item sum.
        extra_discount: Absolute discount on top of the condition discount.
        condition_discount_percent: Discount percent of the commercial
            condition.
        original_price: Price the profit impact is measured against;
            defaults to the sum of all item values.
        event_duration_hours: Multiplier for HOUR items.
    """
    currency = _resolve_currency(items, currency)
    zero = Money.zero(currency)
    courtesy = frozenset(courtesy_ids) if courtesy_ids is not None else None

    item_base = zero
    catalog_total = zero
    total_cost = zero
    total_expense = zero
    negotiated_items: list[NegotiatedItem] = []

    for item in items:
        quantity = item.effective_quantity(event_duration_hours)
        is_courtesy = _is_courtesy(item, courtesy)
        value = item.catalog_value

        total_cost = total_cost + (item.cost or zero) * quantity
        total_expense = total_expense + (item.expense or zero) * quantity
        catalog_total = catalog_total + value
        if not is_courtesy:
            item_base = item_base + value

        negotiated_items.append(NegotiatedItem(
            item_id=item.item_id,
            original_value=value,
            negotiated_value=zero if is_courtesy else value,
            is_courtesy=is_courtesy,
        ))

    base_price = custom_price if custom_price is not None else item_base

    condition_discount = zero
    if condition_discount_percent is not None and condition_discount_percent > Decimal("0"):
        condition_discount = percent_of(base_price, condition_discount_percent)
    total_discount = condition_discount + (extra_discount or zero)
    final_price = (base_price - total_discount).floor_zero()

    ratio = normalize_ratio(commission_rate)
    commission_amount = final_price * ratio
    costs = total_cost + total_expense
    net_profit = final_price - costs - commission_amount
    margin_percent = (
        net_profit.amount / final_price.amount * HUNDRED
        if final_price.is_positive
        else Decimal("0")
    )

    reference = original_price if original_price is not None else catalog_total
    original_profit = reference - costs - reference * ratio
    profit_impact = net_profit - original_profit

    is_viable = final_price >= costs
    if not is_viable:
        logger.warning("negotiation_below_cost", extra={
            "final_price": str(final_price.amount),
            "minimum_price": str(costs.amount),
        })

    logger.info("negotiation_evaluated", extra={
        "final_price": str(final_price.amount),
        "net_profit": str(net_profit.amount),
        "margin_percent": str(margin_percent),
        "profit_impact": str(profit_impact.amount),
        "is_viable": is_viable,
    })

    return NegotiationResult(
        final_price=final_price,
        base_price=base_price,
        total_discount=total_discount,
        total_cost=total_cost,
        total_expense=total_expense,
        commission_amount=commission_amount,
        commission_ratio=ratio,
        net_profit=net_profit,
        margin_percent=margin_percent,
        profit_impact=profit_impact,
        items=tuple(negotiated_items),
        is_viable=is_viable,
    )


def validate_margin(
    margin_percent: Decimal,
    final_price: Money,
    total_cost: Money,
    total_expense: Money,
) -> MarginValidation:
    """Classify a negotiated margin; a price below cost is invalid."""
    minimum = total_cost + total_expense
    if final_price < minimum:
        return MarginValidation(
            is_valid=False,
            level=MarginLevel.CRITICAL,
            message=f"Price must not be below {minimum.round()} (cost + expense)",
        )
    if margin_percent < CRITICAL_MARGIN_PERCENT:
        return MarginValidation(
            is_valid=True,
            level=MarginLevel.CRITICAL,
            message=f"Critical margin: {margin_percent:.1f}%. Minimum recommended is 10%.",
        )
    if margin_percent < ACCEPTABLE_MARGIN_PERCENT:
        return MarginValidation(
            is_valid=True,
            level=MarginLevel.LOW,
            message=f"Low margin: {margin_percent:.1f}%. Minimum recommended is 20%.",
        )
    return MarginValidation(
        is_valid=True,
        level=MarginLevel.ACCEPTABLE,
        message=f"Acceptable margin: {margin_percent:.1f}%",
    )


def assess_financial_health(
    costs: Money,
    expenses: Money,
    negotiated_price: Money,
    commission_rate: Decimal | None = None,
) -> FinancialHealth:
    """
    Margin after commission and the rescue price for a 20% margin.

    ``rescue_price = (costs + expenses) / (0.80 - commission_ratio)``; when
    the commission leaves no room for a 20% margin the negotiated price is
    returned unchanged.
    """
    total_costs = costs + expenses
    ratio = normalize_ratio(commission_rate)
    net_profit = negotiated_price - total_costs - negotiated_price * ratio
    margin_percent = (
        net_profit.amount / negotiated_price.amount * HUNDRED
        if negotiated_price.is_positive
        else Decimal("0")
    )

    denominator = Decimal("1") - TARGET_MARGIN_RATIO - ratio
    rescue_price = total_costs / denominator if denominator > Decimal("0") else negotiated_price
    shortfall = rescue_price - negotiated_price

    if margin_percent >= ACCEPTABLE_MARGIN_PERCENT:
        state = HealthState.HEALTHY
    elif margin_percent >= WARNING_MARGIN_PERCENT:
        state = HealthState.WARNING
    elif margin_percent >= CRITICAL_MARGIN_PERCENT:
        state = HealthState.CRITICAL
    else:
        state = HealthState.DANGER

    return FinancialHealth(
        state=state,
        margin_percent=margin_percent,
        rescue_price=rescue_price,
        shortfall=shortfall,
    )


def courtesy_impact(
    items: Sequence[LineItem],
    courtesy_ids: Iterable[str] | None = None,
    currency: Currency | str | None = None,
) -> CourtesyImpact:
    """
    Value given away as courtesy and its effect on profit.

    The profit impact is negative: the foregone price minus the cost and
    expense the studio still carries.
    """
    currency = _resolve_currency(items, currency)
    zero = Money.zero(currency)
    courtesy = frozenset(courtesy_ids) if courtesy_ids is not None else None

    total = zero
    impact = zero
    for item in items:
        if not _is_courtesy(item, courtesy):
            continue
        value = item.catalog_value
        carried = ((item.cost or zero) + (item.expense or zero)) * item.quantity
        total = total + value
        impact = impact - (value - carried)

    return CourtesyImpact(total_courtesy=total, profit_impact=impact)
