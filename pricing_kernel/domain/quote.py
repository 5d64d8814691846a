"""
Quote -- Quote, line item, discount and commercial condition domain types.

Responsibility:
    Immutable representation of a quote as the engines see it: list price,
    discount, negotiated and closing overrides, line items with courtesy
    flags, special bonus and the commercial condition snapshot.  Mutation
    requests produce a new Quote and are refused once the quote is frozen.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - The discount unit is explicit (PERCENT or AMOUNT); the legacy
      single-number encoding is only read through ``Discount.from_legacy``.
    - A FROZEN quote never changes: every ``with_*`` method raises
      ``QuoteFrozenError``.
    - A courtesy line item still carries its catalog value; its owed value
      is zero.

Failure modes:
    - QuoteFrozenError on mutation of a frozen quote.
    - ValueError on negative quantities or mixed currencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum

from pricing_kernel.domain.values import HUNDRED, Currency, Money, to_decimal
from pricing_kernel.exceptions import QuoteFrozenError


class DiscountKind(str, Enum):
    PERCENT = "percent"
    AMOUNT = "amount"


@dataclass(frozen=True)
class Discount:
    """
    Quote discount with an explicit unit.

    ``value`` is a percent in [0, 100] for PERCENT discounts and an amount
    in the quote currency for AMOUNT discounts.
    """

    kind: DiscountKind
    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", to_decimal(self.value))
        if not isinstance(self.kind, DiscountKind):
            object.__setattr__(self, "kind", DiscountKind(self.kind))

    @classmethod
    def percent(cls, value: Decimal | int | str) -> Discount:
        return cls(kind=DiscountKind.PERCENT, value=to_decimal(value))

    @classmethod
    def amount(cls, value: Decimal | int | str) -> Discount:
        return cls(kind=DiscountKind.AMOUNT, value=to_decimal(value))

    @classmethod
    def from_legacy(
        cls,
        raw: Decimal | int | str | None,
        price: Money | Decimal | int | str | None,
    ) -> Discount | None:
        """
        Read the legacy single-number discount field.

        Stored quotes use one numeric column for both percent and amount
        discounts.  A positive integer up to 100 on a quote with a positive
        price is read as a percent; anything else positive is an amount.
        Zero or negative values mean no discount.
        """
        value = to_decimal(raw)
        if value <= Decimal("0"):
            return None
        price_amount = price.amount if isinstance(price, Money) else to_decimal(price)
        is_integer = value == value.to_integral_value()
        if value <= HUNDRED and is_integer and price_amount > Decimal("0"):
            return cls.percent(value)
        return cls.amount(value)

    def amount_for(self, price: Money) -> Money:
        """Discount in money against ``price``; never negative."""
        if self.value <= Decimal("0"):
            return Money.zero(price.currency)
        if self.kind == DiscountKind.PERCENT:
            return price.floor_zero() * (self.value / HUNDRED)
        return Money(amount=self.value, currency=price.currency)


class BillingType(str, Enum):
    """HOUR items are multiplied by the event duration in negotiation analysis."""

    HOUR = "HOUR"
    SERVICE = "SERVICE"
    UNIT = "UNIT"


@dataclass(frozen=True)
class LineItem:
    """A quoted catalog item."""

    price: Money
    quantity: int = 1
    is_courtesy: bool = False
    item_id: str | None = None
    name: str | None = None
    cost: Money | None = None
    expense: Money | None = None
    billing_type: BillingType | None = None

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"Line item quantity must not be negative: {self.quantity}")
        if self.billing_type is not None and not isinstance(self.billing_type, BillingType):
            object.__setattr__(
                self, "billing_type", BillingType(str(self.billing_type).upper())
            )

    @property
    def catalog_value(self) -> Money:
        """price * quantity, regardless of the courtesy flag."""
        return self.price * self.quantity

    @property
    def owed_value(self) -> Money:
        if self.is_courtesy:
            return Money.zero(self.price.currency)
        return self.catalog_value

    def effective_quantity(self, event_duration_hours: Decimal | None) -> Decimal:
        """Quantity scaled by event duration for HOUR items."""
        quantity = Decimal(self.quantity)
        if (
            self.billing_type == BillingType.HOUR
            and event_duration_hours is not None
            and event_duration_hours > Decimal("0")
        ):
            return quantity * event_duration_hours
        return quantity


class AdvanceType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"

    @classmethod
    def parse(cls, value: str | None) -> AdvanceType | None:
        """Accept the spellings found in stored conditions."""
        if value is None:
            return None
        normalized = str(value).strip().lower()
        if normalized == "percentage":
            return cls.PERCENTAGE
        if normalized in ("fixed_amount", "amount"):
            return cls.FIXED_AMOUNT
        return None


@dataclass(frozen=True)
class CommercialCondition:
    """
    Commercial condition offered at closing (discount and advance payment).

    Quotes keep a snapshot of the condition they were closed with; the
    snapshot takes priority over the studio's live condition.
    """

    name: str
    discount_percent: Decimal | None = None
    advance_type: AdvanceType | None = None
    advance_percent: Decimal | None = None
    advance_amount: Decimal | None = None

    def __post_init__(self) -> None:
        for name in ("discount_percent", "advance_percent", "advance_amount"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_decimal(value))
        if self.advance_type is not None and not isinstance(self.advance_type, AdvanceType):
            object.__setattr__(self, "advance_type", AdvanceType.parse(self.advance_type))


class QuoteStatus(str, Enum):
    """Commercial status of a quote within its promise."""

    PENDING = "pending"
    NEGOTIATION = "negotiation"
    APPROVED = "approved"
    CONTRACTED = "contracted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


TERMINAL_REJECTED_STATUSES: frozenset[QuoteStatus] = frozenset(
    {QuoteStatus.REJECTED, QuoteStatus.CANCELLED}
)


class QuoteLifecycle(str, Enum):
    """DRAFT quotes accept negotiation; FROZEN quotes are contract snapshots."""

    DRAFT = "draft"
    FROZEN = "frozen"


@dataclass(frozen=True)
class Quote:
    """
    A quote as consumed by the reconciler and commission calculator.

    Contract:
        Immutable.  ``with_*`` methods return a modified copy while the
        quote is DRAFT and raise ``QuoteFrozenError`` once it is FROZEN.
    """

    price: Money
    quote_id: str = ""
    discount: Discount | None = None
    negotiated_price: Money | None = None
    calculated_price: Money | None = None
    closing_total: Money | None = None
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)
    special_bonus: Money | None = None
    status: QuoteStatus = QuoteStatus.PENDING
    archived: bool = False
    lifecycle: QuoteLifecycle = QuoteLifecycle.DRAFT
    condition: CommercialCondition | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.line_items, tuple):
            object.__setattr__(self, "line_items", tuple(self.line_items))
        currency = self.price.currency
        for name in ("negotiated_price", "calculated_price", "closing_total", "special_bonus"):
            value = getattr(self, name)
            if value is not None and value.currency != currency:
                raise ValueError(
                    f"Quote {name} currency {value.currency} does not match {currency}"
                )
        for item in self.line_items:
            if item.price.currency != currency:
                raise ValueError(
                    f"Line item currency {item.price.currency} does not match {currency}"
                )

    @property
    def currency(self) -> Currency:
        return self.price.currency

    @property
    def is_frozen(self) -> bool:
        return self.lifecycle == QuoteLifecycle.FROZEN

    @property
    def is_active(self) -> bool:
        """Not archived and not in a terminal rejected status."""
        return not self.archived and self.status not in TERMINAL_REJECTED_STATUSES

    def discount_in_money(self) -> Money:
        if self.discount is None:
            return Money.zero(self.currency)
        return self.discount.amount_for(self.price)

    def net_price(self) -> Money:
        """max(0, price - discount)."""
        return (self.price - self.discount_in_money()).floor_zero()

    # -- mutation requests ---------------------------------------------------

    def _ensure_mutable(self, operation: str) -> None:
        if self.is_frozen:
            raise QuoteFrozenError(quote_id=self.quote_id, operation=operation)

    def with_negotiated_price(self, price: Money | None) -> Quote:
        self._ensure_mutable("set_negotiated_price")
        return replace(self, negotiated_price=price)

    def with_discount(self, discount: Discount | None) -> Quote:
        self._ensure_mutable("set_discount")
        return replace(self, discount=discount)

    def with_special_bonus(self, bonus: Money | None) -> Quote:
        self._ensure_mutable("set_special_bonus")
        return replace(self, special_bonus=bonus)

    def with_closing_total(self, total: Money | None) -> Quote:
        self._ensure_mutable("set_closing_total")
        return replace(self, closing_total=total)

    def with_condition(self, condition: CommercialCondition | None) -> Quote:
        self._ensure_mutable("set_condition")
        return replace(self, condition=condition)

    def with_courtesy_items(self, item_ids: Iterable[str]) -> Quote:
        """Mark exactly the given item ids as courtesy."""
        self._ensure_mutable("set_courtesy_items")
        courtesy = set(item_ids)
        items = tuple(
            replace(item, is_courtesy=item.item_id in courtesy)
            for item in self.line_items
        )
        return replace(self, line_items=items)

    def freeze(self) -> Quote:
        """Snapshot the quote (contract signed).  Idempotent."""
        if self.is_frozen:
            return self
        return replace(self, lifecycle=QuoteLifecycle.FROZEN)
