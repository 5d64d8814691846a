"""
Module: pricing_kernel.selectors.promise_selector
Responsibility: Read-only access to a promise, its attribution and its
    quotes, converted into the domain values the commission calculator
    consumes.
Architecture position: Kernel > Selectors.  May import from models/,
    selectors/base.py and domain/ value objects.

Invariants enforced:
    - Read-only: no mutations performed on any queried data.
    - DTO convention: returns PromiseCommissionInputs holding domain Quote
      and Attribution values, never ORM models.
    - Stored discounts without an explicit unit are read through
      ``Discount.from_legacy``.
    - Quotes are returned in creation order.

Failure modes:
    - Returns None when the promise does not exist (never raises on absence
      of data).
    - ValueError on a stored status or referrer type that is not a known
      value.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from pricing_kernel.domain.attribution import Attribution, ReferrerType
from pricing_kernel.domain.quote import (
    Discount,
    DiscountKind,
    Quote,
    QuoteLifecycle,
    QuoteStatus,
)
from pricing_kernel.domain.values import Money
from pricing_kernel.models.promise import PromiseModel, PromiseQuoteModel
from pricing_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class PromiseCommissionInputs:
    """Everything the commission calculator needs for one promise."""

    promise_id: str
    studio_slug: str
    currency: str
    attribution: Attribution
    quotes: tuple[Quote, ...]

    @property
    def quote_count(self) -> int:
        return len(self.quotes)

    @property
    def has_quotes(self) -> bool:
        return bool(self.quotes)


class PromiseSelector(BaseSelector[PromiseModel]):
    """Selector for promise commission inputs."""

    def get_commission_inputs(
        self, promise_id: UUID | str
    ) -> PromiseCommissionInputs | None:
        """
        Load a promise with its quotes.

        Args:
            promise_id: Promise identifier (UUID or its string form).

        Returns:
            PromiseCommissionInputs, or None if the promise does not exist.
        """
        try:
            key = promise_id if isinstance(promise_id, UUID) else UUID(str(promise_id))
        except ValueError:
            return None

        stmt = (
            select(PromiseModel)
            .options(selectinload(PromiseModel.quotes))
            .where(PromiseModel.id == key)
        )
        promise = self.session.execute(stmt).scalar_one_or_none()
        if promise is None:
            return None

        currency = promise.currency
        quotes = tuple(self._to_quote(row, currency) for row in promise.quotes)

        referrer_type = (
            ReferrerType(promise.referrer_type.upper())
            if promise.referrer_type
            else None
        )
        attribution = Attribution(
            promise_id=str(promise.id),
            sales_agent_id=promise.sales_agent_id,
            referrer_id=promise.referrer_id,
            referrer_type=referrer_type,
        )

        return PromiseCommissionInputs(
            promise_id=str(promise.id),
            studio_slug=promise.studio_slug,
            currency=currency,
            attribution=attribution,
            quotes=quotes,
        )

    @staticmethod
    def _money(value: Decimal | None, currency: str) -> Money | None:
        if value is None:
            return None
        return Money.of(value, currency)

    def _to_quote(self, row: PromiseQuoteModel, currency: str) -> Quote:
        price = Money.of(row.price, currency)

        if row.discount_kind:
            discount = Discount(kind=DiscountKind(row.discount_kind.lower()), value=row.discount)
        else:
            discount = Discount.from_legacy(row.discount, price)

        return Quote(
            price=price,
            quote_id=str(row.id),
            discount=discount,
            negotiated_price=self._money(row.negotiated_price, currency),
            calculated_price=self._money(row.calculated_price, currency),
            closing_total=self._money(row.closing_total, currency),
            special_bonus=self._money(row.special_bonus, currency),
            status=QuoteStatus(row.status.lower()),
            archived=row.archived,
            lifecycle=QuoteLifecycle.FROZEN if row.frozen else QuoteLifecycle.DRAFT,
        )
