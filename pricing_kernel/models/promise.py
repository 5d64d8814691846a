"""
Module: pricing_kernel.models.promise
Responsibility: ORM read models for a promise (a prospective deal) and its
    quotes, as far as commission distribution needs them.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from selectors/, domain/, or outer layers.

Invariants enforced:
    - Quote amounts are Decimal (Numeric(38, 9)), never float.
    - ``discount`` keeps the stored single-number encoding; ``discount_kind``
      is set when the unit is known ("percent" or "amount").  When it is
      NULL the selector reads ``discount`` through the legacy heuristic.
    - Statuses are stored as lowercase strings matching QuoteStatus values.

Failure modes:
    - IntegrityError on a quote whose promise_id does not exist.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricing_kernel.db.base import TrackedBase, UUIDString


class PromiseModel(TrackedBase):
    """
    A studio's prospective deal with a client.

    The sales agent and the referrer are recorded once when the promise is
    created and drive the commission split of its quotes.
    """

    __tablename__ = "promises"

    studio_slug: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="MXN")

    sales_agent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    referrer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # "STAFF" | "CONTACT" | NULL
    referrer_type: Mapped[str | None] = mapped_column(String(10), nullable=True)

    quotes: Mapped[list["PromiseQuoteModel"]] = relationship(
        back_populates="promise",
        order_by="PromiseQuoteModel.created_at",
    )

    __table_args__ = (Index("idx_promise_studio", "studio_slug"),)

    def __repr__(self) -> str:
        return f"<Promise {self.id} studio={self.studio_slug}>"


class PromiseQuoteModel(TrackedBase):
    """A quote issued under a promise."""

    __tablename__ = "promise_quotes"

    promise_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("promises.id"),
        nullable=False,
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    price: Mapped[Decimal] = mapped_column(nullable=False)
    discount: Mapped[Decimal | None] = mapped_column(nullable=True)
    discount_kind: Mapped[str | None] = mapped_column(String(10), nullable=True)
    negotiated_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    calculated_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    closing_total: Mapped[Decimal | None] = mapped_column(nullable=True)
    special_bonus: Mapped[Decimal | None] = mapped_column(nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    frozen: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    promise: Mapped["PromiseModel"] = relationship(back_populates="quotes")

    __table_args__ = (Index("idx_promise_quote_promise", "promise_id"),)

    def __repr__(self) -> str:
        return f"<PromiseQuote {self.id} price={self.price} status={self.status}>"
