"""SQLAlchemy read models."""

from pricing_kernel.models.promise import PromiseModel, PromiseQuoteModel

__all__ = [
    "PromiseModel",
    "PromiseQuoteModel",
]
