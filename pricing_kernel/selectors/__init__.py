"""Read-only selectors returning domain DTOs."""

from pricing_kernel.selectors.base import BaseSelector
from pricing_kernel.selectors.promise_selector import (
    PromiseCommissionInputs,
    PromiseSelector,
)

__all__ = [
    "BaseSelector",
    "PromiseSelector",
    "PromiseCommissionInputs",
]
