"""
pricing_services.outcomes -- Explicit success/failure results for callers.

Services never let engine exceptions escape to their callers: typed kernel
errors become a FAILED ``ServiceOutcome`` carrying the error's ``code``.
Outcomes are deterministic; no operation here is retryable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pricing_kernel.exceptions import PricingKernelError

T = TypeVar("T")


class ServiceStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ServiceOutcome(Generic[T]):
    """Stable result type for service callers.

    When status is FAILED, ``value`` is None and ``error_code`` is the
    ``code`` of the kernel error that caused the failure.
    """

    status: ServiceStatus
    value: T | None = None
    error_code: str | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T, message: str | None = None) -> ServiceOutcome[T]:
        return cls(status=ServiceStatus.SUCCESS, value=value, message=message)

    @classmethod
    def failed(cls, error_code: str, message: str) -> ServiceOutcome[T]:
        return cls(status=ServiceStatus.FAILED, error_code=error_code, message=message)

    @classmethod
    def from_error(cls, error: PricingKernelError) -> ServiceOutcome[T]:
        """Build a FAILED outcome from a typed kernel error."""
        return cls.failed(error_code=error.code, message=str(error))

    @property
    def is_success(self) -> bool:
        return self.status == ServiceStatus.SUCCESS

    def unwrap(self) -> T:
        """Return the value of a successful outcome.

        Raises:
            RuntimeError: If the outcome failed.
        """
        if not self.is_success:
            raise RuntimeError(f"Outcome failed [{self.error_code}]: {self.message}")
        return self.value  # type: ignore[return-value]
