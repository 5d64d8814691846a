"""Attribution -- who gets credit for a deal."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ReferrerType(str, Enum):
    """Kind of party credited for originating a deal."""

    STAFF = "STAFF"
    CONTACT = "CONTACT"


@dataclass(frozen=True)
class Attribution:
    """
    Sales attribution of a promise.

    Set once when the deal is created.  ``referrer_type`` drives the
    commission distribution branch; a missing ``sales_agent_id`` leaves the
    pool unattributed.
    """

    promise_id: str
    sales_agent_id: str | None = None
    referrer_id: str | None = None
    referrer_type: ReferrerType | None = None

    def __post_init__(self) -> None:
        if self.referrer_type is not None and not isinstance(self.referrer_type, ReferrerType):
            object.__setattr__(self, "referrer_type", ReferrerType(self.referrer_type))

    @property
    def has_referrer(self) -> bool:
        return self.referrer_type is not None
