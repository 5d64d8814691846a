"""
StudioPricingConfig schema.

Defines the human-authored, reviewable source artifact for a studio's
pricing configuration.  YAML files are parsed into these types by the
loader and selected by date in ``pricing_config.get_active_config``.

The policies are kernel domain value objects so that a selected
configuration can be passed straight into the engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pricing_config.lifecycle import ConfigStatus
from pricing_kernel.domain.policy import CommissionPolicy, PricingPolicy


@dataclass(frozen=True)
class StudioPricingConfig:
    """Versioned pricing and commission configuration of one studio.

    Attributes:
        config_id: Unique identifier (e.g., "demo-studio-2025-v2")
        version: Configuration version number
        status: Lifecycle status
        studio: Studio slug the set applies to, or "*" for any studio
        currency: ISO 4217 currency of the studio
        effective_from: First date the set applies
        effective_to: Last date the set applies, or None if open-ended
        pricing_policy: Profit, commission and overprice percents
        commission_policy: Sales commission rate and referral reward
        checksum: SHA-256 of the canonical serialization of the source
    """

    config_id: str
    version: int
    status: ConfigStatus
    studio: str
    currency: str
    effective_from: date
    pricing_policy: PricingPolicy
    commission_policy: CommissionPolicy
    checksum: str
    effective_to: date | None = None

    def covers(self, as_of_date: date) -> bool:
        """True if ``as_of_date`` falls in the effective range."""
        if as_of_date < self.effective_from:
            return False
        return self.effective_to is None or as_of_date <= self.effective_to

    def applies_to(self, studio: str) -> bool:
        return self.studio == studio or self.studio == "*"
