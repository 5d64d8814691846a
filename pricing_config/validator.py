"""
Configuration Validator (``pricing_config.validator``).

Responsibility
--------------
Validates a ``StudioPricingConfig`` before it is handed to the engines,
so that a malformed policy is rejected when configuration is selected
rather than in the middle of a price composition.

Invariants enforced
-------------------
* Pricing percents are in [0, 100); ``commission_percent < 100`` keeps
  the commission-absorbing base price defined.
* The sales commission rate normalizes to a ratio in [0, 1].
* PERCENTAGE referral rewards normalize to [0, 1]; FIXED rewards are
  non-negative amounts.
* The currency is a registered ISO 4217 code.
* The effective range is not inverted.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> the
  configuration MUST NOT be used.
* Validation warnings  -> usable, but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from pricing_config.schema import StudioPricingConfig
from pricing_kernel.domain.currency import CurrencyRegistry
from pricing_kernel.domain.policy import RewardType

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block use but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: StudioPricingConfig) -> ConfigValidationResult:
    """
    Validate a studio pricing configuration.

    Postconditions:
        - Returns a ``ConfigValidationResult``; ``is_valid`` is ``True``
          only when no errors were found.
    """
    result = ConfigValidationResult()

    if not config.config_id:
        result.add_error("config_id must not be empty")
    if not config.studio:
        result.add_error("studio must not be empty")
    if not CurrencyRegistry.is_valid(config.currency):
        result.add_error(f"currency '{config.currency}' is not a valid ISO 4217 code")
    if config.effective_to is not None and config.effective_to < config.effective_from:
        result.add_error(
            f"effective_to {config.effective_to} is before "
            f"effective_from {config.effective_from}"
        )

    _validate_pricing_policy(config, result)
    _validate_commission_policy(config, result)
    return result


def _check_percent(name: str, value: Decimal | None, result: ConfigValidationResult) -> None:
    if value is None:
        return
    if value < _ZERO or value >= _HUNDRED:
        result.add_error(f"pricing_policy.{name} must be in [0, 100), got {value}")


def _validate_pricing_policy(
    config: StudioPricingConfig, result: ConfigValidationResult
) -> None:
    policy = config.pricing_policy
    _check_percent("profit_percent", policy.profit_percent, result)
    _check_percent("commission_percent", policy.commission_percent, result)
    _check_percent("overprice_percent", policy.overprice_percent, result)
    _check_percent("service_profit_percent", policy.service_profit_percent, result)
    _check_percent("product_profit_percent", policy.product_profit_percent, result)

    if policy.service_profit_percent is None and policy.product_profit_percent is None:
        result.add_warning(
            "pricing_policy has no service/product margins; "
            "profit_percent applies to every item kind"
        )


def _validate_commission_policy(
    config: StudioPricingConfig, result: ConfigValidationResult
) -> None:
    policy = config.commission_policy
    rate = policy.sales_commission_rate
    if rate < _ZERO or rate > _HUNDRED:
        result.add_error(
            f"commission_policy.sales_commission_rate must be a ratio in [0, 1] "
            f"or a percent in [0, 100], got {rate}"
        )

    reward = policy.referral_reward_value
    if reward < _ZERO:
        result.add_error(
            f"commission_policy.referral_reward_value must not be negative, got {reward}"
        )
    elif policy.referral_reward_type == RewardType.PERCENTAGE and reward > _HUNDRED:
        result.add_error(
            f"commission_policy.referral_reward_value must be a ratio in [0, 1] "
            f"or a percent in [0, 100] for PERCENTAGE rewards, got {reward}"
        )
