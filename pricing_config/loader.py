"""
Configuration Loader (``pricing_config.loader``).

Responsibility
--------------
Loads studio pricing YAML files and parses them into
``pricing_config.schema.StudioPricingConfig`` instances.  This is
build/test tooling; services obtain configuration through
``pricing_config.get_active_config()``.

Invariants enforced
-------------------
* The ``parse_*`` helpers raise ``ValueError`` or ``KeyError`` with
  descriptive messages; no silent defaults for required fields.
  ``load_config_file`` wraps them in ``InvalidConfigError`` naming the file.
* Numeric YAML values are converted to ``Decimal`` through their string
  form, so ``0.05`` in YAML is exactly ``Decimal("0.05")``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  source document for configuration identity and change detection.

Failure modes
-------------
* Missing sets directory  -> ``FileNotFoundError``.
* Malformed YAML, missing required keys, invalid values  ->
  ``InvalidConfigError`` from ``load_config_file``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from pricing_config.lifecycle import ConfigStatus
from pricing_config.schema import StudioPricingConfig
from pricing_kernel.domain.policy import CommissionPolicy, PricingPolicy, RewardType
from pricing_kernel.exceptions import InvalidConfigError

CONFIG_FILENAME = "pricing.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping at the top level, got {type(data).__name__}")
    return data


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse a YAML scalar into Decimal via its string form."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{field_name}: invalid number {value!r}") from e


def _optional_decimal(data: dict[str, Any], key: str) -> Decimal | None:
    value = data.get(key)
    if value is None:
        return None
    return parse_decimal(value, key)


def parse_pricing_policy(data: dict[str, Any]) -> PricingPolicy:
    return PricingPolicy(
        profit_percent=parse_decimal(data["profit_percent"], "profit_percent"),
        commission_percent=parse_decimal(data["commission_percent"], "commission_percent"),
        overprice_percent=parse_decimal(data.get("overprice_percent", 0), "overprice_percent"),
        service_profit_percent=_optional_decimal(data, "service_profit_percent"),
        product_profit_percent=_optional_decimal(data, "product_profit_percent"),
    )


def parse_commission_policy(data: dict[str, Any]) -> CommissionPolicy:
    raw_type = str(data.get("referral_reward_type", RewardType.PERCENTAGE.value)).upper()
    try:
        reward_type = RewardType(raw_type)
    except ValueError as e:
        raise ValueError(f"referral_reward_type: unknown reward type {raw_type!r}") from e
    return CommissionPolicy(
        sales_commission_rate=parse_decimal(
            data["sales_commission_rate"], "sales_commission_rate"
        ),
        referral_reward_type=reward_type,
        referral_reward_value=parse_decimal(
            data.get("referral_reward_value", 0), "referral_reward_value"
        ),
    )


def parse_config(data: dict[str, Any]) -> StudioPricingConfig:
    """
    Parse a ``StudioPricingConfig`` from a YAML document.

    Postconditions:
        - ``checksum`` is computed over the document without any
          ``checksum`` key it may carry.
    """
    source = {k: v for k, v in data.items() if k != "checksum"}
    try:
        status = ConfigStatus(str(data.get("status", ConfigStatus.DRAFT.value)).lower())
    except ValueError as e:
        raise ValueError(f"status: unknown configuration status {data.get('status')!r}") from e

    return StudioPricingConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        status=status,
        studio=data["studio"],
        currency=str(data["currency"]).upper(),
        effective_from=parse_date(data["effective_from"]),
        effective_to=parse_date(data["effective_to"]) if data.get("effective_to") else None,
        pricing_policy=parse_pricing_policy(data["pricing_policy"]),
        commission_policy=parse_commission_policy(data["commission_policy"]),
        checksum=compute_checksum(source),
    )


def load_config_file(path: Path) -> StudioPricingConfig:
    """
    Load and parse one pricing YAML file.

    Raises:
        InvalidConfigError: If the file is not valid YAML, misses a required
            key or holds a value that cannot be parsed.
    """
    try:
        return parse_config(load_yaml_file(path))
    except KeyError as e:
        raise InvalidConfigError(str(path), [f"missing required key {e}"]) from e
    except (ValueError, TypeError, yaml.YAMLError) as e:
        raise InvalidConfigError(str(path), [str(e)]) from e


def load_config_sets(sets_dir: Path) -> list[StudioPricingConfig]:
    """
    Load every configuration set under ``sets_dir``.

    Each set is a subdirectory holding a ``pricing.yaml``; subdirectories
    without one are skipped.  Sets are returned in directory name order.

    Raises:
        FileNotFoundError: If ``sets_dir`` does not exist.
        InvalidConfigError: If any set cannot be parsed.
    """
    if not sets_dir.is_dir():
        raise FileNotFoundError(f"Configuration sets directory not found: {sets_dir}")

    configs: list[StudioPricingConfig] = []
    for subdir in sorted(sets_dir.iterdir()):
        config_file = subdir / CONFIG_FILENAME
        if subdir.is_dir() and config_file.exists():
            configs.append(load_config_file(config_file))
    return configs


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
