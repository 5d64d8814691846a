"""
pricing_config -- single public entrypoint for studio pricing configuration.

Responsibility:
    Provides the ONLY way to obtain pricing configuration at runtime
    through ``get_active_config()``.  No other component reads
    configuration files directly.  Returns a ``StudioPricingConfig`` whose
    policies are passed explicitly into the engines.

Architecture position:
    Configuration -- YAML-driven, versioned, validated on selection.
    This package sits above ``pricing_kernel`` and below
    ``pricing_services``.  The kernel and the engines MUST NEVER import
    from ``pricing_config``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Only PUBLISHED sets are selectable; among several matching sets the
      highest version wins, an exact studio match before a "*" set.
    - Validation: a selected set must pass ``validate_configuration``.
    - Deterministic checksum: the same YAML source always produces the
      same checksum.

Failure modes:
    - ``ConfigNotFoundError`` -- no published set covers the studio and
      date, or the configuration directory does not exist.
    - ``InvalidConfigError`` -- a set cannot be parsed, or the selected set
      fails validation.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PRICING_CONFIG_TRACE`` log entry with the config_id, version,
    checksum and studio.  It ties every composed price and commission
    split to the configuration version that produced it.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from pricing_config.lifecycle import ConfigStatus
from pricing_config.loader import load_config_sets
from pricing_config.schema import StudioPricingConfig
from pricing_config.validator import ConfigValidationResult, validate_configuration
from pricing_kernel.exceptions import ConfigNotFoundError, InvalidConfigError

_logger = logging.getLogger("pricing_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = [
    "ConfigStatus",
    "ConfigValidationResult",
    "StudioPricingConfig",
    "get_active_config",
    "validate_configuration",
]


def get_active_config(
    studio: str,
    as_of_date: date,
    config_dir: Path | None = None,
) -> StudioPricingConfig:
    """The ONLY public configuration entrypoint.

    Preconditions:
        - ``studio`` is a studio slug declared by a configuration set (or
          a "*" set exists).

    Postconditions:
        - Returns a PUBLISHED ``StudioPricingConfig`` that covers
          ``as_of_date`` and has passed validation.
        - A ``PRICING_CONFIG_TRACE`` log entry has been emitted.

    Args:
        studio: Studio slug.
        as_of_date: Date for effective date filtering.
        config_dir: Override path to configuration sets directory.
            Defaults to pricing_config/sets/.

    Raises:
        ConfigNotFoundError: If no published set matches or the sets
            directory does not exist.
        InvalidConfigError: If a set cannot be parsed or the selected set
            fails validation.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    config = _find_matching_config(sets_dir, studio, as_of_date)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise InvalidConfigError(config.config_id, validation.errors)
    for warning in validation.warnings:
        _logger.warning(
            "config_validation_warning",
            extra={"config_set_id": config.config_id, "warning": warning},
        )

    _logger.info(
        "PRICING_CONFIG_TRACE",
        extra={
            "trace_type": "PRICING_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "studio": studio,
            "as_of_date": as_of_date.isoformat(),
            "currency": config.currency,
        },
    )
    return config


def _find_matching_config(
    sets_dir: Path, studio: str, as_of_date: date
) -> StudioPricingConfig:
    """Select the published set for a studio and date.

    Raises:
        ConfigNotFoundError: If no published set applies.
    """
    if not sets_dir.is_dir():
        _logger.warning("config_directory_missing", extra={"config_dir": str(sets_dir)})
        raise ConfigNotFoundError(studio=studio, as_of_date=as_of_date.isoformat())

    candidates = [
        config
        for config in load_config_sets(sets_dir)
        if config.status.is_selectable
        and config.applies_to(studio)
        and config.covers(as_of_date)
    ]
    if not candidates:
        raise ConfigNotFoundError(studio=studio, as_of_date=as_of_date.isoformat())

    return max(candidates, key=lambda c: (c.studio == studio, c.version))
