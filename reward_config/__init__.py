"""
reward_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``EngineConfig``.  YAML
    loading is internal tooling and never exposed to engines.

Architecture position:
    Configuration -- YAML-driven settings.  This package sits above
    ``reward_kernel`` and below ``reward_services``.  The kernel and the
    engines MUST NEVER import from ``reward_config``; bridges in this
    package translate the config into kernel value objects.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic loading: the same YAML files always produce the same
      ``EngineConfig`` checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configuration set does not exist.
    - ``ConfigurationError`` -- a value is missing or malformed.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``REWARD_CONFIG_TRACE`` log entry containing the config_id, version,
    checksum, time measurement and holiday count, tying every computed
    distribution back to the configuration that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from reward_config.loader import load_config_set
from reward_config.schema import EngineConfig

_logger = logging.getLogger("reward_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_SET = "default"


def get_active_config(
    config_set: str = DEFAULT_CONFIG_SET,
    config_dir: Path | None = None,
) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_set: Name of the configuration set subdirectory.
        config_dir: Override path to the configuration sets directory.
            Defaults to reward_config/sets/.

    Returns:
        EngineConfig with its checksum stamped.

    Raises:
        FileNotFoundError: If the configuration set does not exist.
        ConfigurationError: If a value is missing or malformed.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    set_dir = sets_dir / config_set
    if not set_dir.is_dir():
        raise FileNotFoundError(f"Configuration set not found: {set_dir}")

    config = load_config_set(set_dir)

    _logger.info(
        "REWARD_CONFIG_TRACE",
        extra={
            "trace_type": "REWARD_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "time_measurement": config.time_measurement,
            "holiday_count": len(config.holidays),
            "lunch_override_count": len(config.lunch_overrides),
        },
    )
    return config


__all__ = ["EngineConfig", "get_active_config"]
