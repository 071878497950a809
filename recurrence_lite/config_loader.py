"""recurrence_lite.config_loader

Lightweight config loader for recurrence_lite.

- Reads YAML (PyYAML); JSON files load too since YAML is a superset.
- Environment variables override file values.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .lite_models import Frequency

logger = logging.getLogger(__name__)

DEFAULT_NEVER_HORIZON_YEARS = 2
MAX_NEVER_HORIZON_YEARS = 50

ENV_PREFIX = "RECURRENCE_LITE_"


@dataclass
class Config:
    """Typed configuration for recurrence_lite.

    Fields:
        never_horizon_years: how far a never-ending series is materialized (1..50)
        log_level: logging level name
        default_frequency: frequency of the rule offered for a brand new series
    """

    never_horizon_years: int = DEFAULT_NEVER_HORIZON_YEARS
    log_level: str = "INFO"
    default_frequency: Frequency = Frequency.WEEKLY

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int and the horizon is bounded to
        1..50 years, logging warnings when coercions occur.
        """
        if data is None:
            data = {}

        raw_horizon = data.get("never_horizon_years", DEFAULT_NEVER_HORIZON_YEARS)
        try:
            horizon = int(raw_horizon)
        except (TypeError, ValueError):
            logger.warning(
                "Config never_horizon_years=%r is not an int; using default %d",
                raw_horizon,
                DEFAULT_NEVER_HORIZON_YEARS,
            )
            horizon = DEFAULT_NEVER_HORIZON_YEARS
        if horizon < 1:
            logger.warning("never_horizon_years %d below minimum; coercing to 1", horizon)
            horizon = 1
        elif horizon > MAX_NEVER_HORIZON_YEARS:
            logger.warning(
                "never_horizon_years %d above maximum; coercing to %d",
                horizon,
                MAX_NEVER_HORIZON_YEARS,
            )
            horizon = MAX_NEVER_HORIZON_YEARS

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        raw_frequency = data.get("default_frequency", Frequency.WEEKLY.value)
        try:
            default_frequency = Frequency(str(raw_frequency).upper())
        except ValueError:
            logger.warning(
                "Config default_frequency=%r is not a known frequency; using WEEKLY",
                raw_frequency,
            )
            default_frequency = Frequency.WEEKLY

        return cls(
            never_horizon_years=horizon,
            log_level=log_level,
            default_frequency=default_frequency,
        )


def build_config_from_env() -> dict[str, Any]:
    """Build a configuration mapping from environment variables.

    Recognizes:
    - RECURRENCE_LITE_NEVER_HORIZON_YEARS -> 'never_horizon_years'
    - RECURRENCE_LITE_LOG_LEVEL -> 'log_level'
    - RECURRENCE_LITE_DEFAULT_FREQUENCY -> 'default_frequency'
    """
    cfg: dict[str, Any] = {}

    horizon = os.environ.get(f"{ENV_PREFIX}NEVER_HORIZON_YEARS")
    if horizon:
        cfg["never_horizon_years"] = horizon

    log_level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        cfg["log_level"] = log_level

    frequency = os.environ.get(f"{ENV_PREFIX}DEFAULT_FREQUENCY")
    if frequency:
        cfg["default_frequency"] = frequency

    return cfg


def _load_yaml(path: Path) -> Any:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    if loaded is None:
        return {}
    return loaded


def _read_mapping(path: str | None) -> dict[str, Any]:
    p = Path(path) if path else Path.cwd() / "recurrence_lite.yaml"
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return {}

    raw = _load_yaml(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    logger.info("Loaded configuration from %s", p)
    return raw


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to
              ./recurrence_lite.yaml (relative to current working dir).

    Behavior:
    - If file is missing: returns Config() with defaults.
    - If file exists but top-level is not a mapping: raises ValueError.
    """
    cfg = Config.from_dict(_read_mapping(path))
    logger.debug("Configuration values: %s", cfg)
    return cfg


def load_full_config(path: str | None = None) -> Config:
    """Load the config file and layer environment overrides on top of it."""
    data = _read_mapping(path)
    env_overrides = build_config_from_env()
    if env_overrides:
        logger.debug("Applying environment overrides for keys: %s", ", ".join(env_overrides))
    data.update(env_overrides)
    return Config.from_dict(data)
