"""
config.py — Report configuration.

The reference date and counters used to be literals inside the metrics
computation; they now live on a `StatusConfig` instance that callers pass in
explicitly. The built-in defaults reproduce the reference configuration, and
an optional YAML file can override any field:

    status:
      last_update: "2025-12-01 00:00:00"
      total_packages_installed: 150
      pending_updates: 5
    display:
      title: "System Update Status"
      bar_width: 20
      filled_glyph: "█"
      empty_glyph: "░"
      stats: [installed, upgradable, last_update]
    paths:
      log_dir: logs
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for a configuration value of the wrong type or range."""


# Stats the plain view knows how to show
STAT_IDS = ("installed", "upgradable", "last_update", "days_since_update")
DEFAULT_STATS = ("installed", "upgradable", "last_update")


# ---------------------------------------------------------------------------
# Data structure
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusConfig:
    """Inputs for one status report."""
    last_update: pd.Timestamp = pd.Timestamp(2025, 12, 1)   # naive = local time
    total_packages_installed: int = 150
    pending_updates: int = 5
    bar_width: int = 20
    filled_glyph: str = "█"
    empty_glyph: str = "░"
    title: str = "System Update Status"
    stats: tuple[str, ...] = DEFAULT_STATS   # plain view, in display order
    log_dir: Optional[str] = None


# YAML section -> dataclass fields it may set
_SECTIONS = {
    "status": ("last_update", "total_packages_installed", "pending_updates"),
    "display": ("title", "bar_width", "filled_glyph", "empty_glyph", "stats"),
    "paths": ("log_dir",),
}

_COUNTERS = ("total_packages_installed", "pending_updates", "bar_width")
_GLYPHS = ("filled_glyph", "empty_glyph")


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def parse_timestamp(value: Any) -> pd.Timestamp:
    """Parse a date/datetime/ISO string into a Timestamp.

    Args:
        value: Anything pandas can turn into a single timestamp.

    Returns:
        Parsed Timestamp (naive values are kept naive, i.e. local time).

    Raises:
        ConfigError: If the value is empty or cannot be parsed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigError("timestamp value is empty")
    # pandas reads bare numbers as epoch nanoseconds; `20251201` is a typo
    if isinstance(value, (bool, int, float)):
        raise ConfigError(f"cannot parse timestamp {value!r}: expected a date, not a number")
    try:
        ts = pd.to_datetime(value)
    except (ValueError, TypeError) as exc:
        raise ConfigError(f"cannot parse timestamp {value!r}: {exc}") from exc
    if pd.isna(ts):
        raise ConfigError(f"cannot parse timestamp {value!r}")
    return ts


def _non_negative_int(name: str, value: Any) -> int:
    # bool is an int subclass; `pending_updates: yes` is a typo, not a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigError(f"{name} must be >= 0, got {value}")
    return value


def _glyph(name: str, value: Any) -> str:
    if not isinstance(value, str) or len(value) != 1:
        raise ConfigError(f"{name} must be a single character, got {value!r}")
    return value


def _stat_list(value: Any) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"stats must be a list of stat ids, got {value!r}")
    for stat in value:
        if stat not in STAT_IDS:
            raise ConfigError(
                f"unknown stat '{stat}' in stats (known: {', '.join(STAT_IDS)})"
            )
    return tuple(value)


def validate(cfg: StatusConfig) -> StatusConfig:
    """Check every field of a StatusConfig and return a normalised copy.

    Args:
        cfg: Config to check.

    Returns:
        StatusConfig with `last_update` coerced to a Timestamp and
        `stats` to a tuple.

    Raises:
        ConfigError: On the first invalid field.
    """
    for name in _COUNTERS:
        _non_negative_int(name, getattr(cfg, name))
    for name in _GLYPHS:
        _glyph(name, getattr(cfg, name))
    if not isinstance(cfg.title, str):
        raise ConfigError(f"title must be a string, got {cfg.title!r}")
    if cfg.log_dir is not None and not isinstance(cfg.log_dir, str):
        raise ConfigError(f"log_dir must be a string, got {cfg.log_dir!r}")
    return replace(
        cfg,
        last_update=parse_timestamp(cfg.last_update),
        stats=_stat_list(cfg.stats),
    )


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def config_from_dict(raw: Optional[dict[str, Any]]) -> StatusConfig:
    """Build a StatusConfig from a parsed YAML mapping.

    Missing sections and keys keep their defaults. Unknown keys are logged
    and ignored.

    Args:
        raw: Parsed YAML document (None for an empty file).

    Returns:
        Validated StatusConfig.

    Raises:
        ConfigError: If the document or a value has the wrong shape.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("configuration root must be a mapping")

    overrides: dict[str, Any] = {}
    for section, allowed in _SECTIONS.items():
        block = raw.get(section) or {}
        if not isinstance(block, dict):
            raise ConfigError(f"section '{section}' must be a mapping")
        for key, value in block.items():
            if key not in allowed:
                logger.warning("Ignoring unknown config key %s.%s", section, key)
                continue
            overrides[key] = value

    for section in raw:
        if section not in _SECTIONS:
            logger.warning("Ignoring unknown config section '%s'", section)

    return validate(replace(StatusConfig(), **overrides))


def load_config(config_path: Optional[str] = None) -> StatusConfig:
    """Load the report configuration.

    Args:
        config_path: Path to a YAML file, or None for the built-in defaults.

    Returns:
        Validated StatusConfig.

    Raises:
        FileNotFoundError: If `config_path` does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ConfigError: If a value is invalid.
    """
    if config_path is None:
        logger.debug("No config file given, using built-in defaults")
        return StatusConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    cfg = config_from_dict(raw)
    logger.info("Loaded config from %s (last update: %s)", path, cfg.last_update)
    return cfg
