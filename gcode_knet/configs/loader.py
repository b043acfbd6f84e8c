"""Configuration loader for gcode-knet runs.

Loads and validates ``knet.yaml`` into typed, frozen dataclasses.  Output
naming, text encoding, the park-move format and logging defaults all come
from the config.  Per-core settings (axis letter, park position, feed)
are **not** configured here: they travel inside the G-code program as
``(Core: ...)`` comments.

Usage::

    from gcode_knet.configs.loader import load_config
    cfg = load_config()                    # default path
    cfg = load_config("/custom/knet.yaml") # explicit path
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from gcode_knet.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "knet.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutputConfig:
    """Output file naming and text encoding."""

    suffix: str
    encoding: str


@dataclass(frozen=True)
class ParkConfig:
    """Format of the parking move emitted on a core hand-off.

    Parameters
    ----------
    rapid_command : str
        Command word used when the core's feed is zero, e.g. ``"G00"``.
    feed_command : str
        Command word used when the core has a feed rate, e.g. ``"G1"``.
    decimals : int
        Digits after the decimal point for the park coordinate and feed.
    """

    rapid_command: str
    feed_command: str
    decimals: int


@dataclass(frozen=True)
class LoggingConfig:
    """Default console logging settings (CLI flags override)."""

    level: str
    color: bool


@dataclass(frozen=True)
class KnetConfig:
    """Complete run configuration loaded from ``knet.yaml``."""

    output: OutputConfig
    park: ParkConfig
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: KnetConfig) -> None:
    """Validate field values.

    Raises
    ------
    ConfigError
        On any invalid value.
    """
    suffix = cfg.output.suffix
    if not suffix:
        raise ConfigError("output.suffix must not be empty")
    if any(sep in suffix for sep in ("/", "\\")):
        raise ConfigError(
            f"output.suffix must not contain path separators, got {suffix!r}"
        )

    try:
        codecs.lookup(cfg.output.encoding)
    except LookupError as exc:
        raise ConfigError(
            f"Unknown output.encoding {cfg.output.encoding!r}"
        ) from exc

    for name in ("rapid_command", "feed_command"):
        value = getattr(cfg.park, name)
        if not value or any(ch.isspace() for ch in value):
            raise ConfigError(
                f"park.{name} must be a single non-empty word, got {value!r}"
            )

    if not 0 <= cfg.park.decimals <= 6:
        raise ConfigError(
            f"park.decimals must be between 0 and 6, got {cfg.park.decimals}"
        )

    if not isinstance(cfg.logging.color, bool):
        raise ConfigError(
            f"logging.color must be true or false, got {cfg.logging.color!r}"
        )

    if cfg.logging.level not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {list(_LOG_LEVELS)}, "
            f"got {cfg.logging.level!r}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> KnetConfig:
    """Load and validate run configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``knet.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    KnetConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing, malformed or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)

    try:
        data: dict[str, Any] = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unreadable configuration file {path}: {exc}") from exc
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    try:
        # -- output ---------------------------------------------------------
        od = data["output"]
        output = OutputConfig(
            suffix=str(od["suffix"]),
            encoding=str(od.get("encoding", "utf-8")),
        )

        # -- park -----------------------------------------------------------
        pd = data.get("park", {})
        park = ParkConfig(
            rapid_command=str(pd.get("rapid_command", "G00")),
            feed_command=str(pd.get("feed_command", "G1")),
            decimals=int(pd.get("decimals", 3)),
        )

        # -- logging --------------------------------------------------------
        ld = data.get("logging", {})
        log_cfg = LoggingConfig(
            level=str(ld.get("level", "INFO")).upper(),
            color=ld.get("color", True),
        )

        config = KnetConfig(output=output, park=park, logging=log_cfg)

        _validate_config(config)
        logger.debug("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
