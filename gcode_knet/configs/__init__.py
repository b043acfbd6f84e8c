"""Run configuration loading and validation."""

from gcode_knet.configs.loader import (
    ConfigError,
    KnetConfig,
    LoggingConfig,
    OutputConfig,
    ParkConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "KnetConfig",
    "LoggingConfig",
    "OutputConfig",
    "ParkConfig",
    "load_config",
]
