"""Config module exports."""

from importlcov.config.loader import config_path, load_config
from importlcov.config.models import (
    DemanglerConfig,
    ImportLcovConfig,
    LoggingConfig,
    WatchConfig,
)

__all__ = [
    "config_path",
    "load_config",
    "DemanglerConfig",
    "ImportLcovConfig",
    "LoggingConfig",
    "WatchConfig",
]
