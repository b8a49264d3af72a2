"""Core module exports."""

from importlcov.core.errors import (
    ConfigError,
    DemangleError,
    ErrorCode,
    ImportLcovError,
    ReportError,
)
from importlcov.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "DemangleError",
    "ErrorCode",
    "ImportLcovError",
    "ReportError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
