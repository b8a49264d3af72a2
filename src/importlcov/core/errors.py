"""import-lcov error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Report (reading and parsing LCOV files)
- 4xxx: Demangle
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Report (3xxx)
    REPORT_READ_ERROR = 3001
    REPORT_PARSE_ERROR = 3002

    # Demangle (4xxx)
    DEMANGLE_LOAD_FAILED = 4001


@dataclass(frozen=True, slots=True)
class ImportLcovError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'REPORT_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ImportLcovError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ReportError(ImportLcovError):
    """A coverage report could not be read or decoded."""

    @classmethod
    def read_error(cls, path: str, reason: str) -> "ReportError":
        return cls(
            code=ErrorCode.REPORT_READ_ERROR,
            message=f"Failed to read report {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def parse_error(cls, reason: str, line_number: int | None = None) -> "ReportError":
        where = f" (line {line_number})" if line_number is not None else ""
        return cls(
            code=ErrorCode.REPORT_PARSE_ERROR,
            message=f"Invalid LCOV data{where}: {reason}",
            details={"line": line_number, "reason": reason},
        )


class DemangleError(ImportLcovError):
    """Symbol demangling errors."""

    @classmethod
    def load_failed(cls, backend: str, reason: str) -> "DemangleError":
        return cls(
            code=ErrorCode.DEMANGLE_LOAD_FAILED,
            message=f"Failed to load demangler '{backend}': {reason}",
            retryable=True,
            details={"backend": backend, "reason": reason},
        )
