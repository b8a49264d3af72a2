"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (IMPORT_LCOV__SECTION__KEY)
3. Repo YAML (.import-lcov.yaml)
4. Global YAML (~/.config/import-lcov/config.yaml)
5. Built-in defaults (this file)

Examples:
    IMPORT_LCOV__LOGGING__LEVEL=DEBUG
    IMPORT_LCOV__DEMANGLER__BACKEND=cxxfilt:demangle
    IMPORT_LCOV__LCOV_FILES=build/lcov.info
    IMPORT_LCOV__LCOV_FILES='["build/**/lcov.info", "out/*.info"]'
"""

import contextlib
import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import NoDecode

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        IMPORT_LCOV__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO reports every run pass and report file.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DemanglerConfig(BaseModel):
    """Symbol demangler configuration.

    Env vars:
        IMPORT_LCOV__DEMANGLER__BACKEND: "module:attribute" of a str -> str callable
    """

    backend: str = Field(
        default="cxxfilt:demangle",
        description="Callable used to demangle Itanium C++ symbol names, "
        "imported lazily on first use.",
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        module, sep, attr = v.partition(":")
        if not module or not sep or not attr:
            raise ValueError(f"Backend must look like 'module:attribute', got {v!r}")
        return v


class WatchConfig(BaseModel):
    """Report file watching configuration.

    Env vars:
        IMPORT_LCOV__WATCH__DEBOUNCE_MS: Change debounce window
    """

    debounce_ms: int = Field(
        default=300,
        description="Debounce window before re-importing changed reports. "
        "Coverage tools often rewrite a report in several steps.",
    )

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {v}")
        return v


class ImportLcovConfig(BaseModel):
    """Root configuration for import-lcov."""

    lcov_files: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Glob patterns of LCOV reports, relative to each workspace root.",
    )
    workspace_roots: list[str] = Field(
        default_factory=list,
        description="Candidate roots for resolving source paths. "
        "Defaults to the repository root.",
    )
    demangler: DemanglerConfig = Field(default_factory=DemanglerConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("lcov_files", mode="before")
    @classmethod
    def coerce_single_pattern(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        # Env values arrive undecoded: a JSON list or a single pattern
        if v.lstrip().startswith("["):
            with contextlib.suppress(json.JSONDecodeError):
                decoded = json.loads(v)
                if isinstance(decoded, list):
                    return decoded
        return [v]
