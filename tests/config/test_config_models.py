"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from importlcov.config.models import (
    DemanglerConfig,
    ImportLcovConfig,
    LogOutputConfig,
    WatchConfig,
)


class TestImportLcovConfig:
    def test_defaults(self) -> None:
        config = ImportLcovConfig()

        assert config.lcov_files == []
        assert config.workspace_roots == []
        assert config.logging.level == "WARNING"

    def test_lcov_files_accepts_string(self) -> None:
        assert ImportLcovConfig(lcov_files="lcov.info").lcov_files == ["lcov.info"]

    def test_lcov_files_accepts_list(self) -> None:
        config = ImportLcovConfig(lcov_files=["a.info", "b/**/*.info"])

        assert config.lcov_files == ["a.info", "b/**/*.info"]

    def test_lcov_files_bracket_glob_is_single_pattern(self) -> None:
        assert ImportLcovConfig(lcov_files="[ab]*.info").lcov_files == ["[ab]*.info"]


class TestDemanglerConfig:
    @pytest.mark.parametrize("backend", ["cxxfilt:demangle", "pkg.sub:fn"])
    def test_valid_backends(self, backend: str) -> None:
        assert DemanglerConfig(backend=backend).backend == backend

    @pytest.mark.parametrize("backend", ["cxxfilt", ":demangle", "cxxfilt:", ""])
    def test_invalid_backends(self, backend: str) -> None:
        with pytest.raises(ValidationError):
            DemanglerConfig(backend=backend)


class TestWatchConfig:
    def test_negative_debounce_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WatchConfig(debounce_ms=-1)

    def test_zero_debounce_allowed(self) -> None:
        assert WatchConfig(debounce_ms=0).debounce_ms == 0


class TestLogOutputConfig:
    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/import-lcov.log")

    def test_console_destinations(self) -> None:
        assert LogOutputConfig(destination="stdout").destination == "stdout"
        assert LogOutputConfig().destination == "stderr"
