"""Tests for CLI utilities."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from importlcov.cli.utils import create_session, load_cli_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    global_path = tmp_path_factory.mktemp("global") / "config.yaml"
    monkeypatch.setattr("importlcov.config.loader.GLOBAL_CONFIG_PATH", global_path)
    monkeypatch.delenv("IMPORT_LCOV__LCOV_FILES", raising=False)


class TestLoadCliConfig:
    def test_patterns_override_config(self, tmp_path: Path) -> None:
        (tmp_path / ".import-lcov.yaml").write_text("lcov_files: a.info\n")

        config = load_cli_config(tmp_path, ("b.info", "c.info"))

        assert config.lcov_files == ["b.info", "c.info"]

    def test_config_used_without_patterns(self, tmp_path: Path) -> None:
        (tmp_path / ".import-lcov.yaml").write_text("lcov_files: a.info\n")

        assert load_cli_config(tmp_path).lcov_files == ["a.info"]

    def test_config_error_becomes_click_exception(self, tmp_path: Path) -> None:
        (tmp_path / ".import-lcov.yaml").write_text("lcov_files: [unclosed\n")

        with pytest.raises(click.ClickException) as exc_info:
            load_cli_config(tmp_path)

        assert "Failed to parse config" in exc_info.value.message


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_session_uses_configured_backend(self, tmp_path: Path) -> None:
        (tmp_path / ".import-lcov.yaml").write_text(
            "demangler:\n  backend: posixpath:basename\n"
        )
        config = load_cli_config(tmp_path)

        session = create_session(config)
        demangle = await session.demangler.get()

        assert session.workspace_roots == [str(tmp_path.resolve())]
        assert demangle("/x/y") == "y"
