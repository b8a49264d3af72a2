"""Tests for import-lcov watch command."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.console import Console
from watchfiles import Change

from importlcov.cli.main import cli
from importlcov.cli.watch import CoverageWatch

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user-level config and environment out of the command."""
    global_path = tmp_path_factory.mktemp("global") / "config.yaml"
    monkeypatch.setattr("importlcov.config.loader.GLOBAL_CONFIG_PATH", global_path)
    monkeypatch.delenv("IMPORT_LCOV__LCOV_FILES", raising=False)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path.resolve()
    (root / "build").mkdir()
    (root / "build" / "lcov.info").write_text(f"SF:{root}/src/a.c\nDA:1,1\nDA:2,0\nend_of_record\n")
    (root / "other.info").write_text(f"SF:{root}/src/b.c\nDA:1,1\nend_of_record\n")
    (root / ".import-lcov.yaml").write_text("lcov_files: build/lcov.info\n")
    return root


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def watch(repo: Path) -> CoverageWatch:
    return CoverageWatch(repo, console=Console(record=True, width=120))


class FakeAwatch:
    """Stands in for awatch; records the roots of each call and yields nothing."""

    def __init__(self) -> None:
        self.calls: list[list[Path]] = []

    async def __call__(
        self, *paths: Path, stop_event: asyncio.Event, **kwargs: object
    ) -> AsyncIterator[set[tuple[Change, str]]]:
        self.calls.append(list(paths))
        await stop_event.wait()
        for _ in ():
            yield set()


class PassCounter:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1


class TestReloadConfig:
    """CoverageWatch.reload_config tests."""

    def test_given_unchanged_config_when_reload_then_false(self, watch: CoverageWatch) -> None:
        session = watch.session

        assert watch.reload_config() is False
        assert watch.session is session

    def test_given_rewritten_but_equal_config_when_reload_then_false(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        """Formatting-only edits do not count as a change."""
        (repo / ".import-lcov.yaml").write_text("lcov_files:\n  - build/lcov.info\n")

        assert watch.reload_config() is False

    def test_given_new_patterns_when_reload_then_applied(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        session = watch.session
        (repo / ".import-lcov.yaml").write_text("lcov_files: other.info\n")

        assert watch.reload_config() is True
        assert watch.config.lcov_files == ["other.info"]
        assert watch.watcher.reports == {repo / "other.info"}
        assert watch.session is not session

    def test_given_new_roots_when_reload_then_watched(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        (repo / ".import-lcov.yaml").write_text(
            "lcov_files: lcov.info\nworkspace_roots:\n  - build\n"
        )

        assert watch.reload_config() is True
        assert watch.watcher.roots == [repo / "build"]
        assert watch.watcher.reports == {repo / "build" / "lcov.info"}
        assert watch.session.workspace_roots == [str(repo / "build")]

    def test_given_invalid_config_when_reload_then_kept(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        (repo / ".import-lcov.yaml").write_text("watch:\n  debounce_ms: -1\n")

        assert watch.reload_config() is False
        assert watch.config.lcov_files == ["build/lcov.info"]


class TestOnChange:
    """CoverageWatch.on_change tests."""

    @pytest.mark.asyncio
    async def test_given_report_change_when_notified_then_runs_pass(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        counter = PassCounter()
        watch.run_pass = counter  # type: ignore[method-assign]

        await watch.on_change([repo / "build" / "lcov.info"])

        assert counter.calls == 1

    @pytest.mark.asyncio
    async def test_given_unchanged_config_when_notified_then_no_pass(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        counter = PassCounter()
        watch.run_pass = counter  # type: ignore[method-assign]

        await watch.on_change([repo / ".import-lcov.yaml"])

        assert counter.calls == 0

    @pytest.mark.asyncio
    async def test_given_changed_config_when_notified_then_runs_pass(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        counter = PassCounter()
        watch.run_pass = counter  # type: ignore[method-assign]
        (repo / ".import-lcov.yaml").write_text("lcov_files: other.info\n")

        await watch.on_change([repo / ".import-lcov.yaml"])

        assert counter.calls == 1


    @pytest.mark.asyncio
    async def test_given_new_roots_when_watching_then_awatch_restarted(
        self, watch: CoverageWatch, repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake = FakeAwatch()
        monkeypatch.setattr("importlcov.daemon.watcher.awatch", fake)
        watch.run_pass = PassCounter()  # type: ignore[method-assign]
        (repo / ".import-lcov.yaml").write_text(
            "lcov_files: lcov.info\nworkspace_roots:\n  - build\n"
        )

        await watch.watcher.start()
        try:
            await _settle()
            await watch.on_change([repo / ".import-lcov.yaml"])
            await _settle()
        finally:
            await watch.watcher.stop()

        assert fake.calls == [[repo], [repo / "build"]]


class TestRunPass:
    """CoverageWatch.run_pass tests."""

    @pytest.mark.asyncio
    async def test_given_reports_when_pass_then_prints_summary(self, watch: CoverageWatch) -> None:
        await watch.run_pass()

        text = watch.console.export_text()
        assert "src/a.c" in text
        assert "1/2 (50%)" in text

    @pytest.mark.asyncio
    async def test_given_new_report_when_pass_then_discovered(
        self, watch: CoverageWatch, repo: Path
    ) -> None:
        (repo / ".import-lcov.yaml").write_text("lcov_files: '**/*.info'\n")
        watch.reload_config()

        await watch.run_pass()

        text = watch.console.export_text()
        assert "src/a.c" in text
        assert "src/b.c" in text


class TestWatchCommand:
    """import-lcov watch command tests."""

    def test_given_no_patterns_when_watch_then_fails(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["watch", str(tmp_path)])

        assert result.exit_code != 0
        assert "No LCOV reports configured" in result.output
