"""import-lcov watch command - re-import coverage whenever a report changes."""

import asyncio
from pathlib import Path

import click
import structlog
from rich.console import Console

from importlcov.cli.render import print_errors, summary_table
from importlcov.cli.utils import create_session, load_cli_config
from importlcov.config.loader import config_path
from importlcov.config.models import ImportLcovConfig
from importlcov.coverage.session import CoverageSession
from importlcov.daemon.watcher import ReportWatcher

logger = structlog.get_logger()


class CoverageWatch:
    """Keeps a coverage session in step with the reports on disk.

    Report changes trigger a new run pass. Config file changes are re-read
    and only applied when the resulting configuration actually differs.
    """

    def __init__(
        self,
        repo_root: Path,
        patterns: tuple[str, ...] = (),
        console: Console | None = None,
    ) -> None:
        self.repo_root = repo_root
        self.patterns = patterns
        self.console = console or Console()
        self.config = load_cli_config(repo_root, patterns)
        self.session: CoverageSession = create_session(self.config)
        self.watcher = ReportWatcher(
            roots=[Path(root) for root in self.config.workspace_roots],
            patterns=self.config.lcov_files,
            on_change=self.on_change,
            config_file=config_path(repo_root),
            debounce_ms=self.config.watch.debounce_ms,
        )

    async def run_pass(self) -> None:
        self.watcher.refresh_reports()
        result = await self.session.refresh(sorted(self.watcher.reports))
        if result.cancelled:
            return
        self.console.print(summary_table(result.coverage, self.config.workspace_roots))
        print_errors(self.console, result.errors)

    def reload_config(self) -> bool:
        """Re-read the config file. Returns True if the configuration changed."""
        try:
            config = load_cli_config(self.repo_root, self.patterns)
        except click.ClickException as e:
            logger.error("config_reload_failed", error=e.message)
            return False
        if config.model_dump() == self.config.model_dump():
            return False

        self.config = config
        self.session = create_session(config)
        self.watcher.update_roots([Path(root) for root in config.workspace_roots])
        self.watcher.refresh_reports(config.lcov_files)
        logger.info("config_reloaded", lcov_files=config.lcov_files)
        return True

    async def on_change(self, paths: list[Path]) -> None:
        config_file = config_path(self.repo_root).resolve()
        reports_changed = any(path != config_file for path in paths)
        config_changed = config_file in paths and self.reload_config()
        if reports_changed or config_changed:
            await self.run_pass()

    async def run(self) -> None:
        await self.run_pass()
        await self.watcher.start()
        try:
            await self.watcher.wait()
        finally:
            await self.watcher.stop()


@click.command()
@click.argument(
    "path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option(
    "-f",
    "--file",
    "patterns",
    multiple=True,
    help="LCOV report glob, relative to each workspace root. Overrides lcov_files.",
)
def watch_command(path: Path, patterns: tuple[str, ...]) -> None:
    """Show coverage for PATH and refresh it whenever a report changes.

    PATH is the repository root (default: current directory).
    """
    watch = CoverageWatch(path.resolve(), patterns)
    if not watch.config.lcov_files:
        raise click.ClickException(
            "No LCOV reports configured. Set lcov_files in .import-lcov.yaml or pass --file."
        )
    try:
        asyncio.run(watch.run())
    except KeyboardInterrupt:
        click.echo("Stopped watching.")
