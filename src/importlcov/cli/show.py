"""import-lcov show command - print coverage from LCOV reports."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from importlcov.cli.render import (
    coverage_to_dict,
    details_table,
    print_errors,
    summary_table,
)
from importlcov.cli.utils import create_session, load_cli_config
from importlcov.config.models import ImportLcovConfig
from importlcov.core.errors import DemangleError
from importlcov.coverage.discovery import find_report_files
from importlcov.coverage.models import FileCoverageDetail
from importlcov.coverage.paths import relative_label
from importlcov.coverage.session import RunResult


async def _collect(
    config: ImportLcovConfig, reports: list[Path], with_details: bool
) -> tuple[RunResult, dict[int, list[FileCoverageDetail]], dict[str, str]]:
    session = create_session(config)
    result = await session.refresh(reports)

    details: dict[int, list[FileCoverageDetail]] = {}
    detail_errors: dict[str, str] = {}
    if with_details:
        for index, fc in enumerate(result.coverage):
            try:
                details[index] = await session.load_detailed_coverage(fc)
            except DemangleError as e:
                detail_errors[str(fc.uri)] = e.message

    return result, details, detail_errors


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
@click.option("--details", "with_details", is_flag=True, help="Show per-line coverage")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show_command(
    path: Path, patterns: tuple[str, ...], with_details: bool, as_json: bool
) -> None:
    """Show coverage from the LCOV reports configured for PATH.

    PATH is the repository root (default: current directory).
    """
    repo_root = path.resolve()
    config = load_cli_config(repo_root, patterns)
    if not config.lcov_files:
        raise click.ClickException(
            "No LCOV reports configured. Set lcov_files in .import-lcov.yaml or pass --file."
        )

    reports = find_report_files(config.workspace_roots, config.lcov_files)
    result, details, detail_errors = asyncio.run(_collect(config, reports, with_details))

    if as_json:
        files = [
            coverage_to_dict(fc, details.get(index) if with_details else None)
            for index, fc in enumerate(result.coverage)
        ]
        click.echo(
            json.dumps(
                {
                    "reports": [str(r) for r in reports],
                    "files": files,
                    "errors": {str(p): msg for p, msg in result.errors.items()},
                    "detail_errors": detail_errors,
                },
                indent=2,
            )
        )
        return

    console = Console()
    if not reports:
        console.print("No LCOV reports found.")
        return

    console.print(summary_table(result.coverage, config.workspace_roots))
    if with_details:
        for index, fc in enumerate(result.coverage):
            label = relative_label(fc.uri, config.workspace_roots)
            if index in details:
                console.print(details_table(label, details[index]))
            else:
                console.print(
                    f"[red]✗[/red] {escape(label)}: {escape(detail_errors[str(fc.uri)])}",
                    highlight=False,
                    soft_wrap=True,
                )

    print_errors(Console(stderr=True), result.errors)
