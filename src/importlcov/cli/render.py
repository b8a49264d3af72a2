"""Terminal and JSON renderings of coverage results."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from importlcov.coverage.models import (
    CoverageCount,
    DeclarationCoverage,
    FileCoverage,
    FileCoverageDetail,
    StatementCoverage,
)
from importlcov.coverage.paths import relative_label


def _format_count(count: CoverageCount) -> str:
    if count.total == 0:
        return "-"
    return f"{count.covered}/{count.total} ({count.rate:.0%})"


def summary_table(coverage: Sequence[FileCoverage], roots: Sequence[str | Path]) -> Table:
    """One row per file, sorted by label."""
    table = Table(title="Coverage", title_justify="left")
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Lines", justify="right")
    table.add_column("Branches", justify="right")
    table.add_column("Functions", justify="right")

    rows = sorted(coverage, key=lambda fc: relative_label(fc.uri, roots))
    for fc in rows:
        table.add_row(
            escape(relative_label(fc.uri, roots)),
            _format_count(fc.statement_coverage),
            _format_count(fc.branch_coverage),
            _format_count(fc.declaration_coverage),
        )
    return table


def details_table(label: str, details: Sequence[FileCoverageDetail]) -> Table:
    """Statements and declarations of one file. Lines are shown 1-based."""
    table = Table(title=escape(label), title_justify="left")
    table.add_column("Line", justify="right")
    table.add_column("Kind")
    table.add_column("Hits", justify="right")
    table.add_column("Detail")

    for detail in details:
        if isinstance(detail, StatementCoverage):
            branches = ", ".join(f"{b.label}:{b.executed}" for b in detail.branches)
            style = None if detail.executed else "red"
            table.add_row(
                str(detail.line + 1), "line", str(detail.executed), escape(branches), style=style
            )
        else:
            style = None if detail.executed else "red"
            table.add_row(
                str(detail.line + 1),
                "function",
                str(detail.executed),
                escape(detail.name),
                style=style,
            )
    return table


def print_errors(console: Console, errors: dict[Path, str]) -> None:
    for path, message in sorted(errors.items()):
        console.print(
            f"[red]✗[/red] {escape(str(path))}: {escape(message)}", highlight=False, soft_wrap=True
        )


def _count_dict(count: CoverageCount) -> dict[str, int]:
    return {"covered": count.covered, "total": count.total}


def detail_to_dict(detail: FileCoverageDetail) -> dict[str, Any]:
    if isinstance(detail, DeclarationCoverage):
        return {
            "kind": "declaration",
            "name": detail.name,
            "line": detail.line,
            "executed": detail.executed,
        }
    return {
        "kind": "statement",
        "line": detail.line,
        "executed": detail.executed,
        "branches": [{"label": b.label, "executed": b.executed} for b in detail.branches],
    }


def coverage_to_dict(
    fc: FileCoverage, details: Sequence[FileCoverageDetail] | None = None
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "uri": str(fc.uri),
        "statements": _count_dict(fc.statement_coverage),
        "branches": _count_dict(fc.branch_coverage),
        "declarations": _count_dict(fc.declaration_coverage),
    }
    if details is not None:
        data["details"] = [detail_to_dict(d) for d in details]
    return data
