"""Section -> summary and detail coverage.

``summarize`` is cheap and runs for every section of every report. The
detailed view (per-line statements with their branches, plus declarations)
is only built when a consumer asks for one file via ``expand_details``.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from importlcov.coverage.demangle import DemanglerCache, is_mangled
from importlcov.coverage.models import (
    BranchCoverage,
    BranchDetail,
    CoverageCount,
    DeclarationCoverage,
    FileCoverage,
    FileCoverageDetail,
    Section,
    StatementCoverage,
)

logger = structlog.get_logger()


def summarize(section: Section, uri: Path) -> FileCoverage:
    """Project the section's own totals onto a FileCoverage."""
    return FileCoverage(
        uri=uri,
        statement_coverage=CoverageCount(section.lines.hit, section.lines.instrumented),
        branch_coverage=CoverageCount(section.branches.hit, section.branches.instrumented),
        declaration_coverage=CoverageCount(
            section.functions.hit, section.functions.instrumented
        ),
    )


def group_branches(details: Iterable[BranchDetail]) -> dict[int, dict[str, int]]:
    """Group branch records by line, summing hits of repeated identifiers.

    The same conditional can be instrumented more than once (templates,
    inlined functions, macros), producing several records for one
    (line, branch) pair. Identifiers keep first-seen order within a line.
    """
    by_line: dict[int, dict[str, int]] = {}
    for detail in details:
        branches = by_line.setdefault(detail.line, {})
        branches[detail.branch] = branches.get(detail.branch, 0) + max(detail.hit, 0)
    return by_line


def _branch_records(line: int, branches: dict[str, int]) -> tuple[BranchCoverage, ...]:
    return tuple(
        BranchCoverage(executed=hits, line=line - 1, label=label)
        for label, hits in branches.items()
    )


async def expand_details(
    section: Section, demangler: DemanglerCache
) -> list[FileCoverageDetail]:
    """Build detail records for one section.

    Statement records come first, in ``DA`` order, then declaration records
    in function order. Functions with an empty name are dropped. Mangled
    names are demangled; a name the backend rejects is shown as recorded.

    Raises:
        DemangleError: If the demangler is needed and cannot be loaded.
    """
    branches_by_line = group_branches(section.branches.details)

    details: list[FileCoverageDetail] = [
        StatementCoverage(
            executed=line.hit,
            line=line.line - 1,
            branches=_branch_records(line.line, branches_by_line.get(line.line, {})),
        )
        for line in section.lines.details
    ]

    for fn in section.functions.details:
        if not fn.name:
            continue

        name = fn.name
        if is_mangled(name):
            demangle = await demangler.get()
            try:
                name = demangle(name)
            except Exception as e:
                logger.warning(
                    "demangle_failed", name=fn.name, path=section.path, error=str(e)
                )
                name = fn.name

        details.append(DeclarationCoverage(name=name, executed=fn.hit, line=fn.line - 1))

    return details
