"""LCOV import: parsing, path resolution, aggregation, and run passes.

Usage:
    from importlcov.coverage import CoverageSession, find_report_files, load_backend

    session = CoverageSession(roots, lambda: load_backend("cxxfilt:demangle"))
    result = await session.refresh(find_report_files(roots, ["**/lcov.info"]))
    details = await session.load_detailed_coverage(result.coverage[0])
"""

from importlcov.coverage.aggregate import expand_details, group_branches, summarize
from importlcov.coverage.demangle import (
    Demangle,
    DemanglerCache,
    DemangleLoader,
    is_mangled,
    load_backend,
)
from importlcov.coverage.discovery import find_report_files
from importlcov.coverage.models import (
    BranchCoverage,
    BranchDetail,
    CoverageCount,
    DeclarationCoverage,
    FileCoverage,
    FileCoverageDetail,
    FunctionDetail,
    LineDetail,
    RecordSummary,
    Section,
    StatementCoverage,
)
from importlcov.coverage.parser import parse_lcov
from importlcov.coverage.paths import relative_label, resolve_uri
from importlcov.coverage.session import CoverageSession, RunResult

__all__ = [
    # Models
    "BranchCoverage",
    "BranchDetail",
    "CoverageCount",
    "DeclarationCoverage",
    "FileCoverage",
    "FileCoverageDetail",
    "FunctionDetail",
    "LineDetail",
    "RecordSummary",
    "Section",
    "StatementCoverage",
    # Parsing and paths
    "parse_lcov",
    "relative_label",
    "resolve_uri",
    "find_report_files",
    # Aggregation
    "expand_details",
    "group_branches",
    "summarize",
    # Demangling
    "Demangle",
    "DemangleLoader",
    "DemanglerCache",
    "is_mangled",
    "load_backend",
    # Runs
    "CoverageSession",
    "RunResult",
]
