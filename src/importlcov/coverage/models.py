"""Coverage data model.

Two layers:
- Section types are what the LCOV parser produces: one ``Section`` per
  ``SF:`` record, with 1-based line numbers exactly as the coverage tool
  recorded them. They are immutable once parsed.
- FileCoverage and the detail records are what consumers display. Detail
  records use 0-based line positions and are derived on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class LineDetail:
    """``DA:<line>,<hit>``"""

    line: int
    hit: int


@dataclass(frozen=True, slots=True)
class BranchDetail:
    """``BRDA:<line>,<block>,<branch>,<taken>``

    ``branch`` is kept as recorded; it identifies the branch within its line.
    """

    line: int
    block: int
    branch: str
    hit: int


@dataclass(frozen=True, slots=True)
class FunctionDetail:
    """A function record, from ``FN``/``FNDA`` or ``FNL``/``FNA``."""

    name: str
    line: int
    hit: int


@dataclass(frozen=True, slots=True)
class RecordSummary(Generic[T]):
    """Instrumented/hit totals plus the detail records they summarize."""

    instrumented: int = 0
    hit: int = 0
    details: tuple[T, ...] = ()


@dataclass(frozen=True, slots=True)
class Section:
    """Coverage for one source file within one LCOV report."""

    path: str
    test_name: str = ""
    lines: RecordSummary[LineDetail] = field(default_factory=RecordSummary)
    branches: RecordSummary[BranchDetail] = field(default_factory=RecordSummary)
    functions: RecordSummary[FunctionDetail] = field(default_factory=RecordSummary)


@dataclass(frozen=True, slots=True)
class CoverageCount:
    """Covered/total pair for one coverage kind."""

    covered: int
    total: int

    @property
    def rate(self) -> float:
        """Fraction covered (0.0 to 1.0)."""
        if self.total <= 0:
            return 0.0
        return self.covered / self.total


@dataclass(frozen=True, slots=True, eq=False)
class FileCoverage:
    """Summary coverage for one resolved source file.

    Compared and hashed by identity: two sections for the same path are two
    distinct summaries, each backed by its own section.
    """

    uri: Path
    statement_coverage: CoverageCount
    branch_coverage: CoverageCount
    declaration_coverage: CoverageCount


@dataclass(frozen=True, slots=True)
class BranchCoverage:
    """One distinct branch on a line, hits summed over duplicate records."""

    executed: int
    line: int  # 0-based
    label: str


@dataclass(frozen=True, slots=True)
class StatementCoverage:
    """Line record with the branches that share the line."""

    executed: int
    line: int  # 0-based
    branches: tuple[BranchCoverage, ...] = ()


@dataclass(frozen=True, slots=True)
class DeclarationCoverage:
    """Function record with its display name."""

    name: str
    executed: int
    line: int  # 0-based


FileCoverageDetail = StatementCoverage | DeclarationCoverage
