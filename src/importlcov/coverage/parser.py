"""LCOV format parser.

LCOV format is a plain text format with records like:
- TN:<test name>
- SF:<source file path>
- FN:<line>[,<end line>],<name>
- FNDA:<hit count>,<name>
- FNL:<index>,<line>[,<end line>]       (lcov >= 2.2)
- FNA:<index>,<hit count>,<name>         (lcov >= 2.2)
- FNF:<functions found>
- FNH:<functions hit>
- DA:<line>,<hit count>[,<checksum>]
- LF:<lines found>
- LH:<lines hit>
- BRDA:<line>,[e]<block>,<branch>,<taken>
- BRF:<branches found>
- BRH:<branches hit>
- end_of_record

Used by: gcov/lcov, cargo-llvm-cov, c8, pytest-cov, dart test
"""

from __future__ import annotations

from dataclasses import dataclass, field

from importlcov.core.errors import ReportError
from importlcov.coverage.models import (
    BranchDetail,
    FunctionDetail,
    LineDetail,
    RecordSummary,
    Section,
)

# Records allowed before the first SF: record
_IGNORED_RECORDS = frozenset({"VER"})


def _count(value: str, line_number: int) -> int:
    # '-' marks a branch whose block was never reached
    if value == "-":
        return 0
    try:
        count = int(value)
    except ValueError:
        raise ReportError.parse_error(f"expected a count, got {value!r}", line_number) from None
    if count < 0:
        raise ReportError.parse_error(f"negative count {count}", line_number)
    return count


def _line(value: str, line_number: int) -> int:
    try:
        line = int(value)
    except ValueError:
        raise ReportError.parse_error(
            f"expected a line number, got {value!r}", line_number
        ) from None
    if line < 1:
        raise ReportError.parse_error(f"line numbers start at 1, got {line}", line_number)
    return line


def _summarize(explicit: tuple[int | None, int | None], computed: tuple[int, int]) -> tuple[int, int]:
    """Prefer the totals the report states; fall back to counting details."""
    instrumented, hit = explicit
    return (
        computed[0] if instrumented is None else instrumented,
        computed[1] if hit is None else hit,
    )


@dataclass
class _SectionBuilder:
    """Mutable accumulator for the section currently being read."""

    path: str
    test_name: str
    lines: list[LineDetail] = field(default_factory=list)
    branches: list[BranchDetail] = field(default_factory=list)
    # Function records keyed by name, in FN order
    fn_lines: dict[str, int] = field(default_factory=dict)
    fn_hits: dict[str, int] = field(default_factory=dict)
    # FNL/FNA alias index -> line
    fn_aliases: dict[str, int] = field(default_factory=dict)
    lf: int | None = None
    lh: int | None = None
    brf: int | None = None
    brh: int | None = None
    fnf: int | None = None
    fnh: int | None = None

    def build(self) -> Section:
        functions = tuple(
            FunctionDetail(name=name, line=line, hit=self.fn_hits.get(name, 0))
            for name, line in self.fn_lines.items()
        )
        lines_total = _summarize(
            (self.lf, self.lh),
            (len(self.lines), sum(1 for d in self.lines if d.hit > 0)),
        )
        branches_total = _summarize(
            (self.brf, self.brh),
            (len(self.branches), sum(1 for d in self.branches if d.hit > 0)),
        )
        functions_total = _summarize(
            (self.fnf, self.fnh),
            (len(functions), sum(1 for d in functions if d.hit > 0)),
        )
        return Section(
            path=self.path,
            test_name=self.test_name,
            lines=RecordSummary(lines_total[0], lines_total[1], tuple(self.lines)),
            branches=RecordSummary(branches_total[0], branches_total[1], tuple(self.branches)),
            functions=RecordSummary(functions_total[0], functions_total[1], functions),
        )


def parse_lcov(contents: bytes | str) -> list[Section]:
    """Parse LCOV data into sections, in report order.

    Args:
        contents: Raw report bytes (UTF-8) or already-decoded text.

    Returns:
        One Section per ``SF:`` record. A section missing its
        ``end_of_record`` at end of input is still returned.

    Raises:
        ReportError: If the data is not UTF-8, a record is malformed, or a
            coverage record appears outside of a section.
    """
    if isinstance(contents, bytes):
        try:
            text = contents.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReportError.parse_error(f"not UTF-8 text: {e.reason}") from e
    else:
        text = contents

    sections: list[Section] = []
    current: _SectionBuilder | None = None
    test_name = ""

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line == "end_of_record":
            if current is not None:
                sections.append(current.build())
            current = None
            continue

        key, sep, value = line.partition(":")
        if not sep:
            raise ReportError.parse_error(f"unrecognized line {line!r}", line_number)

        if key == "TN":
            test_name = value
            continue
        if key == "SF":
            if current is not None:
                sections.append(current.build())
            current = _SectionBuilder(path=value, test_name=test_name)
            continue
        if key in _IGNORED_RECORDS:
            continue
        if current is None:
            raise ReportError.parse_error(f"{key} record outside of a section", line_number)

        parts = value.split(",")

        if key == "DA":
            # DA:line,hits[,checksum]
            if len(parts) < 2:
                raise ReportError.parse_error("DA needs a line and a hit count", line_number)
            current.lines.append(
                LineDetail(line=_line(parts[0], line_number), hit=_count(parts[1], line_number))
            )

        elif key == "BRDA":
            # BRDA:line,block,branch,taken
            if len(parts) < 4:
                raise ReportError.parse_error("BRDA needs four fields", line_number)
            # lcov 2.x marks exception branches with an "e" before the block
            block = parts[1].removeprefix("e")
            if not block.isdigit():
                raise ReportError.parse_error(f"invalid block {parts[1]!r}", line_number)
            current.branches.append(
                BranchDetail(
                    line=_line(parts[0], line_number),
                    block=int(block),
                    # Branch expressions (llvm-cov) may themselves contain commas
                    branch=",".join(parts[2:-1]),
                    hit=_count(parts[-1], line_number),
                )
            )

        elif key == "FN":
            # FN:line,name or FN:line,end_line,name
            fields = value.split(",", 2)
            if len(fields) < 2:
                raise ReportError.parse_error("FN needs a line and a name", line_number)
            if len(fields) == 3 and fields[1].isdigit():
                name = fields[2]
            else:
                name = value.split(",", 1)[1]
            current.fn_lines.setdefault(name, _line(fields[0], line_number))

        elif key == "FNDA":
            # FNDA:hits,name
            hits, _, name = value.partition(",")
            count = _count(hits, line_number)
            current.fn_hits[name] = current.fn_hits.get(name, 0) + count

        elif key == "FNL":
            # FNL:index,line[,end_line]
            if len(parts) < 2:
                raise ReportError.parse_error("FNL needs an index and a line", line_number)
            current.fn_aliases[parts[0]] = _line(parts[1], line_number)

        elif key == "FNA":
            # FNA:index,hits,name
            fields = value.split(",", 2)
            if len(fields) < 3 or fields[0] not in current.fn_aliases:
                raise ReportError.parse_error("FNA without a matching FNL", line_number)
            current.fn_lines.setdefault(fields[2], current.fn_aliases[fields[0]])
            current.fn_hits[fields[2]] = current.fn_hits.get(fields[2], 0) + _count(
                fields[1], line_number
            )

        elif key == "LF":
            current.lf = _count(value, line_number)
        elif key == "LH":
            current.lh = _count(value, line_number)
        elif key == "BRF":
            current.brf = _count(value, line_number)
        elif key == "BRH":
            current.brh = _count(value, line_number)
        elif key == "FNF":
            current.fnf = _count(value, line_number)
        elif key == "FNH":
            current.fnh = _count(value, line_number)

        # Unknown record types are skipped; newer lcov versions add records

    # Handle section without end_of_record
    if current is not None:
        sections.append(current.build())

    return sections
