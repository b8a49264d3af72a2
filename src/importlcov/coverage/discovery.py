"""Locating LCOV reports from configured glob patterns."""

from __future__ import annotations

import glob
from collections.abc import Iterable, Sequence
from pathlib import Path

import structlog

logger = structlog.get_logger()


def _expand(pattern: str, root: Path) -> Iterable[Path]:
    if Path(pattern).is_absolute():
        matches = glob.glob(pattern, recursive=True)
    else:
        matches = glob.glob(pattern, root_dir=root, recursive=True)
        matches = [str(root / match) for match in matches]
    return (Path(match) for match in matches)


def find_report_files(roots: Sequence[str | Path], patterns: Sequence[str]) -> list[Path]:
    """Find report files matching any pattern under any root.

    Relative patterns are expanded in every workspace root; ``**`` matches
    any number of directories. Directories are skipped. The result is sorted
    and free of duplicates.
    """
    found: set[Path] = set()
    for root in roots:
        for pattern in patterns:
            for path in _expand(pattern, Path(root)):
                if path.is_file():
                    found.add(path.resolve())
    reports = sorted(found)
    logger.debug("reports_discovered", count=len(reports), patterns=list(patterns))
    return reports
