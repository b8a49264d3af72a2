"""Coverage run passes over a set of LCOV reports.

A run pass reads every report concurrently, parses it, and publishes one
FileCoverage per section as soon as it is built. The session remembers which
section each published FileCoverage came from, so detailed coverage can be
expanded later for whichever file a consumer opens.

Only the latest pass is authoritative: ``refresh`` cancels the previous pass
and starts from an empty table.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from importlcov.core.errors import ReportError
from importlcov.core.logging import set_run_id
from importlcov.coverage.aggregate import expand_details, summarize
from importlcov.coverage.demangle import DemanglerCache, DemangleLoader
from importlcov.coverage.models import FileCoverage, FileCoverageDetail, Section
from importlcov.coverage.parser import parse_lcov
from importlcov.coverage.paths import resolve_uri

logger = structlog.get_logger()

CoverageCallback = Callable[[FileCoverage], None]


@dataclass
class RunResult:
    """Outcome of one run pass."""

    coverage: list[FileCoverage] = field(default_factory=list)
    errors: dict[Path, str] = field(default_factory=dict)
    cancelled: bool = False
    duration_seconds: float = 0.0


def _read_report(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ReportError.read_error(str(path), e.strerror or str(e)) from e


class CoverageSession:
    """Runs coverage passes and serves detailed coverage for their results."""

    def __init__(
        self,
        workspace_roots: Sequence[str | Path],
        demangle_loader: DemangleLoader,
        on_coverage: CoverageCallback | None = None,
    ) -> None:
        self.workspace_roots = list(workspace_roots)
        self._demangle_loader = demangle_loader
        self._on_coverage = on_coverage
        self._demangler = DemanglerCache(demangle_loader)
        self._sections: dict[FileCoverage, Section] = {}
        self._cancel_event = asyncio.Event()

    @property
    def demangler(self) -> DemanglerCache:
        return self._demangler

    def cancel(self) -> None:
        """Cancel the active run pass, if any."""
        self._cancel_event.set()

    async def refresh(self, report_paths: Sequence[Path]) -> RunResult:
        """Supersede the current pass with a new one over ``report_paths``."""
        self._cancel_event.set()
        self._cancel_event = asyncio.Event()
        self._demangler = DemanglerCache(self._demangle_loader)
        return await self.run(report_paths, self._cancel_event)

    async def run(
        self, report_paths: Sequence[Path], cancel_event: asyncio.Event | None = None
    ) -> RunResult:
        """Process all reports concurrently.

        A report that cannot be read or parsed is recorded in
        ``RunResult.errors`` and does not affect the others.
        Without ``cancel_event`` the pass can be stopped with ``cancel()``.
        """
        if cancel_event is None:
            if self._cancel_event.is_set():
                self._cancel_event = asyncio.Event()
            cancel_event = self._cancel_event
        run_id = set_run_id()
        start = time.monotonic()
        self._sections.clear()

        result = RunResult()
        logger.info("run_started", run_id=run_id, reports=len(report_paths))

        def publish(coverage: FileCoverage, section: Section) -> None:
            self._sections[coverage] = section
            result.coverage.append(coverage)
            if self._on_coverage is not None:
                self._on_coverage(coverage)

        outcomes = await asyncio.gather(
            *(self._process_report(path, cancel_event, publish) for path in report_paths),
            return_exceptions=True,
        )

        for path, outcome in zip(report_paths, outcomes, strict=True):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                result.errors[path] = str(outcome)
                logger.warning("report_failed", path=str(path), error=str(outcome))

        result.cancelled = cancel_event.is_set()
        result.duration_seconds = time.monotonic() - start
        logger.info(
            "run_completed",
            files=len(result.coverage),
            errors=len(result.errors),
            cancelled=result.cancelled,
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result

    async def _process_report(
        self,
        path: Path,
        cancel_event: asyncio.Event,
        publish: Callable[[FileCoverage, Section], None],
    ) -> int:
        if cancel_event.is_set():
            return 0
        loop = asyncio.get_running_loop()

        contents = await loop.run_in_executor(None, _read_report, path)
        if cancel_event.is_set():
            return 0

        sections = await loop.run_in_executor(None, parse_lcov, contents)
        if cancel_event.is_set():
            return 0

        published = 0
        for section in sections:
            if cancel_event.is_set():
                break
            uri = resolve_uri(section.path, self.workspace_roots)
            publish(summarize(section, uri), section)
            published += 1

        logger.debug("report_loaded", path=str(path), sections=published)
        return published

    async def load_detailed_coverage(
        self, file_coverage: FileCoverage
    ) -> list[FileCoverageDetail]:
        """Detail records for a FileCoverage from the current pass.

        Returns an empty list for coverage this pass did not publish.
        """
        section = self._sections.get(file_coverage)
        if section is None:
            return []
        return await expand_details(section, self._demangler)
