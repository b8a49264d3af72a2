"""Report watcher using watchfiles for async filesystem monitoring.

Design:
- Watches the workspace roots recursively with awatch
- Only modifications count: a report being created or deleted is ignored
  until the next explicit refresh
- A batch of changes is relevant when it touches a discovered report or the
  config file; relevant batches are handed to the callback in one call
- Changing the roots restarts awatch on the new roots
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from watchfiles import Change, awatch

from importlcov.coverage.discovery import find_report_files

logger = structlog.get_logger()


@dataclass
class ReportWatcher:
    """Async watcher that reports changes to LCOV reports and the config file."""

    roots: list[Path]
    patterns: list[str]
    on_change: Callable[[list[Path]], Awaitable[None]]
    config_file: Path | None = None
    debounce_ms: int = 300

    _reports: set[Path] = field(default_factory=set, init=False)
    _watch_task: asyncio.Task[None] | None = field(default=None, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _restart_pending: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.refresh_reports()

    @property
    def reports(self) -> set[Path]:
        return set(self._reports)

    def refresh_reports(self, patterns: list[str] | None = None) -> None:
        """Re-discover reports, optionally with new patterns."""
        if patterns is not None:
            self.patterns = patterns
        self._reports = set(find_report_files(self.roots, self.patterns))

    def update_roots(self, roots: list[Path]) -> bool:
        """Watch a new set of roots. Returns True if the roots changed.

        A running watch loop ends its current awatch and starts a new one on
        the new roots. Reports are not re-discovered; call refresh_reports.
        """
        roots = list(roots)
        if roots == self.roots:
            return False
        self.roots = roots
        if self._watch_task is not None:
            self._restart_pending = True
            self._stop_event.set()
        return True

    def relevant_changes(self, changes: Iterable[tuple[Change, str]]) -> list[Path]:
        """Modified paths that are a known report or the config file."""
        watched = set(self._reports)
        if self.config_file is not None:
            watched.add(self.config_file.resolve())

        relevant: set[Path] = set()
        for change, raw_path in changes:
            if change != Change.modified:
                continue
            path = Path(raw_path).resolve()
            if path in watched:
                relevant.add(path)
        return sorted(relevant)

    async def start(self) -> None:
        """Start watching."""
        if self._watch_task is not None:
            return
        self._stop_event.clear()
        self._restart_pending = False
        self._watch_task = asyncio.create_task(self._watch_loop())
        logger.info(
            "report_watcher_started",
            roots=[str(root) for root in self.roots],
            reports=len(self._reports),
        )

    async def stop(self) -> None:
        """Stop watching."""
        self._restart_pending = False
        self._stop_event.set()
        if self._watch_task is not None:
            self._watch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                await asyncio.wait_for(self._watch_task, timeout=2.0)
            self._watch_task = None
        logger.info("report_watcher_stopped")

    async def wait(self) -> None:
        """Block until the watcher stops."""
        if self._watch_task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._watch_task

    async def _watch_loop(self) -> None:
        try:
            while True:
                async for changes in awatch(
                    *self.roots,
                    debounce=self.debounce_ms,
                    stop_event=self._stop_event,
                    ignore_permission_denied=True,
                ):
                    paths = self.relevant_changes(changes)
                    if not paths:
                        continue
                    logger.info("reports_changed", count=len(paths))
                    try:
                        await self.on_change(paths)
                    except Exception as e:
                        logger.error("change_handler_failed", error=str(e))

                if not self._restart_pending:
                    break
                self._restart_pending = False
                self._stop_event.clear()
                logger.info(
                    "report_watcher_restarted", roots=[str(root) for root in self.roots]
                )
        except asyncio.CancelledError:
            pass
