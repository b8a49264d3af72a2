"""import-lcov daemon - report file watching."""

from importlcov.daemon.watcher import ReportWatcher

__all__ = [
    "ReportWatcher",
]
