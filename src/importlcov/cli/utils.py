"""CLI utilities."""

from functools import partial
from pathlib import Path

import click

from importlcov.config.loader import load_config
from importlcov.config.models import ImportLcovConfig
from importlcov.core.errors import ConfigError
from importlcov.coverage.demangle import load_backend
from importlcov.coverage.session import CoverageCallback, CoverageSession


def load_cli_config(repo_root: Path, patterns: tuple[str, ...] = ()) -> ImportLcovConfig:
    """Load config for a command, with ``--file`` patterns taking precedence.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    overrides = {"lcov_files": list(patterns)} if patterns else {}
    try:
        return load_config(repo_root, **overrides)
    except ConfigError as e:
        raise click.ClickException(e.message) from e


def create_session(
    config: ImportLcovConfig, on_coverage: CoverageCallback | None = None
) -> CoverageSession:
    """Coverage session wired to the configured roots and demangler."""
    return CoverageSession(
        config.workspace_roots,
        partial(load_backend, config.demangler.backend),
        on_coverage=on_coverage,
    )
