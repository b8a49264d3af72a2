"""import-lcov CLI."""

import click

from importlcov.cli.show import show_command
from importlcov.cli.watch import watch_command
from importlcov.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="import-lcov")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """import-lcov - Line, branch and function coverage from LCOV reports."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(show_command, name="show")
cli.add_command(watch_command, name="watch")


if __name__ == "__main__":
    cli()
