"""CLI helpers for turning job errors and failures into exit codes."""

import logging

import click

from fleetledger.domain.errors import ConfigurationError, DomainError
from fleetledger.domain.summary import RunSummary

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print the error, plus a setup hint for configuration problems, and exit 1."""
    logger.debug("Command failed", exc_info=error)
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ConfigurationError):
        click.echo("Check --db-path/--db-url and the FLEETLEDGER_* environment variables.", err=True)
    ctx.exit(1)


def exit_on_failures(ctx: click.Context, summary: RunSummary) -> None:
    """Exit 1 when any unit of work failed, so schedulers notice partial runs."""
    if summary.failed:
        click.echo(f"Error: {summary.failed} operations failed; see the log for details.", err=True)
        ctx.exit(1)
