"""CLI helpers for printing job results."""

import click

from fleetledger.domain.summary import RunSummary


def echo_summary(summary: RunSummary, hint: str | None = None) -> None:
    """Print a run summary, with an optional hint shown after dry runs."""
    click.echo("")
    for line in summary.format_lines():
        click.echo(line)
    if summary.dry_run:
        click.echo("\nDry run: nothing was written.")
        if hint:
            click.echo(hint)
