"""CLI helpers for date option resolution."""

from datetime import date

import click

from fleetledger.utils.date_parser import parse_date, today_in


def resolve_cli_date(ctx: click.Context, value: str | None, label: str) -> date | None:
    """Parse a date option relative to today in the business timezone, or exit."""
    if not value:
        return None
    settings = ctx.obj["settings"]
    try:
        return parse_date(value, today=today_in(settings.tz))
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
