"""Folio commands."""

import click

from fleetledger.cli.error_handling import exit_on_failures, handle_domain_error
from fleetledger.cli.reporting import echo_summary
from fleetledger.domain.errors import DomainError
from fleetledger.domain.sequence import FolioService


@click.group()
def folios_group():
    """Assign sequential folios."""
    pass


@folios_group.command("assign")
@click.argument("record_id")
@click.pass_context
def assign_folio(ctx, record_id: str):
    """Assign today's next folio to a service record."""
    service = FolioService(ctx.obj["db"], ctx.obj["settings"])

    try:
        folio = service.assign_folio(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Service {record_id}: folio {folio}")


@folios_group.command("backfill")
@click.pass_context
def backfill_folios(ctx):
    """Give historical service records without a folio one from their own day."""
    service = FolioService(ctx.obj["db"], ctx.obj["settings"])

    summary = service.backfill_folios()
    echo_summary(summary)
    exit_on_failures(ctx, summary)


def register_commands(cli):
    """Register folio commands with main CLI."""
    cli.add_command(folios_group, name="folios")
