"""Service record maintenance commands."""

import click

from fleetledger.cli.error_handling import exit_on_failures, handle_domain_error
from fleetledger.cli.reporting import echo_summary
from fleetledger.domain.errors import DomainError
from fleetledger.domain.unification import UnificationService


@click.group()
def records_group():
    """Maintain service records."""
    pass


@records_group.command("unify")
@click.option("--execute", is_flag=True, help="Write the results (default is a dry run)")
@click.pass_context
def unify_records(ctx, execute: bool):
    """Collapse legacy advisor, technician and total fields."""
    db = ctx.obj["db"]
    service = UnificationService(db, ctx.obj["settings"])

    try:
        summary = service.run(execute=execute)
    except DomainError as e:
        handle_domain_error(ctx, e)
    echo_summary(summary, hint="Re-run with --execute to apply these changes.")
    exit_on_failures(ctx, summary)


def register_commands(cli):
    """Register record commands with main CLI."""
    cli.add_command(records_group, name="records")
