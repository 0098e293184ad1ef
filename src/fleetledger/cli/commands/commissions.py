"""Commission migration commands."""

import click

from fleetledger.cli.error_handling import exit_on_failures, handle_domain_error
from fleetledger.cli.reporting import echo_summary
from fleetledger.domain.commission import DELIVERED_STATUS, CommissionMigrationService
from fleetledger.domain.errors import DomainError


@click.group()
def commissions_group():
    """Reconcile technician commissions."""
    pass


@commissions_group.command("migrate")
@click.option("--execute", is_flag=True, help="Write the results (default is a dry run)")
@click.option("--status", default=DELIVERED_STATUS, show_default=True, help="Only records with this status")
@click.option("--all-statuses", is_flag=True, help="Process records of every status")
@click.pass_context
def migrate_commissions(ctx, execute: bool, status: str, all_statuses: bool):
    """Compute missing commissions of historical service records.

    Records with ambiguous or unknown technicians are skipped and listed for
    manual follow-up; no commission is guessed.
    """
    db = ctx.obj["db"]
    service = CommissionMigrationService(db, ctx.obj["settings"])

    try:
        summary = service.run(execute=execute, status=None if all_statuses else status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    echo_summary(summary, hint="Re-run with --execute to apply these changes.")
    exit_on_failures(ctx, summary)


def register_commands(cli):
    """Register commission commands with main CLI."""
    cli.add_command(commissions_group, name="commissions")
