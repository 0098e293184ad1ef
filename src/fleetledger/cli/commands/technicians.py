"""Technician assignment commands."""

import click

from fleetledger.cli.error_handling import exit_on_failures
from fleetledger.cli.reporting import echo_summary
from fleetledger.domain.assignments import TechnicianAssignmentService


@click.group()
def technicians_group():
    """Link and audit technicians on service items."""
    pass


@technicians_group.command("link")
@click.option("--execute", is_flag=True, help="Write the results (default is a dry run)")
@click.pass_context
def link_technicians(ctx, execute: bool):
    """Link items that only carry a technician name to a user id."""
    service = TechnicianAssignmentService(ctx.obj["db"], ctx.obj["settings"])

    summary = service.link_items(execute=execute)
    echo_summary(summary, hint="Re-run with --execute to apply these changes.")
    exit_on_failures(ctx, summary)


@technicians_group.command("audit")
@click.pass_context
def audit_technicians(ctx):
    """List technician ids used on items that have no user profile."""
    service = TechnicianAssignmentService(ctx.obj["db"], ctx.obj["settings"])

    missing = service.find_missing_technicians()
    if not missing:
        click.echo("All technicians assigned to items have a user profile.")
        return

    click.echo(f"\n{len(missing)} technicians without a user profile:")
    click.echo("-" * 60)
    for technician_id, name in sorted(missing.items()):
        click.echo(f"ID: {technician_id:20s} | {name}")
    click.echo("\nCreate a profile with role and commission rate for each of them.")


def register_commands(cli):
    """Register technician commands with main CLI."""
    cli.add_command(technicians_group, name="technicians")
