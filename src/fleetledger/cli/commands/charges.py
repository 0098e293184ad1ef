"""Daily rental charge commands."""

import click

from fleetledger.cli.date_filters import resolve_cli_date
from fleetledger.cli.error_handling import exit_on_failures, handle_domain_error
from fleetledger.cli.reporting import echo_summary
from fleetledger.domain.charges import RentalChargeService, StartDatePolicy
from fleetledger.domain.errors import DomainError


@click.group()
def charges_group():
    """Generate daily rental charges."""
    pass


@charges_group.command("run")
@click.option("--until", "until", help="Last day to bill (default: today)")
@click.option("--since", "since", help="Earliest day to bill, e.g. 'today' for the daily run")
@click.option("--cutoff", help="Bill every driver from this date (overrides FLEETLEDGER_CHARGE_CUTOFF)")
@click.option(
    "--per-subscriber",
    is_flag=True,
    help="Bill each driver from their contract date, ignoring any configured cutoff",
)
@click.option("--dry-run", is_flag=True, help="Show what would be created without writing")
@click.pass_context
def run_charges(ctx, until: str | None, since: str | None, cutoff: str | None, per_subscriber: bool, dry_run: bool):
    """Create every missing daily charge for active drivers.

    Existing charges are never duplicated, so the command can run on a
    schedule and be re-run by hand with the same result.

    Examples:
        fleetledger charges run --since today
        fleetledger charges run --cutoff 2025-09-30
        fleetledger charges run --until 2025-01-31 --dry-run
    """
    if cutoff and per_subscriber:
        click.echo("Error: --cutoff cannot be combined with --per-subscriber.", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = RentalChargeService(db, settings)

    reference_end = resolve_cli_date(ctx, until, "end date")
    reference_start = resolve_cli_date(ctx, since, "start date")
    cutoff_date = resolve_cli_date(ctx, cutoff, "cutoff date")

    policy = None
    if per_subscriber:
        policy = StartDatePolicy.per_subscriber()
    elif cutoff_date is not None:
        policy = StartDatePolicy.fixed_cutoff(cutoff_date)

    try:
        summary = service.run(
            reference_end=reference_end,
            reference_start=reference_start,
            policy=policy,
            dry_run=dry_run,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    echo_summary(summary)
    exit_on_failures(ctx, summary)


def register_commands(cli):
    """Register charge commands with main CLI."""
    cli.add_command(charges_group, name="charges")
