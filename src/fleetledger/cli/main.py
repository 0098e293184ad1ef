"""Main CLI entry point."""

import logging

import click

from fleetledger.config import Settings
from fleetledger.database.factories import create_database_from_settings
from fleetledger.domain.errors import ConfigurationError
from fleetledger.cli.error_handling import handle_domain_error

# Import and register all commands at module level
from fleetledger.cli.commands import (
    charges,
    commissions,
    folios,
    records,
    technicians,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides FLEETLEDGER_DB_PATH environment variable)",
    envvar="FLEETLEDGER_DB_PATH",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides FLEETLEDGER_DB_URL; wins over --db-path)",
    envvar="FLEETLEDGER_DB_URL",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level",
)
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, log_level: str):
    """Fleetledger - ledger generation and reconciliation jobs.

    Generates daily rental charges, assigns folios and reconciles historical
    service records. Every job is safe to re-run.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=getattr(logging, log_level.upper()), format=LOG_FORMAT)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = Settings.from_env(database_url=db_url, database_path=db_path)
            db = create_database_from_settings(settings)
        except ConfigurationError as e:
            handle_domain_error(ctx, e)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.call_on_close(db.disconnect)


# Register all commands
charges.register_commands(cli)
commissions.register_commands(cli)
folios.register_commands(cli)
records.register_commands(cli)
technicians.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
