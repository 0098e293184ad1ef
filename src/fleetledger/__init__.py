"""Ledger generation and reconciliation jobs for workshop and fleet records."""

__version__ = "0.1.0"


def __getattr__(name):
    # The CLI pulls in every service, so it is only loaded on demand
    if name == "main":
        from fleetledger.cli.main import main

        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
