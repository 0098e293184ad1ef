"""Database layer for fleetledger application."""

from fleetledger.database.base import Database
from fleetledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
