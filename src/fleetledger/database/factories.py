"""Database factory functions for creating database instances."""

from typing import Optional

from sqlalchemy.exc import ArgumentError, NoSuchModuleError, OperationalError

from fleetledger.config import Settings
from fleetledger.database.sqlalchemy_db import SQLAlchemyDatabase
from fleetledger.domain.errors import ConfigurationError


def create_database(database_url: str, timeout: Optional[float] = None) -> SQLAlchemyDatabase:
    """Create a database instance for any SQLAlchemy URL.

    Raises:
        ConfigurationError: If the URL is malformed, its driver is missing
            or the database cannot be opened
    """
    try:
        return SQLAlchemyDatabase(database_url, timeout=timeout)
    except (ArgumentError, NoSuchModuleError, OperationalError) as e:
        raise ConfigurationError(f"Cannot open database '{database_url}': {e}") from e


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks
            FLEETLEDGER_DB_URL and FLEETLEDGER_DB_PATH environment variables,
            then defaults to ~/.fleetledger/fleetledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    settings = Settings.from_env(database_path=database_path)
    return create_database_from_settings(settings)


def create_database_from_settings(settings: Settings) -> SQLAlchemyDatabase:
    """Create the database described by validated settings."""
    return create_database(settings.database_url, timeout=settings.db_timeout)
