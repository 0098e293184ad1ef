"""Runtime settings for fleetledger jobs.

Settings come from environment variables and may be overridden by CLI
options. Invalid values raise ConfigurationError so a run aborts before it
touches any data.
"""

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from fleetledger.domain.errors import ConfigurationError, invalid_setting
from fleetledger.utils.date_parser import get_timezone, parse_date

DEFAULT_TIMEZONE = "America/Mexico_City"
DEFAULT_MAX_BATCH_OPS = 490
# Hard ceiling of the backing store for one atomic write group
BATCH_OPS_CEILING = 500
DEFAULT_SEQUENCE_ATTEMPTS = 5
DEFAULT_DB_TIMEOUT = 10.0


def default_database_url() -> str:
    """Return the default SQLite URL under ~/.fleetledger."""
    db_dir = Path.home() / ".fleetledger"
    db_dir.mkdir(exist_ok=True)
    return f"sqlite:///{db_dir / 'fleetledger.db'}"


@dataclass(frozen=True)
class Settings:
    """Validated runtime settings."""

    database_url: str
    timezone: str = DEFAULT_TIMEZONE
    max_operations_per_batch: int = DEFAULT_MAX_BATCH_OPS
    sequence_attempts: int = DEFAULT_SEQUENCE_ATTEMPTS
    db_timeout: float = DEFAULT_DB_TIMEOUT
    charge_cutoff: Optional[date] = None

    def __post_init__(self):
        if not self.database_url:
            raise ConfigurationError("No database configured")
        try:
            get_timezone(self.timezone)
        except ValueError as e:
            raise ConfigurationError(str(e))
        if not 1 <= self.max_operations_per_batch <= BATCH_OPS_CEILING:
            raise ConfigurationError(
                invalid_setting(
                    "max_operations_per_batch",
                    self.max_operations_per_batch,
                    f"must be between 1 and {BATCH_OPS_CEILING}",
                )
            )
        if self.sequence_attempts < 1:
            raise ConfigurationError(
                invalid_setting("sequence_attempts", self.sequence_attempts, "must be at least 1")
            )
        if self.db_timeout <= 0:
            raise ConfigurationError(invalid_setting("db_timeout", self.db_timeout, "must be positive"))

    @property
    def tz(self):
        """tzinfo for the business timezone."""
        return get_timezone(self.timezone)

    @classmethod
    def from_env(
        cls,
        database_url: Optional[str] = None,
        database_path: Optional[str] = None,
        **overrides,
    ) -> "Settings":
        """Build settings from FLEETLEDGER_* environment variables.

        Args:
            database_url: SQLAlchemy URL; wins over every other source
            database_path: SQLite file path; used when no URL is given
            **overrides: Explicit values for any other Settings field

        Raises:
            ConfigurationError: If any value is malformed
        """
        env = os.environ

        if database_url is None and database_path is None:
            database_url = env.get("FLEETLEDGER_DB_URL")
            if database_url is None:
                database_path = env.get("FLEETLEDGER_DB_PATH")
        if database_url is None:
            database_url = f"sqlite:///{database_path}" if database_path else default_database_url()

        values = {
            "timezone": env.get("FLEETLEDGER_TIMEZONE", DEFAULT_TIMEZONE),
            "max_operations_per_batch": _env_number(
                "FLEETLEDGER_MAX_BATCH_OPS", int, DEFAULT_MAX_BATCH_OPS
            ),
            "sequence_attempts": _env_number(
                "FLEETLEDGER_SEQUENCE_ATTEMPTS", int, DEFAULT_SEQUENCE_ATTEMPTS
            ),
            "db_timeout": _env_number("FLEETLEDGER_DB_TIMEOUT", float, DEFAULT_DB_TIMEOUT),
            "charge_cutoff": _env_date("FLEETLEDGER_CHARGE_CUTOFF"),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(database_url=database_url, **values)


def _env_number(name: str, kind, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(invalid_setting(name, raw, f"expected {kind.__name__}"))


def _env_date(name: str) -> Optional[date]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return parse_date(raw)
    except ValueError as e:
        raise ConfigurationError(invalid_setting(name, raw, str(e)))
