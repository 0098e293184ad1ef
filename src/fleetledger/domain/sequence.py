"""Sequential folio numbering."""

import logging
from collections import defaultdict
from datetime import datetime, UTC
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from fleetledger.config import DEFAULT_SEQUENCE_ATTEMPTS, Settings
from fleetledger.database.base import Database
from fleetledger.domain.entities import FinancialRecord
from fleetledger.domain.errors import NotFoundError, SequenceConflictError, record_not_found
from fleetledger.domain.summary import RunSummary
from fleetledger.utils.date_parser import now_in, to_local_datetime

logger = logging.getLogger(__name__)

FOLIO_DATE_FORMAT = "%y%m%d"
FOLIO_WIDTH = 4
# Document fields tried, in order, to date a record that has no folio yet
FOLIO_DATE_FIELDS = ("serviceDate", "receptionDateTime", "createdAt")


def format_sequence_id(prefix: str, value: int, width: int = FOLIO_WIDTH) -> str:
    """Build an identifier such as 250115-0007."""
    return f"{prefix}-{value:0{width}d}"


class SequenceCounter:
    """Named monotonic counters with exactly-once increments."""

    def __init__(self, db: Database, attempts: int = DEFAULT_SEQUENCE_ATTEMPTS):
        """Initialize sequence counter.

        Args:
            db: Database instance
            attempts: Transaction attempts before giving up
        """
        self.db = db
        self.attempts = attempts

    def next_value(self, scope: str) -> int:
        """Increment the counter for ``scope`` and return the new value.

        Raises:
            SequenceConflictError: If the increment could not be committed
        """
        return self.db.increment_counter(scope, attempts=self.attempts)

    def current_value(self, scope: str) -> int:
        return self.db.get_counter(scope)


class FolioService:
    """Service for assigning day-scoped folios to service records."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize folio service.

        Args:
            db: Database instance
            settings: Runtime settings (timezone, retry attempts)
        """
        self.db = db
        self.settings = settings
        self.counter = SequenceCounter(db, attempts=settings.sequence_attempts)

    def folio_prefix(self, when: datetime) -> str:
        return when.strftime(FOLIO_DATE_FORMAT)

    def next_folio(self, when: Optional[datetime] = None) -> str:
        """Reserve the next folio for the day of ``when`` (default: now)."""
        if when is None:
            when = now_in(self.settings.tz)
        prefix = self.folio_prefix(when)
        value = self.counter.next_value(f"folio_{prefix}")
        return format_sequence_id(prefix, value)

    def assign_folio(self, record_id: str, when: Optional[datetime] = None) -> str:
        """Assign a new folio to a record.

        The record is left untouched when the counter cannot be incremented.

        Raises:
            NotFoundError: If the record does not exist
            SequenceConflictError: If the counter transaction failed
        """
        record = self.db.get_service_record(record_id)
        if record is None:
            raise NotFoundError(record_not_found(record_id))
        if record.folio:
            return record.folio

        folio = self.next_folio(when)
        self.db.update_service_record(record_id, {"folio": folio})
        logger.info("Generated folio %s for service %s", folio, record_id)
        return folio

    def best_date(self, record: FinancialRecord) -> datetime:
        """Best available local date for a record without a folio."""
        for name in FOLIO_DATE_FIELDS:
            value = to_local_datetime(record.get(name), self.settings.tz)
            if value is not None:
                return value
        if record.created_at is not None:
            # created_at column is stored in UTC
            return to_local_datetime(record.created_at.replace(tzinfo=UTC), self.settings.tz)
        return now_in(self.settings.tz)

    def backfill_folios(self) -> RunSummary:
        """Give every record without a folio one from its own day.

        Records are numbered in chronological order within each day,
        continuing after any folios that day already has.
        """
        summary = RunSummary(job="Folio backfill")
        records = self.db.list_service_records(without_folio=True)
        summary.examined = len(records)
        if not records:
            logger.info("No service records without folio")
            return summary

        by_day: dict[str, list[tuple[datetime, FinancialRecord]]] = defaultdict(list)
        for record in records:
            when = self.best_date(record)
            by_day[self.folio_prefix(when)].append((when, record))

        for prefix in sorted(by_day):
            entries = sorted(by_day[prefix], key=lambda entry: entry[0])
            logger.info("Processing %d services for %s", len(entries), prefix)
            for when, record in entries:
                try:
                    folio = self.next_folio(when)
                    self.db.update_service_record(record.id, {"folio": folio})
                except (SequenceConflictError, SQLAlchemyError):
                    logger.exception("Failed to assign folio to service %s", record.id)
                    summary.failed += 1
                    continue
                logger.debug("Assigned folio %s to service %s", folio, record.id)
                summary.updated += 1

        logger.info("Folio backfill finished: %s", summary.as_dict())
        return summary
