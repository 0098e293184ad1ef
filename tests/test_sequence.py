"""Tests for sequence counters and folio assignment."""

import threading
from datetime import datetime

import pytest

from fleetledger.domain.errors import NotFoundError, SequenceConflictError
from fleetledger.domain.sequence import FolioService, SequenceCounter, format_sequence_id


def test_format_sequence_id():
    assert format_sequence_id("250115", 7) == "250115-0007"
    assert format_sequence_id("250115", 12345) == "250115-12345"


def test_sequential_increments_are_unique(temp_db):
    counter = SequenceCounter(temp_db)

    values = [counter.next_value("folio_250115") for _ in range(5)]

    assert values == [1, 2, 3, 4, 5]
    assert counter.current_value("folio_250115") == 5


def test_scopes_are_independent(temp_db):
    counter = SequenceCounter(temp_db)
    counter.next_value("folio_250115")
    counter.next_value("folio_250115")

    assert counter.next_value("folio_250116") == 1
    assert counter.current_value("folio_250117") == 0


def test_concurrent_increments_are_exactly_once(temp_db):
    counter = SequenceCounter(temp_db, attempts=20)
    values = []
    errors = []
    lock = threading.Lock()

    def worker():
        for _ in range(5):
            try:
                value = counter.next_value("folio_250115")
            except SequenceConflictError as e:
                with lock:
                    errors.append(e)
                continue
            with lock:
                values.append(value)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(values) == list(range(1, 21))
    assert counter.current_value("folio_250115") == 20


def test_exhausted_attempts_raise_conflict(temp_db, monkeypatch):
    from sqlalchemy.exc import OperationalError

    class LockedSession:
        def query(self, *args):
            raise OperationalError("UPDATE counters", {}, Exception("database is locked"))

        def rollback(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(temp_db, "session_factory", LockedSession)
    counter = SequenceCounter(temp_db, attempts=3)

    with pytest.raises(SequenceConflictError, match="after 3 attempts"):
        counter.next_value("folio_250115")


def test_assign_folio(temp_db, settings):
    temp_db.create_service_record("s1", {"technicianName": "Ana Torres"})
    temp_db.create_service_record("s2", {})
    service = FolioService(temp_db, settings)
    when = datetime(2025, 1, 15, 9, 30)

    first = service.assign_folio("s1", when)
    second = service.assign_folio("s2", when)

    assert first == "250115-0001"
    assert second == "250115-0002"
    assert temp_db.get_service_record("s1").folio == "250115-0001"


def test_assign_folio_keeps_existing_folio(temp_db, settings):
    temp_db.create_service_record("s1", {"folio": "250101-0003"})
    service = FolioService(temp_db, settings)

    assert service.assign_folio("s1", datetime(2025, 1, 15)) == "250101-0003"
    assert temp_db.get_counter("folio_250115") == 0


def test_assign_folio_missing_record(temp_db, settings):
    service = FolioService(temp_db, settings)

    with pytest.raises(NotFoundError):
        service.assign_folio("nope")


def test_backfill_numbers_each_day_chronologically(temp_db, settings):
    temp_db.create_service_record("late", {"serviceDate": "2025-01-15T16:00:00"})
    temp_db.create_service_record("early", {"serviceDate": "2025-01-15T08:00:00"})
    temp_db.create_service_record("other-day", {"receptionDateTime": "2025-01-16T10:00:00"})
    temp_db.create_service_record("numbered", {"folio": "250115-0001", "serviceDate": "2025-01-15T07:00:00"})
    # Counter already reflects the folio issued on that day
    temp_db.increment_counter("folio_250115")
    service = FolioService(temp_db, settings)

    summary = service.backfill_folios()

    assert summary.examined == 3
    assert summary.updated == 3
    assert temp_db.get_service_record("early").folio == "250115-0002"
    assert temp_db.get_service_record("late").folio == "250115-0003"
    assert temp_db.get_service_record("other-day").folio == "250116-0001"


def test_backfill_uses_creation_time_in_business_timezone(temp_db, settings):
    # 02:00 UTC on the 16th is still the 15th in Mexico City
    temp_db.create_service_record("s1", {}, created_at=datetime(2025, 1, 16, 2, 0))
    service = FolioService(temp_db, settings)

    service.backfill_folios()

    assert temp_db.get_service_record("s1").folio == "250115-0001"


def test_backfill_with_nothing_to_do(temp_db, settings):
    summary = FolioService(temp_db, settings).backfill_folios()

    assert summary.examined == 0
    assert summary.updated == 0
