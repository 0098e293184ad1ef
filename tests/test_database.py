"""Tests for the SQLAlchemy database layer."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fleetledger.database.base import CHARGES, SERVICE_RECORDS
from fleetledger.database.mappers import charge_to_row
from fleetledger.domain.entities import DELETE_FIELD, RecurringCharge, WriteOp
from fleetledger.domain.errors import BatchCommitError, NotFoundError


def test_identities_are_normalized(temp_db, seeded_directory):
    identities = {identity.id: identity for identity in temp_db.list_identities()}

    assert identities["u3"].normalized_name == "jose perez"
    assert identities["u3"].commission_rate == 15
    assert identities["u1"].signature == "data:image/png;base64,ANA"


def test_billable_subscribers(seeded_fleet):
    subscribers = seeded_fleet.list_billable_subscribers()

    assert [subscriber.id for subscriber in subscribers] == ["d1", "d2"]
    assert subscribers[0].contract_start_date == date(2025, 1, 10)
    assert seeded_fleet.get_resource("v1").daily_rate == Decimal("250")
    assert seeded_fleet.get_resource("v9") is None


def test_list_charges_half_open_range(temp_db):
    for day in (1, 2, 3):
        temp_db.create_charge(
            RecurringCharge(
                subscriber_id="d1",
                resource_id="v1",
                billing_date=datetime(2025, 1, day, 9),
                amount=Decimal("200"),
                resource_label="ABC-123",
            )
        )

    charges = temp_db.list_charges("d1", start=datetime(2025, 1, 2), end=datetime(2025, 1, 3))

    assert [charge.billing_date for charge in charges] == [datetime(2025, 1, 2, 9)]
    assert charges[0].id is not None


def test_update_merges_and_deletes_fields(temp_db):
    temp_db.create_service_record("s1", {"advisorName": "Ana", "total": 10}, status="Entregado")

    temp_db.update_service_record(
        "s1", {"serviceAdvisorName": "Ana", "advisorName": DELETE_FIELD, "folio": "250115-0001"}
    )

    record = temp_db.get_service_record("s1")
    assert record.fields == {"serviceAdvisorName": "Ana", "total": 10}
    assert record.folio == "250115-0001"
    assert record.status == "Entregado"


def test_update_missing_record(temp_db):
    with pytest.raises(NotFoundError):
        temp_db.update_service_record("nope", {"a": 1})


def test_list_service_records_filters(temp_db):
    temp_db.create_service_record("s1", {"folio": "250115-0001"}, status="Entregado")
    temp_db.create_service_record("s2", {}, status="Entregado")
    temp_db.create_service_record("s3", {}, status="Cancelado")

    assert [r.id for r in temp_db.list_service_records(status="Entregado")] == ["s1", "s2"]
    assert [r.id for r in temp_db.list_service_records(without_folio=True)] == ["s2", "s3"]


def test_commit_batch_creates_charges(temp_db):
    charge = RecurringCharge(
        subscriber_id="d1",
        resource_id="v1",
        billing_date=datetime(2025, 1, 1),
        amount=Decimal("200"),
        resource_label="ABC-123",
    )

    temp_db.commit_batch([WriteOp(kind="create", collection=CHARGES, payload=charge_to_row(charge))])

    assert len(temp_db.list_charges("d1")) == 1


def test_commit_batch_rejects_unknown_operation(temp_db):
    with pytest.raises(BatchCommitError):
        temp_db.commit_batch([WriteOp(kind="delete", collection=SERVICE_RECORDS, payload={}, doc_id="s1")])
