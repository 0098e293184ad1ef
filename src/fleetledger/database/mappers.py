"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the document field spellings
used by the engine do not leak into the table layout.
"""

from decimal import Decimal

from fleetledger.domain import entities as domain
from fleetledger.database.models import (
    User as ORMUser,
    Vehicle as ORMVehicle,
    Driver as ORMDriver,
    DailyRentalCharge as ORMDailyRentalCharge,
    ServiceRecord as ORMServiceRecord,
)
from fleetledger.utils.name_normalizer import normalize_name


def user_to_identity(orm_user: ORMUser) -> domain.Identity:
    """Convert SQLAlchemy User model to domain Identity entity."""
    return domain.Identity(
        id=orm_user.id,
        display_name=orm_user.name or "",
        normalized_name=normalize_name(orm_user.name),
        commission_rate=orm_user.commission_rate,
        signature=orm_user.signature_data_url,
    )


def vehicle_to_resource(orm_vehicle: ORMVehicle) -> domain.BillableResource:
    """Convert SQLAlchemy Vehicle model to domain BillableResource entity."""
    return domain.BillableResource(
        id=orm_vehicle.id,
        daily_rate=Decimal(orm_vehicle.daily_rental_cost or 0),
        label=orm_vehicle.license_plate or "",
    )


def driver_to_subscriber(orm_driver: ORMDriver) -> domain.RecurringSubscriber:
    """Convert SQLAlchemy Driver model to domain RecurringSubscriber entity."""
    return domain.RecurringSubscriber(
        id=orm_driver.id,
        name=orm_driver.name,
        active=not orm_driver.is_archived,
        assigned_resource_id=orm_driver.assigned_vehicle_id or None,
        contract_start_date=orm_driver.contract_date,
    )


def charge_to_domain(orm_charge: ORMDailyRentalCharge) -> domain.RecurringCharge:
    """Convert SQLAlchemy DailyRentalCharge model to domain RecurringCharge entity."""
    return domain.RecurringCharge(
        id=orm_charge.id,
        subscriber_id=orm_charge.driver_id,
        resource_id=orm_charge.vehicle_id,
        billing_date=orm_charge.date,
        amount=orm_charge.amount,
        resource_label=orm_charge.vehicle_license_plate,
    )


def charge_to_row(charge: domain.RecurringCharge) -> dict:
    """Column values for inserting a new charge."""
    return {
        "driver_id": charge.subscriber_id,
        "vehicle_id": charge.resource_id,
        "date": charge.billing_date,
        "amount": charge.amount,
        "vehicle_license_plate": charge.resource_label,
    }


def service_record_to_domain(orm_record: ORMServiceRecord) -> domain.FinancialRecord:
    """Convert SQLAlchemy ServiceRecord model to domain FinancialRecord entity."""
    return domain.FinancialRecord(
        id=orm_record.id,
        fields=dict(orm_record.data or {}),
        status=orm_record.status,
        folio=orm_record.folio,
        created_at=orm_record.created_at,
    )
