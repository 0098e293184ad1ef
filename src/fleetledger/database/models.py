"""SQLAlchemy models for fleetledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class User(Base):
    """User directory entry (advisors and technicians)."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    role = Column(String, nullable=True)
    commission_rate = Column(Float, nullable=True)
    signature_data_url = Column(String, nullable=True)


class Vehicle(Base):
    """Rentable fleet vehicle."""

    __tablename__ = "vehicles"

    id = Column(String, primary_key=True)
    license_plate = Column(String, nullable=False, default="")
    daily_rental_cost = Column(Numeric(10, 2), nullable=True)


class Driver(Base):
    """Fleet driver billed daily for an assigned vehicle."""

    __tablename__ = "drivers"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    assigned_vehicle_id = Column(String, nullable=True)
    contract_date = Column(Date, nullable=True)


class DailyRentalCharge(Base):
    """One day of vehicle rent owed by a driver."""

    __tablename__ = "daily_rental_charges"

    id = Column(Integer, primary_key=True)
    driver_id = Column(String, nullable=False)
    vehicle_id = Column(String, nullable=False)
    date = Column(DateTime, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    vehicle_license_plate = Column(String, nullable=False, default="")

    __table_args__ = (Index("ix_charges_driver_date", "driver_id", "date"),)


class ServiceRecord(Base):
    """Service order; legacy and derived fields live in the JSON document."""

    __tablename__ = "service_records"

    id = Column(String, primary_key=True)
    status = Column(String, nullable=True)
    folio = Column(String, nullable=True, unique=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    data = Column(JSON, nullable=False, default=dict)


class Counter(Base):
    """Named sequence counter, e.g. folio_250115."""

    __tablename__ = "counters"

    scope = Column(String, primary_key=True)
    count = Column(Integer, nullable=False, default=0)


def create_session_factory(database_url: str, timeout: float | None = None) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are opened per thread by the sequence counter
        connect_args["check_same_thread"] = False
        if timeout is not None:
            connect_args["timeout"] = timeout
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
