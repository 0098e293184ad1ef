"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from fleetledger.domain.entities import (
    BillableResource,
    FinancialRecord,
    Identity,
    RecurringCharge,
    RecurringSubscriber,
    WriteOp,
)

# Collections accepted by commit_batch
CHARGES = "daily_rental_charges"
SERVICE_RECORDS = "service_records"


class Database(ABC):
    """Abstract database interface for fleetledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Identity directory
    @abstractmethod
    def create_identity(
        self,
        identity_id: str,
        name: str,
        commission_rate: Optional[float] = None,
        signature: Optional[str] = None,
        role: Optional[str] = None,
    ) -> str:
        """Create a directory entry. Returns its ID."""
        pass

    @abstractmethod
    def list_identities(self) -> list[Identity]:
        """Full scan of the identity directory."""
        pass

    # Fleet
    @abstractmethod
    def create_resource(self, resource_id: str, label: str, daily_rate: Optional[Decimal]) -> str:
        """Create a billable vehicle. Returns its ID."""
        pass

    @abstractmethod
    def get_resource(self, resource_id: str) -> Optional[BillableResource]:
        """Get a vehicle by ID."""
        pass

    @abstractmethod
    def create_subscriber(
        self,
        subscriber_id: str,
        name: str,
        assigned_resource_id: Optional[str] = None,
        contract_start_date: Optional[date] = None,
        archived: bool = False,
    ) -> str:
        """Create a driver. Returns its ID."""
        pass

    @abstractmethod
    def list_billable_subscribers(self) -> list[RecurringSubscriber]:
        """List drivers that are not archived and have an assigned vehicle."""
        pass

    @abstractmethod
    def create_charge(self, charge: RecurringCharge) -> int:
        """Create a single charge. Returns charge ID."""
        pass

    @abstractmethod
    def list_charges(
        self,
        subscriber_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[RecurringCharge]:
        """List a driver's charges, optionally limited to [start, end)."""
        pass

    # Service records
    @abstractmethod
    def create_service_record(
        self,
        record_id: str,
        fields: dict[str, Any],
        status: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create a service record. Returns its ID."""
        pass

    @abstractmethod
    def get_service_record(self, record_id: str) -> Optional[FinancialRecord]:
        """Get a service record by ID."""
        pass

    @abstractmethod
    def list_service_records(
        self, status: Optional[str] = None, without_folio: bool = False
    ) -> list[FinancialRecord]:
        """List service records with optional filters."""
        pass

    @abstractmethod
    def update_service_record(self, record_id: str, payload: dict[str, Any]) -> None:
        """Merge payload into a record. DELETE_FIELD values remove the field."""
        pass

    # Transaction and batch primitives
    @abstractmethod
    def increment_counter(self, scope: str, attempts: int = 1) -> int:
        """Atomically increment a named counter and return the new value.

        Raises:
            SequenceConflictError: If no attempt could commit
        """
        pass

    @abstractmethod
    def get_counter(self, scope: str) -> int:
        """Current value of a counter (0 if it does not exist)."""
        pass

    @abstractmethod
    def commit_batch(self, ops: Sequence[WriteOp]) -> None:
        """Apply all operations in one atomic commit.

        Raises:
            BatchCommitError: If the group was rolled back
        """
        pass
