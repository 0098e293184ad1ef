"""Domain model entities for fleetledger.

These are pure data classes representing business concepts, independent of
database schema. Service records keep their free-form document in
``FinancialRecord.fields`` because historical records carry several legacy
spellings of the same attribute.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class _DeleteField:
    """Sentinel payload value meaning "remove this field from the document"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD = _DeleteField()


@dataclass(frozen=True)
class Identity:
    """Person from the user directory (advisor or technician)."""

    id: str
    display_name: str
    normalized_name: str
    commission_rate: Optional[float] = None
    signature: Optional[str] = None


@dataclass(frozen=True)
class RecurringSubscriber:
    """Fleet driver enrolled in daily rental billing."""

    id: str
    name: str
    active: bool
    assigned_resource_id: Optional[str] = None
    contract_start_date: Optional[date] = None


@dataclass(frozen=True)
class BillableResource:
    """Vehicle with a daily rental rate."""

    id: str
    daily_rate: Decimal
    label: str


@dataclass(frozen=True)
class RecurringCharge:
    """Daily rental charge. ``id`` is None until persisted."""

    subscriber_id: str
    resource_id: str
    billing_date: datetime
    amount: Decimal
    resource_label: str
    id: Optional[int] = None


@dataclass(frozen=True)
class FinancialRecord:
    """Service record with its raw document fields."""

    id: str
    fields: dict[str, Any]
    status: Optional[str] = None
    folio: Optional[str] = None
    created_at: Optional[datetime] = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


class ResolutionOutcome(Enum):
    """Outcome of resolving a free-text name against the directory."""

    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


@dataclass(frozen=True)
class IdentityResolution:
    """Result of an identity lookup by name."""

    outcome: ResolutionOutcome
    candidates: tuple[Identity, ...] = ()

    @property
    def identity(self) -> Optional[Identity]:
        """The matched identity, only when the match is unique."""
        if self.outcome is ResolutionOutcome.UNIQUE:
            return self.candidates[0]
        return None


class Disposition(Enum):
    """What a reconciliation step did with a record."""

    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WriteOp:
    """Pending write for a batch commit.

    ``kind`` is "create" (``doc_id`` unused) or "update".
    """

    kind: str
    collection: str
    payload: dict[str, Any]
    doc_id: Optional[str] = None


@dataclass(frozen=True)
class UnifyResult:
    """Payload computed by the field unifier for one record."""

    record_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    changed: bool = False
    ambiguous_names: tuple[str, ...] = ()
    unmatched_names: tuple[str, ...] = ()
    # Legacy total present but not a finite number; aliases are kept
    unparseable_total: bool = False
