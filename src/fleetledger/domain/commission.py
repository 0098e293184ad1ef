"""Commission reconciliation for historical service records."""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Iterator, Optional

from fleetledger.config import Settings
from fleetledger.database.base import SERVICE_RECORDS, Database
from fleetledger.domain.batch import BatchWriter
from fleetledger.domain.entities import (
    Disposition,
    FinancialRecord,
    Identity,
    ResolutionOutcome,
)
from fleetledger.domain.summary import RunSummary
from fleetledger.utils.amount_parser import amount_to_json, finite_amount
from fleetledger.utils.identity_resolver import IdentityDirectory

logger = logging.getLogger(__name__)

COMMISSION_FIELD = "totalCommission"
DELIVERED_STATUS = "Entregado"
DEFAULT_ITEM_NAME = "General service"

# Priority order; payments[0].amount is checked between price and total
TOTAL_FIELDS_BEFORE_PAYMENTS = ("amount", "price")
TOTAL_FIELDS_AFTER_PAYMENTS = ("total", "totalCost", "Total", "serviceTotal")
TECHNICIAN_ID_FIELDS = ("technicianId", "technician_id")

SKIP_ALREADY_RECONCILED = "already reconciled"
SKIP_NO_TOTAL = "no resolvable total"
SKIP_ZERO_TOTAL = "zero total"
SKIP_NO_TECHNICIAN = "no technician"
SKIP_TECHNICIAN_NOT_FOUND = "technician not found"
SKIP_AMBIGUOUS_TECHNICIAN = "ambiguous technician"
SKIP_TECHNICIAN_NOT_IN_DIRECTORY = "technician not in directory"
SKIP_NO_RATE = "no commission rate"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one record."""

    record: FinancialRecord
    disposition: Disposition
    reason: Optional[str] = None
    unresolved_name: Optional[str] = None
    commission: Optional[Decimal] = None
    technician: Optional[Identity] = None

    @property
    def updated(self) -> bool:
        return self.disposition is Disposition.UPDATED

    @property
    def payload(self) -> dict[str, Any]:
        """Fields to write back for an updated record."""
        if not self.updated:
            return {}
        return {
            "serviceItems": self.record.fields["serviceItems"],
            COMMISSION_FIELD: self.record.fields[COMMISSION_FIELD],
        }


def _total_candidates(fields: dict[str, Any]) -> Iterator[Any]:
    for name in TOTAL_FIELDS_BEFORE_PAYMENTS:
        yield fields.get(name)
    payments = fields.get("payments")
    if isinstance(payments, list) and payments and isinstance(payments[0], dict):
        yield payments[0].get("amount")
    for name in TOTAL_FIELDS_AFTER_PAYMENTS:
        yield fields.get(name)


def resolve_total(fields: dict[str, Any]) -> Optional[Decimal]:
    """First finite numeric total among the known aliases."""
    for value in _total_candidates(fields):
        amount = finite_amount(value)
        if amount is not None:
            return amount
    return None


class CommissionReconciler:
    """Recomputes the technician commission of a service record."""

    def skipped(self, record: FinancialRecord, reason: str, name: Optional[str] = None) -> ReconcileResult:
        return ReconcileResult(
            record=record, disposition=Disposition.SKIPPED, reason=reason, unresolved_name=name
        )

    def resolve_technician(
        self, record: FinancialRecord, directory: IdentityDirectory
    ) -> tuple[Optional[Identity], Optional[str], Optional[str]]:
        """Return (identity, skip reason, unresolved name)."""
        for name in TECHNICIAN_ID_FIELDS:
            technician_id = record.get(name)
            if technician_id:
                identity = directory.get(technician_id)
                if identity is None:
                    return None, SKIP_TECHNICIAN_NOT_IN_DIRECTORY, str(technician_id)
                return identity, None, None

        technician_name = record.get("technicianName")
        if not technician_name:
            return None, SKIP_NO_TECHNICIAN, None

        resolution = directory.resolve(technician_name)
        if resolution.outcome is ResolutionOutcome.AMBIGUOUS:
            return None, SKIP_AMBIGUOUS_TECHNICIAN, technician_name
        if resolution.outcome is ResolutionOutcome.NONE:
            return None, SKIP_TECHNICIAN_NOT_FOUND, technician_name
        return resolution.identity, None, None

    def reconcile(self, record: FinancialRecord, directory: IdentityDirectory) -> ReconcileResult:
        """Compute the commission of a record that does not have one yet.

        The input record is never mutated. Skips leave the commission field
        absent rather than writing a zero.
        """
        if not isinstance(directory, IdentityDirectory):
            directory = IdentityDirectory(directory)
        if finite_amount(record.get(COMMISSION_FIELD)) is not None:
            return self.skipped(record, SKIP_ALREADY_RECONCILED)

        total = resolve_total(record.fields)
        if total is None:
            return self.skipped(record, SKIP_NO_TOTAL)
        if total == 0:
            return self.skipped(record, SKIP_ZERO_TOTAL)

        technician, reason, unresolved = self.resolve_technician(record, directory)
        if technician is None:
            return self.skipped(record, reason, unresolved)

        rate = finite_amount(technician.commission_rate)
        if rate is None or rate <= 0:
            return self.skipped(record, SKIP_NO_RATE, technician.display_name)

        commission = total * rate / Decimal(100)

        fields = dict(record.fields)
        fields["serviceItems"] = self.attribute_to_items(record, technician, total, commission)
        fields[COMMISSION_FIELD] = amount_to_json(commission)
        return ReconcileResult(
            record=replace(record, fields=fields),
            disposition=Disposition.UPDATED,
            commission=commission,
            technician=technician,
        )

    def attribute_to_items(
        self, record: FinancialRecord, technician: Identity, total: Decimal, commission: Decimal
    ) -> list[dict[str, Any]]:
        """Stamp the technician on every item; the first one carries the whole commission."""
        items = record.get("serviceItems")
        if not isinstance(items, list) or not items:
            items = [{"name": DEFAULT_ITEM_NAME, "sellingPrice": 0}]

        updated = []
        for index, item in enumerate(items):
            item = dict(item) if isinstance(item, dict) else {"name": str(item)}
            is_main_item = index == 0
            item["technicianId"] = technician.id
            item["technicianName"] = technician.display_name
            if is_main_item:
                item["sellingPrice"] = amount_to_json(total)
                item["technicianCommission"] = amount_to_json(commission)
            else:
                item.setdefault("sellingPrice", 0)
                item.setdefault("technicianCommission", 0)
            updated.append(item)
        return updated


class CommissionMigrationService:
    """Service that backfills commissions on delivered service records."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize commission migration service.

        Args:
            db: Database instance
            settings: Runtime settings (batch ceiling)
        """
        self.db = db
        self.settings = settings
        self.reconciler = CommissionReconciler()

    def run(self, execute: bool = False, status: Optional[str] = DELIVERED_STATUS) -> RunSummary:
        """Reconcile commissions; only writes when ``execute`` is True.

        Args:
            execute: Write the results (default is a dry run)
            status: Only records with this status (None for all)

        Returns:
            RunSummary; ``updated`` counts records written (or that would be)
        """
        summary = RunSummary(job="Commission migration", dry_run=not execute)
        directory = IdentityDirectory(self.db.list_identities())
        records = self.db.list_service_records(status=status)
        logger.info(
            "Loaded %d identities, %d service records to check", len(directory), len(records)
        )

        writer = BatchWriter(self.db, self.settings.max_operations_per_batch)
        planned = 0
        for record in records:
            summary.examined += 1
            result = self.reconciler.reconcile(record, directory)
            if not result.updated:
                summary.skip(result.reason)
                if result.reason == SKIP_AMBIGUOUS_TECHNICIAN:
                    summary.ambiguous_names.add(result.unresolved_name)
                elif result.reason == SKIP_TECHNICIAN_NOT_FOUND:
                    summary.unmatched_names.add(result.unresolved_name)
                if result.reason != SKIP_ALREADY_RECONCILED:
                    logger.warning("Service %s skipped: %s", record.folio or record.id, result.reason)
                continue

            logger.info(
                "Service %s: %s x %s%% = %s for %s",
                record.folio or record.id,
                resolve_total(record.fields),
                result.technician.commission_rate,
                result.commission,
                result.technician.display_name,
            )
            planned += 1
            if execute:
                writer.update(SERVICE_RECORDS, record.id, result.payload)

        if execute:
            writer.flush()
            summary.updated = writer.committed
            summary.failed = writer.failed
        else:
            summary.updated = planned

        logger.info("Commission migration finished: %s", summary.as_dict())
        return summary
