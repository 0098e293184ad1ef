"""Technician links on service line items."""

import logging
from typing import Any, Optional

from fleetledger.config import Settings
from fleetledger.database.base import SERVICE_RECORDS, Database
from fleetledger.domain.batch import BatchWriter
from fleetledger.domain.entities import FinancialRecord, ResolutionOutcome
from fleetledger.domain.summary import RunSummary
from fleetledger.utils.identity_resolver import IdentityDirectory

logger = logging.getLogger(__name__)

UNKNOWN_TECHNICIAN_NAME = "Unregistered name"


class TechnicianAssignmentService:
    """Service for linking line-item technician names to directory ids."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize technician assignment service.

        Args:
            db: Database instance
            settings: Runtime settings (batch ceiling)
        """
        self.db = db
        self.settings = settings

    def link_record_items(
        self, record: FinancialRecord, directory: IdentityDirectory, summary: RunSummary
    ) -> Optional[list[dict[str, Any]]]:
        """Return updated line items, or None when nothing could be linked."""
        items = record.get("serviceItems")
        if not isinstance(items, list):
            return None

        linked = False
        updated = []
        for item in items:
            if isinstance(item, dict) and item.get("technicianName") and not item.get("technicianId"):
                name = item["technicianName"]
                resolution = directory.resolve(name)
                if resolution.outcome is ResolutionOutcome.UNIQUE:
                    logger.info(
                        "Linking '%s' in service %s to '%s'",
                        name,
                        record.id,
                        resolution.identity.display_name,
                    )
                    item = {**item, "technicianId": resolution.identity.id}
                    summary.created += 1
                    linked = True
                elif resolution.outcome is ResolutionOutcome.AMBIGUOUS:
                    logger.warning("Ambiguous technician '%s' in service %s, not linked", name, record.id)
                    summary.ambiguous_names.add(name)
                    summary.skip("ambiguous technician")
                else:
                    summary.unmatched_names.add(name)
                    summary.skip("technician not found")
            updated.append(item)

        return updated if linked else None

    def link_items(self, execute: bool = False) -> RunSummary:
        """Link items that only carry a technician name.

        ``created`` counts linked items and ``updated`` counts records.
        """
        summary = RunSummary(job="Technician linking", dry_run=not execute)
        directory = IdentityDirectory(self.db.list_identities())
        records = self.db.list_service_records()
        writer = BatchWriter(self.db, self.settings.max_operations_per_batch)

        planned = 0
        for record in records:
            summary.examined += 1
            items = self.link_record_items(record, directory, summary)
            if items is None:
                continue
            planned += 1
            if execute:
                writer.update(SERVICE_RECORDS, record.id, {"serviceItems": items})

        if execute:
            writer.flush()
            summary.updated = writer.committed
            summary.failed = writer.failed
        else:
            summary.updated = planned

        logger.info("Technician linking finished: %s", summary.as_dict())
        return summary

    def find_missing_technicians(self) -> dict[str, str]:
        """Technician ids used by line items but absent from the directory.

        Returns:
            Mapping of technician id to the name stored on the item
        """
        known_ids = {identity.id for identity in self.db.list_identities()}
        missing: dict[str, str] = {}
        for record in self.db.list_service_records():
            items = record.get("serviceItems")
            if not isinstance(items, list):
                continue
            for item in items:
                if not isinstance(item, dict):
                    continue
                technician_id = item.get("technicianId")
                if technician_id and technician_id not in known_ids:
                    missing[technician_id] = item.get("technicianName") or UNKNOWN_TECHNICIAN_NAME
        return missing
