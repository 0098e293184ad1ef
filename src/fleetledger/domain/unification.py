"""Collapse legacy alias fields of service records into canonical fields."""

import logging
from typing import Any, Optional, Sequence

from fleetledger.config import Settings
from fleetledger.database.base import SERVICE_RECORDS, Database
from fleetledger.domain.batch import BatchWriter
from fleetledger.domain.entities import (
    DELETE_FIELD,
    FinancialRecord,
    Identity,
    ResolutionOutcome,
    UnifyResult,
)
from fleetledger.domain.summary import RunSummary
from fleetledger.utils.amount_parser import finite_amount
from fleetledger.utils.identity_resolver import IdentityDirectory

logger = logging.getLogger(__name__)

# The first name of each group is the canonical field
ADVISOR_ID_FIELDS = ("serviceAdvisorId", "advisorId", "serviceAdvisor_id")
ADVISOR_NAME_FIELDS = ("serviceAdvisorName", "advisorName")
ADVISOR_SIGNATURE_FIELDS = ("serviceAdvisorSignatureDataUrl", "advisorSignatureDataUrl")
TECHNICIAN_ID_FIELDS = ("technicianId", "technician_id")
TECHNICIAN_NAME_FIELDS = ("technicianName",)

CANONICAL_TOTAL = "serviceTotal"
LEGACY_TOTAL_FIELDS = ("total", "totalCost", "Total")


def first_present(fields: dict[str, Any], names: Sequence[str]) -> Any:
    """Value of the first alias holding a non-empty value."""
    for name in names:
        value = fields.get(name)
        if value not in (None, ""):
            return value
    return None


class FieldUnifier:
    """Computes the update payload that leaves one field per attribute."""

    def __init__(self, directory: IdentityDirectory | Sequence[Identity]):
        if not isinstance(directory, IdentityDirectory):
            directory = IdentityDirectory(directory)
        self.directory = directory

    def unify(self, record: FinancialRecord) -> UnifyResult:
        """Build the payload for one record.

        Canonical fields get the best value available, cross-filled from the
        directory when only the id or only the name is known. Aliases are
        scheduled for deletion with DELETE_FIELD.
        """
        fields = record.fields
        payload: dict[str, Any] = {}
        ambiguous: list[str] = []
        unmatched: list[str] = []

        advisor = self._unify_person(
            fields, ADVISOR_ID_FIELDS, ADVISOR_NAME_FIELDS, payload, ambiguous, unmatched
        )
        signature = first_present(fields, ADVISOR_SIGNATURE_FIELDS)
        if signature is None and advisor is not None:
            signature = advisor.signature
        self._set_canonical(fields, payload, ADVISOR_SIGNATURE_FIELDS[0], signature)

        self._unify_person(
            fields, TECHNICIAN_ID_FIELDS, TECHNICIAN_NAME_FIELDS, payload, ambiguous, unmatched
        )

        total_resolved = self._unify_total(fields, payload)

        aliases = [
            *ADVISOR_ID_FIELDS[1:],
            *ADVISOR_NAME_FIELDS[1:],
            *ADVISOR_SIGNATURE_FIELDS[1:],
            *TECHNICIAN_ID_FIELDS[1:],
        ]
        # Unparseable legacy totals are kept rather than lost
        if total_resolved:
            aliases.extend(LEGACY_TOTAL_FIELDS)
        unparseable_total = not total_resolved and first_present(fields, LEGACY_TOTAL_FIELDS) is not None
        for name in aliases:
            if name in fields:
                payload[name] = DELETE_FIELD

        return UnifyResult(
            record_id=record.id,
            payload=payload,
            changed=bool(payload),
            ambiguous_names=tuple(ambiguous),
            unmatched_names=tuple(unmatched),
            unparseable_total=unparseable_total,
        )

    def _unify_person(
        self,
        fields: dict[str, Any],
        id_fields: Sequence[str],
        name_fields: Sequence[str],
        payload: dict[str, Any],
        ambiguous: list[str],
        unmatched: list[str],
    ) -> Optional[Identity]:
        """Fill canonical id and name; returns the identity when known."""
        person_id = first_present(fields, id_fields)
        name = first_present(fields, name_fields)
        identity = self.directory.get(person_id) if person_id else None

        if person_id and not name:
            if identity is not None and identity.display_name:
                name = identity.display_name
        elif name and not person_id:
            resolution = self.directory.resolve(name)
            if resolution.outcome is ResolutionOutcome.UNIQUE:
                identity = resolution.identity
                person_id = identity.id
            elif resolution.outcome is ResolutionOutcome.AMBIGUOUS:
                ambiguous.append(name)
            else:
                unmatched.append(name)

        self._set_canonical(fields, payload, id_fields[0], person_id)
        self._set_canonical(fields, payload, name_fields[0], name)
        return identity

    def _unify_total(self, fields: dict[str, Any], payload: dict[str, Any]) -> bool:
        """Copy the legacy total into serviceTotal; True if a total is known."""
        for name in LEGACY_TOTAL_FIELDS:
            value = fields.get(name)
            if finite_amount(value) is not None:
                self._set_canonical(fields, payload, CANONICAL_TOTAL, value)
                return True
        return finite_amount(fields.get(CANONICAL_TOTAL)) is not None

    def _set_canonical(self, fields: dict[str, Any], payload: dict[str, Any], name: str, value: Any) -> None:
        if value is not None and fields.get(name) != value:
            payload[name] = value


class UnificationService:
    """Service that unifies the legacy fields of every service record."""

    def __init__(self, db: Database, settings: Settings):
        """Initialize unification service.

        Args:
            db: Database instance
            settings: Runtime settings (batch ceiling)
        """
        self.db = db
        self.settings = settings

    def run(self, execute: bool = False) -> RunSummary:
        """Unify all records; only writes when ``execute`` is True.

        Returns:
            RunSummary; ``updated`` counts records written (or that would be)
        """
        summary = RunSummary(job="Field unification", dry_run=not execute)
        unifier = FieldUnifier(IdentityDirectory(self.db.list_identities()))
        records = self.db.list_service_records()
        logger.info("Unifying fields of %d service records", len(records))

        writer = BatchWriter(self.db, self.settings.max_operations_per_batch)
        planned = 0
        for record in records:
            summary.examined += 1
            result = unifier.unify(record)
            summary.ambiguous_names.update(result.ambiguous_names)
            summary.unmatched_names.update(result.unmatched_names)
            if result.unparseable_total:
                logger.warning("Service %s has an unparseable legacy total, kept as is", record.id)
                summary.needs_review.add(record.id)
            if not result.changed:
                summary.skip("already unified")
                continue

            logger.debug("Service %s payload: %s", record.id, sorted(result.payload))
            planned += 1
            if execute:
                writer.update(SERVICE_RECORDS, record.id, result.payload)

        if execute:
            writer.flush()
            summary.updated = writer.committed
            summary.failed = writer.failed
        else:
            summary.updated = planned

        logger.info("Field unification finished: %s", summary.as_dict())
        return summary
