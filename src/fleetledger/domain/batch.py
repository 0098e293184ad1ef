"""Bounded-size batched writes."""

import logging
from typing import Any

from fleetledger.config import DEFAULT_MAX_BATCH_OPS
from fleetledger.database.base import Database
from fleetledger.domain.entities import WriteOp
from fleetledger.domain.errors import BatchCommitError, ValidationError

logger = logging.getLogger(__name__)


class BatchWriter:
    """Accumulates writes and commits them in groups of bounded size.

    Each group is atomic. A group that fails is retried as a unit up to
    ``max_attempts`` times, then its operations are committed one at a time so
    a single bad operation only fails itself. Later groups still run.
    ``committed`` and ``failed`` count operations, so callers can report how
    far a run got.
    """

    def __init__(
        self,
        db: Database,
        max_operations_per_batch: int = DEFAULT_MAX_BATCH_OPS,
        max_attempts: int = 2,
    ):
        """Initialize batch writer.

        Args:
            db: Database instance
            max_operations_per_batch: Ceiling of operations per commit
            max_attempts: Commit attempts per group before giving up
        """
        if max_operations_per_batch < 1:
            raise ValidationError("max_operations_per_batch must be at least 1")
        if max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1")
        self.db = db
        self.max_operations_per_batch = max_operations_per_batch
        self.max_attempts = max_attempts
        self.pending: list[WriteOp] = []
        self.committed = 0
        self.failed = 0
        self.batches_committed = 0
        self.errors: list[str] = []

    def create(self, collection: str, payload: dict[str, Any]) -> None:
        """Queue creation of a new document."""
        self._add(WriteOp(kind="create", collection=collection, payload=payload))

    def update(self, collection: str, doc_id: str, payload: dict[str, Any]) -> None:
        """Queue a merge update of an existing document."""
        self._add(WriteOp(kind="update", collection=collection, payload=payload, doc_id=doc_id))

    def _add(self, op: WriteOp) -> None:
        self.pending.append(op)
        if len(self.pending) >= self.max_operations_per_batch:
            self.flush()

    def flush(self) -> bool:
        """Commit pending operations. Returns False if any operation failed."""
        if not self.pending:
            return True

        group = self.pending
        self.pending = []
        for attempt in range(1, self.max_attempts + 1):
            try:
                self.db.commit_batch(group)
            except BatchCommitError as e:
                logger.warning(
                    "Batch of %d operations failed (attempt %d/%d): %s",
                    len(group),
                    attempt,
                    self.max_attempts,
                    e,
                )
                last_error = str(e)
                continue
            self.committed += len(group)
            self.batches_committed += 1
            logger.debug("Committed batch of %d operations", len(group))
            return True

        if len(group) == 1:
            self.failed += 1
            self.errors.append(last_error)
            logger.error("Giving up on operation %s: %s", group[0].doc_id or group[0].collection, last_error)
            return False

        logger.warning("Splitting failed batch of %d operations", len(group))
        return self._commit_one_by_one(group)

    def _commit_one_by_one(self, group: list[WriteOp]) -> bool:
        all_committed = True
        for op in group:
            try:
                self.db.commit_batch([op])
            except BatchCommitError as e:
                self.failed += 1
                self.errors.append(str(e))
                logger.error("Giving up on operation %s: %s", op.doc_id or op.collection, e)
                all_committed = False
                continue
            self.committed += 1
        return all_committed

    def __enter__(self) -> "BatchWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()
