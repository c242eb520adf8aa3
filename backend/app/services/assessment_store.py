"""In-memory repository for assessment records.

A single process-wide map keyed by assessment id. Every mutation runs under
one ``asyncio.Lock`` so merges on the same record never interleave. Records
handed out are copies: callers observe a snapshot and cannot mutate stored
state.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from app.models.assessment import (
    RESULT_FIELDS,
    AssessmentFacts,
    AssessmentRecord,
    AssessmentStatus,
)

logger = logging.getLogger(__name__)

# Singleton instance
_store: "AssessmentStore | None" = None


class AssessmentStoreError(Exception):
    """Base error for assessment store operations."""


class StaleRecordError(AssessmentStoreError):
    """A guarded update found the record in a different status."""

    def __init__(
        self,
        assessment_id: str,
        expected: AssessmentStatus,
        actual: AssessmentStatus,
    ) -> None:
        super().__init__(
            f"Assessment {assessment_id} is {actual.value}, expected {expected.value}"
        )
        self.assessment_id = assessment_id
        self.expected = expected
        self.actual = actual


class SupersededRunError(AssessmentStoreError):
    """A guarded update belongs to an analysis run that a retry replaced."""

    def __init__(self, assessment_id: str, run: int, current_run: int) -> None:
        super().__init__(
            f"Assessment {assessment_id} run {run} was superseded by run {current_run}"
        )
        self.assessment_id = assessment_id
        self.run = run
        self.current_run = current_run


class AssessmentStore:
    """Keyed store supporting create, get, list and partial update.

    Each record also carries an analysis run number. It starts at 0 and is
    bumped by ``reset_for_retry``, so writes from an abandoned run can be
    told apart from writes of the run that replaced it.
    """

    def __init__(self) -> None:
        self._records: dict[str, AssessmentRecord] = {}
        self._runs: dict[str, int] = {}
        self._lock = asyncio.Lock()
        self._last_created_at: Optional[datetime] = None

    def _next_created_at(self) -> datetime:
        # Strictly increasing so newest-first ordering never ties
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + timedelta(microseconds=1)
        self._last_created_at = now
        return now

    async def create(self, facts: AssessmentFacts) -> AssessmentRecord:
        """Store a new pending record for the given facts."""
        if not facts.suppliers:
            raise ValueError("At least one supplier is required")

        async with self._lock:
            assessment_id = str(uuid.uuid4())
            while assessment_id in self._records:
                assessment_id = str(uuid.uuid4())

            now = self._next_created_at()
            record = AssessmentRecord(
                id=assessment_id,
                company_name=facts.company_name,
                industry=facts.industry,
                suppliers=list(facts.suppliers),
                logistics_routes=facts.logistics_routes,
                transportation_methods=facts.transportation_methods,
                risk_factors=facts.risk_factors,
                status=AssessmentStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._records[assessment_id] = record
            self._runs[assessment_id] = 0

        logger.info(
            f"Created assessment {assessment_id} for {facts.company_name} "
            f"({len(facts.suppliers)} suppliers)"
        )
        return record.model_copy(deep=True)

    async def get(self, assessment_id: str) -> Optional[AssessmentRecord]:
        """Return the current record, or None if the id is unknown."""
        record = self._records.get(assessment_id)
        return record.model_copy(deep=True) if record else None

    async def list(self) -> list[AssessmentRecord]:
        """Return all records, most recently created first."""
        records = sorted(
            self._records.values(), key=lambda r: r.created_at, reverse=True
        )
        return [r.model_copy(deep=True) for r in records]

    async def update(
        self,
        assessment_id: str,
        changes: dict[str, Any],
        *,
        expected_status: Optional[AssessmentStatus] = None,
        expected_run: Optional[int] = None,
    ) -> Optional[AssessmentRecord]:
        """Merge ``changes`` into a record and refresh ``updated_at``.

        Args:
            assessment_id: Record to update
            changes: Field values keyed by attribute name
            expected_status: If given, only apply the merge while the record
                is still in this status
            expected_run: If given, only apply the merge while this is still
                the record's current analysis run

        Returns:
            The updated record, or None if the id is unknown

        Raises:
            StaleRecordError: The record is not in ``expected_status``
            SupersededRunError: A retry replaced ``expected_run``
            ValueError: ``changes`` names a field the record does not have
        """
        _check_fields(changes)
        async with self._lock:
            updated = self._apply(assessment_id, changes, expected_status, expected_run)
        return updated.model_copy(deep=True) if updated else None

    async def start_run(
        self, assessment_id: str
    ) -> Optional[tuple[AssessmentRecord, int]]:
        """Move a pending record to processing.

        Returns:
            The processing record and the run number its result must be
            written under, or None if the id is unknown

        Raises:
            StaleRecordError: The record is no longer pending
        """
        async with self._lock:
            updated = self._apply(
                assessment_id,
                {"status": AssessmentStatus.PROCESSING},
                AssessmentStatus.PENDING,
                None,
            )
            if updated is None:
                return None
            return updated.model_copy(deep=True), self._runs[assessment_id]

    async def reset_for_retry(self, assessment_id: str) -> Optional[AssessmentRecord]:
        """Put a record back to pending with all result fields cleared.

        Starts a new analysis run, so results of the previous run are refused.
        """
        changes: dict[str, Any] = {name: None for name in RESULT_FIELDS}
        changes["status"] = AssessmentStatus.PENDING
        async with self._lock:
            updated = self._apply(assessment_id, changes, None, None)
            if updated is None:
                return None
            self._runs[assessment_id] += 1
        return updated.model_copy(deep=True)

    def _apply(
        self,
        assessment_id: str,
        changes: dict[str, Any],
        expected_status: Optional[AssessmentStatus],
        expected_run: Optional[int],
    ) -> Optional[AssessmentRecord]:
        # Caller holds self._lock
        existing = self._records.get(assessment_id)
        if existing is None:
            return None

        if expected_status is not None and existing.status != expected_status:
            raise StaleRecordError(assessment_id, expected_status, existing.status)

        current_run = self._runs[assessment_id]
        if expected_run is not None and current_run != expected_run:
            raise SupersededRunError(assessment_id, expected_run, current_run)

        merged = existing.model_dump()
        merged.update(changes)
        merged["updated_at"] = datetime.now(timezone.utc)
        updated = AssessmentRecord.model_validate(merged)
        self._records[assessment_id] = updated
        return updated

    def __len__(self) -> int:
        return len(self._records)


def _check_fields(changes: dict[str, Any]) -> None:
    rejected = (set(changes) - set(AssessmentRecord.model_fields)) | (
        set(changes) & {"id", "created_at"}
    )
    if rejected:
        raise ValueError(f"Cannot update fields: {sorted(rejected)}")


def get_store() -> AssessmentStore:
    """Get singleton store instance."""
    global _store
    if _store is None:
        _store = AssessmentStore()
    return _store


def reset_store() -> None:
    """Reset store for testing."""
    global _store
    _store = None
