"""
Assessment Orchestrator - drives each assessment through its lifecycle.

pending -> processing -> completed

Submission returns as soon as the record exists. Analysis runs in a
background task that races the analysis provider against a fixed deadline.
If the provider is too slow or fails in any way, the deterministic fallback
analyzer supplies the result, so every record reaches ``completed``.
``failed`` is only written for unexpected internal errors or by an operator.
"""

import asyncio
import logging
import time
from typing import Optional, Protocol

from app.config import Settings, get_settings
from app.models.assessment import (
    RESULT_FIELDS,
    AnalysisResult,
    AssessmentFacts,
    AssessmentRecord,
    AssessmentStatus,
)
from app.services import fallback_analyzer
from app.services.assessment_store import (
    AssessmentStore,
    StaleRecordError,
    SupersededRunError,
    get_store,
)
from app.services.fallback_analyzer import FallbackRules
from app.services.risk_analyzer import get_risk_analyzer

logger = logging.getLogger(__name__)

# Singleton instance
_orchestrator: "AssessmentOrchestrator | None" = None

SOURCE_PROVIDER = "provider"
SOURCE_FALLBACK = "fallback"


class AnalysisProvider(Protocol):
    async def analyze(self, facts: AssessmentFacts) -> AnalysisResult: ...


class AssessmentOrchestrator:
    """
    Lifecycle manager that:
    1. Creates a pending record for each submission
    2. Schedules analysis without blocking the caller
    3. Races the analysis provider against the deadline
    4. Falls back to rule-based analysis on timeout or error
    5. Writes the result only while the record is still processing
    """

    def __init__(
        self,
        store: AssessmentStore,
        provider: AnalysisProvider,
        timeout_seconds: float = 11.0,
        fallback_rules: FallbackRules = fallback_analyzer.DEFAULT_RULES,
    ) -> None:
        self.store = store
        self.provider = provider
        self.timeout_seconds = timeout_seconds
        self.fallback_rules = fallback_rules
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: Optional[AssessmentStore] = None,
        provider: Optional[AnalysisProvider] = None,
    ) -> "AssessmentOrchestrator":
        return cls(
            store=store if store is not None else get_store(),
            provider=provider if provider is not None else get_risk_analyzer(),
            timeout_seconds=settings.analysis_timeout_seconds,
            fallback_rules=FallbackRules.from_settings(settings),
        )

    @property
    def in_flight(self) -> int:
        """Number of analyses currently running."""
        return len(self._tasks)

    async def submit(self, facts: AssessmentFacts) -> AssessmentRecord:
        """
        Entry point - create the record and schedule its analysis.

        Args:
            facts: Validated supply chain facts

        Returns:
            The newly created record, still pending
        """
        record = await self.store.create(facts)
        self._schedule(record.id, facts)
        return record

    async def retry(self, assessment_id: str) -> Optional[AssessmentRecord]:
        """
        Reset a record to pending and run its analysis again.

        Returns:
            The reset record, or None if the id is unknown
        """
        record = await self.store.reset_for_retry(assessment_id)
        if record is None:
            return None
        logger.info(f"Manual retry requested for assessment {assessment_id}")
        self._schedule(record.id, record.facts)
        return record

    def _schedule(self, assessment_id: str, facts: AssessmentFacts) -> None:
        task = asyncio.create_task(
            self.process(assessment_id, facts),
            name=f"assessment-{assessment_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_for_pending(self) -> None:
        """Wait for every scheduled analysis to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def process(
        self, assessment_id: str, facts: AssessmentFacts
    ) -> Optional[AssessmentRecord]:
        """
        Run one assessment from pending to completed.

        Never raises: provider problems fall back, internal errors mark the
        record failed.

        Returns:
            The final record, or None if the record vanished or was changed
            by someone else mid-analysis
        """
        start_time = time.monotonic()
        run: Optional[int] = None
        try:
            started = await self.store.start_run(assessment_id)
            if started is None:
                logger.error(f"Assessment {assessment_id} not found, skipping analysis")
                return None
            _, run = started

            result, source = await self.acquire_result(assessment_id, facts)

            changes = result.to_record_fields()
            changes["status"] = AssessmentStatus.COMPLETED
            record = await self.store.update(
                assessment_id,
                changes,
                expected_status=AssessmentStatus.PROCESSING,
                expected_run=run,
            )

            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(
                f"Assessment {assessment_id} completed from {source} "
                f"in {duration_ms}ms (overall={result.scores.overall_risk_score})"
            )
            return record

        except (StaleRecordError, SupersededRunError) as e:
            logger.warning(f"Discarding analysis result: {e}")
            return None
        except Exception:
            logger.exception(f"Assessment {assessment_id} failed unexpectedly")
            return await self._mark_failed(assessment_id, run)

    async def acquire_result(
        self, assessment_id: str, facts: AssessmentFacts
    ) -> tuple[AnalysisResult, str]:
        """
        Race the provider against the deadline.

        Returns:
            (result, source) where source is "provider" or "fallback"
        """
        try:
            result = await asyncio.wait_for(
                self.provider.analyze(facts), timeout=self.timeout_seconds
            )
            if not isinstance(result, AnalysisResult):
                raise TypeError(
                    f"Provider returned {type(result).__name__}, expected AnalysisResult"
                )
            return result, SOURCE_PROVIDER
        except asyncio.TimeoutError:
            logger.warning(
                f"Analysis for {assessment_id} exceeded {self.timeout_seconds}s, "
                f"using fallback"
            )
        except Exception as e:
            logger.warning(
                f"Analysis provider failed for {assessment_id}, using fallback: {e}"
            )

        return fallback_analyzer.analyze(facts, self.fallback_rules), SOURCE_FALLBACK

    async def _mark_failed(
        self, assessment_id: str, run: Optional[int]
    ) -> Optional[AssessmentRecord]:
        changes: dict = {name: None for name in RESULT_FIELDS}
        changes["status"] = AssessmentStatus.FAILED
        try:
            return await self.store.update(assessment_id, changes, expected_run=run)
        except Exception:
            logger.exception(f"Could not mark assessment {assessment_id} as failed")
            return None


def get_orchestrator() -> AssessmentOrchestrator:
    """Get singleton orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AssessmentOrchestrator.from_settings(get_settings())
    return _orchestrator


def reset_orchestrator() -> None:
    """Reset orchestrator for testing."""
    global _orchestrator
    _orchestrator = None
