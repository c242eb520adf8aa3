"""Supply chain assessment router."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.assessment import (
    RESULT_FIELDS,
    AssessmentFacts,
    AssessmentRecord,
    AssessmentStatus,
    AssessmentUpdate,
)
from app.services.assessment_orchestrator import (
    AssessmentOrchestrator,
    get_orchestrator,
)
from app.services.assessment_store import StaleRecordError

router = APIRouter(prefix="/assessments", tags=["assessments"])

# processing and completed are written only by the orchestrator
PATCHABLE_STATUSES = (AssessmentStatus.PENDING, AssessmentStatus.FAILED)


@router.get("", response_model=list[AssessmentRecord])
async def list_assessments(
    orchestrator: AssessmentOrchestrator = Depends(get_orchestrator),
) -> list[AssessmentRecord]:
    """List all assessments, most recent first."""
    return await orchestrator.store.list()


@router.get("/{assessment_id}", response_model=AssessmentRecord)
async def get_assessment(
    assessment_id: str,
    orchestrator: AssessmentOrchestrator = Depends(get_orchestrator),
) -> AssessmentRecord:
    """
    Get the current state of an assessment.

    Clients poll this until ``status`` leaves ``pending``/``processing``.
    """
    record = await orchestrator.store.get(assessment_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return record


@router.post(
    "",
    response_model=AssessmentRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_assessment(
    facts: AssessmentFacts,
    orchestrator: AssessmentOrchestrator = Depends(get_orchestrator),
) -> AssessmentRecord:
    """
    Submit supply chain facts for analysis.

    Returns the pending record immediately. Analysis runs in the background;
    poll ``GET /assessments/{id}`` for the result.
    """
    try:
        return await orchestrator.submit(facts)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{assessment_id}", response_model=AssessmentRecord)
async def update_assessment(
    assessment_id: str,
    update: AssessmentUpdate,
    orchestrator: AssessmentOrchestrator = Depends(get_orchestrator),
) -> AssessmentRecord:
    """
    Apply an operational update to an assessment.

    - ``status: pending`` clears the result and re-runs the analysis
    - ``status: failed`` clears the result
    - result fields may only be edited on a completed assessment, without a
      status change
    """
    existing = await orchestrator.store.get(assessment_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Assessment not found")

    changes = update.model_dump(exclude_unset=True)
    new_status = changes.get("status")
    result_changes = [name for name in RESULT_FIELDS if name in changes]

    if new_status is not None and new_status not in PATCHABLE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Status can only be set to pending or failed, not {new_status.value}",
        )
    if new_status is not None and result_changes:
        raise HTTPException(
            status_code=400,
            detail="Result fields cannot be combined with a status change",
        )

    if new_status == AssessmentStatus.PENDING:
        record = await orchestrator.retry(assessment_id)
    elif new_status == AssessmentStatus.FAILED:
        changes.update({name: None for name in RESULT_FIELDS})
        record = await orchestrator.store.update(assessment_id, changes)
    elif result_changes:
        try:
            record = await orchestrator.store.update(
                assessment_id, changes, expected_status=AssessmentStatus.COMPLETED
            )
        except StaleRecordError:
            raise HTTPException(
                status_code=400,
                detail="Result fields can only be set on completed assessments",
            )
    else:
        record = existing

    if record is None:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return record
