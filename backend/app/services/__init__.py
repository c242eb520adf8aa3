from app.services.assessment_orchestrator import (
    AssessmentOrchestrator,
    get_orchestrator,
    reset_orchestrator,
)
from app.services.assessment_store import (
    AssessmentStore,
    StaleRecordError,
    SupersededRunError,
    get_store,
    reset_store,
)
from app.services.risk_analyzer import (
    AnalysisProviderError,
    RiskAnalyzer,
    get_risk_analyzer,
    reset_risk_analyzer,
)

__all__ = [
    # Assessment orchestrator
    "AssessmentOrchestrator",
    "get_orchestrator",
    "reset_orchestrator",
    # Assessment store
    "AssessmentStore",
    "StaleRecordError",
    "SupersededRunError",
    "get_store",
    "reset_store",
    # Risk analyzer
    "AnalysisProviderError",
    "RiskAnalyzer",
    "get_risk_analyzer",
    "reset_risk_analyzer",
]
