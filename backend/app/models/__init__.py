from app.models.alerts import (
    SecurityEvent,
    SecurityEventResponse,
    WeatherAlert,
    WeatherAlertResponse,
)
from app.models.assessment import (
    AnalysisResult,
    AssessmentFacts,
    AssessmentRecord,
    AssessmentStatus,
    AssessmentUpdate,
    Criticality,
    HealthResponse,
    Priority,
    Recommendation,
    RiskScores,
    Severity,
    Supplier,
    TransportationMethods,
    Vulnerability,
)

__all__ = [
    # Assessment models
    "AnalysisResult",
    "AssessmentFacts",
    "AssessmentRecord",
    "AssessmentStatus",
    "AssessmentUpdate",
    "Criticality",
    "HealthResponse",
    "Priority",
    "Recommendation",
    "RiskScores",
    "Severity",
    "Supplier",
    "TransportationMethods",
    "Vulnerability",
    # Alert models
    "SecurityEvent",
    "SecurityEventResponse",
    "WeatherAlert",
    "WeatherAlertResponse",
]
