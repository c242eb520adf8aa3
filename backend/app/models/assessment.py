"""Supply chain assessment request, result and record models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Criticality(str, Enum):
    """How critical a supplier is to the company's operations."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Severity(str, Enum):
    """Severity of an identified vulnerability."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Priority(str, Enum):
    """Priority of a mitigation recommendation."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class AssessmentStatus(str, Enum):
    """Lifecycle status of an assessment record."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Supplier(BaseModel):
    """A single supplier in the company's network."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, description="Supplier name")
    location: str = Field(..., min_length=1, description="City / country")
    criticality: Criticality = Field(..., description="High, Medium or Low")
    products: str = Field(
        ..., min_length=1, description="Products or services supplied"
    )


class TransportationMethods(BaseModel):
    """Transport modes in use, each independent."""

    model_config = ConfigDict(frozen=True)

    ocean: bool = False
    air: bool = False
    truck: bool = False
    rail: bool = False

    def enabled(self) -> list[str]:
        """Names of the modes switched on, in declaration order."""
        return [name for name, used in self.model_dump().items() if used]


class AssessmentFacts(BaseModel):
    """Supply chain facts submitted for one assessment. Immutable."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, str_strip_whitespace=True
    )

    company_name: str = Field(..., alias="companyName", min_length=1)
    industry: str = Field(..., min_length=1)
    suppliers: tuple[Supplier, ...] = Field(
        ..., min_length=1, description="At least one supplier is required"
    )
    logistics_routes: str = Field(..., alias="logisticsRoutes", min_length=1)
    transportation_methods: TransportationMethods = Field(
        default_factory=TransportationMethods, alias="transportationMethods"
    )
    risk_factors: str = Field(..., alias="riskFactors", min_length=1)


class Vulnerability(BaseModel):
    """A supply chain vulnerability identified by analysis."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    severity: Severity
    score: float = Field(..., ge=0.0, le=10.0)
    impact_timeline: str = Field(..., alias="impactTimeline")
    potential_cost: str = Field(..., alias="potentialCost")


class Recommendation(BaseModel):
    """A mitigation recommendation produced by analysis."""

    id: str
    title: str
    description: str
    timeline: str
    priority: Priority


class RiskScores(BaseModel):
    """The four 0-10 risk scores (10 is highest risk)."""

    model_config = ConfigDict(populate_by_name=True)

    overall_risk_score: float = Field(..., alias="overallRiskScore", ge=0, le=10)
    supplier_risk_score: float = Field(
        ..., alias="supplierRiskScore", ge=0, le=10
    )
    logistics_risk_score: float = Field(
        ..., alias="logisticsRiskScore", ge=0, le=10
    )
    geopolitical_risk_score: float = Field(
        ..., alias="geopoliticalRiskScore", ge=0, le=10
    )


class AnalysisResult(BaseModel):
    """Structured output of either the analysis provider or the fallback."""

    scores: RiskScores
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)

    def to_record_fields(self) -> dict:
        """Flatten into the result fields of an AssessmentRecord."""
        return {
            "overall_risk_score": self.scores.overall_risk_score,
            "supplier_risk_score": self.scores.supplier_risk_score,
            "logistics_risk_score": self.scores.logistics_risk_score,
            "geopolitical_risk_score": self.scores.geopolitical_risk_score,
            "vulnerabilities": [v.model_copy() for v in self.vulnerabilities],
            "recommendations": [r.model_copy() for r in self.recommendations],
        }


# Result fields are written together and cleared together.
RESULT_FIELDS = (
    "overall_risk_score",
    "supplier_risk_score",
    "logistics_risk_score",
    "geopolitical_risk_score",
    "vulnerabilities",
    "recommendations",
)


class AssessmentRecord(BaseModel):
    """Stored lifecycle state for one assessment."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    company_name: str = Field(..., alias="companyName")
    industry: str
    suppliers: list[Supplier]
    logistics_routes: str = Field(..., alias="logisticsRoutes")
    transportation_methods: TransportationMethods = Field(
        ..., alias="transportationMethods"
    )
    risk_factors: str = Field(..., alias="riskFactors")

    status: AssessmentStatus = AssessmentStatus.PENDING
    overall_risk_score: Optional[float] = Field(None, alias="overallRiskScore")
    supplier_risk_score: Optional[float] = Field(None, alias="supplierRiskScore")
    logistics_risk_score: Optional[float] = Field(
        None, alias="logisticsRiskScore"
    )
    geopolitical_risk_score: Optional[float] = Field(
        None, alias="geopoliticalRiskScore"
    )
    vulnerabilities: Optional[list[Vulnerability]] = None
    recommendations: Optional[list[Recommendation]] = None

    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @property
    def facts(self) -> AssessmentFacts:
        """The submitted facts this record was created from."""
        return AssessmentFacts(
            company_name=self.company_name,
            industry=self.industry,
            suppliers=tuple(self.suppliers),
            logistics_routes=self.logistics_routes,
            transportation_methods=self.transportation_methods,
            risk_factors=self.risk_factors,
        )

    @property
    def has_result(self) -> bool:
        return any(getattr(self, name) is not None for name in RESULT_FIELDS)


class AssessmentUpdate(BaseModel):
    """Partial update accepted by PATCH /assessments/{id}.

    Submitted facts are immutable, so only status and result fields can be
    changed. Setting status back to ``pending`` requests a manual retry.
    Fields are optional but never nullable: result fields are only cleared
    together, through a status change.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    status: Optional[AssessmentStatus] = None
    overall_risk_score: Optional[float] = Field(
        None, alias="overallRiskScore", ge=0, le=10
    )
    supplier_risk_score: Optional[float] = Field(
        None, alias="supplierRiskScore", ge=0, le=10
    )
    logistics_risk_score: Optional[float] = Field(
        None, alias="logisticsRiskScore", ge=0, le=10
    )
    geopolitical_risk_score: Optional[float] = Field(
        None, alias="geopoliticalRiskScore", ge=0, le=10
    )
    vulnerabilities: Optional[list[Vulnerability]] = None
    recommendations: Optional[list[Recommendation]] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields cannot be null: {nulls}")
        return data


class HealthResponse(BaseModel):
    """Response body of the health endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="'ok' when the API is serving")
    provider_connected: bool = Field(..., alias="providerConnected")
    timestamp: datetime
