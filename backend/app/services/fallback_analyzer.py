"""
Rule-based fallback risk analysis.

NO LLM - pure, deterministic heuristics over the submitted facts.

Used by the orchestrator whenever the analysis provider times out or fails,
so every assessment still completes. Never raises for valid facts.
"""

import math
from dataclasses import dataclass

from app.config import Settings
from app.models.assessment import (
    AnalysisResult,
    AssessmentFacts,
    Priority,
    Recommendation,
    RiskScores,
    Severity,
    Vulnerability,
)

LOGISTICS_RISK_KEYWORDS = ("port", "congestion")
GEOPOLITICAL_RISK_KEYWORDS = ("china",)
SCORE_FIELDS = (
    "single_supplier_risk",
    "diversified_supplier_risk",
    "elevated_logistics_risk",
    "baseline_logistics_risk",
    "elevated_geopolitical_risk",
    "baseline_geopolitical_risk",
)


@dataclass(frozen=True)
class FallbackRules:
    """Scores assigned by each heuristic."""

    single_supplier_risk: int = 8
    diversified_supplier_risk: int = 5
    elevated_logistics_risk: int = 7
    baseline_logistics_risk: int = 4
    elevated_geopolitical_risk: int = 7
    baseline_geopolitical_risk: int = 4
    logistics_keywords: tuple[str, ...] = LOGISTICS_RISK_KEYWORDS
    geopolitical_keywords: tuple[str, ...] = GEOPOLITICAL_RISK_KEYWORDS

    def __post_init__(self) -> None:
        for name in SCORE_FIELDS:
            value = getattr(self, name)
            if not 0 <= value <= 10:
                raise ValueError(f"{name} must be between 0 and 10, got {value}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "FallbackRules":
        return cls(
            single_supplier_risk=settings.fallback_single_supplier_risk,
            diversified_supplier_risk=settings.fallback_diversified_supplier_risk,
            elevated_logistics_risk=settings.fallback_elevated_logistics_risk,
            baseline_logistics_risk=settings.fallback_baseline_logistics_risk,
            elevated_geopolitical_risk=settings.fallback_elevated_geopolitical_risk,
            baseline_geopolitical_risk=settings.fallback_baseline_geopolitical_risk,
        )


DEFAULT_RULES = FallbackRules()


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def supplier_risk(facts: AssessmentFacts, rules: FallbackRules = DEFAULT_RULES) -> int:
    """Single-sourced supply chains score higher."""
    if len(facts.suppliers) == 1:
        return rules.single_supplier_risk
    return rules.diversified_supplier_risk


def logistics_risk(facts: AssessmentFacts, rules: FallbackRules = DEFAULT_RULES) -> int:
    """Known port or congestion problems score higher."""
    if _contains_any(facts.risk_factors, rules.logistics_keywords):
        return rules.elevated_logistics_risk
    return rules.baseline_logistics_risk


def geopolitical_risk(
    facts: AssessmentFacts, rules: FallbackRules = DEFAULT_RULES
) -> int:
    """Suppliers in flagged regions score higher."""
    if any(
        _contains_any(s.location, rules.geopolitical_keywords) for s in facts.suppliers
    ):
        return rules.elevated_geopolitical_risk
    return rules.baseline_geopolitical_risk


def analyze(facts: AssessmentFacts, rules: FallbackRules = DEFAULT_RULES) -> AnalysisResult:
    """
    Produce a complete analysis result from simple heuristics.

    Args:
        facts: Submitted supply chain facts
        rules: Score constants (defaults match the production heuristics)

    Returns:
        AnalysisResult with two vulnerabilities and two recommendations
    """
    supplier = supplier_risk(facts, rules)
    logistics = logistics_risk(facts, rules)
    geopolitical = geopolitical_risk(facts, rules)
    overall = _round_half_up((supplier + logistics + geopolitical) / 3)

    return AnalysisResult(
        scores=RiskScores(
            overall_risk_score=overall,
            supplier_risk_score=supplier,
            logistics_risk_score=logistics,
            geopolitical_risk_score=geopolitical,
        ),
        vulnerabilities=[
            Vulnerability(
                id="vuln_001",
                title="Supply Chain Concentration Risk",
                description=(
                    "Limited supplier diversity creates vulnerability to disruptions."
                ),
                severity=Severity.HIGH,
                score=supplier,
                impact_timeline="Immediate to weeks",
                potential_cost="$100K-$1M USD",
            ),
            Vulnerability(
                id="vuln_002",
                title="Logistics Bottleneck Risk",
                description="Transportation dependencies may cause delays.",
                severity=Severity.MEDIUM,
                score=logistics,
                impact_timeline="Days to weeks",
                potential_cost="$50K-$500K USD",
            ),
        ],
        recommendations=[
            Recommendation(
                id="rec_001",
                title="Diversify Supplier Network",
                description="Add backup suppliers to reduce single points of failure.",
                timeline="3-6 months",
                priority=Priority.CRITICAL,
            ),
            Recommendation(
                id="rec_002",
                title="Optimize Logistics Routes",
                description="Develop alternative transportation and routing plans.",
                timeline="1-3 months",
                priority=Priority.HIGH,
            ),
        ],
    )
