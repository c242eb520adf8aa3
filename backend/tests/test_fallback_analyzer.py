"""Tests for the rule-based fallback analyzer."""

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.models.assessment import (
    AssessmentFacts,
    Criticality,
    Priority,
    Severity,
    Supplier,
    TransportationMethods,
)
from app.services import fallback_analyzer
from app.services.fallback_analyzer import FallbackRules


def _facts(locations: list[str], risk_factors: str) -> AssessmentFacts:
    return AssessmentFacts(
        company_name="Acme Manufacturing",
        industry="Electronics",
        suppliers=tuple(
            Supplier(
                name=f"Supplier {i}",
                location=location,
                criticality=Criticality.HIGH,
                products="Components",
            )
            for i, location in enumerate(locations)
        ),
        logistics_routes="Asia-Pacific to North America",
        transportation_methods=TransportationMethods(ocean=True, truck=True),
        risk_factors=risk_factors,
    )


@pytest.fixture
def single_china_supplier():
    """One supplier at a congested Chinese port."""
    return _facts(["Shanghai Port, China"], "port congestion issues")


@pytest.fixture
def diversified_suppliers():
    """Three suppliers outside China with no logistics keywords."""
    return _facts(
        ["Hamburg, Germany", "Monterrey, Mexico", "Osaka, Japan"],
        "currency fluctuations",
    )


class TestFallbackScores:
    """Heuristic score computation."""

    def test_single_supplier_in_china_with_port_congestion(
        self, single_china_supplier
    ):
        result = fallback_analyzer.analyze(single_china_supplier)
        assert result.scores.supplier_risk_score == 8
        assert result.scores.logistics_risk_score == 7
        assert result.scores.geopolitical_risk_score == 7
        assert result.scores.overall_risk_score == 7  # round(22 / 3)

    def test_diversified_suppliers_outside_china(self, diversified_suppliers):
        result = fallback_analyzer.analyze(diversified_suppliers)
        assert result.scores.supplier_risk_score == 5
        assert result.scores.logistics_risk_score == 4
        assert result.scores.geopolitical_risk_score == 4
        assert result.scores.overall_risk_score == 4  # round(13 / 3)

    def test_keywords_are_case_insensitive(self):
        facts = _facts(["Guangzhou, CHINA", "Austin, USA"], "Severe CONGESTION")
        assert fallback_analyzer.logistics_risk(facts) == 7
        assert fallback_analyzer.geopolitical_risk(facts) == 7

    def test_port_alone_triggers_logistics_risk(self):
        facts = _facts(["Lyon, France"], "Strike at the Port of Le Havre")
        assert fallback_analyzer.logistics_risk(facts) == 7

    def test_any_supplier_in_china_raises_geopolitical_risk(self):
        facts = _facts(["Lyon, France", "Shenzhen, China"], "none")
        assert fallback_analyzer.geopolitical_risk(facts) == 7

    def test_overall_rounds_to_nearest(self):
        rules = FallbackRules(
            single_supplier_risk=8,
            baseline_logistics_risk=4,
            baseline_geopolitical_risk=5,
        )
        # (8 + 4 + 5) / 3 = 5.67
        result = fallback_analyzer.analyze(_facts(["Lyon"], "none"), rules)
        assert result.scores.overall_risk_score == 6


class TestFallbackFindings:
    """Fixed vulnerability and recommendation templates."""

    def test_two_vulnerabilities_scored_from_heuristics(self, single_china_supplier):
        result = fallback_analyzer.analyze(single_china_supplier)
        assert [v.id for v in result.vulnerabilities] == ["vuln_001", "vuln_002"]
        concentration, bottleneck = result.vulnerabilities
        assert concentration.title == "Supply Chain Concentration Risk"
        assert concentration.severity == Severity.HIGH
        assert concentration.score == 8
        assert bottleneck.title == "Logistics Bottleneck Risk"
        assert bottleneck.severity == Severity.MEDIUM
        assert bottleneck.score == 7

    def test_two_recommendations(self, diversified_suppliers):
        result = fallback_analyzer.analyze(diversified_suppliers)
        assert [r.title for r in result.recommendations] == [
            "Diversify Supplier Network",
            "Optimize Logistics Routes",
        ]
        assert [r.priority for r in result.recommendations] == [
            Priority.CRITICAL,
            Priority.HIGH,
        ]

    def test_deterministic(self, single_china_supplier):
        first = fallback_analyzer.analyze(single_china_supplier)
        second = fallback_analyzer.analyze(single_china_supplier)
        assert first.model_dump_json() == second.model_dump_json()


class TestFallbackRules:
    def test_rules_from_settings(self):
        settings = Settings(
            fallback_single_supplier_risk=9,
            fallback_baseline_geopolitical_risk=2,
        )
        rules = FallbackRules.from_settings(settings)
        assert rules.single_supplier_risk == 9
        assert rules.baseline_geopolitical_risk == 2
        assert rules.diversified_supplier_risk == 5

    def test_custom_rules_applied(self):
        rules = FallbackRules(single_supplier_risk=10)
        result = fallback_analyzer.analyze(_facts(["Lyon"], "none"), rules)
        assert result.scores.supplier_risk_score == 10

    @pytest.mark.parametrize(
        "setting",
        ["fallback_single_supplier_risk", "fallback_baseline_logistics_risk"],
    )
    @pytest.mark.parametrize("value", [-1, 12])
    def test_out_of_range_settings_rejected(self, setting, value):
        with pytest.raises(ValidationError):
            Settings(**{setting: value})

    def test_out_of_range_rules_rejected(self):
        with pytest.raises(ValueError, match="elevated_geopolitical_risk"):
            FallbackRules(elevated_geopolitical_risk=11)

    def test_boundary_rules_still_produce_result(self):
        rules = FallbackRules(single_supplier_risk=10, baseline_logistics_risk=0)
        result = fallback_analyzer.analyze(_facts(["Lyon"], "none"), rules)
        assert result.scores.supplier_risk_score == 10
        assert result.scores.logistics_risk_score == 0
