"""Tests for the Claude-backed risk analyzer."""

import json
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from app.config import Settings
from app.models.assessment import (
    AssessmentFacts,
    Criticality,
    Priority,
    Severity,
    Supplier,
    TransportationMethods,
)
from app.services.risk_analysis_prompts import build_assessment_prompt
from app.services.risk_analyzer import (
    AnalysisProviderError,
    RiskAnalyzer,
    parse_analysis_response,
)


def _finding_payload(n_vulns: int = 3, n_recs: int = 3) -> dict:
    return {
        "scores": {
            "overallRiskScore": 6.8,
            "supplierRiskScore": 8.2,
            "logisticsRiskScore": 6.1,
            "geopoliticalRiskScore": 5.9,
        },
        "vulnerabilities": [
            {
                "id": f"vuln_{i:03d}",
                "title": f"Vulnerability {i}",
                "description": "Explained risk",
                "severity": "HIGH",
                "score": 7.5,
                "impactTimeline": "weeks",
                "potentialCost": "$1M-$3M USD",
            }
            for i in range(1, n_vulns + 1)
        ],
        "recommendations": [
            {
                "id": f"rec_{i:03d}",
                "title": f"Recommendation {i}",
                "description": "Do the thing",
                "timeline": "3 months",
                "priority": "High",
            }
            for i in range(1, n_recs + 1)
        ],
    }


def _mock_response(text: str):
    """Create a mock Anthropic API response."""
    content_block = MagicMock()
    content_block.text = text
    response = MagicMock()
    response.content = [content_block]
    return response


@pytest.fixture
def sample_facts():
    return AssessmentFacts(
        company_name="Northwind Foods",
        industry="Food & Beverage",
        suppliers=(
            Supplier(
                name="Andes Cocoa",
                location="Quito, Ecuador",
                criticality=Criticality.HIGH,
                products="Cocoa beans",
            ),
            Supplier(
                name="Baltic Packaging",
                location="Gdansk, Poland",
                criticality=Criticality.LOW,
                products="Cartons",
            ),
        ),
        logistics_routes="South America to Northern Europe",
        transportation_methods=TransportationMethods(ocean=True, rail=True),
        risk_factors="Weather volatility during harvest",
    )


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.with_options = MagicMock(return_value=client)
    return client


@pytest.fixture
def analyzer(mock_client):
    return RiskAnalyzer(settings=Settings(anthropic_api_key="test-key"), client=mock_client)


class TestParseAnalysisResponse:
    """Strict schema validation at the provider boundary."""

    def test_valid_payload(self):
        result = parse_analysis_response(json.dumps(_finding_payload()))
        assert result.scores.overall_risk_score == 6.8
        assert result.vulnerabilities[0].severity == Severity.HIGH
        assert result.vulnerabilities[0].impact_timeline == "weeks"
        assert result.recommendations[0].priority == Priority.HIGH

    def test_fenced_payload(self):
        text = f"```json\n{json.dumps(_finding_payload(4, 5))}\n```"
        result = parse_analysis_response(text)
        assert len(result.vulnerabilities) == 4
        assert len(result.recommendations) == 5

    def test_missing_ids_are_assigned(self):
        payload = _finding_payload()
        for item in payload["vulnerabilities"] + payload["recommendations"]:
            del item["id"]
        result = parse_analysis_response(json.dumps(payload))
        assert [v.id for v in result.vulnerabilities] == [
            "vuln_001",
            "vuln_002",
            "vuln_003",
        ]
        assert result.recommendations[2].id == "rec_003"

    def test_empty_response_rejected(self):
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response("")

    def test_non_json_rejected(self):
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response("I cannot help with that.")

    def test_score_out_of_range_rejected(self):
        payload = _finding_payload()
        payload["scores"]["overallRiskScore"] = 11
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response(json.dumps(payload))

    def test_missing_score_rejected(self):
        payload = _finding_payload()
        del payload["scores"]["geopoliticalRiskScore"]
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response(json.dumps(payload))

    def test_unknown_severity_rejected(self):
        payload = _finding_payload()
        payload["vulnerabilities"][0]["severity"] = "EXTREME"
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response(json.dumps(payload))

    def test_unknown_priority_rejected(self):
        payload = _finding_payload()
        payload["recommendations"][0]["priority"] = "urgent"
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response(json.dumps(payload))

    @pytest.mark.parametrize("n_vulns,n_recs", [(2, 3), (6, 3), (3, 2), (3, 6)])
    def test_finding_counts_enforced(self, n_vulns, n_recs):
        with pytest.raises(AnalysisProviderError):
            parse_analysis_response(json.dumps(_finding_payload(n_vulns, n_recs)))


class TestAssessmentPrompt:
    def test_prompt_includes_facts(self, sample_facts):
        prompt = build_assessment_prompt(sample_facts)
        assert "Company: Northwind Foods" in prompt
        assert "Industry: Food & Beverage" in prompt
        assert "- Andes Cocoa (Quito, Ecuador, High criticality): Cocoa beans" in prompt
        assert "Transportation Methods: ocean, rail" in prompt
        assert "Weather volatility during harvest" in prompt

    def test_prompt_without_transport_methods(self, sample_facts):
        facts = sample_facts.model_copy(
            update={"transportation_methods": TransportationMethods()}
        )
        assert "Transportation Methods: none specified" in build_assessment_prompt(
            facts
        )


class TestRiskAnalyzerAnalyze:
    @pytest.mark.asyncio
    async def test_analyze_success(self, analyzer, mock_client, sample_facts):
        mock_client.messages.create = AsyncMock(
            return_value=_mock_response(json.dumps(_finding_payload()))
        )

        result = await analyzer.analyze(sample_facts)

        assert result.scores.supplier_risk_score == 8.2
        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert call_kwargs["model"] == "claude-sonnet-4-20250514"
        assert "Northwind Foods" in call_kwargs["messages"][0]["content"]
        assert "JSON" in call_kwargs["system"]

    @pytest.mark.asyncio
    async def test_analyze_without_api_key(self, sample_facts):
        analyzer = RiskAnalyzer(settings=Settings(anthropic_api_key=None))
        assert analyzer.is_available is False
        with pytest.raises(AnalysisProviderError, match="not configured"):
            await analyzer.analyze(sample_facts)

    @pytest.mark.asyncio
    async def test_analyze_api_error(self, analyzer, mock_client, sample_facts):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(request=request)
        )
        with pytest.raises(AnalysisProviderError, match="Anthropic API error"):
            await analyzer.analyze(sample_facts)

    @pytest.mark.asyncio
    async def test_analyze_empty_content(self, analyzer, mock_client, sample_facts):
        response = MagicMock()
        response.content = []
        mock_client.messages.create = AsyncMock(return_value=response)
        with pytest.raises(AnalysisProviderError, match="Empty response"):
            await analyzer.analyze(sample_facts)

    @pytest.mark.asyncio
    async def test_analyze_schema_violation(self, analyzer, mock_client, sample_facts):
        mock_client.messages.create = AsyncMock(
            return_value=_mock_response(json.dumps({"scores": {}}))
        )
        with pytest.raises(AnalysisProviderError):
            await analyzer.analyze(sample_facts)


class TestRiskAnalyzerHealthCheck:
    @pytest.mark.asyncio
    async def test_healthy(self, analyzer, mock_client):
        mock_client.messages.create = AsyncMock(return_value=_mock_response("OK"))
        assert await analyzer.health_check() is True

    @pytest.mark.asyncio
    async def test_unexpected_answer(self, analyzer, mock_client):
        mock_client.messages.create = AsyncMock(
            return_value=_mock_response("Sorry, no.")
        )
        assert await analyzer.health_check() is False

    @pytest.mark.asyncio
    async def test_api_failure(self, analyzer, mock_client):
        mock_client.messages.create = AsyncMock(side_effect=Exception("timeout"))
        assert await analyzer.health_check() is False

    @pytest.mark.asyncio
    async def test_no_api_key(self):
        analyzer = RiskAnalyzer(settings=Settings(anthropic_api_key=None))
        assert await analyzer.health_check() is False
