"""
Claude-powered supply chain risk analyzer.

Turns submitted supply chain facts into risk scores, vulnerabilities and
recommendations. The response is validated strictly: anything that does not
match the expected schema is reported as AnalysisProviderError and never
passed through partially.

Uses ANTHROPIC_API_KEY and claude_model from config.
"""

import json
import logging
from typing import Any, Optional

import anthropic
import httpx
from pydantic import ValidationError

from app.config import Settings, get_settings
from app.models.assessment import AnalysisResult, AssessmentFacts
from app.services.llm_utils import extract_json_object
from app.services.risk_analysis_prompts import (
    HEALTH_CHECK_PROMPT,
    MAX_FINDINGS,
    MIN_FINDINGS,
    RISK_ANALYSIS_SYSTEM_PROMPT,
    build_assessment_prompt,
)

logger = logging.getLogger(__name__)


class AnalysisProviderError(Exception):
    """The analysis provider could not produce a valid result."""


def _assign_missing_ids(items: Any, prefix: str) -> Any:
    if not isinstance(items, list):
        return items
    for i, item in enumerate(items, start=1):
        if isinstance(item, dict) and not item.get("id"):
            item["id"] = f"{prefix}_{i:03d}"
    return items


def parse_analysis_response(response_text: str) -> AnalysisResult:
    """
    Parse and validate a raw model response.

    Args:
        response_text: Text content returned by the model

    Returns:
        Validated AnalysisResult

    Raises:
        AnalysisProviderError: Empty, unparseable or schema-violating response
    """
    try:
        data = extract_json_object(response_text)
    except (json.JSONDecodeError, TypeError) as e:
        raise AnalysisProviderError(f"Malformed analysis response: {e}") from e

    _assign_missing_ids(data.get("vulnerabilities"), "vuln")
    _assign_missing_ids(data.get("recommendations"), "rec")

    try:
        result = AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise AnalysisProviderError(
            f"Analysis response failed schema validation: {e.error_count()} errors"
        ) from e

    for name, found in (
        ("vulnerabilities", len(result.vulnerabilities)),
        ("recommendations", len(result.recommendations)),
    ):
        if not MIN_FINDINGS <= found <= MAX_FINDINGS:
            raise AnalysisProviderError(
                f"Expected {MIN_FINDINGS}-{MAX_FINDINGS} {name}, got {found}"
            )

    return result


class RiskAnalyzer:
    """Analysis provider backed by the Anthropic Messages API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ) -> None:
        settings = settings or get_settings()
        self._api_key = settings.anthropic_api_key
        self._model = settings.claude_model
        self._max_tokens = settings.analysis_max_tokens
        self._health_timeout = settings.health_check_timeout_seconds
        self._request_timeout = settings.analysis_timeout_seconds
        self._client = client

    @property
    def is_available(self) -> bool:
        """Check if Anthropic API key is configured."""
        return bool(self._api_key) or self._client is not None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key,
                max_retries=0,
                timeout=httpx.Timeout(self._request_timeout + 5.0, connect=5.0),
            )
        return self._client

    async def analyze(self, facts: AssessmentFacts) -> AnalysisResult:
        """
        Analyze supply chain facts with Claude.

        Args:
            facts: Submitted supply chain facts

        Returns:
            Validated AnalysisResult

        Raises:
            AnalysisProviderError: Missing API key, API failure, or invalid
                response
        """
        if not self.is_available:
            raise AnalysisProviderError("Anthropic API key not configured")

        try:
            response = await self._get_client().messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=RISK_ANALYSIS_SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": build_assessment_prompt(facts),
                    }
                ],
            )
        except anthropic.APIError as e:
            raise AnalysisProviderError(f"Anthropic API error: {e}") from e
        except httpx.HTTPError as e:
            raise AnalysisProviderError(f"Network error calling Anthropic: {e}") from e

        if not response.content:
            raise AnalysisProviderError("Empty response from Anthropic API")

        response_text = getattr(response.content[0], "text", "") or ""
        result = parse_analysis_response(response_text)

        logger.info(
            f"Risk analysis for {facts.company_name}: "
            f"overall={result.scores.overall_risk_score}, "
            f"vulnerabilities={len(result.vulnerabilities)}, "
            f"recommendations={len(result.recommendations)}"
        )
        return result

    async def health_check(self) -> bool:
        """Return True if the provider answers a trivial prompt."""
        if not self.is_available:
            return False

        try:
            response = await self._get_client().with_options(
                timeout=self._health_timeout
            ).messages.create(
                model=self._model,
                max_tokens=10,
                messages=[{"role": "user", "content": HEALTH_CHECK_PROMPT}],
            )
            text = getattr(response.content[0], "text", "") if response.content else ""
            return "ok" in text.lower()
        except Exception as e:
            logger.warning(f"Anthropic health check failed: {e}")
            return False


_analyzer: RiskAnalyzer | None = None


def get_risk_analyzer() -> RiskAnalyzer:
    """Get singleton analyzer instance."""
    global _analyzer
    if _analyzer is None:
        _analyzer = RiskAnalyzer()
    return _analyzer


def reset_risk_analyzer() -> None:
    """Reset analyzer for testing."""
    global _analyzer
    _analyzer = None
