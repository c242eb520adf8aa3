"""Prompt templates for the supply chain risk analyzer.

The system prompt pins the JSON output schema; the user message carries the
facts for one assessment.
"""

from app.models.assessment import AssessmentFacts

MIN_FINDINGS = 3
MAX_FINDINGS = 5

RISK_ANALYSIS_SYSTEM_PROMPT = f"""You are an expert supply chain risk analyst with decades of experience in identifying vulnerabilities and providing actionable recommendations.

You MUST return valid JSON with this exact structure:
{{
    "scores": {{
        "overallRiskScore": 0-10,
        "supplierRiskScore": 0-10,
        "logisticsRiskScore": 0-10,
        "geopoliticalRiskScore": 0-10
    }},
    "vulnerabilities": [
        {{
            "id": "vuln_001",
            "title": "Clear, actionable title",
            "description": "Detailed description explaining the risk",
            "severity": "HIGH | MEDIUM | LOW",
            "score": 0-10,
            "impactTimeline": "immediate, days, weeks or months",
            "potentialCost": "Cost range in USD"
        }}
    ],
    "recommendations": [
        {{
            "id": "rec_001",
            "title": "Specific, actionable title",
            "description": "Detailed implementation description",
            "timeline": "Realistic implementation timeline",
            "priority": "Critical | High | Medium | Low"
        }}
    ]
}}

IMPORTANT:
- Scores run from 0 to 10 where 10 is the highest risk
- Return between {MIN_FINDINGS} and {MAX_FINDINGS} vulnerabilities and between {MIN_FINDINGS} and {MAX_FINDINGS} recommendations
- Use ids of the form vuln_001, rec_001
- Return ONLY the JSON object, no markdown or explanations"""

ANALYSIS_CHECKLIST = (
    "Single points of failure in the supplier network",
    "Geographic concentration risks",
    "Geopolitical instability in supplier regions",
    "Transportation vulnerabilities and bottlenecks",
    "Industry-specific risks and regulations",
    "Financial stability concerns",
    "Cybersecurity and data protection risks",
    "Natural disaster and climate change impacts",
    "Market volatility and economic factors",
    "Compliance and regulatory risks",
)

HEALTH_CHECK_PROMPT = "Respond with 'OK' if you can process this request."


def build_assessment_prompt(facts: AssessmentFacts) -> str:
    """Render the facts for one assessment as the user message."""
    supplier_lines = "\n".join(
        f"- {s.name} ({s.location}, {s.criticality.value} criticality): {s.products}"
        for s in facts.suppliers
    )
    methods = ", ".join(facts.transportation_methods.enabled()) or "none specified"
    checklist = "\n".join(
        f"{i}. {item}" for i, item in enumerate(ANALYSIS_CHECKLIST, start=1)
    )

    return f"""Analyze the following supply chain data and provide a comprehensive vulnerability assessment.

COMPANY INFORMATION:
- Company: {facts.company_name}
- Industry: {facts.industry}

SUPPLIERS:
{supplier_lines}

LOGISTICS:
- Routes: {facts.logistics_routes}
- Transportation Methods: {methods}

KNOWN RISK FACTORS:
{facts.risk_factors}

Perform a thorough analysis considering:
{checklist}

Provide risk scores for overall risk (weighted average), supplier risk (concentration, reliability, alternatives), logistics risk (routes, methods, disruption potential) and geopolitical risk (stability, trade relations, sanctions).

Focus on practical, implementable solutions that address the highest-impact risks first. Consider both short-term mitigation strategies and long-term resilience building."""
