import json
from typing import Any, Dict
from openai import AsyncOpenAI, OpenAIError
from .config import Settings, get_settings
from .schemas import ModelVerdict, RiskLevel


SYSTEM_PROMPT = """You are a world-class cybersecurity analyst who assesses URLs for phishing risk.\nYou only see the URL text; you have no live lookup tools. Return JSON only, matching the requested schema."""

DETAIL_KEYS = ["domainAge", "domainAnalysis", "urlStructure", "contentClues", "threatIntelligence"]

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "riskLevel": {
            "type": "string",
            "enum": [r.value for r in RiskLevel],
            "description": "The overall risk assessment level.",
        },
        "summary": {
            "type": "string",
            "description": "A concise, one-sentence summary of the findings.",
        },
        "score": {
            "type": "integer",
            "description": "A risk score from 0 (safe) to 100 (highly malicious).",
        },
        "details": {
            "type": "object",
            "properties": {
                "domainAge": {
                    "type": "string",
                    "description": "Analysis of the domain's registration age. Note if it is suspiciously new (e.g., less than 6 months old).",
                },
                "domainAnalysis": {
                    "type": "string",
                    "description": "Detailed analysis of the domain name, TLD, and subdomains (excluding age).",
                },
                "urlStructure": {
                    "type": "string",
                    "description": "Analysis of the URL path, query parameters, and overall structure.",
                },
                "contentClues": {
                    "type": "string",
                    "description": "Inference about potential content based on the URL.",
                },
                "threatIntelligence": {
                    "type": "string",
                    "description": "Comparison against known threat patterns and intelligence.",
                },
            },
            "required": DETAIL_KEYS,
            "additionalProperties": False,
        },
    },
    "required": ["riskLevel", "summary", "score", "details"],
    "additionalProperties": False,
}


def build_prompt(url: str) -> str:
    return (
        f"Analyze the following URL for potential phishing threats: {url}\n\n"
        "Evaluate the URL based on the following criteria:\n"
        "1. Domain Analysis:\n"
        "   - CRITICAL: Determine the domain's registration date/age. If the domain is less than 6 months old, "
        "flag it as a significant risk factor. State the approximate age or registration date if found.\n"
        "   - Check TLD reputation (.zip, .mov are suspicious), subdomain complexity, and character impersonation (homoglyphs).\n"
        "2. URL Structure: Look for excessive length, use of IP addresses, unnecessary redirection, "
        "keyword stuffing ('login', 'secure', 'account'), and brand impersonation.\n"
        "3. Content Clues (Hypothetical): Infer potential content. Does it suggest urgency, credential harvesting, or fake offers?\n"
        "4. Threat Intelligence Context: Cross-reference with known phishing patterns, even if you don't have a live database.\n\n"
        "Based on your analysis, provide a risk level (SAFE, SUSPICIOUS, MALICIOUS), a risk score (0-100), "
        "a concise summary, and a detailed breakdown."
    )


def _mock_payload(url: str) -> Dict[str, Any]:
    # Deterministic mock: flags plain-http URLs as suspicious, everything else safe
    suspicious = url.startswith("http://")
    return {
        "riskLevel": "SUSPICIOUS" if suspicious else "SAFE",
        "summary": "Mock one-sentence summary.",
        "score": 55 if suspicious else 10,
        "details": {k: "Mock analysis." for k in DETAIL_KEYS},
    }


async def call_openai(url: str, settings: Settings = None) -> str:
    """Send the analysis instruction for ``url`` and return the raw response text."""
    settings = settings or get_settings()
    if settings.use_mock_openai:
        return json.dumps(_mock_payload(url))

    if not settings.openai_api_key:
        raise OpenAIError("Missing credentials: OPENAI_API_KEY is not set")

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(url)},
    ]
    async with AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout, max_retries=0) as client:
        resp = await client.chat.completions.create(
            model=settings.openai_model,
            messages=messages,
            temperature=0.2,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "url_risk_analysis", "strict": True, "schema": RESPONSE_SCHEMA},
            },
        )
    return resp.choices[0].message.content or ""


def parse_verdict(content: str) -> ModelVerdict:
    # json.JSONDecodeError and pydantic.ValidationError both propagate to the caller
    return ModelVerdict.model_validate(json.loads(content.strip()))
