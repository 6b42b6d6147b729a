from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    SUSPICIOUS = "SUSPICIOUS"
    MALICIOUS = "MALICIOUS"
    UNKNOWN = "UNKNOWN"


class AnalyzeRequest(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL must not be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


class AnalysisDetails(BaseModel):
    domainAge: str
    domainAnalysis: str
    urlStructure: str
    contentClues: str
    threatIntelligence: str


class ModelVerdict(BaseModel):
    """The object the remote model returns; it never carries the URL."""

    model_config = ConfigDict(extra="ignore")

    riskLevel: RiskLevel
    summary: str
    score: int
    details: AnalysisDetails

    @field_validator("riskLevel", mode="before")
    @classmethod
    def coerce_risk_level(cls, v):
        if isinstance(v, RiskLevel):
            return v
        try:
            return RiskLevel(str(v).strip().upper())
        except ValueError:
            return RiskLevel.UNKNOWN

    @field_validator("score")
    @classmethod
    def clamp_score(cls, v: int) -> int:
        return max(0, min(100, v))


class AnalysisResult(ModelVerdict):
    url: str
    isCached: bool = False
    cachedAt: Optional[datetime] = None

    def to_cache_json(self) -> str:
        return self.model_dump_json(exclude={"isCached", "cachedAt"})


class ErrorResponse(BaseModel):
    error: str
    title: str
    message: str
