import os
from typing import List, Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) in ("1", "true", "True")


def _env_optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw else None


class Settings(BaseModel):
    openai_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    openai_model: str = Field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    openai_timeout: float = Field(default_factory=lambda: float(os.getenv("OPENAI_TIMEOUT", "60")))
    use_mock_openai: bool = Field(default_factory=lambda: _env_flag("USE_MOCK_OPENAI"))
    analyzer_user: str = Field(default_factory=lambda: os.getenv("ANALYZER_USER", "admin"))
    analyzer_pass: str = Field(default_factory=lambda: os.getenv("ANALYZER_PASS", "changeme"))
    database_url: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./data/app.db"))
    agent_version: str = Field(default_factory=lambda: os.getenv("AGENT_VERSION", "v1"))
    allowed_origins: List[str] = Field(
        default_factory=lambda: [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    )
    # Connectivity signal
    force_offline: bool = Field(default_factory=lambda: _env_flag("PHISHGUARD_OFFLINE"))
    connectivity_probe_url: str = Field(
        default_factory=lambda: os.getenv("CONNECTIVITY_PROBE_URL", "https://www.gstatic.com/generate_204")
    )
    connectivity_timeout: float = Field(default_factory=lambda: float(os.getenv("CONNECTIVITY_TIMEOUT", "3")))
    # None = cached entries never expire
    cache_max_age_hours: Optional[float] = Field(default_factory=lambda: _env_optional_float("CACHE_MAX_AGE_HOURS"))


def get_settings() -> Settings:
    return Settings()
