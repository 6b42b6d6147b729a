import json
import pytest
from phishguard.cache import ResultCache
from phishguard.config import Settings
from phishguard.db import init_engine_and_session
from phishguard.service import UrlAnalyzer

VERDICT = {
    "riskLevel": "MALICIOUS",
    "summary": "Impersonates a bank login page on a newly registered domain.",
    "score": 92,
    "details": {
        "domainAge": "Registered roughly three weeks ago.",
        "domainAnalysis": "Uses a homoglyph of a well-known bank brand.",
        "urlStructure": "Path stuffed with 'secure' and 'login' keywords.",
        "contentClues": "Likely a credential-harvesting form.",
        "threatIntelligence": "Matches common bank phishing kits.",
    },
}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        openai_api_key="test-key",
        database_url=f"sqlite:///{tmp_path / 'cache.db'}",
        use_mock_openai=False,
        force_offline=False,
        cache_max_age_hours=None,
    )


@pytest.fixture
def session_factory(settings):
    _, SessionLocal = init_engine_and_session(settings.database_url)
    return SessionLocal


@pytest.fixture
def cache(session_factory):
    return ResultCache(session_factory)


class FakeModel:
    """Stands in for the remote model: returns a payload or raises."""

    def __init__(self, payload=None, error=None):
        self.payload = VERDICT if payload is None else payload
        self.error = error
        self.calls = []

    async def __call__(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload)


class FakeNetwork:
    def __init__(self, online=True):
        self.online = online
        self.checks = 0

    async def __call__(self):
        self.checks += 1
        return self.online


@pytest.fixture
def make_analyzer(settings, cache):
    def _make(model=None, network=None, result_cache=None):
        return UrlAnalyzer(
            settings=settings,
            cache=result_cache or cache,
            model_call=model or FakeModel(),
            online_check=network or FakeNetwork(online=True),
        )
    return _make
