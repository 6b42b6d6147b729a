import asyncio
from typing import Awaitable, Callable, Dict, Optional
from .cache import ResultCache
from .config import Settings, get_settings
from .connectivity import is_online
from .errors import classify_failure, network_error
from .openai_client import call_openai, parse_verdict
from .schemas import AnalysisResult
from .utils.logging import get_logger

log = get_logger(__name__)

ModelCall = Callable[[str], Awaitable[str]]
OnlineCheck = Callable[[], Awaitable[bool]]


class UrlAnalyzer:
    """Live analysis with a cache write on success and a cache read when offline."""

    def __init__(
        self,
        settings: Settings = None,
        cache: ResultCache = None,
        model_call: ModelCall = None,
        online_check: OnlineCheck = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache or ResultCache(
            max_age_hours=self.settings.cache_max_age_hours,
            database_url=self.settings.database_url,
        )
        self._model_call = model_call or (lambda url: call_openai(url, self.settings))
        self._online_check = online_check or (lambda: is_online(self.settings))

    async def analyze(self, url: str) -> AnalysisResult:
        try:
            content = await self._model_call(url)
            verdict = parse_verdict(content)
        except Exception as e:
            log.error(f"Error analyzing {url}: {e!r}")
            if await self._online_check():
                raise classify_failure(e) from e
            cached = self._read_fallback(url)
            if cached is None:
                raise network_error(e) from e
            return cached

        result = AnalysisResult(url=url, **verdict.model_dump())
        written = self.cache.write(result)
        if not written.ok:
            log.error(f"Failed to cache analysis result for {url}: {written.error}")
        return result

    def _read_fallback(self, url: str) -> Optional[AnalysisResult]:
        cached = self.cache.read(url)
        if cached.error:
            log.error(f"Failed to retrieve or parse from cache: {cached.error}")
        if cached.hit:
            log.info(f"Serving from cache for URL: {url}")
        return cached.result


class Superseded(Exception):
    """A newer submission from the same owner replaced this one."""


class SubmissionTracker:
    """At most one effective in-flight analysis per owner.

    A newer submission cancels the owner's pending one; the older caller
    gets ``Superseded`` instead of a result.
    """

    def __init__(self, analyzer: UrlAnalyzer):
        self.analyzer = analyzer
        self._inflight: Dict[str, asyncio.Task] = {}

    async def submit(self, owner: str, url: str) -> AnalysisResult:
        previous = self._inflight.get(owner)
        if previous is not None and not previous.done():
            log.info(f"Superseding pending analysis for {owner}")
            previous.cancel()
        task = asyncio.ensure_future(self.analyzer.analyze(url))
        self._inflight[owner] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._inflight.get(owner) is not task:
                raise Superseded(url)
            raise
        finally:
            if self._inflight.get(owner) is task:
                del self._inflight[owner]


_default_analyzer: Optional[UrlAnalyzer] = None


def get_analyzer() -> UrlAnalyzer:
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = UrlAnalyzer()
    return _default_analyzer


async def analyze_url(url: str) -> AnalysisResult:
    return await get_analyzer().analyze(url)
