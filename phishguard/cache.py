from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from .db import init_engine_and_session, session_scope
from .models import AnalysisCache
from .schemas import AnalysisResult
from .utils.logging import get_logger

log = get_logger(__name__)

CACHE_PREFIX = "phishguard:"


def cache_key(url: str) -> str:
    # exact string, no normalization: http://x and https://x are distinct
    return f"{CACHE_PREFIX}{url}"


@dataclass
class CacheWrite:
    ok: bool
    error: Optional[str] = None


@dataclass
class CacheRead:
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def hit(self) -> bool:
        return self.result is not None


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class ResultCache:
    """Last successful result per exact URL, served only on the offline path."""

    def __init__(self, SessionLocal=None, max_age_hours: Optional[float] = None, database_url: Optional[str] = None):
        if SessionLocal is None:
            _, SessionLocal = init_engine_and_session(database_url)
        self.SessionLocal = SessionLocal
        self.max_age_hours = max_age_hours

    def write(self, result: AnalysisResult) -> CacheWrite:
        key = cache_key(result.url)
        try:
            with session_scope(self.SessionLocal) as s:
                row = s.query(AnalysisCache).filter_by(key=key).first()
                if row:
                    row.value = result.to_cache_json()
                    row.cached_at = datetime.now(timezone.utc)
                else:
                    s.add(AnalysisCache(key=key, value=result.to_cache_json()))
        except Exception as e:
            return CacheWrite(ok=False, error=str(e))
        return CacheWrite(ok=True)

    def read(self, url: str) -> CacheRead:
        key = cache_key(url)
        try:
            with session_scope(self.SessionLocal) as s:
                row = s.query(AnalysisCache).filter_by(key=key).first()
                if not row:
                    return CacheRead()
                value, cached_at = row.value, row.cached_at
        except Exception as e:
            return CacheRead(error=f"cache lookup failed: {e}")

        if cached_at is not None and self._expired(_as_utc(cached_at)):
            log.info(f"Cached entry for {url} is older than {self.max_age_hours}h; ignoring")
            return CacheRead()

        try:
            cached = AnalysisResult.model_validate_json(value)
        except ValueError as e:
            return CacheRead(error=f"cached value for {url} is unusable: {e}")
        result = cached.model_copy(update={
            "url": url,
            "isCached": True,
            "cachedAt": _as_utc(cached_at) if cached_at else None,
        })
        return CacheRead(result=result)

    def _expired(self, cached_at: datetime) -> bool:
        if self.max_age_hours is None:
            return False
        return datetime.now(timezone.utc) - cached_at > timedelta(hours=self.max_age_hours)
