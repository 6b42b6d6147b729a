from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, String, Text
from .db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class AnalysisCache(Base):
    """One row per exact cache key; value is the serialized AnalysisResult."""

    __tablename__ = "analysis_cache"
    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, index=True, nullable=False)
    value = Column(Text, nullable=False)
    cached_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
