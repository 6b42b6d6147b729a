from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import get_settings

Base = declarative_base()
_engine = None
_SessionLocal = None


def _ensure_sqlite_dir(url: str):
    # sqlite:///./data/app.db -> ./data
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)


def init_engine_and_session(database_url: str = None):
    global _engine, _SessionLocal
    url = database_url or get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    if url.startswith("sqlite"):
        _ensure_sqlite_dir(url)
    _engine = create_engine(url, echo=False, future=True, connect_args=connect_args)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    from . import models  # noqa: F401  register tables
    Base.metadata.create_all(bind=_engine)
    return _engine, _SessionLocal


@contextmanager
def session_scope(SessionLocal=None):
    session = (SessionLocal or _SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
