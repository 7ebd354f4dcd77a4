"""
database.py — Engine & Sessions
=================================
SQLite for local development, Postgres when hosted; DATABASE_URL decides.

Two ways to get a session:
- `get_db`: FastAPI dependency, one session per request.
- `session_scope()`: for scripts (setup_profile.py). Commits on success,
  rolls back on any exception, always closes.
"""

from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from daybook.config import settings


def normalize_database_url(url: str) -> str:
    # Hosted providers hand out "postgres://"; SQLAlchemy only accepts "postgresql://"
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def build_engine(url: str) -> Engine:
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        # Sessions cross threads: sync handlers run in FastAPI's threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    # Hosted Postgres drops idle connections
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
