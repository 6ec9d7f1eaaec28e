# formstore/database.py
"""
Engine and session handling for the entry store.

The API gets one session per request through get_db(); CLI commands and
scheduled cleanups use session_scope().
"""

from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from formstore.config import get_settings

# DATABASE_URL usually comes from .env in local setups
load_dotenv()

DATABASE_URL = get_settings().DATABASE_URL

# SQLite connections are shared with the threadpool FastAPI runs sync routes in
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=not DATABASE_URL.startswith("sqlite"),
    echo=False,
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def init_db() -> None:
    """Create missing tables. Migrations own the schema outside local development."""
    from formstore import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Session for CLI commands and scheduled jobs.

    Rolls back whatever is still pending when the block raises; services
    commit their own work.
    """
    db: Session = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
