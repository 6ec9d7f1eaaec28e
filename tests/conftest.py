# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os
from datetime import timedelta

import pytest

# Set test environment before any formstore module reads it
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("LOG_JSON", "false")


@pytest.fixture
def db():
    """Session on a fresh in-memory SQLite database."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from formstore import models  # noqa: F401
    from formstore.database import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def resources(tmp_path):
    """Local resource store in a temporary directory, installed as the singleton."""
    from formstore.storage import LocalResourceStore, reset_resource_store, set_resource_store

    store = LocalResourceStore(base_path=str(tmp_path / "resources"), base_url="/_resources")
    set_resource_store(store)
    yield store
    reset_resource_store()


@pytest.fixture
def make_entry(db):
    """Insert an entry directly, optionally backdated by age_days."""
    from formstore.models import Entry, utcnow

    def _make(bucket, properties=None, age_days=0, created_at=None):
        entry = Entry(
            bucket=bucket,
            properties=properties or {},
            created_at=created_at or utcnow() - timedelta(days=age_days),
        )
        db.add(entry)
        db.commit()
        return entry

    return _make
