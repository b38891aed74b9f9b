# tests/conftest.py
"""
Fixtures for the schema test-suite.

Every test gets its own SQLite file under ``tmp_path``; nothing talks to a
shared server.  ``migrated_url`` runs the real Alembic revisions to head so
tests exercise the same DDL production databases get.
"""
from __future__ import annotations

import os

# Must be set before stridehr.core.config caches its Settings
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy.orm import sessionmaker

from stridehr.core.config import get_settings
from stridehr.db import migrate
from stridehr.db.session import dispose_engines, make_engine
from stridehr.db.soft_delete import StrideSession


# Make anyio run on asyncio (so our async tests work everywhere)
@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Tests may tweak env vars; never leak a cached Settings between them."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    dispose_engines()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'stridehr.db'}"


@pytest.fixture
def migrated_url(db_url) -> str:
    migrate.upgrade("head", url=db_url)
    return db_url


@pytest.fixture
def engine(migrated_url):
    eng = make_engine(migrated_url)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=StrideSession)


@pytest.fixture
def session(session_factory):
    with session_factory() as s:
        yield s
