# tests/test_config.py
from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from stridehr.app_logger import get_logger, setup_logging
from stridehr.core.config import Settings, async_url, get_settings, sync_url
from stridehr.errors import MigrationError, SchemaDriftError, StrideHRError

DB_ENV_VARS = (
    "DATABASE_URL",
    "STRIDEHR_DATABASE_URL",
    "ASYNC_DATABASE_URL",
    "STRIDEHR_ASYNC_DATABASE_URL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in DB_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgresql+asyncpg://u:p@db:5432/hr", "postgresql+psycopg2://u:p@db:5432/hr"),
        ("postgresql://u:p@db/hr", "postgresql+psycopg2://u:p@db/hr"),
        ("sqlite+aiosqlite:///./hr.db", "sqlite:///./hr.db"),
        ("sqlite:///./hr.db", "sqlite:///./hr.db"),
    ],
)
def test_sync_url(url, expected):
    assert sync_url(url) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgresql+psycopg2://u:p@db/hr", "postgresql+asyncpg://u:p@db/hr"),
        ("postgresql://u:p@db/hr", "postgresql+asyncpg://u:p@db/hr"),
        ("sqlite:///./hr.db", "sqlite+aiosqlite:///./hr.db"),
        ("postgresql+asyncpg://u:p@db/hr", "postgresql+asyncpg://u:p@db/hr"),
    ],
)
def test_async_url(url, expected):
    assert async_url(url) == expected


def test_defaults(clean_env):
    s = Settings(_env_file=None)
    assert s.APP_NAME == "StrideHR"
    assert s.DATABASE_URL == "sqlite:///./stridehr.db"
    assert s.ASYNC_DATABASE_URL == "sqlite+aiosqlite:///./stridehr.db"
    assert s.MIGRATIONS_VERSION_TABLE == "alembic_version"
    assert s.SEED_REFERENCE_DATA is True
    assert s.DB_POOL_PRE_PING is True


def test_prefixed_database_url_wins(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite:///./other.db")
    clean_env.setenv("STRIDEHR_DATABASE_URL", "postgresql://hr:secret@db/stridehr")
    s = Settings(_env_file=None)
    assert s.DATABASE_URL == "postgresql://hr:secret@db/stridehr"
    assert s.ASYNC_DATABASE_URL == "postgresql+asyncpg://hr:secret@db/stridehr"


def test_explicit_async_url_is_kept(clean_env):
    clean_env.setenv("ASYNC_DATABASE_URL", "postgresql+asyncpg://ro@replica/stridehr")
    s = Settings(_env_file=None)
    assert s.ASYNC_DATABASE_URL == "postgresql+asyncpg://ro@replica/stridehr"


def test_log_level_is_normalised(monkeypatch):
    monkeypatch.setenv("STRIDEHR_LOG_LEVEL", "debug")
    assert Settings(_env_file=None).LOG_LEVEL == "DEBUG"


def test_invalid_bool_is_rejected(monkeypatch):
    monkeypatch.setenv("SEED_REFERENCE_DATA", "sometimes")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_setup_logging_is_idempotent():
    logger = setup_logging("INFO")
    handlers = list(logger.handlers)
    again = setup_logging("DEBUG")
    assert again is logger
    assert again.handlers == handlers
    assert again.level == logging.DEBUG
    assert again.propagate is False
    setup_logging("WARNING")


def test_child_loggers():
    assert get_logger("migrate").name == "stridehr.migrate"
    assert get_logger().name == "stridehr"


def test_error_hierarchy():
    err = MigrationError("boom", revision="0002_seed_reference_data")
    assert isinstance(err, StrideHRError)
    assert err.revision == "0002_seed_reference_data"

    drift = SchemaDriftError(["a", "b"])
    assert drift.differences == ["a", "b"]
    assert "2 schema difference(s)" in str(drift)
