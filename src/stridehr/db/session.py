# src/stridehr/db/session.py
from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from functools import lru_cache
from typing import Any, AsyncGenerator, AsyncIterator, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from stridehr.core.config import async_url, get_settings, sync_url
from stridehr.db.soft_delete import ACTOR, StrideSession

# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------


def _engine_kwargs(**overrides: Any) -> dict[str, Any]:
    settings = get_settings()
    kwargs: dict[str, Any] = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
    }
    # Use NullPool in tests so connections are never shared across tasks
    if settings.TESTING:
        kwargs["poolclass"] = NullPool
    kwargs.update(overrides)
    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: Optional[str] = None, **kw: Any) -> Engine:
    """Blocking engine; SQLite connections get foreign-key enforcement."""
    engine = create_engine(sync_url(url or get_settings().DATABASE_URL), **_engine_kwargs(**kw))
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_async_engine(url: Optional[str] = None, **kw: Any) -> AsyncEngine:
    settings = get_settings()
    engine = create_async_engine(async_url(url or settings.ASYNC_DATABASE_URL), **_engine_kwargs(**kw))
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


# ---------------------------------------------------------------------------
# Sessionmakers (one factory per URL)
# ---------------------------------------------------------------------------


_engines: dict[Optional[str], Engine] = {}
_async_engines: dict[Optional[str], AsyncEngine] = {}


def get_engine(url: Optional[str] = None) -> Engine:
    """Expose the engine (e.g., for health checks / pings)."""
    if url not in _engines:
        _engines[url] = make_engine(url)
    return _engines[url]


def get_async_engine(url: Optional[str] = None) -> AsyncEngine:
    if url not in _async_engines:
        _async_engines[url] = make_async_engine(url)
    return _async_engines[url]


@lru_cache
def get_sessionmaker(url: Optional[str] = None) -> sessionmaker[StrideSession]:
    return sessionmaker(bind=get_engine(url), class_=StrideSession, expire_on_commit=False)


@lru_cache
def get_async_sessionmaker(url: Optional[str] = None) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_async_engine(url),
        class_=AsyncSession,
        sync_session_class=StrideSession,
        expire_on_commit=False,
    )


def dispose_engines() -> None:
    """
    Dispose cached engines and forget every factory.

    Async engines are only dereferenced here (``close=False``); closing their
    pooled connections needs an event loop, see :func:`dispose_async_engines`.
    """
    for engine in _engines.values():
        engine.dispose()
    for async_engine in _async_engines.values():
        async_engine.sync_engine.dispose(close=False)
    _engines.clear()
    _async_engines.clear()
    get_sessionmaker.cache_clear()
    get_async_sessionmaker.cache_clear()


async def dispose_async_engines() -> None:
    for async_engine in list(_async_engines.values()):
        await async_engine.dispose()
    _async_engines.clear()
    get_async_sessionmaker.cache_clear()


# ---------------------------------------------------------------------------
# Unit-of-work helpers
#   - session_scope: sync context manager (scripts, migrations tooling)
#   - get_session: async context manager (use with `async with`)
#   - get_db: async generator (use with `Depends(get_db)`)
# ---------------------------------------------------------------------------


@contextmanager
def session_scope(url: Optional[str] = None, actor: Optional[str] = None) -> Iterator[StrideSession]:
    session = get_sessionmaker(url)()
    if actor:
        session.info[ACTOR] = actor
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@asynccontextmanager
async def get_session(url: Optional[str] = None) -> AsyncIterator[AsyncSession]:
    async with get_async_sessionmaker(url)() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_async_sessionmaker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


__all__ = [
    "StrideSession",
    "make_engine",
    "make_async_engine",
    "get_engine",
    "get_async_engine",
    "get_sessionmaker",
    "get_async_sessionmaker",
    "dispose_engines",
    "dispose_async_engines",
    "session_scope",
    "get_session",
    "get_db",
]
