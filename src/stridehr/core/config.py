# src/stridehr/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# sync driver -> async driver
_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "postgresql+psycopg": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}
_SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql+psycopg2",
    "postgresql": "postgresql+psycopg2",
    "sqlite+aiosqlite": "sqlite",
}


def _swap_scheme(url: str, table: dict[str, str]) -> str:
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{table.get(scheme, scheme)}://{rest}"


def sync_url(url: str) -> str:
    """Force a blocking driver (Alembic and the sync engine need one)."""
    return _swap_scheme(url, _SYNC_DRIVERS)


def async_url(url: str) -> str:
    """Force an asyncio driver for ``create_async_engine``."""
    return _swap_scheme(url, _ASYNC_DRIVERS)


class Settings(BaseSettings):
    # ---- App ----
    APP_NAME: str = "StrideHR"
    APP_VERSION: str = "0.1.0"

    # ---- DB ----
    DATABASE_URL: str = Field(
        default="sqlite:///./stridehr.db",
        validation_alias=AliasChoices("STRIDEHR_DATABASE_URL", "DATABASE_URL"),
    )
    ASYNC_DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("STRIDEHR_ASYNC_DATABASE_URL", "ASYNC_DATABASE_URL"),
    )
    DB_ECHO: bool = False
    DB_POOL_PRE_PING: bool = True
    TESTING: bool = False

    # ---- Logging ----
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias=AliasChoices("STRIDEHR_LOG_LEVEL", "LOG_LEVEL"),
    )

    # ---- Migrations ----
    MIGRATIONS_VERSION_TABLE: str = "alembic_version"
    SEED_REFERENCE_DATA: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    @model_validator(mode="after")
    def _derive_async_url(self) -> "Settings":
        if not self.ASYNC_DATABASE_URL:
            self.ASYNC_DATABASE_URL = async_url(self.DATABASE_URL)
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings", "sync_url", "async_url"]
