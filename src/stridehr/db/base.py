# src/stridehr/db/base.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy import MetaData
from sqlalchemy.dialects import postgresql as pg
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON, TypeDecorator


# -----------------------------------------------------------------------------
# Declarative Base with naming conventions (stable names for Alembic)
# -----------------------------------------------------------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Shared declarative base for all StrideHR entities."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# -----------------------------------------------------------------------------
# JSONB that becomes JSONB on Postgres and JSON elsewhere
# -----------------------------------------------------------------------------
class JSONB(TypeDecorator):
    """
    Platform-aware JSON type.

    - On PostgreSQL => JSONB
    - Elsewhere     => JSON
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(pg.JSONB())
        return dialect.type_descriptor(JSON())


# -----------------------------------------------------------------------------
# Column mixins
# -----------------------------------------------------------------------------
class IdMixin:
    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))


class AuditMixin:
    created_by: Mapped[Optional[str]] = mapped_column(sa.String(100))
    updated_by: Mapped[Optional[str]] = mapped_column(sa.String(100))


class SoftDeleteMixin:
    """
    Rows are flagged instead of removed.

    Sessions built by ``stridehr.db.session`` hide flagged rows from ORM
    queries; see ``stridehr.db.soft_delete``.
    """
    is_deleted: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False, server_default=sa.false()
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    deleted_by: Mapped[Optional[str]] = mapped_column(sa.String(100))


class EntityMixin(IdMixin, TimestampMixin, AuditMixin, SoftDeleteMixin):
    """id + audit timestamps + actor columns + soft-delete flags."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"


def fk(target: str, ondelete: str, **kw: Any) -> sa.ForeignKey:
    """ForeignKey to ``<target>.id`` with an explicit referential action."""
    return sa.ForeignKey(f"{target}.id", ondelete=ondelete, **kw)


__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "JSONB",
    "IdMixin",
    "TimestampMixin",
    "AuditMixin",
    "SoftDeleteMixin",
    "EntityMixin",
    "fk",
]
