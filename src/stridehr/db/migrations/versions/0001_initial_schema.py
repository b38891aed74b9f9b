"""Create tables for all ORM models

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations

from importlib import import_module

from alembic import op
from sqlalchemy.schema import CreateIndex, CreateTable, DropTable

from stridehr.app_logger import get_logger

log = get_logger("migrations.0001_initial_schema")

# ---- Alembic identifiers ----
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---- Utilities ----
def _metadata():
    # Import the models package to populate Base.metadata,
    # but DO NOT import stridehr.db.session (which builds engines).
    import_module("stridehr.db.models")
    from stridehr.db.base import Base

    return Base.metadata


# ---- Migration steps ----
def upgrade() -> None:
    # sorted_tables is parent-first, so every FK target exists before it is referenced.
    # DDL constructs go through op.execute so --sql renders them too.
    tables = _metadata().sorted_tables
    for table in tables:
        op.execute(CreateTable(table))
        for index in sorted(table.indexes, key=lambda ix: ix.name):
            op.execute(CreateIndex(index))
        log.info("created table %s (%d indexes)", table.name, len(table.indexes))
    log.info("initial schema: %d tables", len(tables))


def downgrade() -> None:
    tables = list(reversed(_metadata().sorted_tables))
    for table in tables:
        op.execute(DropTable(table))
        log.info("dropped table %s", table.name)
