# src/stridehr/db/migrate.py
"""
Programmatic migration runner.

Wraps Alembic's command API so the CLI, tests and deployment scripts share one
code path:

* ``upgrade`` / ``downgrade`` apply or revert revisions (``sql=True`` renders
  the DDL instead and returns it as a string),
* ``current_revision`` / ``pending_revisions`` / ``history`` report state,
* ``check_schema`` diffs the live database against ``Base.metadata``,
* ``table_dependency_order`` / ``drop_order`` / ``schema_summary`` describe
  the metadata itself.

Every Alembic or SQLAlchemy failure is logged and re-raised as
:class:`~stridehr.errors.MigrationError`.  An unparseable database URL or
version table name raises :class:`~stridehr.errors.ConfigurationError`
before anything connects.
"""
from __future__ import annotations

import io
import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

import sqlalchemy as sa
from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from stridehr.app_logger import get_logger
from stridehr.core.config import get_settings, sync_url
from stridehr.errors import ConfigurationError, MigrationError, SchemaDriftError

log = get_logger("migrate")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


@dataclass(frozen=True)
class RevisionInfo:
    revision: str
    down_revision: Optional[str]
    doc: str
    is_head: bool


@dataclass(frozen=True)
class SchemaDifference:
    kind: str  # add_table, remove_table, add_column, modify_type, ...
    table: Optional[str]
    detail: str

    def __str__(self) -> str:
        where = f" on {self.table}" if self.table else ""
        return f"{self.kind}{where}: {self.detail}"


@dataclass(frozen=True)
class TableSummary:
    name: str
    domain: Optional[str]
    columns: int
    foreign_keys: int
    indexes: int
    unique_constraints: int


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _resolve_url(url: Optional[str]) -> str:
    raw = url or get_settings().DATABASE_URL
    try:
        make_url(raw)
    except ArgumentError:
        # the message would echo the URL, password included
        raise ConfigurationError("could not parse database URL") from None
    return sync_url(raw)


def _version_table() -> str:
    name = get_settings().MIGRATIONS_VERSION_TABLE
    if not _IDENTIFIER.match(name):
        raise ConfigurationError(f"invalid migrations version table name {name!r}")
    return name


def _safe_url(url: str) -> str:
    return make_url(url).render_as_string(hide_password=True)


def _metadata(metadata: Optional[sa.MetaData] = None) -> sa.MetaData:
    if metadata is not None:
        return metadata
    import stridehr.db.models  # noqa: F401  registers every table
    from stridehr.db.base import Base

    return Base.metadata


@contextmanager
def _migration_errors(action: str, revision: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except (CommandError, SQLAlchemyError) as exc:
        log.error("%s failed (revision=%s): %s", action, revision, exc)
        raise MigrationError(f"{action} failed: {exc}", revision=revision) from exc


@contextmanager
def _connect(url: Optional[str]) -> Iterator[sa.Connection]:
    engine = sa.create_engine(_resolve_url(url), poolclass=NullPool)
    try:
        with engine.connect() as connection:
            yield connection
    finally:
        engine.dispose()


# ---------------------------------------------------------------------------
# configuration
# ---------------------------------------------------------------------------


def alembic_config(url: Optional[str] = None, output_buffer: Optional[Any] = None) -> Config:
    """Build an Alembic ``Config`` pointing at the packaged migration scripts."""
    cfg = Config(output_buffer=output_buffer) if output_buffer is not None else Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("version_table", _version_table())
    # ConfigParser interpolation: a literal % must be doubled
    cfg.set_main_option("sqlalchemy.url", _resolve_url(url).replace("%", "%%"))
    return cfg


def _script() -> ScriptDirectory:
    return ScriptDirectory.from_config(alembic_config())


# ---------------------------------------------------------------------------
# commands
# ---------------------------------------------------------------------------


def upgrade(revision: str = "head", url: Optional[str] = None, sql: bool = False) -> Optional[str]:
    """Apply revisions up to ``revision``; with ``sql=True`` return the rendered DDL."""
    buf = io.StringIO() if sql else None
    cfg = alembic_config(url, output_buffer=buf)
    log.info("upgrade %s -> %s%s", _safe_url(_resolve_url(url)), revision, " (offline)" if sql else "")
    with _migration_errors("upgrade", revision):
        command.upgrade(cfg, revision, sql=sql)
    return buf.getvalue() if buf is not None else None


def downgrade(revision: str = "base", url: Optional[str] = None, sql: bool = False) -> Optional[str]:
    """Revert revisions down to ``revision``; with ``sql=True`` return the rendered DDL."""
    buf = io.StringIO() if sql else None
    cfg = alembic_config(url, output_buffer=buf)
    if sql and ":" not in revision:
        # offline downgrades need an explicit starting point
        revision = f"{head_revision()}:{revision}"
    log.info("downgrade %s -> %s%s", _safe_url(_resolve_url(url)), revision, " (offline)" if sql else "")
    with _migration_errors("downgrade", revision):
        command.downgrade(cfg, revision, sql=sql)
    return buf.getvalue() if buf is not None else None


def current_revision(url: Optional[str] = None) -> Optional[str]:
    """Revision recorded in the version table, or None for an unmigrated database."""
    with _migration_errors("current"):
        with _connect(url) as connection:
            ctx = MigrationContext.configure(
                connection,
                opts={"version_table": _version_table()},
            )
            return ctx.get_current_revision()


def head_revision() -> str:
    with _migration_errors("heads"):
        head = _script().get_current_head()
    if head is None:
        raise MigrationError("no migration scripts found")
    return head


def history() -> list[RevisionInfo]:
    """All revisions, oldest first."""
    with _migration_errors("history"):
        scripts = list(_script().walk_revisions())
    out = []
    for sc in reversed(scripts):
        down = sc.down_revision
        if isinstance(down, (tuple, list)):
            down = ",".join(down)
        out.append(
            RevisionInfo(
                revision=sc.revision,
                down_revision=down,
                doc=sc.doc or "",
                is_head=sc.is_head,
            )
        )
    return out


def pending_revisions(url: Optional[str] = None) -> list[str]:
    """Revisions not yet applied to the database, oldest first."""
    revisions = [r.revision for r in history()]
    current = current_revision(url)
    if current is None:
        return revisions
    if current not in revisions:
        raise MigrationError(f"database is at unknown revision {current!r}", revision=current)
    return revisions[revisions.index(current) + 1:]


# ---------------------------------------------------------------------------
# drift detection
# ---------------------------------------------------------------------------


def _flatten(diffs: list[Any]) -> Iterator[tuple]:
    for diff in diffs:
        if isinstance(diff, list):
            # column-level modifications come grouped per column
            yield from _flatten(diff)
        else:
            yield diff


def _describe(diff: tuple) -> SchemaDifference:
    kind = diff[0]
    if kind.startswith("modify_"):
        # (kind, schema, table, column, existing_kw, old, new)
        return SchemaDifference(kind, diff[2], f"{diff[3]}: {diff[5]!r} -> {diff[6]!r}")
    if kind in ("add_column", "remove_column"):
        # (kind, schema, table, column)
        return SchemaDifference(kind, diff[2], diff[3].name)

    obj = diff[1]
    if isinstance(obj, sa.Table):
        return SchemaDifference(kind, obj.name, obj.name)
    table = getattr(obj, "table", None)
    return SchemaDifference(kind, getattr(table, "name", None), str(getattr(obj, "name", None) or obj))


def check_schema(url: Optional[str] = None, strict: bool = False) -> list[SchemaDifference]:
    """Compare the live database with the model metadata."""
    metadata = _metadata()
    with _migration_errors("check"):
        with _connect(url) as connection:
            ctx = MigrationContext.configure(
                connection,
                opts={
                    "compare_type": True,
                    "version_table": _version_table(),
                },
            )
            differences = [_describe(d) for d in _flatten(compare_metadata(ctx, metadata))]

    if differences:
        log.warning("%d schema difference(s) detected", len(differences))
        if strict:
            raise SchemaDriftError(differences)
    else:
        log.info("schema matches model metadata")
    return differences


# ---------------------------------------------------------------------------
# metadata introspection
# ---------------------------------------------------------------------------


def table_dependency_order(metadata: Optional[sa.MetaData] = None) -> list[str]:
    """Table names ordered so every FK target precedes the tables that reference it."""
    return [t.name for t in _metadata(metadata).sorted_tables]


def drop_order(metadata: Optional[sa.MetaData] = None) -> list[str]:
    return list(reversed(table_dependency_order(metadata)))


def schema_summary(metadata: Optional[sa.MetaData] = None) -> list[TableSummary]:
    from stridehr.db.models import domain_of

    out = []
    for table in _metadata(metadata).sorted_tables:
        out.append(
            TableSummary(
                name=table.name,
                domain=domain_of(table.name),
                columns=len(table.columns),
                foreign_keys=len(table.foreign_key_constraints),
                indexes=len(table.indexes),
                unique_constraints=sum(isinstance(c, sa.UniqueConstraint) for c in table.constraints),
            )
        )
    return out


__all__ = [
    "MIGRATIONS_DIR",
    "RevisionInfo",
    "SchemaDifference",
    "TableSummary",
    "alembic_config",
    "upgrade",
    "downgrade",
    "current_revision",
    "head_revision",
    "history",
    "pending_revisions",
    "check_schema",
    "table_dependency_order",
    "drop_order",
    "schema_summary",
]
