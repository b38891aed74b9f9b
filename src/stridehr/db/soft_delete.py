# src/stridehr/db/soft_delete.py
"""
Soft-delete and audit stamping for StrideHR sessions.

Two hooks are attached to :class:`StrideSession`:

* ``do_orm_execute`` adds a loader criterion to every ORM ``SELECT`` so rows
  with ``is_deleted = true`` never come back, including lazy/eager
  relationship loads.  Pass ``execution_options(include_deleted=True)`` on a
  statement to see them.
* ``before_flush`` stamps ``created_at`` / ``updated_at`` (and the actor
  columns when ``session.info["actor"]`` is set), and turns
  ``session.delete(obj)`` into an UPDATE of the soft-delete columns.  Set
  ``session.info["hard_delete"] = True`` to emit real DELETEs.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from stridehr.app_logger import get_logger
from stridehr.db.base import AuditMixin, SoftDeleteMixin, TimestampMixin

log = get_logger("db.soft_delete")

INCLUDE_DELETED = "include_deleted"
HARD_DELETE = "hard_delete"
ACTOR = "actor"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StrideSession(Session):
    """Session with soft-delete filtering and audit stamping."""


@event.listens_for(StrideSession, "do_orm_execute")
def _hide_soft_deleted(state: ORMExecuteState) -> None:
    # column loads refresh rows already in the identity map, flagged or not
    if (
        state.is_select
        and not state.is_column_load
        and not state.execution_options.get(INCLUDE_DELETED, False)
    ):
        state.statement = state.statement.options(
            with_loader_criteria(
                SoftDeleteMixin,
                lambda cls: cls.is_deleted.is_(False),
                include_aliases=True,
            )
        )


def _mark_deleted(obj: SoftDeleteMixin, actor: Optional[str], when: datetime) -> None:
    obj.is_deleted = True
    obj.deleted_at = when
    if actor:
        obj.deleted_by = actor


@event.listens_for(StrideSession, "before_flush")
def _stamp_and_soft_delete(session: Session, flush_context: Any, instances: Any) -> None:
    now = utcnow()
    actor = session.info.get(ACTOR)

    for obj in session.new:
        if isinstance(obj, TimestampMixin) and obj.created_at is None:
            obj.created_at = now
        if actor and isinstance(obj, AuditMixin) and obj.created_by is None:
            obj.created_by = actor

    for obj in session.dirty:
        if not session.is_modified(obj, include_collections=False):
            continue
        if isinstance(obj, TimestampMixin):
            obj.updated_at = now
        if actor and isinstance(obj, AuditMixin):
            obj.updated_by = actor

    if session.info.get(HARD_DELETE):
        return

    for obj in list(session.deleted):
        if not isinstance(obj, SoftDeleteMixin):
            continue
        _mark_deleted(obj, actor, now)
        if isinstance(obj, TimestampMixin):
            obj.updated_at = now
        # re-adding moves the instance from the pending-delete set to dirty
        session.add(obj)
        log.debug("soft-deleted %r", obj)


def soft_delete(session: Session, obj: SoftDeleteMixin, actor: Optional[str] = None) -> None:
    """Flag ``obj`` as deleted; it is written on the next flush."""
    _mark_deleted(obj, actor or session.info.get(ACTOR), utcnow())
    session.add(obj)


def restore(session: Session, obj: SoftDeleteMixin) -> None:
    obj.is_deleted = False
    obj.deleted_at = None
    obj.deleted_by = None
    session.add(obj)


__all__ = [
    "StrideSession",
    "INCLUDE_DELETED",
    "HARD_DELETE",
    "ACTOR",
    "soft_delete",
    "restore",
    "utcnow",
]
