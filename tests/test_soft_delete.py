# tests/test_soft_delete.py
from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import select

from stridehr.db.models import Branch, Organization
from stridehr.db.soft_delete import ACTOR, HARD_DELETE, INCLUDE_DELETED, restore, soft_delete


def _raw(engine, sql: str, **params):
    with engine.connect() as conn:
        return conn.execute(sa.text(sql), params).all()


def _org_with_branches(session, name: str, *branch_names: str) -> Organization:
    org = Organization(name=name, branches=[Branch(name=b) for b in branch_names])
    session.add(org)
    session.commit()
    return org


def test_new_rows_are_stamped(session, engine):
    session.info[ACTOR] = "alice"
    org = _org_with_branches(session, "Acme", "HQ")
    assert org.created_at is not None
    assert org.created_by == "alice"
    assert org.is_deleted is False
    assert org.branches[0].created_by == "alice"
    assert org.updated_at is None


def test_updates_are_stamped(session):
    org = _org_with_branches(session, "Acme")
    session.info[ACTOR] = "bob"
    org.name = "Acme Ltd"
    session.commit()
    assert org.updated_at is not None
    assert org.updated_by == "bob"
    assert org.created_by is None


def test_delete_flags_the_row(session, engine):
    org = _org_with_branches(session, "Acme", "HQ", "Remote")
    hq = next(b for b in org.branches if b.name == "HQ")
    hq_id = hq.id

    session.info[ACTOR] = "carol"
    session.delete(hq)
    session.commit()

    visible = session.scalars(select(Branch.name)).all()
    assert "HQ" not in visible and "Remote" in visible

    rows = _raw(engine, "SELECT is_deleted, deleted_by, deleted_at FROM branches WHERE id = :id", id=hq_id)
    assert len(rows) == 1
    is_deleted, deleted_by, deleted_at = rows[0]
    assert is_deleted in (1, True)
    assert deleted_by == "carol"
    assert deleted_at is not None


def test_include_deleted_option(session):
    org = _org_with_branches(session, "Acme", "HQ")
    session.delete(org.branches[0])
    session.commit()

    assert session.scalars(select(Branch).where(Branch.name == "HQ")).all() == []
    stmt = select(Branch).where(Branch.name == "HQ").execution_options(**{INCLUDE_DELETED: True})
    (hq,) = session.scalars(stmt).all()
    assert hq.is_deleted is True


def test_relationship_loads_hide_deleted_rows(session_factory):
    with session_factory() as s:
        org = _org_with_branches(s, "Acme", "HQ", "Remote")
        soft_delete(s, next(b for b in org.branches if b.name == "HQ"), actor="dave")
        s.commit()

    with session_factory() as s:
        org = s.scalars(select(Organization).where(Organization.name == "Acme")).one()
        assert [b.name for b in org.branches] == ["Remote"]


def test_lazy_load_of_a_session_added_parent_hides_deleted_rows(session):
    org = _org_with_branches(session, "Acme", "HQ", "Remote")
    soft_delete(session, next(b for b in org.branches if b.name == "HQ"))
    session.commit()

    session.expire(org, ["branches"])
    assert [b.name for b in org.branches] == ["Remote"]


def test_cascaded_delete_is_soft(session, engine):
    org = _org_with_branches(session, "Acme", "HQ", "Remote")
    org_id = org.id
    session.delete(org)
    session.commit()

    assert session.scalars(select(Organization).where(Organization.id == org_id)).first() is None
    rows = _raw(engine, "SELECT is_deleted FROM branches WHERE organization_id = :id", id=org_id)
    assert len(rows) == 2
    assert all(r[0] in (1, True) for r in rows)


def test_hard_delete_removes_the_row(session, engine):
    org = _org_with_branches(session, "Throwaway")
    org_id = org.id
    session.info[HARD_DELETE] = True
    session.delete(org)
    session.commit()
    assert _raw(engine, "SELECT id FROM organizations WHERE id = :id", id=org_id) == []


def test_restore(session):
    org = _org_with_branches(session, "Acme")
    soft_delete(session, org, actor="erin")
    session.commit()
    assert org.deleted_by == "erin"
    assert session.scalars(select(Organization).where(Organization.name == "Acme")).first() is None

    restore(session, org)
    session.commit()
    assert org.deleted_at is None
    assert session.scalars(select(Organization).where(Organization.name == "Acme")).one() is org
