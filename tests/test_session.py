# tests/test_session.py
from __future__ import annotations

from datetime import date

import pytest
import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from stridehr import db
from stridehr.db.models import Branch, Employee, Organization, Role
from stridehr.db.session import (
    dispose_async_engines,
    dispose_engines,
    get_async_engine,
    get_engine,
    get_session,
    get_sessionmaker,
    session_scope,
)
from stridehr.db.soft_delete import StrideSession


def test_sqlite_foreign_keys_are_enforced(engine):
    with engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


def test_dangling_foreign_key_is_rejected(session):
    session.add(Branch(organization_id=999_999, name="Nowhere"))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_restrict_blocks_deleting_a_staffed_branch(session, engine):
    branch = session.scalars(select(Branch).where(Branch.name == "Main Branch")).one()
    session.add(
        Employee(
            employee_id="EMP001",
            branch=branch,
            first_name="Grace",
            last_name="Hopper",
            email="grace@example.com",
            joining_date=date(2024, 3, 1),
        )
    )
    session.commit()
    branch_id = branch.id

    with pytest.raises(IntegrityError):
        with engine.begin() as conn:
            conn.execute(sa.text("DELETE FROM branches WHERE id = :id"), {"id": branch_id})


def test_employee_ids_are_unique(session):
    branch = session.scalars(select(Branch)).first()
    for first in ("Ann", "Ben"):
        session.add(
            Employee(
                employee_id="EMP042",
                branch_id=branch.id,
                first_name=first,
                last_name="Doe",
                email=f"{first.lower()}@example.com",
                joining_date=date(2024, 1, 1),
            )
        )
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_session_scope_commits_with_actor(migrated_url, engine):
    with session_scope(migrated_url, actor="importer") as s:
        assert isinstance(s, StrideSession)
        s.add(Organization(name="Globex"))

    with engine.connect() as conn:
        row = conn.execute(
            sa.text("SELECT created_by FROM organizations WHERE name = 'Globex'")
        ).one()
    assert row.created_by == "importer"


def test_session_scope_rolls_back_on_error(migrated_url, engine):
    with pytest.raises(RuntimeError):
        with session_scope(migrated_url) as s:
            s.add(Organization(name="Ghost"))
            s.flush()
            raise RuntimeError("boom")

    with engine.connect() as conn:
        count = conn.execute(sa.text("SELECT count(*) FROM organizations WHERE name = 'Ghost'")).scalar_one()
    assert count == 0


def test_sessionmaker_is_cached_per_url(migrated_url):
    assert db.get_sessionmaker(migrated_url) is db.get_sessionmaker(migrated_url)
    with db.get_sessionmaker(migrated_url)() as s:
        assert isinstance(s, StrideSession)


@pytest.mark.anyio
async def test_async_session_reads_seeded_roles(migrated_url):
    try:
        async with get_session(migrated_url) as session:
            names = (await session.scalars(select(Role.name).order_by(Role.hierarchy_level))).all()
    finally:
        await dispose_async_engines()
    assert names == ["SuperAdmin", "HRManager", "Manager", "Employee"]


@pytest.mark.anyio
async def test_async_session_hides_soft_deleted_rows(migrated_url):
    try:
        async with get_session(migrated_url) as session:
            role = (await session.scalars(select(Role).where(Role.name == "Employee"))).one()
            await session.delete(role)
            await session.commit()
            remaining = (await session.scalars(select(Role.name))).all()
    finally:
        await dispose_async_engines()
    assert "Employee" not in remaining
    assert len(remaining) == 3


def test_dispose_engines_forgets_every_factory(migrated_url):
    engine = get_engine(migrated_url)
    async_engine = get_async_engine(migrated_url)
    maker = get_sessionmaker(migrated_url)

    dispose_engines()

    assert get_engine(migrated_url) is not engine
    assert get_async_engine(migrated_url) is not async_engine
    assert get_sessionmaker(migrated_url) is not maker


@pytest.mark.anyio
async def test_dispose_async_engines_closes_and_forgets(migrated_url):
    engine = get_async_engine(migrated_url)
    async with get_session(migrated_url) as session:
        assert (await session.scalars(select(Role.id))).first() is not None

    await dispose_async_engines()
    assert get_async_engine(migrated_url) is not engine
    await dispose_async_engines()
