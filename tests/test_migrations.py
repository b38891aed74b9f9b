# tests/test_migrations.py
from __future__ import annotations

import pytest
from alembic.script import ScriptDirectory
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool

from stridehr.core.config import get_settings
from stridehr.db import migrate
from stridehr.db.base import Base
from stridehr.errors import ConfigurationError, MigrationError, SchemaDriftError

HEAD = "0002_seed_reference_data"
INITIAL = "0001_initial_schema"


def _inspect(url: str) -> sa.Inspector:
    return sa.inspect(sa.create_engine(url, poolclass=NullPool))


def _count(url: str, sql: str) -> int:
    engine = sa.create_engine(url, poolclass=NullPool)
    try:
        with engine.connect() as conn:
            return conn.execute(sa.text(sql)).scalar_one()
    finally:
        engine.dispose()


def test_upgrade_creates_every_table(migrated_url):
    tables = set(_inspect(migrated_url).get_table_names())
    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables
    assert migrate.current_revision(migrated_url) == HEAD
    assert migrate.current_revision(migrated_url) == migrate.head_revision()


def test_fresh_database_has_no_revision(db_url):
    assert migrate.current_revision(db_url) is None
    assert migrate.pending_revisions(db_url) == [INITIAL, HEAD]


def test_downgrade_to_base_drops_everything(migrated_url):
    migrate.downgrade("base", url=migrated_url)
    assert set(_inspect(migrated_url).get_table_names()) == {"alembic_version"}
    assert migrate.current_revision(migrated_url) is None


def test_round_trip(migrated_url):
    migrate.downgrade("base", url=migrated_url)
    migrate.upgrade("head", url=migrated_url)
    assert migrate.current_revision(migrated_url) == HEAD
    assert _count(migrated_url, "SELECT count(*) FROM roles") == 4


def test_step_by_step_upgrade(db_url):
    migrate.upgrade(INITIAL, url=db_url)
    assert migrate.current_revision(db_url) == INITIAL
    assert migrate.pending_revisions(db_url) == [HEAD]
    migrate.upgrade("head", url=db_url)
    assert migrate.pending_revisions(db_url) == []


def test_performance_indexes_are_created(migrated_url):
    inspector = _inspect(migrated_url)
    employee_ix = {ix["name"] for ix in inspector.get_indexes("employees")}
    assert {"ix_employees_branch_status", "ix_employees_joining_date"} <= employee_ix
    attendance_ix = {ix["name"] for ix in inspector.get_indexes("attendance_records")}
    assert "ix_attendance_records_employee_date_status" in attendance_ix
    notification_ix = {ix["name"] for ix in inspector.get_indexes("notifications")}
    assert "ix_notifications_user_read" in notification_ix


def test_foreign_key_actions_are_created(migrated_url):
    fks = _inspect(migrated_url).get_foreign_keys("employees")
    by_column = {fk["constrained_columns"][0]: fk for fk in fks}
    assert by_column["branch_id"]["referred_table"] == "branches"
    assert by_column["branch_id"]["options"].get("ondelete") == "RESTRICT"
    assert by_column["reporting_manager_id"]["options"].get("ondelete") == "SET NULL"


def test_unique_role_names_are_enforced(migrated_url):
    engine = sa.create_engine(migrated_url, poolclass=NullPool)
    try:
        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(sa.text("INSERT INTO roles (name, hierarchy_level) VALUES ('SuperAdmin', 9)"))
    finally:
        engine.dispose()


def _seed_module():
    return ScriptDirectory.from_config(migrate.alembic_config()).get_revision(HEAD).module


def test_reference_data_is_seeded(migrated_url):
    catalogue = _seed_module().permission_rows()
    assert _count(migrated_url, "SELECT count(*) FROM organizations") == 1
    assert _count(migrated_url, "SELECT count(*) FROM branches") == 1
    assert _count(migrated_url, "SELECT count(*) FROM roles") == 4
    assert _count(migrated_url, "SELECT count(*) FROM permissions") == len(catalogue)
    assert (
        _count(
            migrated_url,
            "SELECT count(*) FROM role_permissions rp JOIN roles r ON r.id = rp.role_id "
            "WHERE r.name = 'SuperAdmin'",
        )
        == len(catalogue)
    )
    assert _count(migrated_url, "SELECT count(*) FROM roles WHERE created_by = 'system'") == 4


def test_permission_catalogue_covers_enforced_names(migrated_url):
    engine = sa.create_engine(migrated_url, poolclass=NullPool)
    try:
        with engine.connect() as conn:
            rows = {
                r.name: r
                for r in conn.execute(sa.text("SELECT name, module, resource, action FROM permissions"))
            }
    finally:
        engine.dispose()

    for name in (
        "Employee.Manage",
        "Role.Assign",
        "Payroll.Calculate",
        "Report.View",
        "User.TerminateSession",
        "DocumentTemplate.Read",
        "Training.IssueCertifications",
        "Grievance.ReadAnonymous",
        "SupportTicket.Reopen",
        "Expense.Reimburse",
    ):
        assert name in rows, name
    assert "Reports.View" not in rows

    payslips = rows["Payroll.Payslips.Release"]
    assert (payslips.module, payslips.resource, payslips.action) == ("Payroll", "Payslips", "Release")
    assert rows["Asset.Read"].resource is None


def test_downgrading_the_seed_removes_only_seed_rows(migrated_url):
    migrate.downgrade(INITIAL, url=migrated_url)
    assert migrate.current_revision(migrated_url) == INITIAL
    for table in ("organizations", "branches", "roles", "permissions", "role_permissions"):
        assert _count(migrated_url, f"SELECT count(*) FROM {table}") == 0
    assert "employees" in _inspect(migrated_url).get_table_names()


def test_seeding_can_be_disabled(db_url, monkeypatch):
    monkeypatch.setenv("SEED_REFERENCE_DATA", "false")
    get_settings.cache_clear()
    migrate.upgrade("head", url=db_url)
    assert migrate.current_revision(db_url) == HEAD
    assert _count(db_url, "SELECT count(*) FROM roles") == 0
    assert _count(db_url, "SELECT count(*) FROM permissions") == 0


def test_offline_upgrade_renders_sql(db_url):
    sql = migrate.upgrade("head", url=db_url, sql=True)
    assert "CREATE TABLE organizations" in sql
    assert "CREATE TABLE employees" in sql
    assert "CREATE INDEX ix_employees_branch_status" in sql
    assert "INSERT INTO roles" in sql
    assert sql.index("CREATE TABLE branches") < sql.index("CREATE TABLE employees")
    # nothing was executed
    assert _inspect(db_url).get_table_names() == []


def test_offline_downgrade_renders_sql(db_url):
    sql = migrate.downgrade("base", url=db_url, sql=True)
    assert "DROP TABLE employees" in sql
    assert sql.index("DROP TABLE employees") < sql.index("DROP TABLE branches")


def test_history_is_oldest_first():
    revisions = migrate.history()
    assert [r.revision for r in revisions] == [INITIAL, HEAD]
    assert revisions[0].down_revision is None
    assert revisions[1].down_revision == INITIAL
    assert revisions[1].is_head and not revisions[0].is_head
    assert revisions[0].doc == "Create tables for all ORM models"


def test_pending_revisions_rejects_unknown_version(migrated_url):
    engine = sa.create_engine(migrated_url, poolclass=NullPool)
    with engine.begin() as conn:
        conn.execute(sa.text("UPDATE alembic_version SET version_num = 'deadbeef'"))
    engine.dispose()
    with pytest.raises(MigrationError) as excinfo:
        migrate.pending_revisions(migrated_url)
    assert excinfo.value.revision == "deadbeef"


def test_unknown_revision_raises(db_url):
    with pytest.raises(MigrationError) as excinfo:
        migrate.upgrade("does_not_exist", url=db_url)
    assert excinfo.value.revision == "does_not_exist"


def test_unreachable_database_raises(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'stridehr.db'}"
    with pytest.raises(MigrationError):
        migrate.upgrade("head", url=url)


def test_custom_version_table(db_url, monkeypatch):
    monkeypatch.setenv("MIGRATIONS_VERSION_TABLE", "stridehr_schema_version")
    get_settings.cache_clear()
    migrate.upgrade("head", url=db_url)
    tables = set(_inspect(db_url).get_table_names())
    assert "stridehr_schema_version" in tables
    assert "alembic_version" not in tables
    assert migrate.current_revision(db_url) == HEAD


def test_check_schema_on_migrated_database(migrated_url):
    differences = migrate.check_schema(migrated_url)
    assert not [d for d in differences if d.kind in ("add_table", "remove_table")]


def test_check_schema_on_empty_database(db_url):
    differences = migrate.check_schema(db_url)
    added = {d.table for d in differences if d.kind == "add_table"}
    assert added == set(Base.metadata.tables)
    assert "add_table on employees: employees" in {str(d) for d in differences}

    with pytest.raises(SchemaDriftError) as excinfo:
        migrate.check_schema(db_url, strict=True)
    assert len(excinfo.value.differences) == len(differences)


def test_alembic_config_escapes_percent():
    cfg = migrate.alembic_config("postgresql://hr:p%40ss@db/stridehr")
    assert cfg.get_main_option("sqlalchemy.url") == "postgresql+psycopg2://hr:p%40ss@db/stridehr"
    assert cfg.get_main_option("script_location") == str(migrate.MIGRATIONS_DIR)


def test_unparseable_url_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as excinfo:
        migrate.upgrade("head", url="not a database url")
    assert "not a database url" not in str(excinfo.value)


def test_invalid_version_table_is_a_configuration_error(db_url, monkeypatch):
    monkeypatch.setenv("MIGRATIONS_VERSION_TABLE", "versions; drop table roles")
    get_settings.cache_clear()
    with pytest.raises(ConfigurationError):
        migrate.current_revision(db_url)
    with pytest.raises(ConfigurationError):
        migrate.upgrade("head", url=db_url)
