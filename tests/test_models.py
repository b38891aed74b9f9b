# tests/test_models.py
"""Static checks on the declarative metadata (no database needed)."""
from __future__ import annotations

import inspect
from datetime import date
from decimal import Decimal

import pytest
import sqlalchemy as sa

from stridehr.db import migrate
from stridehr.db.base import Base
from stridehr.db.models import ALL_MODELS, DOMAINS, Employee, LeaveBalance, domain_of

COMMON_COLUMNS = {
    "id",
    "created_at",
    "updated_at",
    "created_by",
    "updated_by",
    "is_deleted",
    "deleted_at",
    "deleted_by",
}

PERFORMANCE_INDEXES = {
    "employees": {
        "ix_employees_branch_status",
        "ix_employees_department_status",
        "ix_employees_manager_status",
        "ix_employees_joining_date",
        "ix_employees_full_name",
    },
    "users": {"ix_users_email_active", "ix_users_last_login_at"},
    "employee_roles": {"ix_employee_roles_employee_active"},
    "role_permissions": {"ix_role_permissions_role_granted"},
    "attendance_records": {
        "ix_attendance_records_employee_date_status",
        "ix_attendance_records_date_status",
        "ix_attendance_records_employee_created",
    },
    "break_records": {"ix_break_records_attendance_start"},
    "shift_assignments": {"ix_shift_assignments_employee_start_date"},
    "shift_swap_requests": {"ix_shift_swap_requests_requester_status"},
    "payroll_records": {
        "ix_payroll_records_period_status",
        "ix_payroll_records_employee_status",
        "ix_payroll_records_processed_at",
    },
    "payroll_adjustments": {"ix_payroll_adjustments_record_type"},
    "exchange_rates": {"ix_exchange_rates_currencies_effective_date"},
    "projects": {"ix_projects_status_priority", "ix_projects_date_range"},
    "project_tasks": {"ix_project_tasks_project_status", "ix_project_tasks_assignee_status"},
    "project_assignments": {"ix_project_assignments_employee_unassigned"},
    "dsrs": {"ix_dsrs_employee_date", "ix_dsrs_project_date"},
    "audit_logs": {
        "ix_audit_logs_user_timestamp",
        "ix_audit_logs_event_type_timestamp",
        "ix_audit_logs_timestamp",
    },
    "notifications": {
        "ix_notifications_user_read",
        "ix_notifications_type_created",
        "ix_notifications_read_created",
    },
    "leave_requests": {"ix_leave_requests_employee_status", "ix_leave_requests_date_range"},
    "leave_balances": {"ix_leave_balances_employee_policy_year"},
    "leave_approval_histories": {"ix_leave_approval_histories_request_level"},
    "performance_reviews": {"ix_performance_reviews_employee_period"},
    "performance_goals": {"ix_performance_goals_employee_status"},
    "performance_improvement_plans": {"ix_performance_improvement_plans_employee_status"},
}

UNIQUE_KEYS = [
    ("employees", ("employee_id",)),
    ("users", ("username",)),
    ("users", ("email",)),
    ("roles", ("name",)),
    ("permissions", ("name",)),
    ("role_permissions", ("role_id", "permission_id")),
    ("leave_balances", ("employee_id", "leave_policy_id", "year")),
    ("support_tickets", ("ticket_number",)),
    ("grievances", ("grievance_number",)),
    ("expense_claims", ("claim_number",)),
    ("generated_documents", ("document_number",)),
    ("assets", ("asset_tag",)),
    ("certifications", ("certificate_number",)),
    ("refresh_tokens", ("token",)),
    ("user_sessions", ("session_id",)),
    ("knowledge_base_categories", ("slug",)),
    ("travel_expenses", ("expense_claim_id",)),
]


def _unique_keys(table: sa.Table) -> set[tuple[str, ...]]:
    keys = {
        tuple(sorted(c.name for c in con.columns))
        for con in table.constraints
        if isinstance(con, sa.UniqueConstraint)
    }
    keys |= {tuple(sorted(c.name for c in ix.columns)) for ix in table.indexes if ix.unique}
    keys |= {(c.name,) for c in table.columns if c.unique}
    return keys


def test_every_domain_table_is_registered():
    registered = set(Base.metadata.tables)
    by_domain = {name for tables in DOMAINS.values() for name in tables}
    assert by_domain == registered
    assert len(ALL_MODELS) == len(registered)
    assert all(DOMAINS.values())


def test_domain_lookup():
    assert domain_of("payroll_records") == "payroll"
    assert domain_of("webhook_deliveries") == "integrations"
    assert domain_of("no_such_table") is None


@pytest.mark.parametrize("table", sorted(Base.metadata.tables))
def test_common_columns(table):
    columns = set(Base.metadata.tables[table].columns.keys())
    assert COMMON_COLUMNS <= columns


def test_primary_keys_are_integer_ids():
    for table in Base.metadata.sorted_tables:
        assert [c.name for c in table.primary_key.columns] == ["id"], table.name


def test_every_foreign_key_has_a_referential_action():
    for table in Base.metadata.sorted_tables:
        for fk in table.foreign_keys:
            assert fk.ondelete in {"CASCADE", "SET NULL", "RESTRICT"}, f"{table.name}.{fk.parent.name}"


def test_set_null_columns_are_nullable():
    for table in Base.metadata.sorted_tables:
        for fk in table.foreign_keys:
            if fk.ondelete == "SET NULL":
                assert fk.parent.nullable, f"{table.name}.{fk.parent.name}"


def test_optional_annotations_match_column_nullability():
    checked = 0
    for model in ALL_MODELS:
        for name, annotation in inspect.get_annotations(model).items():
            column = model.__table__.c[name]
            optional = annotation.startswith("Mapped[Optional[")
            assert column.nullable is optional, f"{model.__tablename__}.{name}: {annotation}"
            checked += 1
    assert checked > 1000


def test_foreign_key_graph_is_acyclic():
    order = migrate.table_dependency_order()
    position = {name: i for i, name in enumerate(order)}
    assert len(order) == len(Base.metadata.tables)
    for table in Base.metadata.sorted_tables:
        for fk in table.foreign_keys:
            target = fk.column.table.name
            if target != table.name:
                assert position[target] < position[table.name], f"{target} -> {table.name}"


def test_drop_order_is_reverse_of_create_order():
    assert migrate.drop_order() == list(reversed(migrate.table_dependency_order()))


def test_core_ordering():
    order = migrate.table_dependency_order()
    assert order.index("organizations") < order.index("branches") < order.index("employees")
    assert order.index("employees") < order.index("users") < order.index("audit_logs")
    assert order.index("expense_claims") < order.index("travel_expenses")


def test_performance_indexes_exist():
    for table, expected in PERFORMANCE_INDEXES.items():
        names = {ix.name for ix in Base.metadata.tables[table].indexes}
        missing = expected - names
        assert not missing, f"{table}: {sorted(missing)}"


@pytest.mark.parametrize("table, columns", UNIQUE_KEYS)
def test_unique_keys(table, columns):
    assert tuple(sorted(columns)) in _unique_keys(Base.metadata.tables[table])


def test_naming_convention_applies():
    employees = Base.metadata.tables["employees"]
    fk_names = {fk.name for fk in employees.foreign_key_constraints}
    assert "fk_employees_branch_id_branches" in fk_names
    assert employees.primary_key.name == "pk_employees"


def test_referential_actions_of_core_links():
    def action(table, column):
        (fk,) = Base.metadata.tables[table].c[column].foreign_keys
        return fk.ondelete

    assert action("branches", "organization_id") == "CASCADE"
    assert action("employees", "branch_id") == "RESTRICT"
    assert action("employees", "reporting_manager_id") == "SET NULL"
    assert action("users", "employee_id") == "CASCADE"
    assert action("audit_logs", "user_id") == "SET NULL"


def test_schema_summary():
    summary = {s.name: s for s in migrate.schema_summary()}
    assert set(summary) == set(Base.metadata.tables)
    employees = summary["employees"]
    assert employees.domain == "employees"
    assert employees.columns == len(Base.metadata.tables["employees"].columns)
    assert employees.foreign_keys >= 3
    assert employees.indexes >= 5
    assert summary["organizations"].foreign_keys == 0


def test_entity_helpers():
    emp = Employee(first_name="Ada", last_name="Lovelace", joining_date=date(2024, 1, 2))
    assert emp.full_name == "Ada Lovelace"

    balance = LeaveBalance(
        allocated_days=Decimal("20"),
        used_days=Decimal("5.5"),
        carried_forward_days=Decimal("3"),
        accrued_days=Decimal("0"),
        encashed_days=Decimal("2"),
    )
    assert balance.remaining_days == Decimal("15.5")
