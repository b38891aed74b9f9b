"""Seed default organization, branch, roles and permission catalogue

Revision ID: 0002_seed_reference_data
Revises: 0001_initial_schema
Create Date: 2026-10-18
"""
from __future__ import annotations

from alembic import context, op
import sqlalchemy as sa

from stridehr.app_logger import get_logger
from stridehr.core.config import get_settings

log = get_logger("migrations.0002_seed_reference_data")

# ---- Alembic identifiers ----
revision = "0002_seed_reference_data"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None

SEED_ACTOR = "system"

ORGANIZATION = {
    "name": "StrideHR Organization",
    "address": "123 Business Street, City, State 12345",
    "email": "info@stridehr.com",
    "phone": "+1234567890",
    "website": "https://stridehr.com",
}

BRANCH = {
    "name": "Main Branch",
    "address": "123 Business Street, City, State 12345",
    "email": "main@stridehr.com",
    "phone": "+1234567890",
}

ROLES = [
    {"name": "SuperAdmin", "description": "System Administrator with full access", "hierarchy_level": 1},
    {"name": "HRManager", "description": "HR Manager with HR operations access", "hierarchy_level": 2},
    {"name": "Manager", "description": "Department Manager with team management access", "hierarchy_level": 3},
    {"name": "Employee", "description": "Regular employee with basic access", "hierarchy_level": 4},
]

# Names checked by the API's authorization policies and RequirePermission
# attributes: <Module>.<Action> or <Module>.<Resource>.<Action>
PERMISSION_CATALOGUE = {
    "Employee": ["View", "Create", "Update", "Delete", "Manage"],
    "Role": ["View", "Create", "Update", "Delete", "Assign"],
    "User": [
        "View", "Create", "Update", "Activate", "Deactivate", "Unlock",
        "ForcePasswordChange", "ViewSessions", "TerminateSession",
    ],
    "Payroll": [
        "View", "Create", "Process", "Calculate", "Approve", "Manage",
        "Templates.View", "Templates.Create", "Templates.Update", "Templates.Delete", "Templates.Manage",
        "Payslips.View", "Payslips.Generate", "Payslips.Approve", "Payslips.Release",
        "Payslips.Download", "Payslips.Regenerate",
    ],
    "Report": ["View", "Create"],
    "Asset": ["View", "Read", "Create", "Update", "Delete"],
    "AuditLog": ["View", "ViewSecurity"],
    "DocumentTemplate": ["View", "Read", "Create", "Update", "Delete"],
    "Training": ["Manage", "Assign", "ViewReports", "IssueCertifications"],
    "KnowledgeBase": ["Read", "Create", "Update", "Delete", "Approve", "Manage", "ManageCategories"],
    "Expense": [
        "Read", "Create", "Update", "Delete", "Submit", "Withdraw",
        "Approve", "Reimburse", "Report", "Upload",
    ],
    "Grievance": [
        "Read", "ReadOwn", "ReadAssigned", "ReadAnonymous", "ReadEscalated", "ReadOverdue",
        "ReadAnalytics", "ReadComments", "ReadFollowUps", "ReadPendingFollowUps",
        "Create", "Update", "UpdateStatus", "Delete", "Assign", "Escalate", "Resolve",
        "Close", "Withdraw", "AddComment", "ScheduleFollowUp", "CompleteFollowUp",
    ],
    "SupportTicket": [
        "Read", "ViewAssigned", "ViewOverdue", "ViewAnalytics", "Create", "Update",
        "UpdateStatus", "Delete", "Assign", "Comment", "Resolve", "Close", "Reopen",
    ],
}


def permission_rows() -> list[dict]:
    rows = []
    for module, actions in PERMISSION_CATALOGUE.items():
        for entry in actions:
            resource, _, action = entry.rpartition(".")
            rows.append(
                {
                    "name": f"{module}.{entry}",
                    "module": module,
                    "action": action,
                    "resource": resource or None,
                    "description": f"{action} access to {module} {resource}".rstrip(),
                }
            )
    return rows


def _seeding_enabled() -> bool:
    flag = context.get_x_argument(as_dictionary=True).get("seed")
    if flag is not None:
        return flag.strip().lower() in {"1", "true", "yes", "y", "on"}
    return get_settings().SEED_REFERENCE_DATA


# ---- lightweight table handles (decoupled from the ORM classes) ----
organizations = sa.table(
    "organizations",
    sa.column("id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("address", sa.String),
    sa.column("email", sa.String),
    sa.column("phone", sa.String),
    sa.column("website", sa.String),
    sa.column("created_by", sa.String),
)
branches = sa.table(
    "branches",
    sa.column("id", sa.Integer),
    sa.column("organization_id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("address", sa.String),
    sa.column("email", sa.String),
    sa.column("phone", sa.String),
    sa.column("created_by", sa.String),
)
roles = sa.table(
    "roles",
    sa.column("id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("description", sa.String),
    sa.column("hierarchy_level", sa.Integer),
    sa.column("is_system_role", sa.Boolean),
    sa.column("created_by", sa.String),
)
permissions = sa.table(
    "permissions",
    sa.column("id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("module", sa.String),
    sa.column("action", sa.String),
    sa.column("resource", sa.String),
    sa.column("description", sa.String),
    sa.column("created_by", sa.String),
)
role_permissions = sa.table(
    "role_permissions",
    sa.column("role_id", sa.Integer),
    sa.column("permission_id", sa.Integer),
    sa.column("is_granted", sa.Boolean),
    sa.column("created_by", sa.String),
)


def upgrade() -> None:
    if not _seeding_enabled():
        log.info("reference data seeding disabled; skipping")
        return

    op.bulk_insert(organizations, [{**ORGANIZATION, "created_by": SEED_ACTOR}])

    # INSERT ... SELECT keeps ids server-generated (and works with --sql)
    op.execute(
        sa.insert(branches).from_select(
            ["organization_id", "name", "address", "email", "phone", "created_by"],
            sa.select(
                organizations.c.id,
                sa.literal(BRANCH["name"]),
                sa.literal(BRANCH["address"]),
                sa.literal(BRANCH["email"]),
                sa.literal(BRANCH["phone"]),
                sa.literal(SEED_ACTOR),
            ).where(organizations.c.name == ORGANIZATION["name"]),
        )
    )

    op.bulk_insert(
        roles,
        [{**r, "is_system_role": True, "created_by": SEED_ACTOR} for r in ROLES],
    )
    perms = permission_rows()
    op.bulk_insert(permissions, [{**p, "created_by": SEED_ACTOR} for p in perms])

    # SuperAdmin gets every catalogue permission
    op.execute(
        sa.insert(role_permissions).from_select(
            ["role_id", "permission_id", "is_granted", "created_by"],
            sa.select(
                roles.c.id,
                permissions.c.id,
                sa.true(),
                sa.literal(SEED_ACTOR),
            )
            .select_from(roles.join(permissions, sa.true()))
            .where(roles.c.name == "SuperAdmin")
            .where(permissions.c.name.in_([p["name"] for p in perms])),
        )
    )
    log.info("seeded %d roles and %d permissions", len(ROLES), len(perms))


def downgrade() -> None:
    if not _seeding_enabled():
        return

    role_names = [r["name"] for r in ROLES]
    perm_names = [p["name"] for p in permission_rows()]

    seeded_roles = sa.select(roles.c.id).where(roles.c.name.in_(role_names))
    seeded_perms = sa.select(permissions.c.id).where(permissions.c.name.in_(perm_names))
    op.execute(
        sa.delete(role_permissions)
        .where(role_permissions.c.role_id.in_(seeded_roles))
        .where(role_permissions.c.permission_id.in_(seeded_perms))
    )
    op.execute(sa.delete(permissions).where(permissions.c.name.in_(perm_names)))
    op.execute(sa.delete(roles).where(roles.c.name.in_(role_names)))

    seeded_org = sa.select(organizations.c.id).where(organizations.c.name == ORGANIZATION["name"])
    op.execute(
        sa.delete(branches)
        .where(branches.c.name == BRANCH["name"])
        .where(branches.c.organization_id.in_(seeded_org))
    )
    op.execute(sa.delete(organizations).where(organizations.c.name == ORGANIZATION["name"]))
    log.info("removed seeded reference data")
