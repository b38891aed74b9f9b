from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class Project(EntityMixin, Base):
    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_status_priority", "status", "priority"),
        Index("ix_projects_date_range", "start_date", "end_date"),
    )

    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "RESTRICT"), nullable=False, index=True)
    created_by_employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    team_lead_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(sa.String(50), unique=True)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    client_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    start_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    estimated_hours: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    budget: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    currency: Mapped[Optional[str]] = mapped_column(sa.String(3))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Planning")  # Planning, Active, OnHold, Completed, Cancelled
    priority: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")

    tasks = relationship("ProjectTask", back_populates="project", cascade="all, delete-orphan")
    assignments = relationship("ProjectAssignment", back_populates="project", cascade="all, delete-orphan")


class ProjectTask(EntityMixin, Base):
    __tablename__ = "project_tasks"
    __table_args__ = (
        Index("ix_project_tasks_project_status", "project_id", "status"),
        Index("ix_project_tasks_assignee_status", "assigned_to_employee_id", "status"),
    )

    project_id: Mapped[int] = mapped_column(sa.Integer, fk("projects", "CASCADE"), nullable=False)
    parent_task_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("project_tasks", "SET NULL"))
    assigned_to_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    estimated_hours: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    actual_hours: Mapped[Decimal] = mapped_column(sa.Numeric(8, 2), nullable=False, server_default=sa.text("0"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="ToDo")
    priority: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    display_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    due_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))

    project = relationship("Project", back_populates="tasks")
    subtasks = relationship("ProjectTask", back_populates="parent_task")
    parent_task = relationship("ProjectTask", remote_side="ProjectTask.id", back_populates="subtasks")


class ProjectAssignment(EntityMixin, Base):
    __tablename__ = "project_assignments"
    __table_args__ = (
        Index("ix_project_assignments_employee_unassigned", "employee_id", "unassigned_date"),
    )

    project_id: Mapped[int] = mapped_column(sa.Integer, fk("projects", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    role: Mapped[Optional[str]] = mapped_column(sa.String(50))
    allocation_percentage: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 2))
    is_team_lead: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    assigned_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    unassigned_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)

    project = relationship("Project", back_populates="assignments")


class TaskAssignment(EntityMixin, Base):
    __tablename__ = "task_assignments"
    __table_args__ = (
        UniqueConstraint("task_id", "employee_id", "assigned_date", name="uq_task_assignments_task_employee_date"),
    )

    task_id: Mapped[int] = mapped_column(sa.Integer, fk("project_tasks", "CASCADE"), nullable=False)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    assigned_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    unassigned_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)


class DSR(EntityMixin, Base):
    """Daily status report."""
    __tablename__ = "dsrs"
    __table_args__ = (
        Index("ix_dsrs_employee_date", "employee_id", "date"),
        Index("ix_dsrs_project_date", "project_id", "date"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    project_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("projects", "SET NULL"))
    task_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("project_tasks", "SET NULL"))
    reviewed_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")  # Draft, Submitted, Approved, Rejected
    submitted_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    reviewed_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    review_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))


class ProjectAlert(EntityMixin, Base):
    __tablename__ = "project_alerts"

    project_id: Mapped[int] = mapped_column(sa.Integer, fk("projects", "CASCADE"), nullable=False, index=True)
    resolved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    alert_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)  # BudgetOverrun, DeadlineRisk, ...
    severity: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    message: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    is_resolved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    resolved_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))


class ProjectComment(EntityMixin, Base):
    __tablename__ = "project_comments"

    project_id: Mapped[int] = mapped_column(sa.Integer, fk("projects", "CASCADE"), nullable=False, index=True)
    task_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("project_tasks", "CASCADE"))
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    parent_comment_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("project_comments", "CASCADE"))
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    is_edited: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())


class ProjectActivity(EntityMixin, Base):
    __tablename__ = "project_activities"

    project_id: Mapped[int] = mapped_column(sa.Integer, fk("projects", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    activity_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    description: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(JSONB())
    occurred_at: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


class ProjectRisk(EntityMixin, Base):
    __tablename__ = "project_risks"

    project_id: Mapped[int] = mapped_column(sa.Integer, fk("projects", "CASCADE"), nullable=False, index=True)
    owner_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    probability: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    impact: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    mitigation_plan: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Open")
    identified_at: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    closed_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
