from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class Report(EntityMixin, Base):
    __tablename__ = "reports"

    created_by_employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False, index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"), index=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Table")  # Table, Chart, Dashboard
    data_source: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    configuration: Mapped[Optional[dict]] = mapped_column(JSONB())
    filters: Mapped[Optional[dict]] = mapped_column(JSONB())
    column_definitions: Mapped[Optional[dict]] = mapped_column(JSONB())
    chart_configuration: Mapped[Optional[dict]] = mapped_column(JSONB())
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    is_public: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_scheduled: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    last_executed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    executions = relationship("ReportExecution", back_populates="report", cascade="all, delete-orphan")
    schedules = relationship("ReportSchedule", back_populates="report", cascade="all, delete-orphan")
    shares = relationship("ReportShare", back_populates="report", cascade="all, delete-orphan")


class ReportExecution(EntityMixin, Base):
    __tablename__ = "report_executions"
    __table_args__ = (
        Index("ix_report_executions_report_executed", "report_id", "executed_at"),
    )

    report_id: Mapped[int] = mapped_column(sa.Integer, fk("reports", "CASCADE"), nullable=False)
    executed_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    report_schedule_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("report_schedules", "SET NULL"))
    executed_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Running")
    parameters: Mapped[Optional[dict]] = mapped_column(JSONB())
    record_count: Mapped[Optional[int]] = mapped_column(sa.Integer)
    execution_time_ms: Mapped[Optional[int]] = mapped_column(sa.Integer)
    export_format: Mapped[Optional[str]] = mapped_column(sa.String(10))  # PDF, Excel, CSV, JSON
    output_file_path: Mapped[Optional[str]] = mapped_column(sa.String(500))
    error_message: Mapped[Optional[str]] = mapped_column(sa.String(2000))

    report = relationship("Report", back_populates="executions")


class ReportSchedule(EntityMixin, Base):
    __tablename__ = "report_schedules"

    report_id: Mapped[int] = mapped_column(sa.Integer, fk("reports", "CASCADE"), nullable=False, index=True)
    created_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    cron_expression: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    parameters: Mapped[Optional[dict]] = mapped_column(JSONB())
    recipients: Mapped[Optional[dict]] = mapped_column(JSONB())
    export_format: Mapped[str] = mapped_column(sa.String(10), nullable=False, server_default="PDF")
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    next_run_time: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), index=True)
    last_run_time: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    report = relationship("Report", back_populates="schedules")


class ReportShare(EntityMixin, Base):
    __tablename__ = "report_shares"

    report_id: Mapped[int] = mapped_column(sa.Integer, fk("reports", "CASCADE"), nullable=False, index=True)
    shared_with_employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    shared_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    permission: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="View")  # View, Edit, Execute
    shared_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    report = relationship("Report", back_populates="shares")


class ReportTemplate(EntityMixin, Base):
    __tablename__ = "report_templates"

    created_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    category: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Table")
    data_source: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    template_configuration: Mapped[Optional[dict]] = mapped_column(JSONB())
    default_filters: Mapped[Optional[dict]] = mapped_column(JSONB())
    default_columns: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_system_template: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
