from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class Employee(EntityMixin, Base):
    __tablename__ = "employees"
    __table_args__ = (
        Index("ix_employees_branch_status", "branch_id", "status"),
        Index("ix_employees_department_status", "department", "status"),
        Index("ix_employees_manager_status", "reporting_manager_id", "status"),
        Index("ix_employees_full_name", "first_name", "last_name"),
    )

    employee_id: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)  # EMP001
    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "RESTRICT"), nullable=False)
    department_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("departments", "SET NULL"))
    reporting_manager_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))

    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    alternate_phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    date_of_birth: Mapped[Optional[date]] = mapped_column(sa.Date)
    gender: Mapped[Optional[str]] = mapped_column(sa.String(20))
    marital_status: Mapped[Optional[str]] = mapped_column(sa.String(20))
    nationality: Mapped[Optional[str]] = mapped_column(sa.String(100))
    national_id: Mapped[Optional[str]] = mapped_column(sa.String(50))
    passport_number: Mapped[Optional[str]] = mapped_column(sa.String(50))
    address: Mapped[Optional[str]] = mapped_column(sa.String(500))
    emergency_contact_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    profile_photo_path: Mapped[Optional[str]] = mapped_column(sa.String(500))

    joining_date: Mapped[date] = mapped_column(sa.Date, nullable=False, index=True)
    probation_end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    confirmation_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    exit_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    designation: Mapped[Optional[str]] = mapped_column(sa.String(100))
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))  # denormalised label, kept for reporting
    employment_type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="FullTime")
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Active")  # Active, Inactive, OnLeave, Terminated, Resigned

    basic_salary: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    bank_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    bank_account_number: Mapped[Optional[str]] = mapped_column(sa.String(50))
    bank_routing_code: Mapped[Optional[str]] = mapped_column(sa.String(20))
    tax_identifier: Mapped[Optional[str]] = mapped_column(sa.String(50))
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    custom_fields: Mapped[Optional[dict]] = mapped_column(JSONB())

    branch = relationship("Branch", back_populates="employees")
    reporting_manager = relationship(
        "Employee", remote_side="Employee.id", back_populates="direct_reports",
        foreign_keys=[reporting_manager_id],
    )
    direct_reports = relationship(
        "Employee", back_populates="reporting_manager", foreign_keys=[reporting_manager_id],
    )
    user = relationship("User", back_populates="employee", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class EmployeeOnboarding(EntityMixin, Base):
    __tablename__ = "employee_onboardings"

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    assigned_hr_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="NotStarted")
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    target_completion_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    completed_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    progress_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    tasks = relationship(
        "EmployeeOnboardingTask", back_populates="onboarding", cascade="all, delete-orphan",
        order_by="EmployeeOnboardingTask.display_order",
    )


class EmployeeOnboardingTask(EntityMixin, Base):
    __tablename__ = "employee_onboarding_tasks"

    employee_onboarding_id: Mapped[int] = mapped_column(sa.Integer, fk("employee_onboardings", "CASCADE"), nullable=False, index=True)
    assigned_to_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    category: Mapped[Optional[str]] = mapped_column(sa.String(50))
    display_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    due_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    is_mandatory: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_completed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    onboarding = relationship("EmployeeOnboarding", back_populates="tasks")


class EmployeeExit(EntityMixin, Base):
    __tablename__ = "employee_exits"

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    processed_by_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    exit_type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Resignation, Termination, Retirement
    resignation_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    exit_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    notice_period_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    reason: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    exit_interview_notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    clearance_status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    final_settlement_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    final_settlement_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    is_rehire_eligible: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
