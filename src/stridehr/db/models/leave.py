from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, fk


class LeavePolicy(EntityMixin, Base):
    __tablename__ = "leave_policies"
    __table_args__ = (
        UniqueConstraint("branch_id", "leave_type", name="uq_leave_policies_branch_type"),
    )

    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    leave_type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Annual, Sick, Casual, Maternity, ...
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    annual_allocation: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    max_consecutive_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    min_advance_notice_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    requires_approval: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_carry_forward_allowed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    max_carry_forward_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    is_encashment_allowed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    encashment_rate: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    applicable_gender: Mapped[Optional[str]] = mapped_column(sa.String(20))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    accrual_rules = relationship("LeaveAccrualRule", back_populates="leave_policy", cascade="all, delete-orphan")


class LeaveBalance(EntityMixin, Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "leave_policy_id", "year",
            name="uq_leave_balances_employee_policy_year",
        ),
        Index("ix_leave_balances_employee_policy_year", "employee_id", "leave_policy_id", "year"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    leave_policy_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_policies", "CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    allocated_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False, server_default=sa.text("0"))
    used_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False, server_default=sa.text("0"))
    carried_forward_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False, server_default=sa.text("0"))
    encashed_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False, server_default=sa.text("0"))
    accrued_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False, server_default=sa.text("0"))

    @property
    def remaining_days(self):
        return (
            (self.allocated_days or 0)
            + (self.carried_forward_days or 0)
            + (self.accrued_days or 0)
            - (self.used_days or 0)
            - (self.encashed_days or 0)
        )


class LeaveRequest(EntityMixin, Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        Index("ix_leave_requests_employee_status", "employee_id", "status"),
        Index("ix_leave_requests_date_range", "start_date", "end_date"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    leave_policy_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_policies", "RESTRICT"), nullable=False, index=True)
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    start_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    requested_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    approved_days: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))
    is_half_day: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    reason: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")  # Pending, Approved, Rejected, Cancelled
    is_emergency: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    submitted_at: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    approved_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    rejection_reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    attachment_path: Mapped[Optional[str]] = mapped_column(sa.String(500))
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    approval_history = relationship(
        "LeaveApprovalHistory", back_populates="leave_request", cascade="all, delete-orphan",
        order_by="LeaveApprovalHistory.level",
    )
    calendar_entries = relationship("LeaveCalendar", back_populates="leave_request", cascade="all, delete-orphan")


class LeaveApprovalHistory(EntityMixin, Base):
    __tablename__ = "leave_approval_histories"
    __table_args__ = (
        Index("ix_leave_approval_histories_request_level", "leave_request_id", "level"),
    )

    leave_request_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_requests", "CASCADE"), nullable=False)
    approver_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    escalated_to_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    level: Mapped[int] = mapped_column(sa.Integer, nullable=False)  # 1 = manager, 2 = department head, 3 = HR
    action: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    action_date: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    leave_request = relationship("LeaveRequest", back_populates="approval_history")


class LeaveCalendar(EntityMixin, Base):
    __tablename__ = "leave_calendars"
    __table_args__ = (
        Index("ix_leave_calendars_employee_date", "employee_id", "date"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    leave_request_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_requests", "CASCADE"), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    leave_type: Mapped[str] = mapped_column(sa.String(30), nullable=False)
    is_full_day: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    leave_request = relationship("LeaveRequest", back_populates="calendar_entries")


class LeaveAccrual(EntityMixin, Base):
    __tablename__ = "leave_accruals"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "leave_policy_id", "year", "month",
            name="uq_leave_accruals_employee_policy_period",
        ),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    leave_policy_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_policies", "CASCADE"), nullable=False)
    accrual_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    accrued_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    accrual_period: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Monthly")
    is_processed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))


class LeaveEncashment(EntityMixin, Base):
    __tablename__ = "leave_encashments"

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    leave_policy_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_policies", "RESTRICT"), nullable=False)
    payroll_record_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("payroll_records", "SET NULL"))
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    encashed_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    encashment_rate: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    encashment_amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    requested_at: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    approved_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    paid_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    comments: Mapped[Optional[str]] = mapped_column(sa.String(500))


class LeaveAccrualRule(EntityMixin, Base):
    __tablename__ = "leave_accrual_rules"

    leave_policy_id: Mapped[int] = mapped_column(sa.Integer, fk("leave_policies", "CASCADE"), nullable=False, index=True)
    accrual_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Fixed, ServiceBased, Prorated
    accrual_frequency: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Monthly")
    accrual_rate: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    max_accrual_days: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(6, 2))
    min_service_months: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    max_service_months: Mapped[Optional[int]] = mapped_column(sa.Integer)
    effective_from: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    effective_to: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    leave_policy = relationship("LeavePolicy", back_populates="accrual_rules")
