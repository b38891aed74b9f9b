from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class Shift(EntityMixin, Base):
    __tablename__ = "shifts"

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False, index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"), index=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Day")  # Day, Night, Rotating, Flexible
    start_time: Mapped[time] = mapped_column(sa.Time, nullable=False)
    end_time: Mapped[time] = mapped_column(sa.Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("60"))
    grace_period_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    working_days: Mapped[Optional[dict]] = mapped_column(JSONB())  # ["Mon", "Tue", ...]
    time_zone: Mapped[Optional[str]] = mapped_column(sa.String(50))
    overtime_multiplier: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("1.5"))
    is_night_shift: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    assignments = relationship("ShiftAssignment", back_populates="shift", cascade="all, delete-orphan")


class ShiftAssignment(EntityMixin, Base):
    __tablename__ = "shift_assignments"
    __table_args__ = (
        Index("ix_shift_assignments_employee_start_date", "employee_id", "start_date"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    shift_id: Mapped[int] = mapped_column(sa.Integer, fk("shifts", "CASCADE"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    assigned_by: Mapped[Optional[str]] = mapped_column(sa.String(100))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))

    shift = relationship("Shift", back_populates="assignments")


class ShiftSwapRequest(EntityMixin, Base):
    __tablename__ = "shift_swap_requests"
    __table_args__ = (
        Index("ix_shift_swap_requests_requester_status", "requester_id", "status"),
    )

    requester_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    requester_shift_assignment_id: Mapped[int] = mapped_column(sa.Integer, fk("shift_assignments", "CASCADE"), nullable=False)
    target_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    target_shift_assignment_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("shift_assignments", "SET NULL"))
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    requested_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    swap_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    is_emergency: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    rejection_reason: Mapped[Optional[str]] = mapped_column(sa.String(500))

    responses = relationship("ShiftSwapResponse", back_populates="request", cascade="all, delete-orphan")


class ShiftSwapResponse(EntityMixin, Base):
    __tablename__ = "shift_swap_responses"

    shift_swap_request_id: Mapped[int] = mapped_column(sa.Integer, fk("shift_swap_requests", "CASCADE"), nullable=False, index=True)
    responder_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    responder_shift_assignment_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("shift_assignments", "SET NULL"))
    is_accepted: Mapped[bool] = mapped_column(sa.Boolean, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
    responded_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    request = relationship("ShiftSwapRequest", back_populates="responses")


class ShiftCoverageRequest(EntityMixin, Base):
    __tablename__ = "shift_coverage_requests"

    requester_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    shift_assignment_id: Mapped[int] = mapped_column(sa.Integer, fk("shift_assignments", "CASCADE"), nullable=False)
    accepted_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    shift_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Open")
    is_emergency: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    accepted_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    responses = relationship("ShiftCoverageResponse", back_populates="request", cascade="all, delete-orphan")


class ShiftCoverageResponse(EntityMixin, Base):
    __tablename__ = "shift_coverage_responses"

    shift_coverage_request_id: Mapped[int] = mapped_column(sa.Integer, fk("shift_coverage_requests", "CASCADE"), nullable=False, index=True)
    responder_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    is_accepted: Mapped[bool] = mapped_column(sa.Boolean, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
    responded_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    request = relationship("ShiftCoverageRequest", back_populates="responses")
