from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class AttendanceRecord(EntityMixin, Base):
    """One row per employee per working day; times are stored in UTC and local."""
    __tablename__ = "attendance_records"
    __table_args__ = (
        Index("ix_attendance_records_employee_date_status", "employee_id", "date", "status"),
        Index("ix_attendance_records_date_status", "date", "status"),
        Index("ix_attendance_records_employee_created", "employee_id", "created_at"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    shift_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("shifts", "SET NULL"), index=True)
    manual_entry_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))

    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Present")  # Present, Absent, Late, OnBreak, HalfDay, OnLeave
    check_in_time: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    check_out_time: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    check_in_time_local: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime)
    check_out_time_local: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime)
    expected_check_in_time: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    expected_check_out_time: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))

    # durations in minutes
    total_working_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    break_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    overtime_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    productive_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    idle_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    late_arrival_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    early_departure_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)

    check_in_location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    check_out_location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    check_in_ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    check_out_ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    check_in_device: Mapped[Optional[str]] = mapped_column(sa.String(500))
    check_out_device: Mapped[Optional[str]] = mapped_column(sa.String(500))

    is_manual_entry: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    manual_entry_reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
    weather_info: Mapped[Optional[dict]] = mapped_column(JSONB())

    break_records = relationship(
        "BreakRecord", back_populates="attendance_record", cascade="all, delete-orphan",
        order_by="BreakRecord.start_time",
    )
    corrections = relationship("AttendanceCorrection", back_populates="attendance_record", cascade="all, delete-orphan")

    def is_on_break(self) -> bool:
        return any(b.end_time is None for b in self.break_records)


class BreakRecord(EntityMixin, Base):
    __tablename__ = "break_records"
    __table_args__ = (
        Index("ix_break_records_attendance_start", "attendance_record_id", "start_time"),
    )

    attendance_record_id: Mapped[int] = mapped_column(sa.Integer, fk("attendance_records", "CASCADE"), nullable=False)
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Tea, Lunch, Personal, Meeting, Prayer, Medical, Emergency, Other
    start_time: Mapped[dt.datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    end_time: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    start_time_local: Mapped[dt.datetime] = mapped_column(sa.DateTime, nullable=False)
    end_time_local: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime)
    duration_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    is_paid: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    max_allowed_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    is_exceeding: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    exceeded_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    approval_status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="NotRequired")
    approved_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))

    attendance_record = relationship("AttendanceRecord", back_populates="break_records")


class AttendanceCorrection(EntityMixin, Base):
    __tablename__ = "attendance_corrections"

    attendance_record_id: Mapped[int] = mapped_column(sa.Integer, fk("attendance_records", "CASCADE"), nullable=False, index=True)
    requested_by: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False, index=True)
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # CheckInTime, CheckOutTime, BreakDuration, ...
    original_value: Mapped[Optional[str]] = mapped_column(sa.String(200))
    corrected_value: Mapped[Optional[str]] = mapped_column(sa.String(200))
    reason: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    approved_at: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    approval_comments: Mapped[Optional[str]] = mapped_column(sa.String(500))

    attendance_record = relationship("AttendanceRecord", back_populates="corrections")


class WorkingHours(EntityMixin, Base):
    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("branch_id", "day_of_week", name="uq_working_hours_branch_day"),
    )

    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(sa.Integer, nullable=False)  # 0 = Sunday
    start_time: Mapped[dt.time] = mapped_column(sa.Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(sa.Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("60"))
    is_working_day: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())


class Holiday(EntityMixin, Base):
    __tablename__ = "holidays"

    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "CASCADE"), index=True)  # NULL = organisation-wide
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False, index=True)
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Public")
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    is_recurring: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_optional: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())


class AttendancePolicy(EntityMixin, Base):
    __tablename__ = "attendance_policies"

    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    grace_period_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("15"))
    late_threshold_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("30"))
    half_day_threshold_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("240"))
    max_break_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("60"))
    overtime_threshold_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("480"))
    enable_geo_fencing: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    office_latitude: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(9, 6))
    office_longitude: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(9, 6))
    allowed_radius_meters: Mapped[Optional[int]] = mapped_column(sa.Integer)
    allowed_ip_ranges: Mapped[Optional[dict]] = mapped_column(JSONB())
    effective_from: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    effective_to: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
