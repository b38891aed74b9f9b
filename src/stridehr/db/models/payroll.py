from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


# ==========================
# Payroll
# ==========================

class PayrollRecord(EntityMixin, Base):
    __tablename__ = "payroll_records"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "payroll_year", "payroll_month",
            name="uq_payroll_records_employee_period",
        ),
        Index("ix_payroll_records_period_status", "payroll_year", "payroll_month", "status"),
        Index("ix_payroll_records_employee_status", "employee_id", "status"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "RESTRICT"), nullable=False, index=True)
    processed_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))

    payroll_period_start: Mapped[date] = mapped_column(sa.Date, nullable=False)
    payroll_period_end: Mapped[date] = mapped_column(sa.Date, nullable=False)
    payroll_month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    payroll_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)

    basic_salary: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    total_allowances: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    total_deductions: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(sa.Numeric(8, 2), nullable=False, server_default=sa.text("0"))
    overtime_amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    tax_deduction: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    provident_fund_deduction: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    employee_state_insurance: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    professional_tax: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    other_deductions: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    leave_deduction: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(sa.Numeric(18, 6), nullable=False, server_default=sa.text("1"))
    working_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    present_days: Mapped[Optional[int]] = mapped_column(sa.Integer)

    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")  # Draft, Calculated, Approved, Processed, Paid
    processed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), index=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    paid_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    calculation_details: Mapped[Optional[dict]] = mapped_column(JSONB())
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    adjustments = relationship("PayrollAdjustment", back_populates="payroll_record", cascade="all, delete-orphan")
    payslips = relationship("PayslipGeneration", back_populates="payroll_record", cascade="all, delete-orphan")


class PayrollFormula(EntityMixin, Base):
    """Stored formula text; evaluation happens outside the schema package."""
    __tablename__ = "payroll_formulas"

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False, index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Allowance, Deduction, Tax, Overtime
    formula: Mapped[str] = mapped_column(sa.Text, nullable=False)
    variables: Mapped[Optional[dict]] = mapped_column(JSONB())
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))
    designation: Mapped[Optional[str]] = mapped_column(sa.String(100))
    priority: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    effective_from: Mapped[date] = mapped_column(sa.Date, nullable=False)
    effective_to: Mapped[Optional[date]] = mapped_column(sa.Date)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())


class PayrollAdjustment(EntityMixin, Base):
    __tablename__ = "payroll_adjustments"
    __table_args__ = (
        Index("ix_payroll_adjustments_record_type", "payroll_record_id", "type"),
    )

    payroll_record_id: Mapped[int] = mapped_column(sa.Integer, fk("payroll_records", "CASCADE"), nullable=False)
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Bonus, Arrear, Deduction, Reimbursement
    description: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    payroll_record = relationship("PayrollRecord", back_populates="adjustments")


class ExchangeRate(EntityMixin, Base):
    __tablename__ = "exchange_rates"
    __table_args__ = (
        Index("ix_exchange_rates_currencies_effective_date", "from_currency", "to_currency", "effective_date"),
    )

    from_currency: Mapped[str] = mapped_column(sa.String(3), nullable=False)
    to_currency: Mapped[str] = mapped_column(sa.String(3), nullable=False)
    rate: Mapped[Decimal] = mapped_column(sa.Numeric(18, 6), nullable=False)
    effective_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    source: Mapped[Optional[str]] = mapped_column(sa.String(50))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())


class PayslipTemplate(EntityMixin, Base):
    __tablename__ = "payslip_templates"

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False, index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    template_config: Mapped[dict] = mapped_column(JSONB(), nullable=False)
    header_config: Mapped[Optional[dict]] = mapped_column(JSONB())
    footer_config: Mapped[Optional[dict]] = mapped_column(JSONB())
    field_mapping: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_default: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())


class PayslipGeneration(EntityMixin, Base):
    __tablename__ = "payslip_generations"

    payroll_record_id: Mapped[int] = mapped_column(sa.Integer, fk("payroll_records", "CASCADE"), nullable=False, index=True)
    payslip_template_id: Mapped[int] = mapped_column(sa.Integer, fk("payslip_templates", "RESTRICT"), nullable=False, index=True)
    generated_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    hr_approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    finance_approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    released_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    status: Mapped[str] = mapped_column(sa.String(30), nullable=False, server_default="Generated")
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))
    payslip_path: Mapped[Optional[str]] = mapped_column(sa.String(500))
    payslip_file_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    generated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    hr_approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    finance_approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    released_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_notification_sent: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())

    payroll_record = relationship("PayrollRecord", back_populates="payslips")
    approval_history = relationship(
        "PayslipApprovalHistory", back_populates="payslip_generation", cascade="all, delete-orphan",
    )


class PayslipApprovalHistory(EntityMixin, Base):
    __tablename__ = "payslip_approval_histories"

    payslip_generation_id: Mapped[int] = mapped_column(sa.Integer, fk("payslip_generations", "CASCADE"), nullable=False, index=True)
    approved_by: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    approval_level: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # HR, Finance, Release
    action: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    previous_status: Mapped[Optional[str]] = mapped_column(sa.String(30))
    new_status: Mapped[Optional[str]] = mapped_column(sa.String(30))
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    action_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    payslip_generation = relationship("PayslipGeneration", back_populates="approval_history")
