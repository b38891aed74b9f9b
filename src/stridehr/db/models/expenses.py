from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class ExpenseCategory(EntityMixin, Base):
    __tablename__ = "expense_categories"
    __table_args__ = (
        UniqueConstraint("organization_id", "code", name="uq_expense_categories_organization_code"),
    )

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    code: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    max_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    daily_limit: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    monthly_limit: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    requires_receipt: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    requires_approval: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_mileage_based: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    mileage_rate: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 4))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    policy_rules = relationship("ExpensePolicyRule", back_populates="category", cascade="all, delete-orphan")


class ExpenseClaim(EntityMixin, Base):
    __tablename__ = "expense_claims"
    __table_args__ = (
        Index("ix_expense_claims_employee_status", "employee_id", "status"),
    )

    claim_number: Mapped[str] = mapped_column(sa.String(30), nullable=False, unique=True)  # EXP-2024-000001
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    rejected_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    payroll_record_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("payroll_records", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    expense_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    submission_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    total_amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    approved_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, server_default="USD")
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    approved_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    rejected_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    rejection_reason: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    reimbursed_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    reimbursement_reference: Mapped[Optional[str]] = mapped_column(sa.String(100))
    is_advance_claim: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    advance_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    items = relationship("ExpenseItem", back_populates="claim", cascade="all, delete-orphan")
    documents = relationship("ExpenseDocument", back_populates="claim", cascade="all, delete-orphan")
    approval_history = relationship(
        "ExpenseApprovalHistory", back_populates="claim", cascade="all, delete-orphan",
        order_by="ExpenseApprovalHistory.approval_level",
    )
    travel_expense = relationship("TravelExpense", back_populates="claim", uselist=False, cascade="all, delete-orphan")


class ExpenseItem(EntityMixin, Base):
    __tablename__ = "expense_items"

    expense_claim_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_claims", "CASCADE"), nullable=False, index=True)
    expense_category_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_categories", "RESTRICT"), nullable=False, index=True)
    project_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("projects", "SET NULL"))
    description: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, server_default="USD")
    exchange_rate: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 6))
    converted_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    expense_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    vendor: Mapped[Optional[str]] = mapped_column(sa.String(200))
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    is_billable: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    mileage_distance: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    mileage_rate: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 4))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))

    claim = relationship("ExpenseClaim", back_populates="items")
    category = relationship("ExpenseCategory")


class ExpenseDocument(EntityMixin, Base):
    __tablename__ = "expense_documents"

    expense_claim_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_claims", "CASCADE"), nullable=False, index=True)
    expense_item_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("expense_items", "CASCADE"))
    uploaded_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    file_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    file_type: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    document_type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Receipt")
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    uploaded_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    claim = relationship("ExpenseClaim", back_populates="documents")


class ExpenseApprovalHistory(EntityMixin, Base):
    __tablename__ = "expense_approval_histories"
    __table_args__ = (
        Index("ix_expense_approval_histories_claim_level", "expense_claim_id", "approval_level"),
    )

    expense_claim_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_claims", "CASCADE"), nullable=False)
    approver_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    approval_level: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Manager, Finance, Director
    action: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    action_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    approved_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))

    claim = relationship("ExpenseClaim", back_populates="approval_history")


class ExpensePolicyRule(EntityMixin, Base):
    __tablename__ = "expense_policy_rules"

    expense_category_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_categories", "CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    rule_type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # MaxAmount, DailyLimit, ReceiptRequired, ...
    max_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    min_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    conditions: Mapped[Optional[dict]] = mapped_column(JSONB())
    requires_justification: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    category = relationship("ExpenseCategory", back_populates="policy_rules")


class TravelExpense(EntityMixin, Base):
    """Travel details for a claim; at most one per claim."""
    __tablename__ = "travel_expenses"

    expense_claim_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_claims", "CASCADE"), nullable=False, unique=True)
    project_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("projects", "SET NULL"))
    travel_purpose: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    from_location: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    to_location: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    departure_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    return_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    travel_mode: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Flight, Train, Car, Bus, ...
    is_round_trip: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    total_mileage: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    mileage_rate: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 4))
    total_mileage_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    claim = relationship("ExpenseClaim", back_populates="travel_expense")
    items = relationship("TravelExpenseItem", back_populates="travel_expense", cascade="all, delete-orphan")


class TravelExpenseItem(EntityMixin, Base):
    __tablename__ = "travel_expense_items"

    travel_expense_id: Mapped[int] = mapped_column(sa.Integer, fk("travel_expenses", "CASCADE"), nullable=False, index=True)
    item_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Transport, Accommodation, Meals, ...
    description: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, server_default="USD")
    expense_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    vendor: Mapped[Optional[str]] = mapped_column(sa.String(200))
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    receipt_number: Mapped[Optional[str]] = mapped_column(sa.String(100))

    travel_expense = relationship("TravelExpense", back_populates="items")


class ExpenseBudget(EntityMixin, Base):
    __tablename__ = "expense_budgets"
    __table_args__ = (
        Index("ix_expense_budgets_period", "start_date", "end_date"),
    )

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False, index=True)
    department_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("departments", "SET NULL"))
    employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    expense_category_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("expense_categories", "SET NULL"))
    project_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("projects", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    budget_amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False)
    spent_amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 2), nullable=False, server_default=sa.text("0"))
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, server_default="USD")
    period: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Monthly")
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    alert_threshold_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("80"))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    alerts = relationship("ExpenseBudgetAlert", back_populates="budget", cascade="all, delete-orphan")

    @property
    def remaining_amount(self):
        return (self.budget_amount or 0) - (self.spent_amount or 0)


class ExpenseBudgetAlert(EntityMixin, Base):
    __tablename__ = "expense_budget_alerts"

    expense_budget_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_budgets", "CASCADE"), nullable=False, index=True)
    acknowledged_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    alert_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Threshold, Exceeded
    message: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    utilization_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    is_acknowledged: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    budget = relationship("ExpenseBudget", back_populates="alerts")


class ExpenseComplianceViolation(EntityMixin, Base):
    __tablename__ = "expense_compliance_violations"

    expense_claim_id: Mapped[int] = mapped_column(sa.Integer, fk("expense_claims", "CASCADE"), nullable=False, index=True)
    expense_item_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("expense_items", "CASCADE"))
    expense_policy_rule_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("expense_policy_rules", "SET NULL"))
    resolved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    violation_type: Mapped[str] = mapped_column(sa.String(30), nullable=False)
    description: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    severity: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    violation_amount: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    is_resolved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_waived: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    resolution_notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    resolved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
