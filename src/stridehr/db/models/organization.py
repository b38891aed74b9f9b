from __future__ import annotations

from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


# ==========================
# Tenancy: organization -> branch -> department
# ==========================

class Organization(EntityMixin, Base):
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(sa.String(500))
    email: Mapped[Optional[str]] = mapped_column(sa.String(100))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    website: Mapped[Optional[str]] = mapped_column(sa.String(200))
    logo_path: Mapped[Optional[str]] = mapped_column(sa.String(500))
    tax_id: Mapped[Optional[str]] = mapped_column(sa.String(50))
    registration_number: Mapped[Optional[str]] = mapped_column(sa.String(50))
    normal_working_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("480"))
    overtime_rate: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("1.5"))
    productive_hours_threshold: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("6"))
    branch_isolation_enabled: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    configuration_settings: Mapped[Optional[dict]] = mapped_column(JSONB())

    branches = relationship("Branch", back_populates="organization", cascade="all, delete-orphan")


class Branch(EntityMixin, Base):
    __tablename__ = "branches"

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    country: Mapped[Optional[str]] = mapped_column(sa.String(100))
    country_code: Mapped[Optional[str]] = mapped_column(sa.String(3))
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, server_default="USD")
    currency_symbol: Mapped[Optional[str]] = mapped_column(sa.String(5))
    time_zone: Mapped[str] = mapped_column(sa.String(50), nullable=False, server_default="UTC")
    address: Mapped[Optional[str]] = mapped_column(sa.String(500))
    city: Mapped[Optional[str]] = mapped_column(sa.String(100))
    state: Mapped[Optional[str]] = mapped_column(sa.String(100))
    postal_code: Mapped[Optional[str]] = mapped_column(sa.String(20))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    email: Mapped[Optional[str]] = mapped_column(sa.String(100))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    local_holidays: Mapped[Optional[dict]] = mapped_column(JSONB())
    compliance_settings: Mapped[Optional[dict]] = mapped_column(JSONB())

    organization = relationship("Organization", back_populates="branches")
    departments = relationship("Department", back_populates="branch", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="branch")


class Department(EntityMixin, Base):
    __tablename__ = "departments"
    __table_args__ = (UniqueConstraint("branch_id", "code", name="uq_departments_branch_code"),)

    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "CASCADE"), nullable=False, index=True)
    parent_department_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("departments", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    code: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    cost_center: Mapped[Optional[str]] = mapped_column(sa.String(50))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    branch = relationship("Branch", back_populates="departments")
    parent = relationship("Department", remote_side="Department.id", back_populates="children")
    children = relationship("Department", back_populates="parent")
