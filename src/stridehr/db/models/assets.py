from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, fk


class Asset(EntityMixin, Base):
    __tablename__ = "assets"
    __table_args__ = (
        Index("ix_assets_branch_status", "branch_id", "status"),
    )

    branch_id: Mapped[int] = mapped_column(sa.Integer, fk("branches", "RESTRICT"), nullable=False)
    asset_tag: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Laptop, Desktop, Mobile, Furniture, Vehicle, ...
    brand: Mapped[Optional[str]] = mapped_column(sa.String(100))
    model: Mapped[Optional[str]] = mapped_column(sa.String(100))
    serial_number: Mapped[Optional[str]] = mapped_column(sa.String(100), index=True)
    vendor: Mapped[Optional[str]] = mapped_column(sa.String(200))
    purchase_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    purchase_price: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    current_value: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    depreciation_rate: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 2))
    currency: Mapped[Optional[str]] = mapped_column(sa.String(3))
    warranty_end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    next_maintenance_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Available")  # Available, Assigned, InMaintenance, Retired, Lost
    condition: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Good")
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    assignments = relationship("AssetAssignment", back_populates="asset", cascade="all, delete-orphan")
    maintenance_records = relationship("AssetMaintenance", back_populates="asset", cascade="all, delete-orphan")
    handover_records = relationship("AssetHandover", back_populates="asset", cascade="all, delete-orphan")


class AssetAssignment(EntityMixin, Base):
    __tablename__ = "asset_assignments"

    asset_id: Mapped[int] = mapped_column(sa.Integer, fk("assets", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"), index=True)
    project_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("projects", "SET NULL"))
    assigned_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    returned_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    assigned_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    returned_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    assigned_condition: Mapped[Optional[str]] = mapped_column(sa.String(20))
    return_condition: Mapped[Optional[str]] = mapped_column(sa.String(20))
    assignment_notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
    return_notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    asset = relationship("Asset", back_populates="assignments")


class AssetMaintenance(EntityMixin, Base):
    __tablename__ = "asset_maintenances"

    asset_id: Mapped[int] = mapped_column(sa.Integer, fk("assets", "CASCADE"), nullable=False, index=True)
    technician_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    requested_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Preventive, Corrective, Emergency
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Scheduled")
    scheduled_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    started_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    completed_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    description: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    work_performed: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    cost: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    vendor: Mapped[Optional[str]] = mapped_column(sa.String(200))
    next_maintenance_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    asset = relationship("Asset", back_populates="maintenance_records")


class AssetHandover(EntityMixin, Base):
    """Return of company assets, usually triggered by an employee exit."""
    __tablename__ = "asset_handovers"

    asset_id: Mapped[int] = mapped_column(sa.Integer, fk("assets", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    employee_exit_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employee_exits", "SET NULL"))
    initiated_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    initiated_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    completed_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    returned_condition: Mapped[Optional[str]] = mapped_column(sa.String(20))
    requires_approval: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    damage_notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    damage_charges: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(18, 2))
    handover_notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    asset = relationship("Asset", back_populates="handover_records")
