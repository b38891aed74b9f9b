from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, fk


class Grievance(EntityMixin, Base):
    __tablename__ = "grievances"
    __table_args__ = (
        Index("ix_grievances_status_priority", "status", "priority"),
    )

    grievance_number: Mapped[str] = mapped_column(sa.String(20), nullable=False, unique=True)  # GRV-2024-000042
    submitted_by_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    assigned_to_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"), index=True)
    escalated_to_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    resolved_by_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    category: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Workplace, Harassment, Discrimination, Compensation, ...
    priority: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Submitted")
    is_anonymous: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    requires_investigation: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    current_escalation_level: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Level1")
    resolution: Mapped[Optional[str]] = mapped_column(sa.Text)
    resolution_notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    closed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    due_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_escalated: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    escalated_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    escalation_reason: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    satisfaction_rating: Mapped[Optional[int]] = mapped_column(sa.Integer)
    feedback_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    attachment_path: Mapped[Optional[str]] = mapped_column(sa.String(500))

    comments = relationship("GrievanceComment", back_populates="grievance", cascade="all, delete-orphan")
    status_history = relationship(
        "GrievanceStatusHistory", back_populates="grievance", cascade="all, delete-orphan",
        order_by="GrievanceStatusHistory.changed_at",
    )
    escalations = relationship("GrievanceEscalation", back_populates="grievance", cascade="all, delete-orphan")
    follow_ups = relationship("GrievanceFollowUp", back_populates="grievance", cascade="all, delete-orphan")


class GrievanceComment(EntityMixin, Base):
    __tablename__ = "grievance_comments"

    grievance_id: Mapped[int] = mapped_column(sa.Integer, fk("grievances", "CASCADE"), nullable=False, index=True)
    author_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    comment: Mapped[str] = mapped_column(sa.Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    attachment_path: Mapped[Optional[str]] = mapped_column(sa.String(500))

    grievance = relationship("Grievance", back_populates="comments")


class GrievanceStatusHistory(EntityMixin, Base):
    __tablename__ = "grievance_status_histories"

    grievance_id: Mapped[int] = mapped_column(sa.Integer, fk("grievances", "CASCADE"), nullable=False, index=True)
    changed_by_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    from_status: Mapped[Optional[str]] = mapped_column(sa.String(20))
    to_status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    changed_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    grievance = relationship("Grievance", back_populates="status_history")


class GrievanceEscalation(EntityMixin, Base):
    __tablename__ = "grievance_escalations"

    grievance_id: Mapped[int] = mapped_column(sa.Integer, fk("grievances", "CASCADE"), nullable=False, index=True)
    escalated_by_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    escalated_to_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    from_level: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    to_level: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    reason: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    is_automatic: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    escalated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    grievance = relationship("Grievance", back_populates="escalations")


class GrievanceFollowUp(EntityMixin, Base):
    __tablename__ = "grievance_follow_ups"

    grievance_id: Mapped[int] = mapped_column(sa.Integer, fk("grievances", "CASCADE"), nullable=False, index=True)
    scheduled_by_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    completed_by_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    scheduled_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_completed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    outcome: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    grievance = relationship("Grievance", back_populates="follow_ups")
