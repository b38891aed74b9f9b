from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, fk


class SupportTicket(EntityMixin, Base):
    __tablename__ = "support_tickets"
    __table_args__ = (
        Index("ix_support_tickets_status_priority", "status", "priority"),
    )

    ticket_number: Mapped[str] = mapped_column(sa.String(20), nullable=False, unique=True)  # ST-2024-000123
    requester_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    assigned_to_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"), index=True)
    asset_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("assets", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    category: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Hardware, Software, Network, Access, ...
    priority: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Medium")
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Open")
    requires_remote_access: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    remote_access_details: Mapped[Optional[str]] = mapped_column(sa.String(500))
    resolution: Mapped[Optional[str]] = mapped_column(sa.Text)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    closed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    resolution_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    satisfaction_rating: Mapped[Optional[int]] = mapped_column(sa.Integer)
    feedback_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    attachment_path: Mapped[Optional[str]] = mapped_column(sa.String(500))

    comments = relationship("SupportTicketComment", back_populates="ticket", cascade="all, delete-orphan")
    status_history = relationship(
        "SupportTicketStatusHistory", back_populates="ticket", cascade="all, delete-orphan",
        order_by="SupportTicketStatusHistory.changed_at",
    )


class SupportTicketComment(EntityMixin, Base):
    __tablename__ = "support_ticket_comments"

    support_ticket_id: Mapped[int] = mapped_column(sa.Integer, fk("support_tickets", "CASCADE"), nullable=False, index=True)
    author_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    comment: Mapped[str] = mapped_column(sa.Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    attachment_path: Mapped[Optional[str]] = mapped_column(sa.String(500))

    ticket = relationship("SupportTicket", back_populates="comments")


class SupportTicketStatusHistory(EntityMixin, Base):
    __tablename__ = "support_ticket_status_histories"

    support_ticket_id: Mapped[int] = mapped_column(sa.Integer, fk("support_tickets", "CASCADE"), nullable=False, index=True)
    changed_by_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    from_status: Mapped[Optional[str]] = mapped_column(sa.String(20))
    to_status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    changed_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    ticket = relationship("SupportTicket", back_populates="status_history")
