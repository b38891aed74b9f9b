from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class Notification(EntityMixin, Base):
    """In-app notification; ``user_id`` is NULL for global announcements."""
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "is_read"),
        Index("ix_notifications_type_created", "type", "created_at"),
        Index("ix_notifications_read_created", "is_read", "created_at"),
    )

    user_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("users", "CASCADE"))
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    message: Mapped[str] = mapped_column(sa.String(2000), nullable=False)
    type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    priority: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Normal")
    channel: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="InApp")
    target_role: Mapped[Optional[str]] = mapped_column(sa.String(50))
    action_url: Mapped[Optional[str]] = mapped_column(sa.String(500))
    extra_data: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_read: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    read_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_global: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())

    user = relationship("User")


class NotificationTemplate(EntityMixin, Base):
    __tablename__ = "notification_templates"

    name: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    channel: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    title_template: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    message_template: Mapped[str] = mapped_column(sa.Text, nullable=False)
    default_parameters: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())


class UserNotificationPreference(EntityMixin, Base):
    __tablename__ = "user_notification_preferences"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "notification_type", "channel",
            name="uq_user_notification_preferences_user_type_channel",
        ),
    )

    user_id: Mapped[int] = mapped_column(sa.Integer, fk("users", "CASCADE"), nullable=False)
    notification_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    channel: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    is_enabled: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    quiet_hours_start_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)  # minutes after midnight
    quiet_hours_end_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    disable_on_weekends: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())


class EmailTemplate(EntityMixin, Base):
    __tablename__ = "email_templates"

    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"), index=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    subject: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    html_body: Mapped[str] = mapped_column(sa.Text, nullable=False)
    text_body: Mapped[Optional[str]] = mapped_column(sa.Text)
    type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Welcome, PasswordReset, Payslip, Campaign, ...
    category: Mapped[Optional[str]] = mapped_column(sa.String(50))
    required_parameters: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_global: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())


class EmailCampaign(EntityMixin, Base):
    __tablename__ = "email_campaigns"

    email_template_id: Mapped[int] = mapped_column(sa.Integer, fk("email_templates", "RESTRICT"), nullable=False, index=True)
    created_by_user_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("users", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    subject: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Announcement")
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    target_branch_ids: Mapped[Optional[dict]] = mapped_column(JSONB())
    target_roles: Mapped[Optional[dict]] = mapped_column(JSONB())
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    started_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    total_recipients: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    sent_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    delivered_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    opened_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    clicked_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    bounced_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    failed_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))

    template = relationship("EmailTemplate")
    logs = relationship("EmailLog", back_populates="campaign")


class EmailLog(EntityMixin, Base):
    __tablename__ = "email_logs"
    __table_args__ = (
        Index("ix_email_logs_status_created", "status", "created_at"),
    )

    email_template_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("email_templates", "SET NULL"))
    email_campaign_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("email_campaigns", "SET NULL"), index=True)
    user_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("users", "SET NULL"), index=True)
    to_email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    to_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    subject: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    html_body: Mapped[Optional[str]] = mapped_column(sa.Text)
    text_body: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    priority: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Normal")
    external_id: Mapped[Optional[str]] = mapped_column(sa.String(200))
    error_message: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    retry_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    sent_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    delivered_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    opened_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    clicked_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    bounced_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    extra_data: Mapped[Optional[dict]] = mapped_column(JSONB())

    campaign = relationship("EmailCampaign", back_populates="logs")
