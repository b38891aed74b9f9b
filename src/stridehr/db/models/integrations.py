from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class WebhookSubscription(EntityMixin, Base):
    __tablename__ = "webhook_subscriptions"

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    url: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    secret: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    subscribed_events: Mapped[dict] = mapped_column(JSONB(), nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    timeout_seconds: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("30"))
    max_retries: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("3"))
    headers: Mapped[Optional[dict]] = mapped_column(JSONB())
    last_delivery_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    consecutive_failures: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))

    deliveries = relationship("WebhookDelivery", back_populates="subscription", cascade="all, delete-orphan")


class WebhookDelivery(EntityMixin, Base):
    """One attempt record per event sent to a subscription."""
    __tablename__ = "webhook_deliveries"
    __table_args__ = (
        Index("ix_webhook_deliveries_subscription_status", "webhook_subscription_id", "status"),
        Index("ix_webhook_deliveries_next_retry", "is_success", "next_retry_at"),
    )

    webhook_subscription_id: Mapped[int] = mapped_column(sa.Integer, fk("webhook_subscriptions", "CASCADE"), nullable=False)
    event_type: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONB(), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    http_status_code: Mapped[Optional[int]] = mapped_column(sa.Integer)
    response_body: Mapped[Optional[str]] = mapped_column(sa.Text)
    error_message: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    attempt_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    delivered_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    next_retry_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_success: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    duration_ms: Mapped[Optional[int]] = mapped_column(sa.Integer)

    subscription = relationship("WebhookSubscription", back_populates="deliveries")


class ExternalIntegration(EntityMixin, Base):
    __tablename__ = "external_integrations"
    __table_args__ = (
        UniqueConstraint("organization_id", "system_type", "name", name="uq_external_integrations_org_system_name"),
    )

    organization_id: Mapped[int] = mapped_column(sa.Integer, fk("organizations", "CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Payroll, Accounting, Calendar, SSO, ...
    system_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)  # QuickBooks, SAP, ADP, ...
    configuration: Mapped[dict] = mapped_column(JSONB(), nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    last_error: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    sync_frequency_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)

    logs = relationship("IntegrationLog", back_populates="integration", cascade="all, delete-orphan")


class IntegrationLog(EntityMixin, Base):
    __tablename__ = "integration_logs"
    __table_args__ = (
        Index("ix_integration_logs_integration_created", "external_integration_id", "created_at"),
    )

    external_integration_id: Mapped[int] = mapped_column(sa.Integer, fk("external_integrations", "CASCADE"), nullable=False)
    operation: Mapped[str] = mapped_column(sa.String(100), nullable=False)  # Export, Import, Sync, Test
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    request_data: Mapped[Optional[dict]] = mapped_column(JSONB())
    response_data: Mapped[Optional[dict]] = mapped_column(JSONB())
    error_message: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    records_processed: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    records_failed: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    duration_ms: Mapped[Optional[int]] = mapped_column(sa.Integer)

    integration = relationship("ExternalIntegration", back_populates="logs")


class CalendarIntegration(EntityMixin, Base):
    __tablename__ = "calendar_integrations"
    __table_args__ = (
        UniqueConstraint("employee_id", "provider", name="uq_calendar_integrations_employee_provider"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    provider: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Google, Outlook
    access_token: Mapped[str] = mapped_column(sa.String(2000), nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    token_expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    calendar_id: Mapped[Optional[str]] = mapped_column(sa.String(500))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    sync_leave: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    sync_meetings: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    sync_holidays: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    settings: Mapped[Optional[dict]] = mapped_column(JSONB())
