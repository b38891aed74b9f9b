from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


# ==========================
# Users, sessions, RBAC, audit trail
# ==========================

class User(EntityMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email_active", "email", "is_active"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(sa.String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_email_verified: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_two_factor_enabled: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    two_factor_secret: Mapped[Optional[str]] = mapped_column(sa.String(200))
    last_login_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), index=True)
    last_login_ip: Mapped[Optional[str]] = mapped_column(sa.String(45))
    failed_login_attempts: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    locked_until: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    password_changed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    force_password_change: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    preferred_language: Mapped[Optional[str]] = mapped_column(sa.String(10))
    time_zone: Mapped[Optional[str]] = mapped_column(sa.String(50))

    employee = relationship("Employee", back_populates="user")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class RefreshToken(EntityMixin, Base):
    __tablename__ = "refresh_tokens"

    user_id: Mapped[int] = mapped_column(sa.Integer, fk("users", "CASCADE"), nullable=False, index=True)
    token: Mapped[str] = mapped_column(sa.String(500), nullable=False, unique=True)
    jwt_id: Mapped[Optional[str]] = mapped_column(sa.String(100))
    expires_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    is_revoked: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    revoked_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    revoked_by_ip: Mapped[Optional[str]] = mapped_column(sa.String(45))
    replaced_by_token: Mapped[Optional[str]] = mapped_column(sa.String(500))
    created_by_ip: Mapped[Optional[str]] = mapped_column(sa.String(45))

    user = relationship("User", back_populates="refresh_tokens")


class UserSession(EntityMixin, Base):
    __tablename__ = "user_sessions"

    user_id: Mapped[int] = mapped_column(sa.Integer, fk("users", "CASCADE"), nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.String(500))
    device_info: Mapped[Optional[str]] = mapped_column(sa.String(500))
    location: Mapped[Optional[str]] = mapped_column(sa.String(200))
    started_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    last_activity_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    ended_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    user = relationship("User", back_populates="sessions")


class Role(EntityMixin, Base):
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(sa.String(200))
    hierarchy_level: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    is_system_role: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")


class Permission(EntityMixin, Base):
    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)  # Employee.View
    module: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    action: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    resource: Mapped[Optional[str]] = mapped_column(sa.String(50))
    description: Mapped[Optional[str]] = mapped_column(sa.String(200))


class RolePermission(EntityMixin, Base):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_role_permission"),
        Index("ix_role_permissions_role_granted", "role_id", "is_granted"),
    )

    role_id: Mapped[int] = mapped_column(sa.Integer, fk("roles", "CASCADE"), nullable=False)
    permission_id: Mapped[int] = mapped_column(sa.Integer, fk("permissions", "CASCADE"), nullable=False, index=True)
    is_granted: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    role = relationship("Role", back_populates="role_permissions")
    permission = relationship("Permission")


class EmployeeRole(EntityMixin, Base):
    __tablename__ = "employee_roles"
    __table_args__ = (
        Index("ix_employee_roles_employee_active", "employee_id", "is_active"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    role_id: Mapped[int] = mapped_column(sa.Integer, fk("roles", "CASCADE"), nullable=False, index=True)
    assigned_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    revoked_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    assigned_by: Mapped[Optional[str]] = mapped_column(sa.String(100))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))

    role = relationship("Role")


class AuditLog(EntityMixin, Base):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_user_timestamp", "user_id", "timestamp"),
        Index("ix_audit_logs_event_type_timestamp", "event_type", "timestamp"),
    )

    user_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("users", "SET NULL"))
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"))
    event_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    severity: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Info")
    entity_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    entity_id: Mapped[Optional[str]] = mapped_column(sa.String(50))
    action: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    old_values: Mapped[Optional[dict]] = mapped_column(JSONB())
    new_values: Mapped[Optional[dict]] = mapped_column(JSONB())
    details: Mapped[Optional[str]] = mapped_column(sa.Text)
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.String(500))
    timestamp: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True)
