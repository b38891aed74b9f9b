from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class DocumentTemplate(EntityMixin, Base):
    __tablename__ = "document_templates"

    created_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    last_modified_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # OfferLetter, Contract, Policy, Certificate, ...
    category: Mapped[Optional[str]] = mapped_column(sa.String(100))
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    merge_fields: Mapped[Optional[dict]] = mapped_column(JSONB())
    requires_approval: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    requires_signature: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_system_template: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))
    usage_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))

    versions = relationship("DocumentTemplateVersion", back_populates="template", cascade="all, delete-orphan")
    generated_documents = relationship("GeneratedDocument", back_populates="template")


class DocumentTemplateVersion(EntityMixin, Base):
    __tablename__ = "document_template_versions"
    __table_args__ = (
        UniqueConstraint("document_template_id", "version_number", name="uq_document_template_versions_number"),
    )

    document_template_id: Mapped[int] = mapped_column(sa.Integer, fk("document_templates", "CASCADE"), nullable=False)
    created_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    version_number: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    merge_fields: Mapped[Optional[dict]] = mapped_column(JSONB())
    change_log: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())

    template = relationship("DocumentTemplate", back_populates="versions")


class GeneratedDocument(EntityMixin, Base):
    __tablename__ = "generated_documents"
    __table_args__ = (
        Index("ix_generated_documents_employee_status", "employee_id", "status"),
    )

    document_template_id: Mapped[int] = mapped_column(sa.Integer, fk("document_templates", "RESTRICT"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    generated_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    document_number: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    merge_data: Mapped[Optional[dict]] = mapped_column(JSONB())
    file_path: Mapped[Optional[str]] = mapped_column(sa.String(500))
    file_hash: Mapped[Optional[str]] = mapped_column(sa.String(128))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    generated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    requires_signature: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    signature_completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    download_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    last_downloaded_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    template = relationship("DocumentTemplate", back_populates="generated_documents")
    signatures = relationship(
        "DocumentSignature", back_populates="document", cascade="all, delete-orphan",
        order_by="DocumentSignature.signing_order",
    )
    approvals = relationship("DocumentApproval", back_populates="document", cascade="all, delete-orphan")
    audit_logs = relationship("DocumentAuditLog", back_populates="document", cascade="all, delete-orphan")


class DocumentSignature(EntityMixin, Base):
    __tablename__ = "document_signatures"

    generated_document_id: Mapped[int] = mapped_column(sa.Integer, fk("generated_documents", "CASCADE"), nullable=False, index=True)
    signer_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    signer_role: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    signature_type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Electronic")
    signing_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    signature_data: Mapped[Optional[str]] = mapped_column(sa.Text)
    signed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.String(500))
    rejection_reason: Mapped[Optional[str]] = mapped_column(sa.String(500))

    document = relationship("GeneratedDocument", back_populates="signatures")


class DocumentApproval(EntityMixin, Base):
    __tablename__ = "document_approvals"

    generated_document_id: Mapped[int] = mapped_column(sa.Integer, fk("generated_documents", "CASCADE"), nullable=False, index=True)
    approver_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    level: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))
    action: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Pending")
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    action_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    document = relationship("GeneratedDocument", back_populates="approvals")


class DocumentAuditLog(EntityMixin, Base):
    __tablename__ = "document_audit_logs"
    __table_args__ = (
        Index("ix_document_audit_logs_document_timestamp", "generated_document_id", "timestamp"),
    )

    generated_document_id: Mapped[int] = mapped_column(sa.Integer, fk("generated_documents", "CASCADE"), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("users", "SET NULL"))
    action: Mapped[str] = mapped_column(sa.String(50), nullable=False)  # Generated, Viewed, Downloaded, Signed, ...
    details: Mapped[Optional[str]] = mapped_column(sa.String(2000))
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.String(500))
    timestamp: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    document = relationship("GeneratedDocument", back_populates="audit_logs")


class DocumentRetentionPolicy(EntityMixin, Base):
    __tablename__ = "document_retention_policies"

    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    document_type: Mapped[str] = mapped_column(sa.String(30), nullable=False)
    retention_period_months: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    auto_delete: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    requires_approval: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    legal_basis: Mapped[Optional[str]] = mapped_column(sa.String(500))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    executions = relationship("DocumentRetentionExecution", back_populates="policy", cascade="all, delete-orphan")


class DocumentRetentionExecution(EntityMixin, Base):
    __tablename__ = "document_retention_executions"

    document_retention_policy_id: Mapped[int] = mapped_column(sa.Integer, fk("document_retention_policies", "CASCADE"), nullable=False, index=True)
    generated_document_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("generated_documents", "SET NULL"))
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    action: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Archived, Deleted, Retained
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Scheduled")
    scheduled_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    executed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    error_message: Mapped[Optional[str]] = mapped_column(sa.String(2000))

    policy = relationship("DocumentRetentionPolicy", back_populates="executions")
