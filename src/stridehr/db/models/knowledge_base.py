from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class KnowledgeBaseCategory(EntityMixin, Base):
    __tablename__ = "knowledge_base_categories"

    parent_category_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("knowledge_base_categories", "SET NULL"), index=True)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(120), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    icon: Mapped[Optional[str]] = mapped_column(sa.String(50))
    color: Mapped[Optional[str]] = mapped_column(sa.String(20))
    sort_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    parent = relationship("KnowledgeBaseCategory", remote_side="KnowledgeBaseCategory.id", back_populates="children")
    children = relationship("KnowledgeBaseCategory", back_populates="parent")
    documents = relationship("KnowledgeBaseDocument", back_populates="category")


class KnowledgeBaseDocument(EntityMixin, Base):
    __tablename__ = "knowledge_base_documents"
    __table_args__ = (
        Index("ix_knowledge_base_documents_category_status", "category_id", "status"),
    )

    category_id: Mapped[int] = mapped_column(sa.Integer, fk("knowledge_base_categories", "RESTRICT"), nullable=False)
    author_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False, index=True)
    reviewer_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    parent_document_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("knowledge_base_documents", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Article")  # Article, Policy, Procedure, FAQ
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    tags: Mapped[Optional[dict]] = mapped_column(JSONB())
    keywords: Mapped[Optional[dict]] = mapped_column(JSONB())
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))
    is_current_version: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    is_public: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_featured: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    published_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    expires_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    review_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    view_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    download_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    meta_title: Mapped[Optional[str]] = mapped_column(sa.String(200))
    meta_description: Mapped[Optional[str]] = mapped_column(sa.String(500))

    category = relationship("KnowledgeBaseCategory", back_populates="documents")
    approvals = relationship("KnowledgeBaseDocumentApproval", back_populates="document", cascade="all, delete-orphan")
    attachments = relationship("KnowledgeBaseDocumentAttachment", back_populates="document", cascade="all, delete-orphan")
    views = relationship("KnowledgeBaseDocumentView", back_populates="document", cascade="all, delete-orphan")
    comments = relationship("KnowledgeBaseDocumentComment", back_populates="document", cascade="all, delete-orphan")


class KnowledgeBaseDocumentApproval(EntityMixin, Base):
    __tablename__ = "knowledge_base_document_approvals"

    document_id: Mapped[int] = mapped_column(sa.Integer, fk("knowledge_base_documents", "CASCADE"), nullable=False, index=True)
    approver_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    action: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Approved, Rejected, RequestedChanges
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    approved_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    level: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))

    document = relationship("KnowledgeBaseDocument", back_populates="approvals")


class KnowledgeBaseDocumentAttachment(EntityMixin, Base):
    __tablename__ = "knowledge_base_document_attachments"

    document_id: Mapped[int] = mapped_column(sa.Integer, fk("knowledge_base_documents", "CASCADE"), nullable=False, index=True)
    uploaded_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    file_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    original_file_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    content_type: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    download_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))

    document = relationship("KnowledgeBaseDocument", back_populates="attachments")


class KnowledgeBaseDocumentView(EntityMixin, Base):
    __tablename__ = "knowledge_base_document_views"
    __table_args__ = (
        Index("ix_knowledge_base_document_views_document_viewed", "document_id", "viewed_at"),
    )

    document_id: Mapped[int] = mapped_column(sa.Integer, fk("knowledge_base_documents", "CASCADE"), nullable=False)
    viewer_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"), index=True)
    viewed_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.String(500))
    time_spent_seconds: Mapped[Optional[int]] = mapped_column(sa.Integer)

    document = relationship("KnowledgeBaseDocument", back_populates="views")


class KnowledgeBaseDocumentComment(EntityMixin, Base):
    __tablename__ = "knowledge_base_document_comments"

    document_id: Mapped[int] = mapped_column(sa.Integer, fk("knowledge_base_documents", "CASCADE"), nullable=False, index=True)
    author_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    parent_comment_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("knowledge_base_document_comments", "CASCADE"))
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())

    document = relationship("KnowledgeBaseDocument", back_populates="comments")
    replies = relationship("KnowledgeBaseDocumentComment")
