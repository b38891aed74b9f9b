from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class ChatbotConversation(EntityMixin, Base):
    __tablename__ = "chatbot_conversations"
    __table_args__ = (
        Index("ix_chatbot_conversations_employee_status", "employee_id", "status"),
    )

    session_id: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    escalated_to_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Active")  # Active, Escalated, Closed
    started_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    ended_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    topic: Mapped[Optional[str]] = mapped_column(sa.String(200))
    is_escalated_to_human: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    escalated_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    escalation_reason: Mapped[Optional[str]] = mapped_column(sa.String(500))
    satisfaction_rating: Mapped[Optional[int]] = mapped_column(sa.Integer)
    feedback_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    messages = relationship(
        "ChatbotMessage", back_populates="conversation", cascade="all, delete-orphan",
        order_by="ChatbotMessage.timestamp",
    )


class ChatbotMessage(EntityMixin, Base):
    __tablename__ = "chatbot_messages"

    conversation_id: Mapped[int] = mapped_column(sa.Integer, fk("chatbot_conversations", "CASCADE"), nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(sa.String(100), nullable=False, index=True)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    message_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Text, QuickReply, Card, System
    sender: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # User, Bot, Agent
    timestamp: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    intent: Mapped[Optional[str]] = mapped_column(sa.String(100))
    confidence_score: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 4))
    entities: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_from_knowledge_base: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    knowledge_base_article_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("chatbot_knowledge_bases", "SET NULL"))

    conversation = relationship("ChatbotConversation", back_populates="messages")


class ChatbotKnowledgeBase(EntityMixin, Base):
    __tablename__ = "chatbot_knowledge_bases"

    updated_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    category: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # HR, Payroll, Leave, IT, Policy, ...
    keywords: Mapped[Optional[dict]] = mapped_column(JSONB())
    tags: Mapped[Optional[dict]] = mapped_column(JSONB())
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    view_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    helpful_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    not_helpful_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    last_updated: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    feedbacks = relationship("ChatbotKnowledgeBaseFeedback", back_populates="article", cascade="all, delete-orphan")


class ChatbotKnowledgeBaseFeedback(EntityMixin, Base):
    __tablename__ = "chatbot_knowledge_base_feedbacks"

    knowledge_base_id: Mapped[int] = mapped_column(sa.Integer, fk("chatbot_knowledge_bases", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    is_helpful: Mapped[bool] = mapped_column(sa.Boolean, nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    session_id: Mapped[Optional[str]] = mapped_column(sa.String(100))

    article = relationship("ChatbotKnowledgeBase", back_populates="feedbacks")


class ChatbotLearningData(EntityMixin, Base):
    """User input / bot response pairs kept for intent model retraining."""
    __tablename__ = "chatbot_learning_data"

    employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"), index=True)
    session_id: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    user_input: Mapped[str] = mapped_column(sa.Text, nullable=False)
    bot_response: Mapped[str] = mapped_column(sa.Text, nullable=False)
    intent: Mapped[Optional[str]] = mapped_column(sa.String(100))
    confidence_score: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 4))
    was_helpful: Mapped[Optional[bool]] = mapped_column(sa.Boolean)
    user_feedback: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    corrected_response: Mapped[Optional[str]] = mapped_column(sa.Text)
    interaction_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    is_used_for_training: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
