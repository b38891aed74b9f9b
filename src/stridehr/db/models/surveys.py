from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class Survey(EntityMixin, Base):
    __tablename__ = "surveys"
    __table_args__ = (
        Index("ix_surveys_status_dates", "status", "start_date", "end_date"),
    )

    created_by_employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False, index=True)
    branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "SET NULL"), index=True)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    type: Mapped[str] = mapped_column(sa.String(30), nullable=False)  # Engagement, Pulse, Exit, Feedback, ...
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    start_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    is_anonymous: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    allow_multiple_responses: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_global: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    tags: Mapped[Optional[dict]] = mapped_column(JSONB())
    settings: Mapped[Optional[dict]] = mapped_column(JSONB())

    questions = relationship(
        "SurveyQuestion", back_populates="survey", cascade="all, delete-orphan",
        order_by="SurveyQuestion.order_index",
    )
    distributions = relationship("SurveyDistribution", back_populates="survey", cascade="all, delete-orphan")
    responses = relationship("SurveyResponse", back_populates="survey", cascade="all, delete-orphan")


class SurveyQuestion(EntityMixin, Base):
    __tablename__ = "survey_questions"

    survey_id: Mapped[int] = mapped_column(sa.Integer, fk("surveys", "CASCADE"), nullable=False, index=True)
    question_text: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # SingleChoice, MultipleChoice, Rating, Text, ...
    order_index: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    is_required: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    min_rating: Mapped[Optional[int]] = mapped_column(sa.Integer)
    max_rating: Mapped[Optional[int]] = mapped_column(sa.Integer)
    min_length: Mapped[Optional[int]] = mapped_column(sa.Integer)
    max_length: Mapped[Optional[int]] = mapped_column(sa.Integer)
    help_text: Mapped[Optional[str]] = mapped_column(sa.String(500))
    conditional_logic: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    survey = relationship("Survey", back_populates="questions")
    options = relationship(
        "SurveyQuestionOption", back_populates="question", cascade="all, delete-orphan",
        order_by="SurveyQuestionOption.order_index",
    )


class SurveyQuestionOption(EntityMixin, Base):
    __tablename__ = "survey_question_options"

    question_id: Mapped[int] = mapped_column(sa.Integer, fk("survey_questions", "CASCADE"), nullable=False, index=True)
    option_text: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    order_index: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    value: Mapped[Optional[int]] = mapped_column(sa.Integer)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    question = relationship("SurveyQuestion", back_populates="options")


class SurveyDistribution(EntityMixin, Base):
    __tablename__ = "survey_distributions"
    __table_args__ = (
        UniqueConstraint("survey_id", "target_employee_id", name="uq_survey_distributions_survey_employee"),
    )

    survey_id: Mapped[int] = mapped_column(sa.Integer, fk("surveys", "CASCADE"), nullable=False)
    target_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "CASCADE"), index=True)
    target_branch_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("branches", "CASCADE"))
    target_role: Mapped[Optional[str]] = mapped_column(sa.String(50))
    sent_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    viewed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    reminder_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    last_reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    survey = relationship("Survey", back_populates="distributions")


class SurveyResponse(EntityMixin, Base):
    __tablename__ = "survey_responses"
    __table_args__ = (
        Index("ix_survey_responses_survey_status", "survey_id", "status"),
    )

    survey_id: Mapped[int] = mapped_column(sa.Integer, fk("surveys", "CASCADE"), nullable=False)
    respondent_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"), index=True)
    survey_distribution_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("survey_distributions", "SET NULL"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="InProgress")
    started_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    submitted_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    is_anonymous: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    anonymous_id: Mapped[Optional[str]] = mapped_column(sa.String(100))
    completion_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    time_spent_seconds: Mapped[Optional[int]] = mapped_column(sa.Integer)
    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.String(500))

    survey = relationship("Survey", back_populates="responses")
    answers = relationship("SurveyAnswer", back_populates="response", cascade="all, delete-orphan")


class SurveyAnswer(EntityMixin, Base):
    __tablename__ = "survey_answers"
    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_survey_answers_response_question"),
    )

    response_id: Mapped[int] = mapped_column(sa.Integer, fk("survey_responses", "CASCADE"), nullable=False)
    question_id: Mapped[int] = mapped_column(sa.Integer, fk("survey_questions", "CASCADE"), nullable=False, index=True)
    selected_option_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("survey_question_options", "SET NULL"))
    text_answer: Mapped[Optional[str]] = mapped_column(sa.Text)
    numeric_answer: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    date_answer: Mapped[Optional[date]] = mapped_column(sa.Date)
    boolean_answer: Mapped[Optional[bool]] = mapped_column(sa.Boolean)
    multiple_selections: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_skipped: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    answered_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    response = relationship("SurveyResponse", back_populates="answers")


class SurveyAnalytics(EntityMixin, Base):
    """Precomputed metrics, one row per survey metric (optionally per question)."""
    __tablename__ = "survey_analytics"
    __table_args__ = (
        Index("ix_survey_analytics_survey_metric", "survey_id", "metric_type"),
    )

    survey_id: Mapped[int] = mapped_column(sa.Integer, fk("surveys", "CASCADE"), nullable=False)
    question_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("survey_questions", "CASCADE"))
    metric_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)  # ResponseRate, AverageRating, NPS, Sentiment
    value: Mapped[Optional[str]] = mapped_column(sa.String(500))
    numeric_value: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(12, 4))
    segment: Mapped[Optional[str]] = mapped_column(sa.String(100))
    calculated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    extra_data: Mapped[Optional[dict]] = mapped_column(JSONB())
