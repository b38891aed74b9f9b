from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, JSONB, fk


class TrainingModule(EntityMixin, Base):
    __tablename__ = "training_modules"

    created_by_employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    content: Mapped[Optional[str]] = mapped_column(sa.Text)
    category: Mapped[Optional[str]] = mapped_column(sa.String(100))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Video, Document, Interactive, Classroom
    level: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Beginner")
    estimated_duration_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    prerequisites: Mapped[Optional[dict]] = mapped_column(JSONB())
    content_files: Mapped[Optional[dict]] = mapped_column(JSONB())
    tags: Mapped[Optional[dict]] = mapped_column(JSONB())
    is_mandatory: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    assignments = relationship("TrainingAssignment", back_populates="training_module", cascade="all, delete-orphan")
    assessments = relationship("Assessment", back_populates="training_module", cascade="all, delete-orphan")


class TrainingAssignment(EntityMixin, Base):
    __tablename__ = "training_assignments"
    __table_args__ = (
        UniqueConstraint("training_module_id", "employee_id", name="uq_training_assignments_module_employee"),
    )

    training_module_id: Mapped[int] = mapped_column(sa.Integer, fk("training_modules", "CASCADE"), nullable=False)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    assigned_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    assigned_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    due_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Assigned")
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))

    training_module = relationship("TrainingModule", back_populates="assignments")


class TrainingProgress(EntityMixin, Base):
    __tablename__ = "training_progresses"

    training_assignment_id: Mapped[int] = mapped_column(sa.Integer, fk("training_assignments", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    training_module_id: Mapped[int] = mapped_column(sa.Integer, fk("training_modules", "CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="NotStarted")
    progress_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    time_spent_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    completed_sections: Mapped[Optional[dict]] = mapped_column(JSONB())
    started_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    last_accessed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))


class Assessment(EntityMixin, Base):
    __tablename__ = "assessments"

    training_module_id: Mapped[int] = mapped_column(sa.Integer, fk("training_modules", "CASCADE"), nullable=False, index=True)
    created_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Quiz")
    passing_score: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("70"))
    time_limit_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    max_attempts: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("3"))
    randomize_questions: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    training_module = relationship("TrainingModule", back_populates="assessments")
    questions = relationship(
        "AssessmentQuestion", back_populates="assessment", cascade="all, delete-orphan",
        order_by="AssessmentQuestion.order_index",
    )
    attempts = relationship("AssessmentAttempt", back_populates="assessment", cascade="all, delete-orphan")


class AssessmentQuestion(EntityMixin, Base):
    __tablename__ = "assessment_questions"

    assessment_id: Mapped[int] = mapped_column(sa.Integer, fk("assessments", "CASCADE"), nullable=False, index=True)
    question_text: Mapped[str] = mapped_column(sa.Text, nullable=False)
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # MultipleChoice, TrueFalse, ShortAnswer, Essay
    options: Mapped[Optional[dict]] = mapped_column(JSONB())
    correct_answers: Mapped[Optional[dict]] = mapped_column(JSONB())
    explanation: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    points: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("1"))
    order_index: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("0"))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())

    assessment = relationship("Assessment", back_populates="questions")


class AssessmentAttempt(EntityMixin, Base):
    __tablename__ = "assessment_attempts"
    __table_args__ = (
        UniqueConstraint("assessment_id", "employee_id", "attempt_number", name="uq_assessment_attempts_number"),
    )

    assessment_id: Mapped[int] = mapped_column(sa.Integer, fk("assessments", "CASCADE"), nullable=False)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    attempt_number: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="InProgress")
    started_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    score: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(8, 2))
    percentage_score: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 2))
    time_spent_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    is_passed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())

    assessment = relationship("Assessment", back_populates="attempts")
    answers = relationship("AssessmentAnswer", back_populates="attempt", cascade="all, delete-orphan")


class AssessmentAnswer(EntityMixin, Base):
    __tablename__ = "assessment_answers"

    assessment_attempt_id: Mapped[int] = mapped_column(sa.Integer, fk("assessment_attempts", "CASCADE"), nullable=False, index=True)
    assessment_question_id: Mapped[int] = mapped_column(sa.Integer, fk("assessment_questions", "RESTRICT"), nullable=False, index=True)
    selected_answers: Mapped[Optional[dict]] = mapped_column(JSONB())
    text_answer: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_correct: Mapped[Optional[bool]] = mapped_column(sa.Boolean)
    points_earned: Mapped[Decimal] = mapped_column(sa.Numeric(8, 2), nullable=False, server_default=sa.text("0"))
    answered_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())

    attempt = relationship("AssessmentAttempt", back_populates="answers")
    question = relationship("AssessmentQuestion")


class Certification(EntityMixin, Base):
    __tablename__ = "certifications"

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False, index=True)
    training_module_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("training_modules", "SET NULL"), index=True)
    issued_by_employee_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    certification_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    certificate_number: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    issuing_authority: Mapped[Optional[str]] = mapped_column(sa.String(200))
    issued_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Active")
    score: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(5, 2))
    certificate_file_path: Mapped[Optional[str]] = mapped_column(sa.String(500))
    notes: Mapped[Optional[str]] = mapped_column(sa.String(500))
