from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stridehr.db.base import Base, EntityMixin, fk


class PerformanceGoal(EntityMixin, Base):
    __tablename__ = "performance_goals"
    __table_args__ = (
        Index("ix_performance_goals_employee_status", "employee_id", "status"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    manager_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    success_criteria: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    target_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    completed_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    weight_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    progress_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    final_rating: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(3, 1))
    employee_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    manager_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    check_ins = relationship("PerformanceGoalCheckIn", back_populates="goal", cascade="all, delete-orphan")


class PerformanceGoalCheckIn(EntityMixin, Base):
    __tablename__ = "performance_goal_check_ins"

    performance_goal_id: Mapped[int] = mapped_column(sa.Integer, fk("performance_goals", "CASCADE"), nullable=False, index=True)
    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    manager_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    check_in_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    progress_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False)
    employee_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    manager_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    challenges: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    support_needed: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    goal = relationship("PerformanceGoal", back_populates="check_ins")


class PerformanceReview(EntityMixin, Base):
    __tablename__ = "performance_reviews"
    __table_args__ = (
        Index("ix_performance_reviews_employee_period", "employee_id", "review_period"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    manager_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False, index=True)
    approved_by: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    review_period: Mapped[str] = mapped_column(sa.String(50), nullable=False)  # 2024-H1, 2024-Q3
    review_start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    review_end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    due_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(30), nullable=False, server_default="NotStarted")
    overall_rating: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(3, 1))
    employee_self_assessment: Mapped[Optional[str]] = mapped_column(sa.Text)
    manager_comments: Mapped[Optional[str]] = mapped_column(sa.Text)
    strengths: Mapped[Optional[str]] = mapped_column(sa.Text)
    areas_for_improvement: Mapped[Optional[str]] = mapped_column(sa.Text)
    development_plan: Mapped[Optional[str]] = mapped_column(sa.Text)
    requires_pip: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    feedbacks = relationship("PerformanceFeedback", back_populates="review", cascade="all, delete-orphan")


class PerformanceFeedback(EntityMixin, Base):
    """360-degree feedback entry attached to a review."""
    __tablename__ = "performance_feedbacks"

    performance_review_id: Mapped[int] = mapped_column(sa.Integer, fk("performance_reviews", "CASCADE"), nullable=False, index=True)
    reviewer_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    reviewee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    feedback_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Self, Manager, Peer, Subordinate
    competency_area: Mapped[Optional[str]] = mapped_column(sa.String(100))
    rating: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(3, 1))
    comments: Mapped[Optional[str]] = mapped_column(sa.Text)
    strengths: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    areas_for_improvement: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    is_anonymous: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    is_submitted: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    submitted_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    review = relationship("PerformanceReview", back_populates="feedbacks")


class PerformanceImprovementPlan(EntityMixin, Base):
    __tablename__ = "performance_improvement_plans"
    __table_args__ = (
        Index("ix_performance_improvement_plans_employee_status", "employee_id", "status"),
    )

    employee_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "CASCADE"), nullable=False)
    manager_id: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    hr_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("employees", "SET NULL"))
    performance_review_id: Mapped[Optional[int]] = mapped_column(sa.Integer, fk("performance_reviews", "SET NULL"))
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    performance_issues: Mapped[str] = mapped_column(sa.Text, nullable=False)
    expected_improvements: Mapped[str] = mapped_column(sa.Text, nullable=False)
    support_provided: Mapped[Optional[str]] = mapped_column(sa.Text)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    review_frequency_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, server_default=sa.text("14"))
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="Draft")
    final_outcome: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_successful: Mapped[Optional[bool]] = mapped_column(sa.Boolean)
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    goals = relationship("PIPGoal", back_populates="pip", cascade="all, delete-orphan")
    reviews = relationship("PIPReview", back_populates="pip", cascade="all, delete-orphan")


class PIPGoal(EntityMixin, Base):
    __tablename__ = "pip_goals"

    pip_id: Mapped[int] = mapped_column(sa.Integer, fk("performance_improvement_plans", "CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    measurable_objective: Mapped[str] = mapped_column(sa.String(1000), nullable=False)
    target_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, server_default="NotStarted")
    progress_percentage: Mapped[Decimal] = mapped_column(sa.Numeric(5, 2), nullable=False, server_default=sa.text("0"))
    is_achieved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.false())
    completed_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    employee_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))
    manager_comments: Mapped[Optional[str]] = mapped_column(sa.String(1000))

    pip = relationship("PerformanceImprovementPlan", back_populates="goals")


class PIPReview(EntityMixin, Base):
    __tablename__ = "pip_reviews"

    pip_id: Mapped[int] = mapped_column(sa.Integer, fk("performance_improvement_plans", "CASCADE"), nullable=False, index=True)
    reviewed_by: Mapped[int] = mapped_column(sa.Integer, fk("employees", "RESTRICT"), nullable=False)
    review_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    progress_summary: Mapped[str] = mapped_column(sa.Text, nullable=False)
    employee_feedback: Mapped[Optional[str]] = mapped_column(sa.Text)
    manager_feedback: Mapped[Optional[str]] = mapped_column(sa.Text)
    overall_progress: Mapped[str] = mapped_column(sa.String(20), nullable=False)  # Poor, BelowExpectations, Meets, Exceeds
    is_on_track: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, server_default=sa.true())
    next_steps: Mapped[Optional[str]] = mapped_column(sa.Text)
    recommended_action: Mapped[Optional[str]] = mapped_column(sa.String(50))

    pip = relationship("PerformanceImprovementPlan", back_populates="reviews")
