from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class PerformanceGoal(Base):
    """KPI-цель сотрудника. progress 0..100, при 100 цель считается выполненной."""

    __tablename__ = "performance_goals"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    metric = Column(String(255), nullable=True)
    target_value = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    progress = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, default="in_progress")
    due_date = Column(Date, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class PerformanceReview(Base):
    """
    Оценка сотрудника за период.
    Статусы: self_review -> manager_review -> completed.
    """

    __tablename__ = "performance_reviews"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    status = Column(String(32), nullable=False, default="self_review")
    self_rating = Column(Integer, nullable=True)
    self_comment = Column(Text, nullable=True)
    manager_rating = Column(Integer, nullable=True)
    manager_comment = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
