from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class Vacation(Base):
    """
    Заявка на отпуск.
    Статусы: draft, pending -> approved | rejected; cancelled из draft/pending/approved.
    """

    __tablename__ = "vacations"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    vacation_type = Column(String(32), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    days_count = Column(Integer, nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    reason = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    substitute_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class VacationBalance(Base):
    __tablename__ = "vacation_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "year", name="uq_vacation_balance_employee_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    total_days = Column(Integer, nullable=False, default=0)
    used_days = Column(Integer, nullable=False, default=0)
    pending_days = Column(Integer, nullable=False, default=0)

    @property
    def remaining_days(self) -> int:
        return (self.total_days or 0) - (self.used_days or 0) - (self.pending_days or 0)


class VacationBlockedPeriod(Base):
    """Период, в который отдел не может уходить в отпуск."""

    __tablename__ = "vacation_blocked_periods"

    id = Column(Integer, primary_key=True, index=True)
    department_id = Column(Integer, nullable=True, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
