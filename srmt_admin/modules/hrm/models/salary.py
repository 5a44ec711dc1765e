from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class SalaryStructure(Base):
    """Оклад и надбавки сотрудника, действующие с effective_from."""

    __tablename__ = "salary_structures"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    base_salary = Column(Float, nullable=False)
    regional_allowance = Column(Float, nullable=False, default=0)
    seniority_allowance = Column(Float, nullable=False, default=0)
    qualification_allowance = Column(Float, nullable=False, default=0)
    hazard_allowance = Column(Float, nullable=False, default=0)
    night_shift_allowance = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="UZS")
    pay_frequency = Column(String(16), nullable=False, default="monthly")
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Salary(Base):
    """
    Начисление за период.
    Статусы: draft -> calculated -> approved -> paid.
    """

    __tablename__ = "salaries"
    __table_args__ = (
        UniqueConstraint("employee_id", "period_year", "period_month", name="uq_salary_employee_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    period_year = Column(Integer, nullable=False)
    period_month = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="draft")

    base_salary = Column(Float, nullable=False, default=0)
    regional_allowance = Column(Float, nullable=False, default=0)
    seniority_allowance = Column(Float, nullable=False, default=0)
    qualification_allowance = Column(Float, nullable=False, default=0)
    hazard_allowance = Column(Float, nullable=False, default=0)
    night_shift_allowance = Column(Float, nullable=False, default=0)
    overtime_amount = Column(Float, nullable=False, default=0)
    bonus_amount = Column(Float, nullable=False, default=0)
    gross_salary = Column(Float, nullable=False, default=0)

    ndfl = Column(Float, nullable=False, default=0)
    social_tax = Column(Float, nullable=False, default=0)
    pension_fund = Column(Float, nullable=False, default=0)
    health_insurance = Column(Float, nullable=False, default=0)
    trade_union = Column(Float, nullable=False, default=0)
    total_deductions = Column(Float, nullable=False, default=0)
    net_salary = Column(Float, nullable=False, default=0)

    work_days = Column(Integer, nullable=False, default=0)
    actual_days = Column(Integer, nullable=False, default=0)
    overtime_hours = Column(Float, nullable=False, default=0)

    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    bonuses = relationship("SalaryBonus", cascade="all, delete-orphan")
    deductions = relationship("SalaryDeduction", cascade="all, delete-orphan")


class SalaryBonus(Base):
    __tablename__ = "salary_bonuses"

    id = Column(Integer, primary_key=True, index=True)
    salary_id = Column(Integer, ForeignKey("salaries.id", ondelete="CASCADE"), nullable=False, index=True)
    bonus_type = Column(String(32), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String(255), nullable=True)


class SalaryDeduction(Base):
    __tablename__ = "salary_deductions"

    id = Column(Integer, primary_key=True, index=True)
    salary_id = Column(Integer, ForeignKey("salaries.id", ondelete="CASCADE"), nullable=False, index=True)
    deduction_type = Column(String(32), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String(255), nullable=True)
