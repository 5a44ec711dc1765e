from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PayFrequency = Literal["monthly", "biweekly"]


class SalaryStructureCreate(BaseModel):
    employee_id: int = Field(..., ge=1)
    base_salary: float = Field(..., gt=0)
    regional_allowance: float = Field(0, ge=0)
    seniority_allowance: float = Field(0, ge=0)
    qualification_allowance: float = Field(0, ge=0)
    hazard_allowance: float = Field(0, ge=0)
    night_shift_allowance: float = Field(0, ge=0)
    currency: str = Field("UZS", min_length=3, max_length=3)
    pay_frequency: PayFrequency = "monthly"
    effective_from: date
    effective_to: Optional[date] = None


class SalaryStructureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    base_salary: float
    regional_allowance: float
    seniority_allowance: float
    qualification_allowance: float
    hazard_allowance: float
    night_shift_allowance: float
    currency: str
    pay_frequency: str
    effective_from: date
    effective_to: Optional[date] = None


class SalaryCreate(BaseModel):
    employee_id: int = Field(..., ge=1)
    period_year: int = Field(..., ge=2000, le=2100)
    period_month: int = Field(..., ge=1, le=12)


class BonusIn(BaseModel):
    bonus_type: str = Field(..., min_length=1, max_length=32)
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=255)


class DeductionIn(BaseModel):
    deduction_type: str = Field(..., min_length=1, max_length=32)
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=255)


class SalaryCalculate(BaseModel):
    """
    Табель за период. Без work_days берётся число рабочих дней месяца
    (пн-сб), без actual_days сотрудник считается отработавшим весь месяц.
    """

    work_days: Optional[int] = Field(None, ge=1, le=31)
    actual_days: Optional[int] = Field(None, ge=0, le=31)
    overtime_hours: float = Field(0, ge=0)
    bonuses: List[BonusIn] = Field(default_factory=list)
    deductions: List[DeductionIn] = Field(default_factory=list)


class BulkCalculate(BaseModel):
    department_id: int = Field(..., ge=1)
    period_year: int = Field(..., ge=2000, le=2100)
    period_month: int = Field(..., ge=1, le=12)


class BulkCalculateOut(BaseModel):
    status: int = 200
    calculated: int


class SalaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    period_year: int
    period_month: int
    status: str
    base_salary: float
    regional_allowance: float
    seniority_allowance: float
    qualification_allowance: float
    hazard_allowance: float
    night_shift_allowance: float
    overtime_amount: float
    bonus_amount: float
    gross_salary: float
    ndfl: float
    social_tax: float
    pension_fund: float
    health_insurance: float
    trade_union: float
    total_deductions: float
    net_salary: float
    work_days: int
    actual_days: int
    overtime_hours: float
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
