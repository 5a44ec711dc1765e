from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VacationType = Literal["annual", "additional", "study", "unpaid", "maternity", "comp", "sick"]


class VacationCreate(BaseModel):
    employee_id: int = Field(..., ge=1)
    vacation_type: VacationType
    start_date: date
    end_date: date
    reason: Optional[str] = None
    substitute_employee_id: Optional[int] = Field(None, ge=1)


class MyVacationCreate(BaseModel):
    """Заявка из личного кабинета: сотрудник определяется по токену."""

    vacation_type: VacationType
    start_date: date
    end_date: date
    reason: Optional[str] = None
    substitute_employee_id: Optional[int] = Field(None, ge=1)


class VacationReject(BaseModel):
    reason: str = Field(..., min_length=1)


class VacationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    vacation_type: str
    start_date: date
    end_date: date
    days_count: int
    status: str
    reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    substitute_employee_id: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class BalanceSet(BaseModel):
    employee_id: int = Field(..., ge=1)
    year: int = Field(..., ge=2000, le=2100)
    total_days: int = Field(..., ge=0, le=366)


class BalanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    year: int
    total_days: int
    used_days: int
    pending_days: int
    remaining_days: int


class BlockedPeriodCreate(BaseModel):
    department_id: int = Field(..., ge=1)
    start_date: date
    end_date: date
    reason: Optional[str] = None


class BlockedPeriodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    department_id: Optional[int] = None
    start_date: date
    end_date: date
    reason: Optional[str] = None
