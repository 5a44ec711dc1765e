from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

EmploymentType = Literal["full_time", "part_time", "contract", "intern"]
EmploymentStatus = Literal["active", "on_leave", "terminated", "suspended"]


class EmployeeCreate(BaseModel):
    contact_id: int = Field(..., ge=1)
    user_id: Optional[int] = Field(None, ge=1)
    employee_number: Optional[str] = Field(None, max_length=64)
    hire_date: date
    employment_type: EmploymentType
    work_schedule: Optional[str] = Field(None, max_length=64)
    work_hours_per_week: Optional[float] = Field(None, gt=0, le=168)
    manager_id: Optional[int] = Field(None, ge=1)
    department_id: Optional[int] = Field(None, ge=1)
    position_id: Optional[int] = Field(None, ge=1)
    probation_end_date: Optional[date] = None
    notes: Optional[str] = None


class EmployeeUpdate(BaseModel):
    user_id: Optional[int] = Field(None, ge=1)
    employee_number: Optional[str] = Field(None, max_length=64)
    employment_type: Optional[EmploymentType] = None
    employment_status: Optional[EmploymentStatus] = None
    work_schedule: Optional[str] = Field(None, max_length=64)
    work_hours_per_week: Optional[float] = Field(None, gt=0, le=168)
    manager_id: Optional[int] = Field(None, ge=1)
    department_id: Optional[int] = Field(None, ge=1)
    position_id: Optional[int] = Field(None, ge=1)
    probation_end_date: Optional[date] = None
    probation_passed: Optional[bool] = None
    notes: Optional[str] = None


class EmployeeTerminate(BaseModel):
    termination_date: date
    reason: str = Field(..., min_length=1)


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int
    name: Optional[str] = None
    user_id: Optional[int] = None
    employee_number: Optional[str] = None
    hire_date: date
    termination_date: Optional[date] = None
    termination_reason: Optional[str] = None
    employment_type: str
    employment_status: str
    work_schedule: Optional[str] = None
    work_hours_per_week: Optional[float] = None
    manager_id: Optional[int] = None
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    probation_end_date: Optional[date] = None
    probation_passed: Optional[bool] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
