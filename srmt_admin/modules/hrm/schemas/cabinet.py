"""Схемы личного кабинета (/my)."""
from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .notification import NotificationOut
from .salary import SalaryOut, SalaryStructureOut


class ProfileOut(BaseModel):
    employee_id: int
    contact_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    employee_number: Optional[str] = None
    hire_date: date
    employment_type: str
    employment_status: str
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    manager_id: Optional[int] = None


class MyNotificationsOut(BaseModel):
    notifications: List[NotificationOut]
    # None, если счётчик не удалось получить
    unread_count: Optional[int] = None


class MySalaryOut(BaseModel):
    structure: Optional[SalaryStructureOut] = None
    salaries: List[SalaryOut]


class VacationApprovalTask(BaseModel):
    type: Literal["vacation_approval"] = "vacation_approval"
    vacation_id: int
    employee_id: int
    employee_name: Optional[str] = None
    vacation_type: str
    start_date: date
    end_date: date
    days_count: int
    created_at: Optional[datetime] = None


class DocumentRequestTask(BaseModel):
    type: Literal["document_request"] = "document_request"
    request_id: int
    contact_id: int
    employee_name: Optional[str] = None
    document_type: str
    purpose: Optional[str] = None
    created_at: Optional[datetime] = None


Task = Annotated[Union[VacationApprovalTask, DocumentRequestTask], Field(discriminator="type")]
