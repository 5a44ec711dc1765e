from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .employee import EmploymentType

WorkFormat = Literal["office", "remote", "hybrid"]
Priority = Literal["low", "normal", "high", "urgent"]
CandidateStatus = Literal["new", "screening", "interview", "offer", "hired", "rejected", "withdrawn"]
CandidateStage = Literal["applied", "phone_screen", "technical", "final", "offer"]


class VacancyCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    department_id: Optional[int] = Field(None, ge=1)
    position_id: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    requirements: Optional[str] = None
    employment_type: EmploymentType
    work_format: WorkFormat
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = Field("UZS", min_length=3, max_length=3)
    priority: Priority = "normal"
    headcount: int = Field(1, ge=1)
    deadline: Optional[date] = None
    hiring_manager_id: Optional[int] = Field(None, ge=1)

    @field_validator("salary_max")
    @classmethod
    def _salary_range(cls, value: Optional[float], info: ValidationInfo) -> Optional[float]:
        salary_min = info.data.get("salary_min")
        if value is not None and salary_min is not None and value < salary_min:
            raise ValueError("salary_max must be greater than or equal to salary_min")
        return value


class VacancyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    department_id: Optional[int] = Field(None, ge=1)
    position_id: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    requirements: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    work_format: Optional[WorkFormat] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    priority: Optional[Priority] = None
    headcount: Optional[int] = Field(None, ge=1)
    deadline: Optional[date] = None
    hiring_manager_id: Optional[int] = Field(None, ge=1)


class VacancyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    employment_type: str
    work_format: str
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str
    priority: str
    headcount: int
    deadline: Optional[date] = None
    status: str
    hiring_manager_id: Optional[int] = None
    published_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


class CandidateCreate(BaseModel):
    vacancy_id: int = Field(..., ge=1)
    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field(..., min_length=1, max_length=128)
    middle_name: Optional[str] = Field(None, max_length=128)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    current_position: Optional[str] = Field(None, max_length=255)
    current_company: Optional[str] = Field(None, max_length=255)
    experience_years: Optional[int] = Field(None, ge=0, le=70)
    expected_salary: Optional[float] = Field(None, ge=0)
    currency: str = Field("UZS", min_length=3, max_length=3)
    resume_file_id: Optional[int] = Field(None, ge=1)
    source: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = None


class CandidateUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=128)
    last_name: Optional[str] = Field(None, min_length=1, max_length=128)
    middle_name: Optional[str] = Field(None, max_length=128)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    current_position: Optional[str] = Field(None, max_length=255)
    current_company: Optional[str] = Field(None, max_length=255)
    experience_years: Optional[int] = Field(None, ge=0, le=70)
    expected_salary: Optional[float] = Field(None, ge=0)
    resume_file_id: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None


class CandidateStatusChange(BaseModel):
    status: CandidateStatus
    stage: Optional[CandidateStage] = None


class CandidateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vacancy_id: int
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    current_position: Optional[str] = None
    current_company: Optional[str] = None
    experience_years: Optional[int] = None
    expected_salary: Optional[float] = None
    currency: str
    resume_file_id: Optional[int] = None
    source: Optional[str] = None
    status: str
    stage: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
