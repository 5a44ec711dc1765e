from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class GoalCreate(BaseModel):
    employee_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = None
    metric: Optional[str] = Field(None, max_length=255)
    target_value: Optional[float] = None
    weight: Optional[float] = Field(None, ge=0, le=100)
    due_date: Optional[date] = None


class GoalProgress(BaseModel):
    progress: int = Field(..., ge=0, le=100)


class GoalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    title: str
    description: Optional[str] = None
    metric: Optional[str] = None
    target_value: Optional[float] = None
    weight: Optional[float] = None
    progress: int
    status: str
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None


class ReviewCreate(BaseModel):
    employee_id: int = Field(..., ge=1)
    reviewer_id: Optional[int] = Field(None, ge=1)
    period_start: date
    period_end: date

    @field_validator("period_end")
    @classmethod
    def _period(cls, value: date, info: ValidationInfo) -> date:
        period_start = info.data.get("period_start")
        if period_start is not None and value < period_start:
            raise ValueError("period_end must not be before period_start")
        return value


class SelfReview(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ManagerReview(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    reviewer_id: Optional[int] = None
    period_start: date
    period_end: date
    status: str
    self_rating: Optional[int] = None
    self_comment: Optional[str] = None
    manager_rating: Optional[int] = None
    manager_comment: Optional[str] = None
    completed_at: Optional[datetime] = None
