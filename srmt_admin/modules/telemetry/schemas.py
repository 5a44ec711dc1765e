"""Схемы телеметрии."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError


class SensorReadingIn(BaseModel):
    """Показания полевого устройства"""

    current: float
    resistance: float
    time: datetime

    @field_validator("current", "resistance")
    @classmethod
    def _non_zero(cls, value: float) -> float:
        # нулевое показание означает, что датчик ничего не передал
        if value == 0:
            raise PydanticCustomError("missing", "value is required")
        return value


class IndicatorSet(BaseModel):
    height: float = Field(..., gt=0)


class ReservoirCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class LevelVolumeOut(BaseModel):
    status: int = 200
    organization_id: int
    level: float
    volume: float
