from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CardType = Literal["standard", "temporary", "visitor", "contractor"]
Direction = Literal["in", "out"]


class ZoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    building: Optional[str] = Field(None, max_length=128)
    floor: Optional[str] = Field(None, max_length=32)
    security_level: int = Field(1, ge=1, le=5)
    is_active: bool = True


class ZoneOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    building: Optional[str] = None
    floor: Optional[str] = None
    security_level: int
    is_active: bool


class CardCreate(BaseModel):
    employee_id: int = Field(..., ge=1)
    card_number: str = Field(..., min_length=4, max_length=64)
    card_type: CardType = "standard"
    issued_date: date
    expiry_date: Optional[date] = None
    notes: Optional[str] = None


class CardUpdate(BaseModel):
    card_type: Optional[CardType] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None


class CardBlock(BaseModel):
    reason: str = Field(..., min_length=1)


class CardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    card_number: str
    card_type: str
    issued_date: date
    expiry_date: Optional[date] = None
    is_active: bool
    deactivation_reason: Optional[str] = None
    deactivated_at: Optional[datetime] = None
    notes: Optional[str] = None


class AccessEventIn(BaseModel):
    card_number: str = Field(..., min_length=1, max_length=64)
    zone_id: int = Field(..., ge=1)
    direction: Direction
    event_time: Optional[datetime] = None


class AccessEventOut(BaseModel):
    status: int = 201
    id: int
    access_granted: bool
    denial_reason: Optional[str] = None


class AccessLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    card_id: int
    employee_id: int
    zone_id: int
    direction: str
    event_time: datetime
    access_granted: bool
    denial_reason: Optional[str] = None
