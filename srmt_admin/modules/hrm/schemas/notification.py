from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

NotificationCategory = Literal["vacation", "document", "training", "review", "task", "system"]
NotificationPriority = Literal["low", "normal", "high", "urgent"]


class NotificationBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    category: NotificationCategory
    priority: NotificationPriority = "normal"
    entity_type: Optional[str] = Field(None, max_length=64)
    entity_id: Optional[int] = None
    action_url: Optional[str] = Field(None, max_length=512)
    expires_at: Optional[datetime] = None


class NotificationCreate(NotificationBase):
    user_id: int = Field(..., ge=1)


class NotificationBulkCreate(NotificationBase):
    user_ids: List[int] = Field(..., min_length=1)


class BulkCreatedOut(BaseModel):
    status: int = 201
    count: int


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    message: str
    category: str
    priority: str
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    action_url: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
