from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .contact import ContactCreate


class UserCreate(BaseModel):
    """Передаётся ровно одно из полей contact_id и contact."""

    login: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)
    role_ids: List[int] = Field(..., min_length=1)
    contact_id: Optional[int] = Field(None, ge=1)
    contact: Optional[ContactCreate] = None


class UserUpdate(BaseModel):
    login: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    is_active: Optional[bool] = None
    role_ids: Optional[List[int]] = None


class RoleAssign(BaseModel):
    role_id: int = Field(..., ge=1)


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = Field(None, max_length=255)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=64)
    description: Optional[str] = Field(None, max_length=255)


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_active: bool
    contact_id: Optional[int] = None
    roles: List[RoleOut] = []


class UserListItem(BaseModel):
    id: int
    name: str
    roles: List[str]
