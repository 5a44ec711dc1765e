"""Схемы инвестиционных проектов."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from srmt_admin.core.fileupload import UploadedFileInfo
from srmt_admin.modules.files.schemas import FileOut


class InvestmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type_id: int = Field(..., ge=1)
    status_id: int = Field(..., ge=1)
    cost: float = Field(0, ge=0)
    comments: Optional[str] = None
    file_ids: List[int] = Field(default_factory=list)


class InvestmentUpdate(BaseModel):
    """file_ids, если передан, заменяет набор привязанных файлов целиком."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type_id: Optional[int] = Field(None, ge=1)
    status_id: Optional[int] = Field(None, ge=1)
    cost: Optional[float] = Field(None, ge=0)
    comments: Optional[str] = None
    file_ids: Optional[List[int]] = None


class InvestmentCreatedOut(BaseModel):
    status: int = 201
    id: int
    uploaded_files: Optional[List[UploadedFileInfo]] = None


class InvestmentEditedOut(BaseModel):
    status: int = 200
    uploaded_files: Optional[List[UploadedFileInfo]] = None


class TypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class TypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class TypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None


class StatusCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type_id: Optional[int] = Field(None, ge=1)
    display_order: int = Field(0, ge=0)


class StatusUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type_id: Optional[int] = Field(None, ge=1)
    display_order: Optional[int] = Field(None, ge=0)


class StatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    type_id: Optional[int] = None
    display_order: int = 0


class InvestmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: TypeOut
    status: StatusOut
    cost: float
    comments: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    files: List[FileOut] = []
