"""Схемы файлового хранилища."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[int] = Field(None, ge=1)


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None


class FileUploadForm(BaseModel):
    """Поля формы загрузки (файл передаётся отдельно, ключ "file")."""

    category_id: int = Field(..., ge=1)
    target_date: Optional[date] = Field(None, validation_alias="date")


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    object_key: str
    category_id: Optional[int] = None
    mime_type: Optional[str] = None
    size_bytes: int
    target_date: Optional[date] = None
    created_at: Optional[datetime] = None


class LatestFileOut(BaseModel):
    id: int
    file_name: str
    extension: str
    size_bytes: int
    created_at: Optional[datetime] = None
    category_name: str
    url: str
