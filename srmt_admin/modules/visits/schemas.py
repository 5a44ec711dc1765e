"""Схемы визитов."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from srmt_admin.core.fileupload import UploadedFileInfo
from srmt_admin.modules.files.schemas import FileOut


class VisitCreate(BaseModel):
    organization_id: int = Field(..., ge=1)
    visit_date: datetime
    description: str = Field(..., min_length=1)
    responsible_name: str = Field(..., min_length=1, max_length=255)
    file_ids: List[int] = Field(default_factory=list)


class VisitUpdate(BaseModel):
    organization_id: Optional[int] = Field(None, ge=1)
    visit_date: Optional[datetime] = None
    description: Optional[str] = Field(None, min_length=1)
    responsible_name: Optional[str] = Field(None, min_length=1, max_length=255)
    file_ids: Optional[List[int]] = None


class VisitCreatedOut(BaseModel):
    status: int = 201
    id: int
    uploaded_files: Optional[List[UploadedFileInfo]] = None


class VisitEditedOut(BaseModel):
    status: int = 200
    uploaded_files: Optional[List[UploadedFileInfo]] = None


class VisitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    organization_name: Optional[str] = None
    visit_date: datetime
    description: str
    responsible_name: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    files: List[FileOut] = []
