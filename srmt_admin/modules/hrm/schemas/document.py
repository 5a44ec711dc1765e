from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DocumentType = Literal["contract", "order", "certificate", "reference", "other"]
DocumentStatus = Literal["active", "expired", "revoked", "draft"]


class HRDocumentCreate(BaseModel):
    """JSON-тело или поля multipart-формы (файл передаётся под ключом "file")."""

    employee_id: int = Field(..., ge=1)
    document_type: DocumentType
    title: str = Field(..., min_length=1, max_length=255)
    document_number: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    file_id: Optional[int] = Field(None, ge=1)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: DocumentStatus = "active"
    notes: Optional[str] = None


class HRDocumentUpdate(BaseModel):
    document_type: Optional[DocumentType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    document_number: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    file_id: Optional[int] = Field(None, ge=1)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: Optional[DocumentStatus] = None
    notes: Optional[str] = None


class HRDocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    document_type: str
    title: str
    document_number: Optional[str] = None
    description: Optional[str] = None
    file_id: Optional[int] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: str
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


class DocumentRequestCreate(BaseModel):
    document_type: DocumentType
    purpose: Optional[str] = Field(None, max_length=1000)


class DocumentRequestReject(BaseModel):
    reason: str = Field(..., min_length=1)


class DocumentRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int
    document_type: str
    purpose: Optional[str] = None
    status: str
    rejection_reason: Optional[str] = None
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
