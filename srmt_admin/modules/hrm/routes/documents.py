"""
Роуты /hrm/documents и /hrm/document-requests.

Документ создаётся из JSON или из multipart-формы с приложенным файлом
(ключ "file"). Файл загружается после валидации полей и удаляется, если
документ сохранить не удалось.
"""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from srmt_admin.core.auth import Claims, require_contact_id, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, InvalidStatusError, NotFoundError
from srmt_admin.core.fileupload import FileTooLargeError, LocalFileStorage, UploadStage
from srmt_admin.core.formparser import form_fields, form_files, is_multipart, read_json, validate_form
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.files.services.repository import FileRepository
from srmt_admin.modules.hrm.dependencies import get_document_repo
from srmt_admin.modules.hrm.models import DocumentRequest, HRDocument
from srmt_admin.modules.hrm.schemas.document import (
    DocumentRequestCreate,
    DocumentRequestOut,
    DocumentRequestReject,
    DocumentType,
    HRDocumentCreate,
    HRDocumentOut,
    HRDocumentUpdate,
)

router = APIRouter(tags=["hrm-documents"])

DOCUMENTS_CATEGORY = "hr-documents"
DOCUMENTS_CATEGORY_DISPLAY = "Кадровые документы"


class DocumentStore(Protocol):
    def add_document(self, values: dict, created_by: int) -> int: ...

    def get_document(self, document_id: int) -> HRDocument: ...

    def list_documents(self, employee_id: Optional[int] = None, document_type: Optional[str] = None) -> List[HRDocument]: ...

    def update_document(self, document_id: int, values: dict) -> None: ...

    def delete_document(self, document_id: int) -> None: ...


class DocumentRequestStore(Protocol):
    def add_document_request(self, contact_id: int, document_type: str, purpose: Optional[str]) -> int: ...

    def list_document_requests(self, contact_id: Optional[int] = None, status: Optional[str] = None) -> List[DocumentRequest]: ...

    def approve_document_request(self, request_id: int, processed_by: int) -> None: ...

    def reject_document_request(self, request_id: int, processed_by: int, reason: str) -> None: ...


# --- Кадровые документы ---


@router.post("/documents/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
async def add_document(
    request: Request,
    log: RequestLogger = Depends(op_log("hrm.documents.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentStore = Depends(get_document_repo),
    files_repo: FileRepository = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    if not is_multipart(request):
        req = await read_json(request, HRDocumentCreate)
        return _create_document(repo, req.model_dump(), claims, log)

    form = await request.form()
    req = validate_form(HRDocumentCreate, form_fields(form))
    uploads = form_files(form, "file")
    if not uploads:
        return _create_document(repo, req.model_dump(), claims, log)

    try:
        category_id = files_repo.get_or_create_category(DOCUMENTS_CATEGORY, DOCUMENTS_CATEGORY_DISPLAY)
    except Exception:
        log.exception("failed to get documents category")
        raise HTTPException(status_code=500, detail="Failed to process file upload")

    with UploadStage(storage, files_repo, DOCUMENTS_CATEGORY, category_id, log) as stage:
        try:
            result = await stage.stage(uploads[:1])
        except FileTooLargeError:
            raise HTTPException(status_code=400, detail="Invalid request or file is too large")
        except Exception:
            log.exception("failed to upload document file")
            raise HTTPException(status_code=500, detail="Failed to upload file")

        values = req.model_dump()
        values["file_id"] = result.file_ids[0]
        response = _create_document(repo, values, claims, log)
        stage.commit()
    return response


def _create_document(repo: DocumentStore, values: dict, claims: Claims, log: RequestLogger) -> IDResponse:
    try:
        document_id = repo.add_document(values, claims.user_id)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id or file_id")
    except Exception:
        log.exception("failed to create document")
        raise HTTPException(status_code=500, detail="Failed to create document")
    log.info("document created", extra={"entity_id": document_id})
    return created(document_id)


@router.get("/documents/", response_model=List[HRDocumentOut])
def list_documents(
    employee_id: Optional[int] = Query(None),
    document_type: Optional[DocumentType] = Query(None, alias="type"),
    log: RequestLogger = Depends(op_log("hrm.documents.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentStore = Depends(get_document_repo),
):
    try:
        return repo.list_documents(employee_id, document_type)
    except Exception:
        log.exception("failed to list documents")
        raise HTTPException(status_code=500, detail="Failed to retrieve documents")


@router.get("/documents/{document_id}", response_model=HRDocumentOut)
def get_document(
    document_id: int,
    log: RequestLogger = Depends(op_log("hrm.documents.get")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentStore = Depends(get_document_repo),
):
    try:
        return repo.get_document(document_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except Exception:
        log.exception("failed to get document", extra={"entity_id": document_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.patch("/documents/{document_id}")
def edit_document(
    document_id: int,
    payload: HRDocumentUpdate,
    log: RequestLogger = Depends(op_log("hrm.documents.edit")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentStore = Depends(get_document_repo),
):
    try:
        repo.update_document(document_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid file_id")
    except Exception:
        log.exception("failed to update document", extra={"entity_id": document_id})
        raise HTTPException(status_code=500, detail="Failed to update document")
    return ok()


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: int,
    log: RequestLogger = Depends(op_log("hrm.documents.delete")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentStore = Depends(get_document_repo),
):
    try:
        repo.delete_document(document_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except Exception:
        log.exception("failed to delete document", extra={"entity_id": document_id})
        raise HTTPException(status_code=500, detail="Failed to delete document")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Запросы документов ---


@router.post("/document-requests/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_document_request(
    payload: DocumentRequestCreate,
    log: RequestLogger = Depends(op_log("hrm.document_requests.add")),
    contact_id: int = Depends(require_contact_id),
    repo: DocumentRequestStore = Depends(get_document_repo),
):
    """Запрос документа от имени контакта текущего пользователя."""
    try:
        request_id = repo.add_document_request(contact_id, payload.document_type, payload.purpose)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid contact_id")
    except Exception:
        log.exception("failed to create document request")
        raise HTTPException(status_code=500, detail="Failed to create document request")
    log.info("document request created", extra={"entity_id": request_id})
    return created(request_id)


@router.get("/document-requests/", response_model=List[DocumentRequestOut])
def list_document_requests(
    contact_id: Optional[int] = Query(None),
    request_status: Optional[str] = Query(None, alias="status"),
    log: RequestLogger = Depends(op_log("hrm.document_requests.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentRequestStore = Depends(get_document_repo),
):
    try:
        return repo.list_document_requests(contact_id, request_status)
    except Exception:
        log.exception("failed to list document requests")
        raise HTTPException(status_code=500, detail="Failed to retrieve document requests")


@router.post("/document-requests/{request_id}/approve")
def approve_document_request(
    request_id: int,
    log: RequestLogger = Depends(op_log("hrm.document_requests.approve")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentRequestStore = Depends(get_document_repo),
):
    try:
        repo.approve_document_request(request_id, claims.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Document request not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Document request is not pending")
    except Exception:
        log.exception("failed to approve document request", extra={"entity_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to approve document request")
    log.info("document request approved", extra={"entity_id": request_id})
    return ok()


@router.post("/document-requests/{request_id}/reject")
def reject_document_request(
    request_id: int,
    payload: DocumentRequestReject,
    log: RequestLogger = Depends(op_log("hrm.document_requests.reject")),
    claims: Claims = Depends(require_roles("hr")),
    repo: DocumentRequestStore = Depends(get_document_repo),
):
    try:
        repo.reject_document_request(request_id, claims.user_id, payload.reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Document request not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Document request is not pending")
    except Exception:
        log.exception("failed to reject document request", extra={"entity_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to reject document request")
    log.info("document request rejected", extra={"entity_id": request_id})
    return ok()
