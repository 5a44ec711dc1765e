"""Роуты /visits: визиты на объекты с приложенными файлами."""
from datetime import date
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from srmt_admin.core.auth import Claims, get_claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError
from srmt_admin.core.fileupload import FileTooLargeError, LocalFileStorage
from srmt_admin.core.formparser import form_fields, form_files, is_multipart, read_json, validate_form
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.files.services.repository import FileRepository
from srmt_admin.modules.visits.dependencies import get_visit_repo
from srmt_admin.modules.visits.models import Visit
from srmt_admin.modules.visits.schemas import VisitCreate, VisitCreatedOut, VisitEditedOut, VisitOut, VisitUpdate
from srmt_admin.modules.visits.services.visits import VisitService

router = APIRouter(tags=["visits"])


class VisitRepo(Protocol):
    def add_visit(self, values: dict, created_by: Optional[int]) -> int: ...

    def get_visit(self, visit_id: int) -> Visit: ...

    def list_visits(self, day: date) -> List[Visit]: ...

    def update_visit(self, visit_id: int, values: dict) -> None: ...

    def delete_visit(self, visit_id: int) -> None: ...

    def link_visit_files(self, visit_id: int, file_ids: List[int]) -> None: ...

    def replace_visit_files(self, visit_id: int, file_ids: List[int]) -> None: ...


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=VisitCreatedOut, response_model_exclude_none=True)
async def add_visit(
    request: Request,
    log: RequestLogger = Depends(op_log("visits.add")),
    claims: Claims = Depends(require_roles("sc")),
    repo: VisitRepo = Depends(get_visit_repo),
    files_repo: FileRepository = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """JSON или multipart (поля визита, file_ids, файлы под ключом "files")."""
    uploads = []
    if is_multipart(request):
        form = await request.form()
        req = validate_form(VisitCreate, form_fields(form, list_fields=("file_ids",)))
        uploads = form_files(form, "files")
    else:
        req = await read_json(request, VisitCreate)

    service = VisitService(repo, storage, files_repo, log)
    try:
        visit_id, uploaded = await service.add_visit(req, claims.user_id, uploads)
    except FileTooLargeError:
        raise HTTPException(status_code=400, detail="Invalid request or file is too large")
    except ForeignKeyViolationError:
        log.warning("organization not found", extra={"entity_id": req.organization_id})
        raise HTTPException(status_code=400, detail="Organization not found")
    except Exception:
        log.exception("failed to add visit")
        raise HTTPException(status_code=500, detail="Failed to add visit")

    log.info("visit added", extra={"entity_id": visit_id, "count": len(req.file_ids) + len(uploaded)})
    return VisitCreatedOut(id=visit_id, uploaded_files=uploaded or None)


@router.get("/", response_model=List[VisitOut])
def list_visits(
    day: Optional[date] = Query(None, alias="date"),
    log: RequestLogger = Depends(op_log("visits.list")),
    claims: Claims = Depends(get_claims),
    repo: VisitRepo = Depends(get_visit_repo),
):
    """Визиты за день (YYYY-MM-DD); без параметра за сегодня."""
    day = day or date.today()
    try:
        visits = repo.list_visits(day)
    except Exception:
        log.exception("failed to list visits")
        raise HTTPException(status_code=500, detail="Failed to retrieve visits")
    log.info("visits listed", extra={"count": len(visits)})
    return visits


@router.patch("/{visit_id}", response_model=VisitEditedOut, response_model_exclude_none=True)
async def edit_visit(
    visit_id: int,
    request: Request,
    log: RequestLogger = Depends(op_log("visits.edit")),
    claims: Claims = Depends(require_roles("sc")),
    repo: VisitRepo = Depends(get_visit_repo),
    files_repo: FileRepository = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """JSON или multipart; file_ids, если передан, заменяет привязанные файлы."""
    uploads = []
    if is_multipart(request):
        form = await request.form()
        req = validate_form(VisitUpdate, form_fields(form, list_fields=("file_ids",)))
        uploads = form_files(form, "files")
    else:
        req = await read_json(request, VisitUpdate)

    service = VisitService(repo, storage, files_repo, log)
    try:
        uploaded = await service.edit_visit(visit_id, req, uploads)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Visit not found")
    except FileTooLargeError:
        raise HTTPException(status_code=400, detail="Invalid request or file is too large")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid organization_id or file_ids")
    except Exception:
        log.exception("failed to update visit", extra={"entity_id": visit_id})
        raise HTTPException(status_code=500, detail="Failed to update visit")
    log.info("visit updated", extra={"entity_id": visit_id, "count": len(uploaded)})
    return VisitEditedOut(uploaded_files=uploaded or None)


@router.delete("/{visit_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_visit(
    visit_id: int,
    log: RequestLogger = Depends(op_log("visits.delete")),
    claims: Claims = Depends(require_roles("sc")),
    repo: VisitRepo = Depends(get_visit_repo),
):
    try:
        repo.delete_visit(visit_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Visit not found")
    except Exception:
        log.exception("failed to delete visit", extra={"entity_id": visit_id})
        raise HTTPException(status_code=500, detail="Failed to delete visit")
    log.info("visit deleted", extra={"entity_id": visit_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
