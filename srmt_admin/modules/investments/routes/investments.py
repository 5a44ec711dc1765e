"""
Роуты /investments: проекты с приложенными файлами.

Проект создаётся и правится из JSON или из multipart-формы (файлы под ключом "files",
file_ids уже загруженных файлов через запятую или повтором ключа). Загруженные
файлы удаляются, если проект сохранить не удалось.
"""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from srmt_admin.core.auth import Claims, get_claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError
from srmt_admin.core.fileupload import FileTooLargeError, LocalFileStorage, UploadStage
from srmt_admin.core.formparser import form_fields, form_files, is_multipart, read_json, validate_form
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.files.services.repository import FileRepository
from srmt_admin.modules.investments.dependencies import get_investment_repo
from srmt_admin.modules.investments.models import Investment
from srmt_admin.modules.investments.schemas import (
    InvestmentCreate,
    InvestmentCreatedOut,
    InvestmentEditedOut,
    InvestmentOut,
    InvestmentUpdate,
)
from srmt_admin.modules.investments.services.repository import InvestmentFilters

router = APIRouter(tags=["investments"])

INVESTMENTS_CATEGORY = "investments"
INVESTMENTS_CATEGORY_DISPLAY = "Инвестиции"


class InvestmentStore(Protocol):
    def add_investment(self, values: dict, created_by: Optional[int]) -> int: ...

    def get_investment(self, investment_id: int) -> Investment: ...

    def list_investments(self, filters: InvestmentFilters) -> List[Investment]: ...

    def update_investment(self, investment_id: int, values: dict) -> None: ...

    def delete_investment(self, investment_id: int) -> None: ...

    def link_investment_files(self, investment_id: int, file_ids: List[int]) -> None: ...

    def replace_investment_files(self, investment_id: int, file_ids: List[int]) -> None: ...


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=InvestmentCreatedOut, response_model_exclude_none=True)
async def add_investment(
    request: Request,
    log: RequestLogger = Depends(op_log("investments.add")),
    claims: Claims = Depends(require_roles("investment")),
    repo: InvestmentStore = Depends(get_investment_repo),
    files_repo: FileRepository = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    if not is_multipart(request):
        req = await read_json(request, InvestmentCreate)
        investment_id = _create_investment(repo, req, claims, log)
        _link_files(repo, investment_id, req.file_ids, log)
        return InvestmentCreatedOut(id=investment_id)

    form = await request.form()
    req = validate_form(InvestmentCreate, form_fields(form, list_fields=("file_ids",)))
    uploads = form_files(form, "files")

    try:
        category_id = files_repo.get_or_create_category(INVESTMENTS_CATEGORY, INVESTMENTS_CATEGORY_DISPLAY)
    except Exception:
        log.exception("failed to get investments category")
        raise HTTPException(status_code=500, detail="Failed to process file upload")

    with UploadStage(storage, files_repo, INVESTMENTS_CATEGORY, category_id, log) as stage:
        try:
            result = await stage.stage(uploads)
        except FileTooLargeError:
            raise HTTPException(status_code=400, detail="Invalid request or file is too large")
        except Exception:
            log.exception("failed to upload investment files")
            raise HTTPException(status_code=500, detail="Failed to upload files")

        investment_id = _create_investment(repo, req, claims, log)
        if _link_files(repo, investment_id, req.file_ids + result.file_ids, log):
            stage.commit()
        else:
            # Проект создан, но файлы к нему не привязаны: загрузки удаляем
            stage.rollback()
            return InvestmentCreatedOut(id=investment_id)

    return InvestmentCreatedOut(id=investment_id, uploaded_files=result.uploaded_files or None)


def _create_investment(repo: InvestmentStore, req: InvestmentCreate, claims: Claims, log: RequestLogger) -> int:
    try:
        investment_id = repo.add_investment(req.model_dump(exclude={"file_ids"}), claims.user_id)
    except ForeignKeyViolationError:
        log.warning("invalid status or type id", extra={"entity_id": req.status_id})
        raise HTTPException(status_code=400, detail="Invalid status ID")
    except Exception:
        log.exception("failed to add investment")
        raise HTTPException(status_code=500, detail="Failed to add investment")
    log.info("investment added", extra={"entity_id": investment_id})
    return investment_id


def _link_files(repo: InvestmentStore, investment_id: int, file_ids: List[int], log: RequestLogger) -> bool:
    """Ошибка привязки не отменяет созданный проект, только логируется."""
    if not file_ids:
        return True
    try:
        repo.link_investment_files(investment_id, file_ids)
    except Exception:
        log.error("failed to link files", exc_info=True, extra={"entity_id": investment_id})
        return False
    log.info("files linked", extra={"entity_id": investment_id, "count": len(file_ids)})
    return True


@router.get("/", response_model=List[InvestmentOut])
def list_investments(
    status_id: Optional[int] = Query(None),
    type_id: Optional[int] = Query(None),
    min_cost: Optional[float] = Query(None, ge=0),
    max_cost: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None, alias="name"),
    created_by: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("investments.list")),
    claims: Claims = Depends(get_claims),
    repo: InvestmentStore = Depends(get_investment_repo),
):
    filters = InvestmentFilters(
        status_id=status_id,
        type_id=type_id,
        min_cost=min_cost,
        max_cost=max_cost,
        search=search,
        created_by=created_by,
    )
    try:
        investments = repo.list_investments(filters)
    except Exception:
        log.exception("failed to list investments")
        raise HTTPException(status_code=500, detail="Failed to retrieve investments")
    log.info("investments listed", extra={"count": len(investments)})
    return investments


@router.get("/{investment_id}", response_model=InvestmentOut)
def get_investment(
    investment_id: int,
    log: RequestLogger = Depends(op_log("investments.get")),
    claims: Claims = Depends(get_claims),
    repo: InvestmentStore = Depends(get_investment_repo),
):
    try:
        return repo.get_investment(investment_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment not found")
    except Exception:
        log.exception("failed to get investment", extra={"entity_id": investment_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.patch("/{investment_id}", response_model=InvestmentEditedOut, response_model_exclude_none=True)
async def edit_investment(
    investment_id: int,
    request: Request,
    log: RequestLogger = Depends(op_log("investments.edit")),
    claims: Claims = Depends(require_roles("investment")),
    repo: InvestmentStore = Depends(get_investment_repo),
    files_repo: FileRepository = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    JSON или multipart. file_ids, если передан, заменяет привязанные файлы,
    новые загрузки добавляются к ним. При любой ошибке загрузки удаляются.
    """
    if not is_multipart(request):
        req = await read_json(request, InvestmentUpdate)
        _update_investment(repo, investment_id, req, [], log)
        return InvestmentEditedOut()

    form = await request.form()
    req = validate_form(InvestmentUpdate, form_fields(form, list_fields=("file_ids",)))
    uploads = form_files(form, "files")
    if not uploads:
        _update_investment(repo, investment_id, req, [], log)
        return InvestmentEditedOut()

    try:
        category_id = files_repo.get_or_create_category(INVESTMENTS_CATEGORY, INVESTMENTS_CATEGORY_DISPLAY)
    except Exception:
        log.exception("failed to get investments category")
        raise HTTPException(status_code=500, detail="Failed to process file upload")

    with UploadStage(storage, files_repo, INVESTMENTS_CATEGORY, category_id, log) as stage:
        try:
            result = await stage.stage(uploads)
        except FileTooLargeError:
            raise HTTPException(status_code=400, detail="Invalid request or file is too large")
        except Exception:
            log.exception("failed to upload investment files")
            raise HTTPException(status_code=500, detail="Failed to upload files")

        _update_investment(repo, investment_id, req, result.file_ids, log)
        stage.commit()

    return InvestmentEditedOut(uploaded_files=result.uploaded_files)


def _update_investment(
    repo: InvestmentStore,
    investment_id: int,
    req: InvestmentUpdate,
    uploaded_ids: List[int],
    log: RequestLogger,
) -> None:
    values = req.model_dump(exclude_unset=True, exclude={"file_ids"})
    try:
        repo.update_investment(investment_id, values)
        if req.file_ids is not None:
            repo.replace_investment_files(investment_id, req.file_ids + uploaded_ids)
        elif uploaded_ids:
            repo.link_investment_files(investment_id, uploaded_ids)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid status, type or file ID")
    except Exception:
        log.exception("failed to update investment", extra={"entity_id": investment_id})
        raise HTTPException(status_code=500, detail="Failed to update investment")
    log.info("investment updated", extra={"entity_id": investment_id, "count": len(uploaded_ids)})


@router.delete("/{investment_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_investment(
    investment_id: int,
    log: RequestLogger = Depends(op_log("investments.delete")),
    claims: Claims = Depends(require_roles("investment")),
    repo: InvestmentStore = Depends(get_investment_repo),
):
    try:
        repo.delete_investment(investment_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment not found")
    except Exception:
        log.exception("failed to delete investment", extra={"entity_id": investment_id})
        raise HTTPException(status_code=500, detail="Failed to delete investment")
    log.info("investment deleted", extra={"entity_id": investment_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
