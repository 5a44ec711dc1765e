"""Роуты /files: загрузка, скачивание, удаление, последние файлы."""
from datetime import date, datetime, time
from typing import List, Optional, Protocol, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import FileResponse

from srmt_admin.core.auth import Claims, get_claims
from srmt_admin.core.config import settings
from srmt_admin.core.errors import NotFoundError
from srmt_admin.core.fileupload import FileTooLargeError, LocalFileStorage, UploadStage
from srmt_admin.core.formparser import form_fields, form_files, is_multipart, validate_form
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created
from srmt_admin.core.validation import INTERNAL_ERROR, INVALID_REQUEST_FORMAT
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.files.models import File, FileCategory
from srmt_admin.modules.files.schemas import FileOut, FileUploadForm, LatestFileOut

router = APIRouter(tags=["files"])


class FileStore(Protocol):
    def add_file(self, file_name, object_key, category_id, mime_type, size_bytes, target_date=None) -> int: ...

    def delete_file(self, file_id: int) -> None: ...

    def get_file(self, file_id: int) -> File: ...

    def get_category(self, category_id: int) -> FileCategory: ...

    def get_latest_files(self) -> List[Tuple[File, str]]: ...

    def get_file_by_category_and_date(self, category_name: str, target_date: date) -> File: ...


def _download_url(file_id: int) -> str:
    return f"{settings.api_v1_prefix}/files/{file_id}/download"


@router.post("/upload", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
async def upload_file(
    request: Request,
    log: RequestLogger = Depends(op_log("files.upload")),
    claims: Claims = Depends(get_claims),
    repo: FileStore = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    if not is_multipart(request):
        raise HTTPException(status_code=400, detail=INVALID_REQUEST_FORMAT)
    form = await request.form()
    uploads = form_files(form, "file")
    if not uploads:
        raise HTTPException(status_code=400, detail="Form field 'file' is required")
    req = validate_form(FileUploadForm, form_fields(form))

    try:
        category = repo.get_category(req.category_id)
    except NotFoundError:
        log.warning("category not found", extra={"entity_id": req.category_id})
        raise HTTPException(status_code=400, detail="Incorrect category")

    target_date = req.target_date or date.today()
    try:
        with UploadStage(
            storage,
            repo,
            category.display_name,
            category.id,
            log,
            upload_date=datetime.combine(target_date, time.min),
        ) as stage:
            result = await stage.stage(uploads[:1])
            stage.commit()
    except FileTooLargeError:
        raise HTTPException(status_code=400, detail="Invalid request or file is too large")
    except Exception:
        log.exception("failed to upload file")
        raise HTTPException(status_code=500, detail="Could not upload file")

    file_id = result.file_ids[0]
    log.info("file uploaded", extra={"entity_id": file_id})
    return created(file_id)


@router.get("/latest", response_model=List[LatestFileOut])
def latest_files(
    log: RequestLogger = Depends(op_log("files.latest")),
    claims: Claims = Depends(get_claims),
    repo: FileStore = Depends(get_files_repo),
):
    try:
        rows = repo.get_latest_files()
    except Exception:
        log.exception("failed to get latest files")
        raise HTTPException(status_code=500, detail="Failed to retrieve latest files")
    return [
        LatestFileOut(
            id=f.id,
            file_name=f.file_name,
            extension=f.file_name.rsplit(".", 1)[1].lower() if "." in f.file_name else "",
            size_bytes=f.size_bytes,
            created_at=f.created_at,
            category_name=category_name,
            url=_download_url(f.id),
        )
        for f, category_name in rows
    ]


@router.get("/", response_model=FileOut)
def get_file_by_category(
    category: Optional[str] = Query(None),
    date_: Optional[date] = Query(None, alias="date"),
    log: RequestLogger = Depends(op_log("files.get_by_category")),
    claims: Claims = Depends(get_claims),
    repo: FileStore = Depends(get_files_repo),
):
    """Файл категории за дату (по умолчанию за сегодня)."""
    if not category:
        raise HTTPException(status_code=400, detail="Query parameter 'category' is required")
    try:
        return repo.get_file_by_category_and_date(category, date_ or date.today())
    except NotFoundError:
        raise HTTPException(status_code=404, detail="No file found for the specified category and date")
    except Exception:
        log.exception("failed to get file by category")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.get("/{file_id}/download")
def download_file(
    file_id: int,
    log: RequestLogger = Depends(op_log("files.download")),
    claims: Claims = Depends(get_claims),
    repo: FileStore = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    try:
        meta = repo.get_file(file_id)
        path = storage.open_file(meta.object_key)
    except (NotFoundError, FileNotFoundError):
        raise HTTPException(status_code=404, detail="File not found")
    except Exception:
        log.exception("failed to retrieve file", extra={"entity_id": file_id})
        raise HTTPException(status_code=500, detail="Failed to retrieve file data")
    return FileResponse(path=str(path), filename=meta.file_name, media_type=meta.mime_type)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: int,
    log: RequestLogger = Depends(op_log("files.delete")),
    claims: Claims = Depends(get_claims),
    repo: FileStore = Depends(get_files_repo),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """Удаляет объект из хранилища, затем метаданные. Уже удалённый файл -> 204."""
    try:
        meta = repo.get_file(file_id)
    except NotFoundError:
        log.info("file already deleted", extra={"entity_id": file_id})
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    try:
        storage.delete_file(meta.object_key)
        repo.delete_file(file_id)
    except NotFoundError:
        # Метаданные удалены параллельным запросом
        log.info("file metadata already deleted", extra={"entity_id": file_id})
    except Exception:
        log.exception("failed to delete file", extra={"entity_id": file_id})
        raise HTTPException(status_code=500, detail="Failed to delete file")
    log.info("file deleted", extra={"entity_id": file_id, "object_key": meta.object_key})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
