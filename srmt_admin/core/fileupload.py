"""
Загрузка файлов из multipart-формы с компенсацией.

Двухфазная схема: UploadStage.stage() загружает объекты и сохраняет
метаданные, commit() вызывается только после успешной записи сущности и
привязки файлов. Если commit() не случился, rollback() удаляет объекты и
метаданные. Каждый загруженный файл либо привязан, либо удалён ровно один раз.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path, PurePosixPath
from typing import List, Optional, Protocol, Sequence

from fastapi import UploadFile

from .config import settings

logger = logging.getLogger(__name__)


class FileUploader(Protocol):
    def upload_file(self, object_key: str, data: bytes, content_type: Optional[str]) -> None: ...

    def delete_file(self, object_key: str) -> None: ...


class FileMetaSaver(Protocol):
    def add_file(
        self,
        file_name: str,
        object_key: str,
        category_id: Optional[int],
        mime_type: Optional[str],
        size_bytes: int,
        target_date: Optional[date] = None,
    ) -> int: ...

    def delete_file(self, file_id: int) -> None: ...


class CategoryGetter(Protocol):
    def get_or_create_category(self, name: str, display_name: str) -> int: ...


class FileTooLargeError(ValueError):
    """Файл больше settings.max_upload_size"""


class UploadStateError(RuntimeError):
    """Повторный commit или commit после rollback"""


@dataclass
class UploadedFileInfo:
    id: int
    file_name: str
    object_key: str
    size_bytes: int
    mime_type: Optional[str] = None


@dataclass
class UploadResult:
    uploaded_files: List[UploadedFileInfo] = field(default_factory=list)

    @property
    def file_ids(self) -> List[int]:
        return [f.id for f in self.uploaded_files]


def build_object_key(category_name: str, file_name: str, when: datetime) -> str:
    """<category>/<YYYY>/<MM>/<DD>/<uuid><ext>"""
    ext = PurePosixPath(file_name or "").suffix.lower()
    return f"{category_name}/{when:%Y/%m/%d}/{uuid.uuid4()}{ext}"


class LocalFileStorage:
    """Хранилище объектов на локальном диске (settings.upload_dir)."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.upload_dir)

    def _path(self, object_key: str) -> Path:
        path = (self.root / object_key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"invalid object key: {object_key}")
        return path

    def upload_file(self, object_key: str, data: bytes, content_type: Optional[str]) -> None:
        dest = self._path(object_key)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)

    def delete_file(self, object_key: str) -> None:
        self._path(object_key).unlink(missing_ok=True)

    def open_file(self, object_key: str) -> Path:
        path = self._path(object_key)
        if not path.is_file():
            raise FileNotFoundError(object_key)
        return path


def get_file_storage() -> LocalFileStorage:
    return LocalFileStorage()


class UploadStage:
    """
    Загруженные, но ещё не привязанные к сущности файлы.

    Usage:
        with UploadStage(storage, files_repo, "investments", category_id, log) as stage:
            result = await stage.stage(form_files(form))
            ...создание сущности и привязка файлов...
            stage.commit()
        # исключение или выход без commit() -> rollback()
    """

    def __init__(
        self,
        uploader: FileUploader,
        saver: FileMetaSaver,
        category_name: str,
        category_id: Optional[int] = None,
        log: Optional[logging.LoggerAdapter] = None,
        upload_date: Optional[datetime] = None,
    ):
        self.uploader = uploader
        self.saver = saver
        self.category_name = category_name
        self.category_id = category_id
        self.log = log or logger
        self.upload_date = upload_date or datetime.utcnow()
        self.result = UploadResult()
        self.committed = False
        self.rolled_back = False

    def __enter__(self) -> "UploadStage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.committed:
            self.rollback()

    async def stage(self, files: Sequence[UploadFile]) -> UploadResult:
        """Загружает файлы; при ошибке откатывает уже загруженные и пробрасывает её."""
        for upload in files:
            try:
                info = await self._upload_one(upload)
            except Exception:
                self.log.error("file upload failed, starting compensation", exc_info=True)
                self.rollback()
                raise
            self.result.uploaded_files.append(info)
            self.log.info(
                "file uploaded successfully",
                extra={"entity_id": info.id, "object_key": info.object_key},
            )
        return self.result

    async def _upload_one(self, upload: UploadFile) -> UploadedFileInfo:
        data = await upload.read()
        if len(data) > settings.max_upload_size:
            raise FileTooLargeError(f"file {upload.filename} exceeds {settings.max_upload_size} bytes")

        file_name = upload.filename or "file"
        object_key = build_object_key(self.category_name, file_name, self.upload_date)
        self.uploader.upload_file(object_key, data, upload.content_type)
        try:
            file_id = self.saver.add_file(
                file_name=file_name,
                object_key=object_key,
                category_id=self.category_id,
                mime_type=upload.content_type,
                size_bytes=len(data),
                target_date=self.upload_date.date(),
            )
        except Exception:
            # Метаданные не сохранились: объект в хранилище никому не принадлежит
            self._delete_object(object_key)
            raise
        return UploadedFileInfo(
            id=file_id,
            file_name=file_name,
            object_key=object_key,
            size_bytes=len(data),
            mime_type=upload.content_type,
        )

    def commit(self) -> None:
        if self.rolled_back:
            raise UploadStateError("upload already rolled back")
        if self.committed:
            raise UploadStateError("upload already committed")
        self.committed = True

    def rollback(self) -> None:
        """Удаляет объекты и метаданные. Повторный вызов ничего не делает."""
        if self.committed or self.rolled_back:
            return
        self.rolled_back = True
        if not self.result.uploaded_files:
            return
        self.log.warning(
            "starting upload compensation",
            extra={"count": len(self.result.uploaded_files)},
        )
        for info in self.result.uploaded_files:
            self._delete_object(info.object_key)
            try:
                self.saver.delete_file(info.id)
            except Exception:
                self.log.error(
                    "compensation: failed to delete file metadata",
                    exc_info=True,
                    extra={"entity_id": info.id},
                )

    def _delete_object(self, object_key: str) -> None:
        try:
            self.uploader.delete_file(object_key)
        except Exception:
            self.log.error(
                "compensation: failed to delete file from storage",
                exc_info=True,
                extra={"object_key": object_key},
            )
