"""
Создание визита вместе с приложенными файлами.

Файлы раскладываются по дате визита. Если визит не сохранился или файлы не
удалось к нему привязать, загруженные файлы удаляются; созданный визит при
ошибке привязки остаётся.
"""
import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from fastapi import UploadFile

from srmt_admin.core.fileupload import (
    CategoryGetter,
    FileMetaSaver,
    FileUploader,
    UploadedFileInfo,
    UploadStage,
)
from srmt_admin.modules.visits.models import Visit
from srmt_admin.modules.visits.schemas import VisitCreate, VisitUpdate

logger = logging.getLogger(__name__)

VISITS_CATEGORY = "visits"
VISITS_CATEGORY_DISPLAY = "Визиты"


class VisitStore(Protocol):
    def add_visit(self, values: dict, created_by: Optional[int]) -> int: ...

    def get_visit(self, visit_id: int) -> Visit: ...

    def update_visit(self, visit_id: int, values: dict) -> None: ...

    def link_visit_files(self, visit_id: int, file_ids: List[int]) -> None: ...

    def replace_visit_files(self, visit_id: int, file_ids: List[int]) -> None: ...


class FileCatalog(FileMetaSaver, CategoryGetter, Protocol):
    pass


class VisitService:
    def __init__(
        self,
        repo: VisitStore,
        uploader: FileUploader,
        files: FileCatalog,
        log: Optional[logging.LoggerAdapter] = None,
    ):
        self.repo = repo
        self.uploader = uploader
        self.files = files
        self.log = log or logger

    async def add_visit(
        self,
        req: VisitCreate,
        created_by: Optional[int],
        uploads: Sequence[UploadFile] = (),
    ) -> Tuple[int, List[UploadedFileInfo]]:
        values = req.model_dump(exclude={"file_ids"})
        if not uploads:
            visit_id = self.repo.add_visit(values, created_by)
            self._link(visit_id, req.file_ids)
            return visit_id, []

        category_id = self.files.get_or_create_category(VISITS_CATEGORY, VISITS_CATEGORY_DISPLAY)
        with UploadStage(
            self.uploader,
            self.files,
            VISITS_CATEGORY,
            category_id,
            self.log,
            upload_date=req.visit_date,
        ) as stage:
            result = await stage.stage(uploads)
            visit_id = self.repo.add_visit(values, created_by)
            if not self._link(visit_id, req.file_ids + result.file_ids):
                return visit_id, []
            stage.commit()
        return visit_id, result.uploaded_files

    async def edit_visit(
        self,
        visit_id: int,
        req: VisitUpdate,
        uploads: Sequence[UploadFile] = (),
    ) -> List[UploadedFileInfo]:
        """
        Правка визита. file_ids, если передан, заменяет привязанные файлы;
        новые загрузки добавляются к ним. Любая ошибка удаляет загрузки.
        """
        values = req.model_dump(exclude_unset=True, exclude={"file_ids"})
        if not uploads:
            self.repo.update_visit(visit_id, values)
            if req.file_ids is not None:
                self.repo.replace_visit_files(visit_id, req.file_ids)
            return []

        # Без новой даты файлы раскладываются по текущей дате визита
        upload_date = req.visit_date or self.repo.get_visit(visit_id).visit_date
        category_id = self.files.get_or_create_category(VISITS_CATEGORY, VISITS_CATEGORY_DISPLAY)
        with UploadStage(
            self.uploader,
            self.files,
            VISITS_CATEGORY,
            category_id,
            self.log,
            upload_date=upload_date,
        ) as stage:
            result = await stage.stage(uploads)
            self.repo.update_visit(visit_id, values)
            if req.file_ids is not None:
                self.repo.replace_visit_files(visit_id, req.file_ids + result.file_ids)
            else:
                self.repo.link_visit_files(visit_id, result.file_ids)
            stage.commit()
        return result.uploaded_files

    def _link(self, visit_id: int, file_ids: List[int]) -> bool:
        if not file_ids:
            return True
        try:
            self.repo.link_visit_files(visit_id, file_ids)
        except Exception:
            self.log.error("failed to link files", exc_info=True, extra={"entity_id": visit_id})
            return False
        return True
