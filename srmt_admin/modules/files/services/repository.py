"""SQL-репозиторий файлов и категорий."""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError
from srmt_admin.modules.files.models import File, FileCategory


def load_files(db: Session, file_ids: List[int]) -> List[File]:
    """Файлы для привязки к сущности; отсутствующий id -> ForeignKeyViolationError."""
    ids = set(file_ids)
    files = db.query(File).filter(File.id.in_(ids)).all() if ids else []
    if len(files) != len(ids):
        missing = sorted(ids - {f.id for f in files})
        raise ForeignKeyViolationError(f"files not found: {missing}")
    return files


class FileRepository(SQLRepository):
    """Реализует FileMetaSaver и CategoryGetter для UploadStage."""

    # --- Файлы ---

    def add_file(
        self,
        file_name: str,
        object_key: str,
        category_id: Optional[int],
        mime_type: Optional[str],
        size_bytes: int,
        target_date: Optional[date] = None,
    ) -> int:
        obj = self._add(
            File(
                file_name=file_name,
                object_key=object_key,
                category_id=category_id,
                mime_type=mime_type,
                size_bytes=size_bytes,
                target_date=target_date,
            )
        )
        return obj.id

    def get_file(self, file_id: int) -> File:
        return self._get(File, file_id)

    def delete_file(self, file_id: int) -> None:
        self._delete(File, file_id)

    def files_exist(self, file_ids: List[int]) -> bool:
        if not file_ids:
            return True
        count = self.db.query(func.count(File.id)).filter(File.id.in_(file_ids)).scalar()
        return count == len(set(file_ids))

    def get_latest_files(self) -> List[Tuple[File, str]]:
        """Последний файл каждой категории (по target_date, затем по created_at)."""
        rows = (
            self.db.query(File, FileCategory.display_name)
            .join(FileCategory, File.category_id == FileCategory.id)
            .order_by(File.category_id, File.target_date.desc(), File.id.desc())
            .all()
        )
        latest = {}
        for file, category_name in rows:
            latest.setdefault(file.category_id, (file, category_name))
        return list(latest.values())

    def get_file_by_category_and_date(self, category_name: str, target_date: date) -> File:
        file = (
            self.db.query(File)
            .join(FileCategory, File.category_id == FileCategory.id)
            .filter(FileCategory.name == category_name, File.target_date == target_date)
            .order_by(File.id.desc())
            .first()
        )
        if file is None:
            raise NotFoundError(f"file category={category_name} date={target_date}")
        return file

    # --- Категории ---

    def add_category(
        self,
        name: str,
        display_name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> int:
        obj = self._add(
            FileCategory(
                name=name,
                display_name=display_name,
                description=description,
                parent_id=parent_id,
            )
        )
        return obj.id

    def get_category(self, category_id: int) -> FileCategory:
        return self._get(FileCategory, category_id)

    def list_categories(self) -> List[FileCategory]:
        return self.db.query(FileCategory).order_by(FileCategory.id).all()

    def get_or_create_category(self, name: str, display_name: str) -> int:
        category = self.db.query(FileCategory).filter(FileCategory.name == name).first()
        if category is not None:
            return category.id
        return self.add_category(name=name, display_name=display_name)
