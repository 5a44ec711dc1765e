"""
Dependencies для модуля файлов.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from srmt_admin.core.database import get_db
from srmt_admin.core.fileupload import get_file_storage  # noqa: F401  (реэкспорт для роутов)
from srmt_admin.modules.files.services.repository import FileRepository


def get_files_repo(db: Session = Depends(get_db)) -> FileRepository:
    return FileRepository(db)
