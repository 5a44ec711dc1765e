"""
API роуты модуля файлов.
Префикс: /api/v1/files. Подроуты: /categories, /upload, /latest, /{file_id}.

categories регистрируется первым, иначе /{file_id} перехватит "categories".
"""
from fastapi import APIRouter

from srmt_admin.core.config import settings

from .routes import categories, files

router = APIRouter(prefix=f"{settings.api_v1_prefix}/files", tags=["files"])

router.include_router(categories.router)
router.include_router(files.router)
