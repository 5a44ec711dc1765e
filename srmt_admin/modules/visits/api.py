"""
API роуты модуля визитов.
Префикс: /api/v1/visits.
"""
from fastapi import APIRouter

from srmt_admin.core.config import settings

from .routes import visits

router = APIRouter(prefix=f"{settings.api_v1_prefix}/visits")

router.include_router(visits.router)
