"""
API роуты телеметрии.
Префикс: /api/v1. Подроуты: /data, /reservoirs, /indicators, /level-volume.
"""
from fastapi import APIRouter

from srmt_admin.core.config import settings

from .routes import data, reservoirs

router = APIRouter(prefix=settings.api_v1_prefix)

router.include_router(data.router)
router.include_router(reservoirs.router)
