"""
API роуты модуля инвестиций.
Префикс: /api/v1/investments. Подроуты: /types, /statuses, /{investment_id}.

catalog регистрируется первым, иначе /{investment_id} перехватит "types".
"""
from fastapi import APIRouter

from srmt_admin.core.config import settings

from .routes import catalog, investments

router = APIRouter(prefix=f"{settings.api_v1_prefix}/investments")

router.include_router(catalog.router)
router.include_router(investments.router)
