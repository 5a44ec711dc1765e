"""
API роуты HRM модуля.
Префикс: /api/v1/hrm. Подроуты: /contacts, /employees, /vacancies, /candidates,
/documents, /document-requests, /salary, /performance, /notifications,
/vacations, /access, /analytics.
Личный кабинет: /api/v1/my.
Администрирование (роль admin): /api/v1/users, /roles, /departments, /positions.
"""
from fastapi import APIRouter

from srmt_admin.core.config import settings

from .routes import (
    access,
    analytics,
    cabinet,
    contacts,
    departments,
    documents,
    employees,
    notifications,
    performance,
    recruiting,
    salary,
    users,
    vacations,
)

router = APIRouter(prefix=f"{settings.api_v1_prefix}/hrm")

router.include_router(contacts.router)
router.include_router(employees.router)
router.include_router(recruiting.router)
router.include_router(documents.router)
router.include_router(salary.router)
router.include_router(performance.router)
router.include_router(notifications.router)
router.include_router(vacations.router)
router.include_router(access.router)
router.include_router(analytics.router)

cabinet_router = APIRouter(prefix=settings.api_v1_prefix)
cabinet_router.include_router(cabinet.router)

admin_router = APIRouter(prefix=settings.api_v1_prefix)
admin_router.include_router(users.router)
admin_router.include_router(departments.router)


@router.get("/")
async def hrm_module_info():
    """Информация о HRM модуле"""
    return {
        "module": "hrm",
        "name": "HRM Module",
        "version": "1.0.0",
        "status": "active",
    }
