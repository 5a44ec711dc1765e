"""
Главный файл SRMT Admin
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from srmt_admin.core import auth_routes
from srmt_admin.core.config import settings
from srmt_admin.core.database import Base, SessionLocal, engine
from srmt_admin.core.logging_config import RequestIDMiddleware, configure_logging
from srmt_admin.core.validation import register_exception_handlers
from srmt_admin.modules.files import api as files_api
from srmt_admin.modules.hrm import api as hrm_api
from srmt_admin.modules.hrm.services.users import UserRepository, ensure_admin
from srmt_admin.modules.investments import api as investments_api
from srmt_admin.modules.telemetry import api as telemetry_api
from srmt_admin.modules.visits import api as visits_api

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Административный бэкенд SRMT",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

register_exception_handlers(app)

# Подключаем роутеры модулей
app.include_router(auth_routes.router)
app.include_router(files_api.router)
app.include_router(telemetry_api.router)
app.include_router(hrm_api.router)
app.include_router(hrm_api.cabinet_router)
app.include_router(hrm_api.admin_router)
app.include_router(investments_api.router)
app.include_router(visits_api.router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "srmt-admin"}


@app.on_event("startup")
def on_startup():
    """Инициализация при старте приложения"""
    logger.info("Запуск SRMT Admin...")
    if settings.create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("таблицы БД созданы")
    if settings.create_admin:
        db = SessionLocal()
        try:
            ensure_admin(UserRepository(db), settings.admin_login, settings.admin_password)
        finally:
            db.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
