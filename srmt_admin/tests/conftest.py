"""
Общие фикстуры тестов.

Переменные окружения выставляются до импорта приложения: настройки читаются
один раз при импорте srmt_admin.core.config.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-srmt-admin-0123456789abcdef"
os.environ["API_KEY"] = "test-api-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="srmt-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from srmt_admin.core.auth import Claims, create_access_token
from srmt_admin.core.database import Base
from srmt_admin.main import app

API_KEY = "test-api-key"


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def override():
    """override(get_x_repo, fake): подмена зависимости на готовый объект."""

    def _override(dependency, value):
        app.dependency_overrides[dependency] = lambda: value

    yield _override
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """auth_headers("hr", user_id=5) -> заголовок Authorization с access-токеном."""

    def _headers(*roles, user_id=1, contact_id=None, name="tester"):
        claims = Claims(user_id=user_id, name=name, roles=list(roles), contact_id=contact_id)
        return {"Authorization": f"Bearer {create_access_token(claims)}"}

    return _headers


@pytest.fixture
def api_key_headers():
    return {"X-API-Key": API_KEY}


@pytest.fixture
def db_session():
    """Сессия SQLite в памяти со всеми таблицами и включёнными внешними ключами."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()
    engine.dispose()
