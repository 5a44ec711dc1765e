"""
Единая база данных для всех модулей SRMT Admin
"""
from typing import Generator, Type, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings
from .errors import NotFoundError, translate_integrity_error

# Базовый класс для всех моделей
Base = declarative_base()

ModelT = TypeVar("ModelT")


def _engine_kwargs(url: str) -> dict:
    # SQLite (тесты, локальный запуск) не поддерживает параметры пула
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency для получения сессии БД.
    Используется во всех модулях платформы.

    Usage:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class SQLRepository:
    """
    Базовый SQL-репозиторий.

    Держит сессию и переводит ошибки целостности БД в ошибки слоя хранения
    (ForeignKeyViolationError, UniqueViolationError).
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise translate_integrity_error(exc) from exc

    def _add(self, obj):
        self.db.add(obj)
        self._commit()
        self.db.refresh(obj)
        return obj

    def _get(self, model: Type[ModelT], obj_id: int) -> ModelT:
        obj = self.db.get(model, obj_id)
        if obj is None:
            raise NotFoundError(f"{model.__tablename__} id={obj_id}")
        return obj

    def _update(self, model: Type[ModelT], obj_id: int, values: dict) -> ModelT:
        obj = self._get(model, obj_id)
        for field, value in values.items():
            setattr(obj, field, value)
        self._commit()
        self.db.refresh(obj)
        return obj

    def _delete(self, model: Type[ModelT], obj_id: int) -> None:
        obj = self._get(model, obj_id)
        self.db.delete(obj)
        self._commit()
