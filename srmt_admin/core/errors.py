"""
Ошибки слоя хранения и доменные ошибки.

Репозитории сигнализируют о хорошо известных ситуациях исключениями из этой
иерархии; роуты переводят их в HTTP-статусы. Всё, что не входит в иерархию,
считается внутренней ошибкой и отдаётся клиенту как 500 без подробностей.
"""
from sqlalchemy.exc import IntegrityError


class StorageError(Exception):
    """Базовая ошибка слоя хранения"""


class NotFoundError(StorageError):
    """Запись не найдена"""


class ForeignKeyViolationError(StorageError):
    """Ссылка на несуществующую запись"""


class UniqueViolationError(StorageError):
    """Нарушено ограничение уникальности"""


class InvalidStatusError(StorageError):
    """Недопустимый переход статуса"""


class InvalidCredentialsError(StorageError):
    """Неверное имя пользователя или пароль"""


# --- Отпуска ---


class InvalidDateRangeError(StorageError):
    """Дата окончания раньше даты начала"""


class StartDateInPastError(StorageError):
    """Дата начала в прошлом"""


class InsufficientBalanceError(StorageError):
    """Недостаточно дней отпуска"""


class VacationOverlapError(StorageError):
    """Пересечение с существующим отпуском"""


class BlockedPeriodError(StorageError):
    """Период заблокирован для отпусков"""


# --- Пользователи ---


class ContactAlreadyLinkedError(StorageError):
    """Контакт уже привязан к другому пользователю"""


# --- Рекрутинг ---


class VacancyNotPublishedError(StorageError):
    """Вакансия не опубликована"""


# --- Зарплата ---


class NegativeNetAmountError(StorageError):
    """Сумма к выплате получилась отрицательной"""


# --- Телеметрия ---


class IndicatorNotFoundError(NotFoundError):
    """Для водохранилища не задана отметка индикатора"""


class LevelOutOfCurveRangeError(StorageError):
    """Уровень вне диапазона кривой уровень/объём"""


_FK_SQLSTATE = "23503"
_UNIQUE_SQLSTATE = "23505"


def translate_integrity_error(exc: IntegrityError) -> StorageError:
    """
    Переводит IntegrityError драйвера в ошибку слоя хранения.

    PostgreSQL отдаёт SQLSTATE (pgcode), SQLite — только текст сообщения.
    """
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    text = str(orig)
    if code == _FK_SQLSTATE or "FOREIGN KEY" in text:
        return ForeignKeyViolationError(text)
    if code == _UNIQUE_SQLSTATE or "UNIQUE" in text:
        return UniqueViolationError(text)
    return StorageError(text)
