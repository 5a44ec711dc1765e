"""
Обработчики ошибок запросов.

RequestValidationError -> 400 со списком сообщений по полям
(field '<name>' is required / too short / not valid); ошибка разбора тела
-> 400 "Invalid request format"; HTTPException -> конверт {"status", "error"};
прочие исключения -> 500 без внутренних подробностей.
"""
import logging
from typing import Any, Dict, List, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responses import error_response

logger = logging.getLogger(__name__)

INVALID_REQUEST_FORMAT = "Invalid request format"
INTERNAL_ERROR = "internal error"

# Ошибки, означающие что тело не удалось разобрать целиком
_DECODE_ERROR_TYPES = {"json_invalid", "model_attributes_type", "dict_type", "model_type"}
_TOO_SHORT_TYPES = {"string_too_short", "too_short"}


def _field_name(loc: Sequence[Any]) -> str:
    for part in reversed(loc):
        if isinstance(part, str):
            return part
    return "body"


def _is_decode_error(err: Dict[str, Any]) -> bool:
    loc = tuple(err.get("loc") or ())
    if err.get("type") == "json_invalid":
        return True
    return loc in ((), ("body",)) and (err.get("type") in _DECODE_ERROR_TYPES or err.get("type") == "missing")


def field_messages(errors: Sequence[Dict[str, Any]]) -> List[str]:
    """Одно сообщение на каждое невалидное поле, в порядке появления."""
    messages: List[str] = []
    seen = set()
    for err in errors:
        name = _field_name(err.get("loc") or ())
        if name in seen:
            continue
        seen.add(name)
        err_type = err.get("type")
        if err_type == "missing":
            problem = "required"
        elif err_type in _TOO_SHORT_TYPES:
            problem = "too short"
        else:
            problem = "not valid"
        messages.append(f"field '{name}' is {problem}")
    return messages


def raise_validation_error(exc: ValidationError) -> None:
    """Для multipart-роутов: ошибка pydantic -> тот же ответ, что и для JSON."""
    raise RequestValidationError(exc.errors()) from exc


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(_is_decode_error(err) for err in errors):
        logger.info("request decode failed: %s", request.url.path)
        return error_response(400, INVALID_REQUEST_FORMAT)
    messages = field_messages(errors)
    logger.info("request validation failed: %s", request.url.path, extra={"reason": "; ".join(messages)})
    return error_response(400, ", ".join(messages), errors=messages)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = error_response(exc.status_code, detail)
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error: %s", request.url.path)
    return error_response(500, INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
