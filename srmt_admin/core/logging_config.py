"""
Логирование: форматтер с контекстом запроса, X-Request-ID и логгер операции.
"""
from __future__ import annotations

import logging
import uuid
from logging.config import dictConfig
from typing import Any, Callable, Iterable, MutableMapping, Sequence

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .config import settings

REQUEST_ID_HEADER = "X-Request-ID"

_DEFAULT_EXTRA_KEYS = (
    "op",
    "request_id",
    "user_id",
    "res_id",
    "entity_id",
    "object_key",
    "reason",
    "count",
)

_configured = False


class ContextualFormatter(logging.Formatter):

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts: list[str] = []
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue
            context_parts.append(f"{key}={value}")
        if context_parts:
            return f"{message} | {' '.join(context_parts)}"
        return message


def configure_logging(level: str | int | None = None) -> None:
    """Настраивает логирование приложения один раз за процесс."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else settings.log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "srmt_admin.core.logging_config.ContextualFormatter",
                    "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True


class RequestLogger(logging.LoggerAdapter):
    """LoggerAdapter, который объединяет свой контекст с extra конкретного вызова."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Берёт X-Request-ID из запроса (или генерирует) и возвращает его в ответе."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def op_log(op: str) -> Callable[[Request], RequestLogger]:
    """
    Dependency: логгер операции с полями op и request_id.

    Usage:
        @router.post("/")
        def add(log: RequestLogger = Depends(op_log("hrm.employees.add"))):
            log.info("employee added", extra={"entity_id": 1})
    """

    def _dependency(request: Request) -> RequestLogger:
        request_id = getattr(request.state, "request_id", None)
        return RequestLogger(
            logging.getLogger(f"srmt_admin.{op}"),
            {"op": op, "request_id": request_id},
        )

    return _dependency
