"""
Конверт ответа: {"status": <int>, "error": "<строка, опускается если пусто>"}.
"""
from fastapi import status as http_status
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class IDResponse(BaseModel):
    """Ответ на создание записи"""

    status: int = http_status.HTTP_201_CREATED
    id: int


def ok() -> dict:
    return {"status": http_status.HTTP_200_OK}


def created(new_id: int) -> IDResponse:
    return IDResponse(id=new_id)


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """JSON-конверт ошибки с тем же кодом, что и HTTP-статус."""
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "error": message, **extra},
    )
