"""
Разбор тела запроса для роутов, принимающих и JSON, и multipart/form-data.

Поля формы собираются в словарь и проверяются той же pydantic-схемой, что и
JSON, поэтому ошибки валидации в обоих случаях выглядят одинаково.
"""
from typing import Dict, Iterable, List, Type, TypeVar

from fastapi import Request, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import FormData

from .validation import raise_validation_error

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def is_multipart(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith("multipart/form-data")


def split_ids(value: str) -> List[str]:
    """"1, 2,3" -> ["1", "2", "3"]; пустые элементы пропускаются."""
    return [part.strip() for part in value.split(",") if part.strip()]


def form_fields(form: FormData, list_fields: Iterable[str] = ()) -> Dict[str, object]:
    """
    Текстовые поля формы.

    Пустые значения считаются отсутствующими. Поля из list_fields
    принимаются как повторяющиеся ключи или как строка через запятую.
    """
    list_fields = set(list_fields)
    data: Dict[str, object] = {}
    for key in form.keys():
        values = [v for v in form.getlist(key) if isinstance(v, str)]
        if key in list_fields:
            items: List[str] = []
            for value in values:
                items.extend(split_ids(value))
            if items:
                data[key] = items
            continue
        if values and values[0] != "":
            data[key] = values[0]
    return data


def form_files(form: FormData, key: str = "files") -> List[UploadFile]:
    """Файлы формы под ключом key (пустые поля файла пропускаются)."""
    return [
        f for f in form.getlist(key)
        if not isinstance(f, str) and getattr(f, "filename", None)
    ]


def validate_form(schema: Type[SchemaT], data: Dict[str, object]) -> SchemaT:
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise_validation_error(exc)


async def read_json(request: Request, schema: Type[SchemaT]) -> SchemaT:
    """JSON-тело -> схема; битый JSON -> "Invalid request format"."""
    try:
        data = await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
        ) from exc
    return validate_form(schema, data)
