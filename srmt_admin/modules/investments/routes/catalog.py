"""Справочники инвестиций: /investments/types и /investments/statuses."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, get_claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError, UniqueViolationError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.modules.investments.dependencies import get_investment_repo
from srmt_admin.modules.investments.models import InvestmentStatus, InvestmentType
from srmt_admin.modules.investments.schemas import (
    StatusCreate,
    StatusOut,
    StatusUpdate,
    TypeCreate,
    TypeOut,
    TypeUpdate,
)

router = APIRouter(tags=["investments"])


class CatalogStore(Protocol):
    def add_type(self, values: dict) -> int: ...

    def list_types(self) -> List[InvestmentType]: ...

    def update_type(self, type_id: int, values: dict) -> None: ...

    def delete_type(self, type_id: int) -> None: ...

    def add_status(self, values: dict) -> int: ...

    def list_statuses(self, type_id: Optional[int] = None) -> List[InvestmentStatus]: ...

    def update_status(self, status_id: int, values: dict) -> None: ...

    def delete_status(self, status_id: int) -> None: ...


# --- Типы ---


@router.post("/types", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_type(
    payload: TypeCreate,
    log: RequestLogger = Depends(op_log("investments.types.add")),
    claims: Claims = Depends(require_roles("investment")),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        type_id = repo.add_type(payload.model_dump())
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Investment type already exists")
    except Exception:
        log.exception("failed to add investment type")
        raise HTTPException(status_code=500, detail="Failed to add investment type")
    log.info("investment type added", extra={"entity_id": type_id})
    return created(type_id)


@router.get("/types", response_model=List[TypeOut])
def list_types(
    log: RequestLogger = Depends(op_log("investments.types.list")),
    claims: Claims = Depends(get_claims),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        return repo.list_types()
    except Exception:
        log.exception("failed to list investment types")
        raise HTTPException(status_code=500, detail="Failed to retrieve investment types")


@router.patch("/types/{type_id}")
def edit_type(
    type_id: int,
    payload: TypeUpdate,
    log: RequestLogger = Depends(op_log("investments.types.edit")),
    claims: Claims = Depends(require_roles("investment")),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        repo.update_type(type_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment type not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Investment type already exists")
    except Exception:
        log.exception("failed to update investment type", extra={"entity_id": type_id})
        raise HTTPException(status_code=500, detail="Failed to update investment type")
    log.info("investment type updated", extra={"entity_id": type_id})
    return ok()


@router.delete("/types/{type_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_type(
    type_id: int,
    log: RequestLogger = Depends(op_log("investments.types.delete")),
    claims: Claims = Depends(require_roles("investment")),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        repo.delete_type(type_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment type not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=409, detail="Investment type is in use")
    except Exception:
        log.exception("failed to delete investment type", extra={"entity_id": type_id})
        raise HTTPException(status_code=500, detail="Failed to delete investment type")
    log.info("investment type deleted", extra={"entity_id": type_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Статусы ---


@router.post("/statuses", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_status(
    payload: StatusCreate,
    log: RequestLogger = Depends(op_log("investments.statuses.add")),
    claims: Claims = Depends(require_roles("investment")),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        status_id = repo.add_status(payload.model_dump())
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Investment status already exists")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid type ID")
    except Exception:
        log.exception("failed to add investment status")
        raise HTTPException(status_code=500, detail="Failed to add investment status")
    log.info("investment status added", extra={"entity_id": status_id})
    return created(status_id)


@router.get("/statuses", response_model=List[StatusOut])
def list_statuses(
    type_id: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("investments.statuses.list")),
    claims: Claims = Depends(get_claims),
    repo: CatalogStore = Depends(get_investment_repo),
):
    """Статусы типа вместе с общими (type_id не задан)."""
    try:
        return repo.list_statuses(type_id)
    except Exception:
        log.exception("failed to list investment statuses")
        raise HTTPException(status_code=500, detail="Failed to retrieve investment statuses")


@router.patch("/statuses/{status_id}")
def edit_status(
    status_id: int,
    payload: StatusUpdate,
    log: RequestLogger = Depends(op_log("investments.statuses.edit")),
    claims: Claims = Depends(require_roles("investment")),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        repo.update_status(status_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment status not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Investment status already exists")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid type ID")
    except Exception:
        log.exception("failed to update investment status", extra={"entity_id": status_id})
        raise HTTPException(status_code=500, detail="Failed to update investment status")
    log.info("investment status updated", extra={"entity_id": status_id})
    return ok()


@router.delete("/statuses/{status_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_status(
    status_id: int,
    log: RequestLogger = Depends(op_log("investments.statuses.delete")),
    claims: Claims = Depends(require_roles("investment")),
    repo: CatalogStore = Depends(get_investment_repo),
):
    try:
        repo.delete_status(status_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Investment status not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=409, detail="Investment status is in use")
    except Exception:
        log.exception("failed to delete investment status", extra={"entity_id": status_id})
        raise HTTPException(status_code=500, detail="Failed to delete investment status")
    log.info("investment status deleted", extra={"entity_id": status_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
