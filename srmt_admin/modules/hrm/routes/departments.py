"""Роуты /departments и /positions: справочники оргструктуры (только admin)."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError, UniqueViolationError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_orgstructure_repo
from srmt_admin.modules.hrm.models import Department, Position
from srmt_admin.modules.hrm.schemas.orgstructure import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentUpdate,
    PositionCreate,
    PositionOut,
    PositionUpdate,
)

router = APIRouter(tags=["orgstructure"])


class DepartmentStore(Protocol):
    def add_department(self, values: dict) -> int: ...

    def get_department(self, department_id: int) -> Department: ...

    def list_departments(self, organization_id: Optional[int] = None) -> List[Department]: ...

    def update_department(self, department_id: int, values: dict) -> None: ...

    def delete_department(self, department_id: int) -> None: ...


class PositionStore(Protocol):
    def add_position(self, values: dict) -> int: ...

    def list_positions(self) -> List[Position]: ...

    def update_position(self, position_id: int, values: dict) -> None: ...

    def delete_position(self, position_id: int) -> None: ...


# --- Подразделения ---


@router.get("/departments", response_model=List[DepartmentOut])
def list_departments(
    organization_id: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("departments.list")),
    claims: Claims = Depends(require_roles("admin")),
    repo: DepartmentStore = Depends(get_orgstructure_repo),
):
    try:
        return repo.list_departments(organization_id)
    except Exception:
        log.exception("failed to list departments")
        raise HTTPException(status_code=500, detail="Failed to retrieve departments")


@router.get("/departments/{department_id}", response_model=DepartmentOut)
def get_department(
    department_id: int,
    log: RequestLogger = Depends(op_log("departments.get")),
    claims: Claims = Depends(require_roles("admin")),
    repo: DepartmentStore = Depends(get_orgstructure_repo),
):
    try:
        return repo.get_department(department_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Department not found")
    except Exception:
        log.exception("failed to get department", extra={"entity_id": department_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/departments", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_department(
    payload: DepartmentCreate,
    log: RequestLogger = Depends(op_log("departments.add")),
    claims: Claims = Depends(require_roles("admin")),
    repo: DepartmentStore = Depends(get_orgstructure_repo),
):
    try:
        department_id = repo.add_department(payload.model_dump())
    except ForeignKeyViolationError:
        log.warning("organization not found", extra={"entity_id": payload.organization_id})
        raise HTTPException(status_code=400, detail="Organization not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Department with this name already exists")
    except Exception:
        log.exception("failed to add department")
        raise HTTPException(status_code=500, detail="Failed to add department")
    log.info("department added", extra={"entity_id": department_id})
    return created(department_id)


@router.patch("/departments/{department_id}")
def edit_department(
    department_id: int,
    payload: DepartmentUpdate,
    log: RequestLogger = Depends(op_log("departments.edit")),
    claims: Claims = Depends(require_roles("admin")),
    repo: DepartmentStore = Depends(get_orgstructure_repo),
):
    try:
        repo.update_department(department_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Department not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Department with this name already exists")
    except Exception:
        log.exception("failed to update department", extra={"entity_id": department_id})
        raise HTTPException(status_code=500, detail="Failed to update department")
    return ok()


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: int,
    log: RequestLogger = Depends(op_log("departments.delete")),
    claims: Claims = Depends(require_roles("admin")),
    repo: DepartmentStore = Depends(get_orgstructure_repo),
):
    try:
        repo.delete_department(department_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Department not found")
    except ForeignKeyViolationError:
        log.warning("department in use", extra={"entity_id": department_id})
        raise HTTPException(status_code=400, detail="Cannot delete department: it has associated employees")
    except Exception:
        log.exception("failed to delete department", extra={"entity_id": department_id})
        raise HTTPException(status_code=500, detail="Failed to delete department")
    log.info("department deleted", extra={"entity_id": department_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Должности ---


@router.get("/positions", response_model=List[PositionOut])
def list_positions(
    log: RequestLogger = Depends(op_log("positions.list")),
    claims: Claims = Depends(require_roles("admin")),
    repo: PositionStore = Depends(get_orgstructure_repo),
):
    try:
        return repo.list_positions()
    except Exception:
        log.exception("failed to list positions")
        raise HTTPException(status_code=500, detail="Failed to retrieve positions")


@router.post("/positions", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_position(
    payload: PositionCreate,
    log: RequestLogger = Depends(op_log("positions.add")),
    claims: Claims = Depends(require_roles("admin")),
    repo: PositionStore = Depends(get_orgstructure_repo),
):
    try:
        position_id = repo.add_position(payload.model_dump())
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Position with this name already exists")
    except Exception:
        log.exception("failed to add position")
        raise HTTPException(status_code=500, detail="Failed to add position")
    log.info("position added", extra={"entity_id": position_id})
    return created(position_id)


@router.patch("/positions/{position_id}")
def edit_position(
    position_id: int,
    payload: PositionUpdate,
    log: RequestLogger = Depends(op_log("positions.edit")),
    claims: Claims = Depends(require_roles("admin")),
    repo: PositionStore = Depends(get_orgstructure_repo),
):
    try:
        repo.update_position(position_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Position not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Position with this name already exists")
    except Exception:
        log.exception("failed to update position", extra={"entity_id": position_id})
        raise HTTPException(status_code=500, detail="Failed to update position")
    return ok()


@router.delete("/positions/{position_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_position(
    position_id: int,
    log: RequestLogger = Depends(op_log("positions.delete")),
    claims: Claims = Depends(require_roles("admin")),
    repo: PositionStore = Depends(get_orgstructure_repo),
):
    try:
        repo.delete_position(position_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Position not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Cannot delete position: it is in use by employees")
    except Exception:
        log.exception("failed to delete position", extra={"entity_id": position_id})
        raise HTTPException(status_code=500, detail="Failed to delete position")
    log.info("position deleted", extra={"entity_id": position_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
