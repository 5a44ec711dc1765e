"""Роуты /hrm/employees."""
from datetime import date
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import (
    ForeignKeyViolationError,
    InvalidStatusError,
    NotFoundError,
    UniqueViolationError,
)
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_employee_repo
from srmt_admin.modules.hrm.models import Employee
from srmt_admin.modules.hrm.schemas.employee import (
    EmployeeCreate,
    EmployeeOut,
    EmployeeTerminate,
    EmployeeUpdate,
    EmploymentStatus,
    EmploymentType,
)
from srmt_admin.modules.hrm.services.employees import EmployeeFilters

router = APIRouter(prefix="/employees", tags=["hrm-employees"])

INVALID_REFERENCE = "Invalid contact_id, user_id, manager_id, department_id or position_id"


class EmployeeStore(Protocol):
    def add_employee(self, values: dict) -> int: ...

    def get_employee(self, employee_id: int) -> Employee: ...

    def list_employees(self, filters: EmployeeFilters) -> List[Employee]: ...

    def update_employee(self, employee_id: int, values: dict) -> None: ...

    def delete_employee(self, employee_id: int) -> None: ...

    def terminate_employee(self, employee_id: int, termination_date: date, reason: str) -> None: ...


@router.get("/", response_model=List[EmployeeOut])
def list_employees(
    employment_status: Optional[EmploymentStatus] = Query(None, alias="status"),
    employment_type: Optional[EmploymentType] = Query(None, alias="type"),
    manager_id: Optional[int] = Query(None),
    department_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    log: RequestLogger = Depends(op_log("hrm.employees.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: EmployeeStore = Depends(get_employee_repo),
):
    filters = EmployeeFilters(
        employment_status=employment_status,
        employment_type=employment_type,
        manager_id=manager_id,
        department_id=department_id,
        search=search,
        limit=limit,
        offset=offset,
    )
    try:
        return repo.list_employees(filters)
    except Exception:
        log.exception("failed to list employees")
        raise HTTPException(status_code=500, detail="Failed to retrieve employees")


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(
    employee_id: int,
    log: RequestLogger = Depends(op_log("hrm.employees.get")),
    claims: Claims = Depends(require_roles("hr")),
    repo: EmployeeStore = Depends(get_employee_repo),
):
    try:
        return repo.get_employee(employee_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Employee not found")
    except Exception:
        log.exception("failed to get employee", extra={"entity_id": employee_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_employee(
    payload: EmployeeCreate,
    log: RequestLogger = Depends(op_log("hrm.employees.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: EmployeeStore = Depends(get_employee_repo),
):
    try:
        employee_id = repo.add_employee(payload.model_dump())
    except ForeignKeyViolationError:
        log.warning("invalid reference on employee add")
        raise HTTPException(status_code=400, detail=INVALID_REFERENCE)
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Employee already exists for this contact or user")
    except Exception:
        log.exception("failed to add employee")
        raise HTTPException(status_code=500, detail="Failed to add employee")
    log.info("employee added", extra={"entity_id": employee_id})
    return created(employee_id)


@router.patch("/{employee_id}")
def edit_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    log: RequestLogger = Depends(op_log("hrm.employees.edit")),
    claims: Claims = Depends(require_roles("hr")),
    repo: EmployeeStore = Depends(get_employee_repo),
):
    try:
        repo.update_employee(employee_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Employee not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail=INVALID_REFERENCE)
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Employee number or user already in use")
    except Exception:
        log.exception("failed to update employee", extra={"entity_id": employee_id})
        raise HTTPException(status_code=500, detail="Failed to update employee")
    log.info("employee updated", extra={"entity_id": employee_id})
    return ok()


@router.post("/{employee_id}/terminate")
def terminate_employee(
    employee_id: int,
    payload: EmployeeTerminate,
    log: RequestLogger = Depends(op_log("hrm.employees.terminate")),
    claims: Claims = Depends(require_roles("hr")),
    repo: EmployeeStore = Depends(get_employee_repo),
):
    try:
        repo.terminate_employee(employee_id, payload.termination_date, payload.reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Employee not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Employee is already terminated")
    except Exception:
        log.exception("failed to terminate employee", extra={"entity_id": employee_id})
        raise HTTPException(status_code=500, detail="Failed to terminate employee")
    log.info("employee terminated", extra={"entity_id": employee_id})
    return ok()


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: int,
    log: RequestLogger = Depends(op_log("hrm.employees.delete")),
    claims: Claims = Depends(require_roles("hr")),
    repo: EmployeeStore = Depends(get_employee_repo),
):
    try:
        repo.delete_employee(employee_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Employee not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=409, detail="Employee has dependent records")
    except Exception:
        log.exception("failed to delete employee", extra={"entity_id": employee_id})
        raise HTTPException(status_code=500, detail="Failed to delete employee")
    log.info("employee deleted", extra={"entity_id": employee_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
