"""Роуты /hrm/vacations: заявки, согласование, балансы и блокировки."""
from datetime import date
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import (
    BlockedPeriodError,
    ForeignKeyViolationError,
    InsufficientBalanceError,
    InvalidDateRangeError,
    InvalidStatusError,
    NotFoundError,
    StartDateInPastError,
    VacationOverlapError,
)
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_vacation_repo
from srmt_admin.modules.hrm.models import Vacation, VacationBalance, VacationBlockedPeriod
from srmt_admin.modules.hrm.schemas.vacation import (
    BalanceOut,
    BalanceSet,
    BlockedPeriodCreate,
    BlockedPeriodOut,
    VacationCreate,
    VacationOut,
    VacationReject,
)
from srmt_admin.modules.hrm.services.vacations import VacationRepository, VacationService

router = APIRouter(prefix="/vacations", tags=["hrm-vacations"])


class VacationReader(Protocol):
    def get_vacation(self, vacation_id: int) -> Vacation: ...

    def list_vacations(self, employee_id=None, status=None, year=None) -> List[Vacation]: ...


class BalanceStore(Protocol):
    def get_balance(self, employee_id: int, year: int) -> VacationBalance: ...

    def set_balance(self, employee_id: int, year: int, total_days: int) -> int: ...


class BlockedPeriodStore(Protocol):
    def add_blocked_period(self, values: dict) -> int: ...

    def list_blocked_periods(self, department_id: Optional[int] = None) -> List[VacationBlockedPeriod]: ...


def create_vacation(service: VacationService, values: dict, created_by: int, log: RequestLogger) -> IDResponse:
    """Общий путь создания заявки для /hrm/vacations и /my/vacations."""
    try:
        vacation_id = service.create(values, created_by)
    except StartDateInPastError:
        raise HTTPException(status_code=400, detail="Start date cannot be in the past")
    except InvalidDateRangeError:
        raise HTTPException(status_code=400, detail="End date must not be before start date")
    except InsufficientBalanceError:
        raise HTTPException(status_code=400, detail="Insufficient vacation balance")
    except VacationOverlapError:
        raise HTTPException(status_code=409, detail="Vacation overlaps with an existing one")
    except BlockedPeriodError:
        raise HTTPException(status_code=409, detail="Vacation period is blocked for the department")
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Employee not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id or substitute_employee_id")
    except Exception:
        log.exception("failed to create vacation")
        raise HTTPException(status_code=500, detail="Failed to create vacation")
    log.info("vacation created", extra={"entity_id": vacation_id})
    return created(vacation_id)


def cancel_vacation(service: VacationService, vacation_id: int, log: RequestLogger, employee_id: Optional[int] = None) -> dict:
    try:
        service.cancel(vacation_id, employee_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacation not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Vacation cannot be cancelled in its current status")
    except Exception:
        log.exception("failed to cancel vacation", extra={"entity_id": vacation_id})
        raise HTTPException(status_code=500, detail="Failed to cancel vacation")
    log.info("vacation cancelled", extra={"entity_id": vacation_id})
    return ok()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_vacation(
    payload: VacationCreate,
    log: RequestLogger = Depends(op_log("hrm.vacations.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacationRepository = Depends(get_vacation_repo),
):
    return create_vacation(VacationService(repo, log), payload.model_dump(), claims.user_id, log)


@router.get("/", response_model=List[VacationOut])
def list_vacations(
    employee_id: Optional[int] = Query(None),
    vacation_status: Optional[str] = Query(None, alias="status"),
    year: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.vacations.list")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: VacationReader = Depends(get_vacation_repo),
):
    try:
        return repo.list_vacations(employee_id, vacation_status, year)
    except Exception:
        log.exception("failed to list vacations")
        raise HTTPException(status_code=500, detail="Failed to retrieve vacations")


@router.get("/balances", response_model=BalanceOut)
def get_balance(
    employee_id: int = Query(..., ge=1),
    year: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.vacations.balance.get")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: BalanceStore = Depends(get_vacation_repo),
):
    try:
        return repo.get_balance(employee_id, year or date.today().year)
    except Exception:
        log.exception("failed to get vacation balance", extra={"entity_id": employee_id})
        raise HTTPException(status_code=500, detail="Failed to retrieve vacation balance")


@router.put("/balances", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def set_balance(
    payload: BalanceSet,
    log: RequestLogger = Depends(op_log("hrm.vacations.balance.set")),
    claims: Claims = Depends(require_roles("hr")),
    repo: BalanceStore = Depends(get_vacation_repo),
):
    try:
        balance_id = repo.set_balance(payload.employee_id, payload.year, payload.total_days)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id")
    except Exception:
        log.exception("failed to set vacation balance", extra={"entity_id": payload.employee_id})
        raise HTTPException(status_code=500, detail="Failed to set vacation balance")
    return created(balance_id)


@router.post("/blocked-periods", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_blocked_period(
    payload: BlockedPeriodCreate,
    log: RequestLogger = Depends(op_log("hrm.vacations.blocked.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: BlockedPeriodStore = Depends(get_vacation_repo),
):
    if payload.end_date < payload.start_date:
        raise HTTPException(status_code=400, detail="End date must not be before start date")
    try:
        period_id = repo.add_blocked_period(payload.model_dump())
    except Exception:
        log.exception("failed to add blocked period")
        raise HTTPException(status_code=500, detail="Failed to add blocked period")
    return created(period_id)


@router.get("/blocked-periods", response_model=List[BlockedPeriodOut])
def list_blocked_periods(
    department_id: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.vacations.blocked.list")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: BlockedPeriodStore = Depends(get_vacation_repo),
):
    try:
        return repo.list_blocked_periods(department_id)
    except Exception:
        log.exception("failed to list blocked periods")
        raise HTTPException(status_code=500, detail="Failed to retrieve blocked periods")


@router.get("/{vacation_id}", response_model=VacationOut)
def get_vacation(
    vacation_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacations.get")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: VacationReader = Depends(get_vacation_repo),
):
    try:
        return repo.get_vacation(vacation_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacation not found")
    except Exception:
        log.exception("failed to get vacation", extra={"entity_id": vacation_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/{vacation_id}/approve")
def approve_vacation(
    vacation_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacations.approve")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: VacationRepository = Depends(get_vacation_repo),
):
    try:
        VacationService(repo, log).approve(vacation_id, claims.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacation not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Only pending vacation can be approved")
    except Exception:
        log.exception("failed to approve vacation", extra={"entity_id": vacation_id})
        raise HTTPException(status_code=500, detail="Failed to approve vacation")
    log.info("vacation approved", extra={"entity_id": vacation_id})
    return ok()


@router.post("/{vacation_id}/reject")
def reject_vacation(
    vacation_id: int,
    payload: VacationReject,
    log: RequestLogger = Depends(op_log("hrm.vacations.reject")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: VacationRepository = Depends(get_vacation_repo),
):
    try:
        VacationService(repo, log).reject(vacation_id, claims.user_id, payload.reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacation not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Only pending vacation can be rejected")
    except Exception:
        log.exception("failed to reject vacation", extra={"entity_id": vacation_id})
        raise HTTPException(status_code=500, detail="Failed to reject vacation")
    log.info("vacation rejected", extra={"entity_id": vacation_id})
    return ok()


@router.post("/{vacation_id}/cancel")
def cancel(
    vacation_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacations.cancel")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacationRepository = Depends(get_vacation_repo),
):
    return cancel_vacation(VacationService(repo, log), vacation_id, log)
