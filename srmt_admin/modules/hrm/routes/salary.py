"""Роуты /hrm/salary: структуры окладов, начисления и их расчёт."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import (
    ForeignKeyViolationError,
    InvalidStatusError,
    NegativeNetAmountError,
    NotFoundError,
    UniqueViolationError,
)
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_salary_repo
from srmt_admin.modules.hrm.models import Salary, SalaryStructure
from srmt_admin.modules.hrm.schemas.salary import (
    BulkCalculate,
    BulkCalculateOut,
    SalaryCalculate,
    SalaryCreate,
    SalaryOut,
    SalaryStructureCreate,
    SalaryStructureOut,
)
from srmt_admin.modules.hrm.services.salary import SalaryRepository, SalaryService

router = APIRouter(prefix="/salary", tags=["hrm-salary"])


class StructureStore(Protocol):
    def add_structure(self, values: dict) -> int: ...

    def list_structures(self, employee_id: Optional[int] = None) -> List[SalaryStructure]: ...


class SalaryStore(Protocol):
    def add_salary(self, employee_id: int, period_year: int, period_month: int) -> int: ...

    def get_salary(self, salary_id: int) -> Salary: ...

    def list_salaries(self, employee_id=None, period_year=None, period_month=None, status=None) -> List[Salary]: ...

    def delete_salary(self, salary_id: int) -> None: ...


# --- Структуры окладов ---


@router.post("/structures", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_structure(
    payload: SalaryStructureCreate,
    log: RequestLogger = Depends(op_log("hrm.salary.structures.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: StructureStore = Depends(get_salary_repo),
):
    try:
        structure_id = repo.add_structure(payload.model_dump())
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id")
    except Exception:
        log.exception("failed to add salary structure")
        raise HTTPException(status_code=500, detail="Failed to add salary structure")
    log.info("salary structure added", extra={"entity_id": structure_id})
    return created(structure_id)


@router.get("/structures", response_model=List[SalaryStructureOut])
def list_structures(
    employee_id: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.salary.structures.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: StructureStore = Depends(get_salary_repo),
):
    try:
        return repo.list_structures(employee_id)
    except Exception:
        log.exception("failed to list salary structures")
        raise HTTPException(status_code=500, detail="Failed to retrieve salary structures")


# --- Начисления ---


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_salary(
    payload: SalaryCreate,
    log: RequestLogger = Depends(op_log("hrm.salary.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryStore = Depends(get_salary_repo),
):
    try:
        salary_id = repo.add_salary(payload.employee_id, payload.period_year, payload.period_month)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Salary for this period already exists")
    except Exception:
        log.exception("failed to add salary")
        raise HTTPException(status_code=500, detail="Failed to add salary")
    log.info("salary draft added", extra={"entity_id": salary_id})
    return created(salary_id)


@router.get("/", response_model=List[SalaryOut])
def list_salaries(
    employee_id: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    salary_status: Optional[str] = Query(None, alias="status"),
    log: RequestLogger = Depends(op_log("hrm.salary.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryStore = Depends(get_salary_repo),
):
    try:
        return repo.list_salaries(employee_id, year, month, salary_status)
    except Exception:
        log.exception("failed to list salaries")
        raise HTTPException(status_code=500, detail="Failed to retrieve salaries")


@router.post("/bulk-calculate", response_model=BulkCalculateOut)
def bulk_calculate(
    payload: BulkCalculate,
    log: RequestLogger = Depends(op_log("hrm.salary.bulk_calculate")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryRepository = Depends(get_salary_repo),
):
    try:
        count = SalaryService(repo, log).bulk_calculate(
            payload.department_id, payload.period_year, payload.period_month
        )
    except Exception:
        log.exception("failed to bulk calculate salaries")
        raise HTTPException(status_code=500, detail="Failed to calculate salaries")
    log.info("salaries calculated", extra={"count": count})
    return BulkCalculateOut(calculated=count)


@router.get("/{salary_id}", response_model=SalaryOut)
def get_salary(
    salary_id: int,
    log: RequestLogger = Depends(op_log("hrm.salary.get")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryStore = Depends(get_salary_repo),
):
    try:
        return repo.get_salary(salary_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Salary not found")
    except Exception:
        log.exception("failed to get salary", extra={"entity_id": salary_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.delete("/{salary_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_salary(
    salary_id: int,
    log: RequestLogger = Depends(op_log("hrm.salary.delete")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryStore = Depends(get_salary_repo),
):
    """Удалить можно только черновик."""
    try:
        salary = repo.get_salary(salary_id)
        if salary.status != "draft":
            raise InvalidStatusError(f"salary {salary_id} is {salary.status}")
        repo.delete_salary(salary_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Salary not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Only draft salary can be deleted")
    except Exception:
        log.exception("failed to delete salary", extra={"entity_id": salary_id})
        raise HTTPException(status_code=500, detail="Failed to delete salary")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{salary_id}/calculate", response_model=SalaryOut)
def calculate_salary(
    salary_id: int,
    payload: SalaryCalculate,
    log: RequestLogger = Depends(op_log("hrm.salary.calculate")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryRepository = Depends(get_salary_repo),
):
    try:
        salary = SalaryService(repo, log).calculate(
            salary_id,
            work_days=payload.work_days,
            actual_days=payload.actual_days,
            overtime_hours=payload.overtime_hours,
            bonuses=[b.model_dump() for b in payload.bonuses],
            deductions=[d.model_dump() for d in payload.deductions],
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Salary or salary structure not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Only draft salary can be calculated")
    except NegativeNetAmountError:
        raise HTTPException(status_code=400, detail="Deductions exceed gross salary")
    except Exception:
        log.exception("failed to calculate salary", extra={"entity_id": salary_id})
        raise HTTPException(status_code=500, detail="Failed to calculate salary")
    log.info("salary calculated", extra={"entity_id": salary_id})
    return salary


@router.post("/{salary_id}/approve")
def approve_salary(
    salary_id: int,
    log: RequestLogger = Depends(op_log("hrm.salary.approve")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryRepository = Depends(get_salary_repo),
):
    try:
        SalaryService(repo, log).approve(salary_id, claims.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Salary not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Only calculated salary can be approved")
    except Exception:
        log.exception("failed to approve salary", extra={"entity_id": salary_id})
        raise HTTPException(status_code=500, detail="Failed to approve salary")
    log.info("salary approved", extra={"entity_id": salary_id})
    return ok()


@router.post("/{salary_id}/pay")
def pay_salary(
    salary_id: int,
    log: RequestLogger = Depends(op_log("hrm.salary.pay")),
    claims: Claims = Depends(require_roles("hr")),
    repo: SalaryRepository = Depends(get_salary_repo),
):
    try:
        SalaryService(repo, log).mark_paid(salary_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Salary not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Only approved salary can be marked as paid")
    except Exception:
        log.exception("failed to mark salary paid", extra={"entity_id": salary_id})
        raise HTTPException(status_code=500, detail="Failed to mark salary as paid")
    log.info("salary paid", extra={"entity_id": salary_id})
    return ok()
