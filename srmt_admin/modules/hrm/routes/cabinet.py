"""
Роуты личного кабинета /my.

Сотрудник определяется по user_id из токена. Вспомогательные данные
(счётчик непрочитанных, структура оклада) необязательны: если их не удалось
получить, ошибка логируется и поле опускается.
"""
from datetime import date
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query

from srmt_admin.core.auth import Claims, get_claims
from srmt_admin.core.errors import NotFoundError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, ok
from srmt_admin.modules.hrm.dependencies import (
    get_cabinet_repo,
    get_notification_repo,
    get_salary_repo,
    get_vacation_repo,
)
from srmt_admin.modules.hrm.models import Employee, Notification, Salary, SalaryStructure, Vacation, VacationBalance
from srmt_admin.modules.hrm.routes.vacations import cancel_vacation, create_vacation
from srmt_admin.modules.hrm.schemas.cabinet import MyNotificationsOut, MySalaryOut, ProfileOut, Task
from srmt_admin.modules.hrm.schemas.salary import SalaryOut
from srmt_admin.modules.hrm.schemas.vacation import BalanceOut, MyVacationCreate, VacationOut
from srmt_admin.modules.hrm.services.vacations import VacationRepository, VacationService

router = APIRouter(prefix="/my", tags=["my"])


class EmployeeFinder(Protocol):
    def get_employee_by_user_id(self, user_id: int) -> Employee: ...


class TaskFinder(EmployeeFinder, Protocol):
    def get_pending_tasks(self, manager_id: int) -> List[Task]: ...


class MyNotificationStore(Protocol):
    def list_notifications(self, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]: ...

    def count_unread(self, user_id: int) -> int: ...

    def mark_read(self, notification_id: int, user_id: int) -> None: ...

    def mark_all_read(self, user_id: int) -> int: ...


class MySalaryStore(Protocol):
    def list_salaries(self, employee_id=None, period_year=None, period_month=None, status=None) -> List[Salary]: ...

    def get_salary(self, salary_id: int) -> Salary: ...

    def get_active_structure(self, employee_id: int, for_date: date) -> SalaryStructure: ...


class MyVacationStore(Protocol):
    def list_vacations(self, employee_id=None, status=None, year=None) -> List[Vacation]: ...

    def get_balance(self, employee_id: int, year: int) -> VacationBalance: ...


def current_employee(repo: EmployeeFinder, claims: Claims, log: RequestLogger) -> Employee:
    try:
        return repo.get_employee_by_user_id(claims.user_id)
    except NotFoundError:
        log.warning("employee not found", extra={"user_id": claims.user_id})
        raise HTTPException(status_code=404, detail="Employee profile not found")
    except Exception:
        log.exception("failed to get employee", extra={"user_id": claims.user_id})
        raise HTTPException(status_code=500, detail="Failed to retrieve employee")


@router.get("/profile", response_model=ProfileOut)
def get_profile(
    log: RequestLogger = Depends(op_log("my.profile")),
    claims: Claims = Depends(get_claims),
    repo: EmployeeFinder = Depends(get_cabinet_repo),
):
    employee = current_employee(repo, claims, log)
    contact = employee.contact
    return ProfileOut(
        employee_id=employee.id,
        contact_id=employee.contact_id,
        name=contact.name if contact else None,
        email=contact.email if contact else None,
        phone=contact.phone if contact else None,
        employee_number=employee.employee_number,
        hire_date=employee.hire_date,
        employment_type=employee.employment_type,
        employment_status=employee.employment_status,
        department_id=employee.department_id,
        position_id=employee.position_id,
        manager_id=employee.manager_id,
    )


@router.get("/notifications", response_model=MyNotificationsOut)
def get_my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    log: RequestLogger = Depends(op_log("my.notifications.list")),
    claims: Claims = Depends(get_claims),
    repo: MyNotificationStore = Depends(get_notification_repo),
):
    try:
        notifications = repo.list_notifications(claims.user_id, unread_only, limit)
    except Exception:
        log.exception("failed to get notifications", extra={"user_id": claims.user_id})
        raise HTTPException(status_code=500, detail="Failed to retrieve notifications")

    unread_count: Optional[int] = None
    try:
        unread_count = repo.count_unread(claims.user_id)
    except Exception:
        log.error("failed to count unread notifications", exc_info=True, extra={"user_id": claims.user_id})

    return MyNotificationsOut(notifications=notifications, unread_count=unread_count)


@router.post("/notifications/read-all")
def mark_all_notifications_read(
    log: RequestLogger = Depends(op_log("my.notifications.read_all")),
    claims: Claims = Depends(get_claims),
    repo: MyNotificationStore = Depends(get_notification_repo),
):
    try:
        repo.mark_all_read(claims.user_id)
    except Exception:
        log.exception("failed to mark notifications read", extra={"user_id": claims.user_id})
        raise HTTPException(status_code=500, detail="Failed to mark notifications as read")
    return ok()


@router.post("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    log: RequestLogger = Depends(op_log("my.notifications.read")),
    claims: Claims = Depends(get_claims),
    repo: MyNotificationStore = Depends(get_notification_repo),
):
    try:
        repo.mark_read(notification_id, claims.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found")
    except Exception:
        log.exception("failed to mark notification read", extra={"entity_id": notification_id})
        raise HTTPException(status_code=500, detail="Failed to mark notification as read")
    return ok()


@router.get("/salary", response_model=MySalaryOut)
def get_my_salary(
    year: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("my.salary")),
    claims: Claims = Depends(get_claims),
    cabinet: EmployeeFinder = Depends(get_cabinet_repo),
    repo: MySalaryStore = Depends(get_salary_repo),
):
    employee = current_employee(cabinet, claims, log)
    try:
        salaries = repo.list_salaries(employee.id, year)
    except Exception:
        log.exception("failed to get salaries", extra={"entity_id": employee.id})
        raise HTTPException(status_code=500, detail="Failed to retrieve salary")

    structure: Optional[SalaryStructure] = None
    try:
        structure = repo.get_active_structure(employee.id, date.today())
    except NotFoundError:
        pass
    except Exception:
        log.error("failed to get salary structure", exc_info=True, extra={"entity_id": employee.id})

    return MySalaryOut(structure=structure, salaries=salaries)


@router.get("/salary/{salary_id}", response_model=SalaryOut)
def get_my_payslip(
    salary_id: int,
    log: RequestLogger = Depends(op_log("my.salary.payslip")),
    claims: Claims = Depends(get_claims),
    cabinet: EmployeeFinder = Depends(get_cabinet_repo),
    repo: MySalaryStore = Depends(get_salary_repo),
):
    employee = current_employee(cabinet, claims, log)
    try:
        salary = repo.get_salary(salary_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Salary not found")
    except Exception:
        log.exception("failed to get salary", extra={"entity_id": salary_id})
        raise HTTPException(status_code=500, detail="Failed to retrieve salary")
    if salary.employee_id != employee.id:
        log.warning("payslip of another employee requested", extra={"entity_id": salary_id})
        raise HTTPException(status_code=403, detail="forbidden")
    return salary


@router.get("/vacations", response_model=List[VacationOut])
def get_my_vacations(
    year: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("my.vacations.list")),
    claims: Claims = Depends(get_claims),
    cabinet: EmployeeFinder = Depends(get_cabinet_repo),
    repo: MyVacationStore = Depends(get_vacation_repo),
):
    employee = current_employee(cabinet, claims, log)
    try:
        return repo.list_vacations(employee.id, None, year)
    except Exception:
        log.exception("failed to get vacations", extra={"entity_id": employee.id})
        raise HTTPException(status_code=500, detail="Failed to retrieve vacations")


@router.post("/vacations", status_code=201, response_model=IDResponse)
def add_my_vacation(
    payload: MyVacationCreate,
    log: RequestLogger = Depends(op_log("my.vacations.add")),
    claims: Claims = Depends(get_claims),
    cabinet: EmployeeFinder = Depends(get_cabinet_repo),
    repo: VacationRepository = Depends(get_vacation_repo),
):
    employee = current_employee(cabinet, claims, log)
    values = payload.model_dump()
    values["employee_id"] = employee.id
    return create_vacation(VacationService(repo, log), values, claims.user_id, log)


@router.post("/vacations/{vacation_id}/cancel")
def cancel_my_vacation(
    vacation_id: int,
    log: RequestLogger = Depends(op_log("my.vacations.cancel")),
    claims: Claims = Depends(get_claims),
    cabinet: EmployeeFinder = Depends(get_cabinet_repo),
    repo: VacationRepository = Depends(get_vacation_repo),
):
    """Отмена своей заявки; чужая заявка выглядит как несуществующая."""
    employee = current_employee(cabinet, claims, log)
    return cancel_vacation(VacationService(repo, log), vacation_id, log, employee_id=employee.id)


@router.get("/leave-balance", response_model=BalanceOut)
def get_my_leave_balance(
    year: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("my.leave_balance")),
    claims: Claims = Depends(get_claims),
    cabinet: EmployeeFinder = Depends(get_cabinet_repo),
    repo: MyVacationStore = Depends(get_vacation_repo),
):
    employee = current_employee(cabinet, claims, log)
    try:
        return repo.get_balance(employee.id, year or date.today().year)
    except Exception:
        log.exception("failed to get leave balance", extra={"entity_id": employee.id})
        raise HTTPException(status_code=500, detail="Failed to retrieve leave balance")


@router.get("/tasks", response_model=List[Task])
def get_my_tasks(
    log: RequestLogger = Depends(op_log("my.tasks")),
    claims: Claims = Depends(get_claims),
    repo: TaskFinder = Depends(get_cabinet_repo),
):
    """Заявки подчинённых, ожидающие решения текущего сотрудника."""
    employee = current_employee(repo, claims, log)
    try:
        tasks = repo.get_pending_tasks(employee.id)
    except Exception:
        log.exception("failed to get tasks", extra={"entity_id": employee.id})
        raise HTTPException(status_code=500, detail="Failed to retrieve tasks")
    log.info("tasks retrieved", extra={"entity_id": employee.id, "count": len(tasks)})
    return tasks
