"""
Отпуска: заявки, согласование и баланс дней.

Рабочая неделя пн-сб, поэтому в длительность отпуска не входят только
воскресенья. Баланс ведётся для типов из BALANCE_REQUIRED_TYPES: при создании
заявки дни резервируются в pending, при согласовании переходят в used, при
отклонении или отмене возвращаются.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional, Protocol

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import (
    BlockedPeriodError,
    InsufficientBalanceError,
    InvalidDateRangeError,
    InvalidStatusError,
    NotFoundError,
    StartDateInPastError,
    VacationOverlapError,
)
from srmt_admin.modules.hrm.models import Employee, Vacation, VacationBalance, VacationBlockedPeriod

logger = logging.getLogger(__name__)

BALANCE_REQUIRED_TYPES = frozenset({"annual", "additional", "study", "comp"})

# Заявки в этих статусах занимают даты
_ACTIVE_STATUSES = ("draft", "pending", "approved")
_CANCELLABLE_STATUSES = ("draft", "pending", "approved")

_SUNDAY = 6


def calculate_business_days(start: date, end: date) -> int:
    """Дни с start по end включительно без воскресений."""
    days = 0
    current = start
    while current <= end:
        if current.weekday() != _SUNDAY:
            days += 1
        current += timedelta(days=1)
    return days


class VacationRepository(SQLRepository):
    def add_vacation(self, values: dict, days_count: int, created_by: Optional[int]) -> int:
        obj = Vacation(**values, days_count=days_count, status="pending", created_by=created_by)
        return self._add(obj).id

    def get_vacation(self, vacation_id: int) -> Vacation:
        return self._get(Vacation, vacation_id)

    def list_vacations(
        self,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[Vacation]:
        query = self.db.query(Vacation)
        if employee_id:
            query = query.filter(Vacation.employee_id == employee_id)
        if status:
            query = query.filter(Vacation.status == status)
        if year:
            query = query.filter(
                Vacation.start_date >= date(year, 1, 1), Vacation.start_date <= date(year, 12, 31)
            )
        return query.order_by(Vacation.start_date.desc(), Vacation.id.desc()).all()

    def set_vacation_status(
        self,
        vacation: Vacation,
        status: str,
        processed_by: Optional[int] = None,
        rejection_reason: Optional[str] = None,
    ) -> None:
        vacation.status = status
        if status == "approved":
            vacation.approved_by = processed_by
            vacation.approved_at = datetime.now(timezone.utc)
        elif status == "rejected":
            vacation.rejection_reason = rejection_reason
        self._commit()

    def has_overlap(self, employee_id: int, start: date, end: date, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Vacation.id).filter(
            Vacation.employee_id == employee_id,
            Vacation.status.in_(_ACTIVE_STATUSES),
            Vacation.start_date <= end,
            Vacation.end_date >= start,
        )
        if exclude_id is not None:
            query = query.filter(Vacation.id != exclude_id)
        return query.first() is not None

    def is_blocked(self, department_id: int, start: date, end: date) -> bool:
        row = (
            self.db.query(VacationBlockedPeriod.id)
            .filter(
                VacationBlockedPeriod.department_id == department_id,
                VacationBlockedPeriod.start_date <= end,
                VacationBlockedPeriod.end_date >= start,
            )
            .first()
        )
        return row is not None

    def add_blocked_period(self, values: dict) -> int:
        return self._add(VacationBlockedPeriod(**values)).id

    def list_blocked_periods(self, department_id: Optional[int] = None) -> List[VacationBlockedPeriod]:
        query = self.db.query(VacationBlockedPeriod)
        if department_id:
            query = query.filter(VacationBlockedPeriod.department_id == department_id)
        return query.order_by(VacationBlockedPeriod.start_date).all()

    def get_department_id(self, employee_id: int) -> Optional[int]:
        return self._get(Employee, employee_id).department_id

    def get_balance(self, employee_id: int, year: int) -> VacationBalance:
        """Баланс за год; если строки нет, возвращается нулевой (не сохранённый)."""
        balance = self._find_balance(employee_id, year)
        if balance is None:
            return VacationBalance(employee_id=employee_id, year=year, total_days=0, used_days=0, pending_days=0)
        return balance

    def set_balance(self, employee_id: int, year: int, total_days: int) -> int:
        balance = self._find_balance(employee_id, year)
        if balance is None:
            balance = VacationBalance(employee_id=employee_id, year=year, total_days=total_days, used_days=0, pending_days=0)
            return self._add(balance).id
        balance.total_days = total_days
        self._commit()
        return balance.id

    def adjust_balance(self, employee_id: int, year: int, pending_delta: int = 0, used_delta: int = 0) -> None:
        balance = self._find_balance(employee_id, year)
        if balance is None:
            raise NotFoundError(f"vacation balance employee_id={employee_id} year={year}")
        balance.pending_days = max(0, balance.pending_days + pending_delta)
        balance.used_days = max(0, balance.used_days + used_delta)
        self._commit()

    def _find_balance(self, employee_id: int, year: int) -> Optional[VacationBalance]:
        return (
            self.db.query(VacationBalance)
            .filter(VacationBalance.employee_id == employee_id, VacationBalance.year == year)
            .first()
        )


class VacationStore(Protocol):
    def add_vacation(self, values: dict, days_count: int, created_by: Optional[int]) -> int: ...

    def get_vacation(self, vacation_id: int) -> Vacation: ...

    def set_vacation_status(self, vacation, status, processed_by=None, rejection_reason=None) -> None: ...

    def has_overlap(self, employee_id: int, start: date, end: date, exclude_id: Optional[int] = None) -> bool: ...

    def is_blocked(self, department_id: int, start: date, end: date) -> bool: ...

    def get_department_id(self, employee_id: int) -> Optional[int]: ...

    def get_balance(self, employee_id: int, year: int) -> VacationBalance: ...

    def adjust_balance(self, employee_id: int, year: int, pending_delta: int = 0, used_delta: int = 0) -> None: ...


class VacationService:
    def __init__(
        self,
        repo: VacationStore,
        log: Optional[logging.LoggerAdapter] = None,
        today: Callable[[], date] = date.today,
    ):
        self.repo = repo
        self.log = log or logger
        self.today = today

    def create(self, values: dict, created_by: Optional[int]) -> int:
        """
        Создаёт заявку в статусе pending.

        Raises:
            StartDateInPastError, InvalidDateRangeError, InsufficientBalanceError,
            VacationOverlapError, BlockedPeriodError
        """
        employee_id = values["employee_id"]
        start, end = values["start_date"], values["end_date"]
        if start < self.today():
            raise StartDateInPastError(str(start))
        if end < start:
            raise InvalidDateRangeError(f"{start} > {end}")

        days = calculate_business_days(start, end)
        needs_balance = values["vacation_type"] in BALANCE_REQUIRED_TYPES
        if needs_balance:
            balance = self.repo.get_balance(employee_id, start.year)
            if balance.remaining_days < days:
                raise InsufficientBalanceError(f"remaining {balance.remaining_days}, requested {days}")

        if self.repo.has_overlap(employee_id, start, end):
            raise VacationOverlapError(f"employee {employee_id} {start}..{end}")

        department_id = self.repo.get_department_id(employee_id)
        if department_id and self.repo.is_blocked(department_id, start, end):
            raise BlockedPeriodError(f"department {department_id} {start}..{end}")

        vacation_id = self.repo.add_vacation(values, days, created_by)

        if needs_balance:
            self._adjust(vacation_id, employee_id, start.year, "failed to update balance pending", pending_delta=days)
        return vacation_id

    def approve(self, vacation_id: int, approved_by: int) -> None:
        vacation = self.repo.get_vacation(vacation_id)
        if vacation.status != "pending":
            raise InvalidStatusError(f"vacation {vacation_id} is {vacation.status}")
        self.repo.set_vacation_status(vacation, "approved", approved_by)
        if vacation.vacation_type in BALANCE_REQUIRED_TYPES:
            self._adjust(
                vacation_id, vacation.employee_id, vacation.start_date.year,
                "failed to update balance on approve",
                pending_delta=-vacation.days_count, used_delta=vacation.days_count,
            )

    def reject(self, vacation_id: int, rejected_by: int, reason: str) -> None:
        vacation = self.repo.get_vacation(vacation_id)
        if vacation.status != "pending":
            raise InvalidStatusError(f"vacation {vacation_id} is {vacation.status}")
        self.repo.set_vacation_status(vacation, "rejected", rejected_by, reason)
        if vacation.vacation_type in BALANCE_REQUIRED_TYPES:
            self._adjust(
                vacation_id, vacation.employee_id, vacation.start_date.year,
                "failed to update balance on reject",
                pending_delta=-vacation.days_count,
            )

    def cancel(self, vacation_id: int, employee_id: Optional[int] = None) -> None:
        """
        Отмена заявки в статусе draft, pending или approved.
        С employee_id отменить можно только свою заявку (чужая -> NotFoundError).
        """
        vacation = self.repo.get_vacation(vacation_id)
        if employee_id is not None and vacation.employee_id != employee_id:
            raise NotFoundError(f"vacation id={vacation_id}")
        previous = vacation.status
        if previous not in _CANCELLABLE_STATUSES:
            raise InvalidStatusError(f"vacation {vacation_id} is {previous}")
        self.repo.set_vacation_status(vacation, "cancelled")

        if vacation.vacation_type not in BALANCE_REQUIRED_TYPES:
            return
        year = vacation.start_date.year
        if previous == "pending":
            self._adjust(
                vacation_id, vacation.employee_id, year,
                "failed to update balance on cancel pending",
                pending_delta=-vacation.days_count,
            )
        elif previous == "approved":
            self._adjust(
                vacation_id, vacation.employee_id, year,
                "failed to update balance on cancel approved",
                used_delta=-vacation.days_count,
            )

    def _adjust(self, vacation_id: int, employee_id: int, year: int, message: str, **deltas) -> None:
        # Статус заявки уже сохранён: ошибка учёта баланса только логируется
        try:
            self.repo.adjust_balance(employee_id, year, **deltas)
        except Exception:
            self.log.error(message, exc_info=True, extra={"entity_id": vacation_id})
