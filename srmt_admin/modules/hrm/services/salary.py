"""
Расчёт заработной платы.

Пропорциональный оклад и надбавки по отработанным дням, сверхурочные по
полуторной ставке, налоги по ставкам Узбекистана. Все суммы округляются до
копеек половиной вверх (от нуля).
"""
import calendar
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence

from sqlalchemy import func

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import InvalidStatusError, NegativeNetAmountError, NotFoundError
from srmt_admin.modules.hrm.models import Employee, Salary, SalaryBonus, SalaryDeduction, SalaryStructure

logger = logging.getLogger(__name__)

ALLOWANCE_FIELDS = (
    "regional_allowance",
    "seniority_allowance",
    "qualification_allowance",
    "hazard_allowance",
    "night_shift_allowance",
)

OVERTIME_MULTIPLIER = 1.5
HOURS_PER_DAY = 8


@dataclass(frozen=True)
class TaxRates:
    ndfl: float = 0.12
    social_tax: float = 0.005
    pension_fund: float = 0.03
    health_insurance: float = 0.005
    trade_union: float = 0.01


DEFAULT_TAX_RATES = TaxRates()


def round2(value: float) -> float:
    """Округление до 0.01, половина от нуля (0.125 -> 0.13, -0.125 -> -0.13)."""
    return math.copysign(math.floor(abs(value) * 100 + 0.5) / 100, value)


def calculate_work_days(year: int, month: int) -> int:
    """Рабочие дни месяца: пн-сб, воскресенье выходной."""
    _, days_in_month = calendar.monthrange(year, month)
    return sum(
        1 for day in range(1, days_in_month + 1)
        if date(year, month, day).weekday() != calendar.SUNDAY
    )


def compute_payroll(
    structure: SalaryStructure,
    work_days: int,
    actual_days: int,
    overtime_hours: float = 0,
    bonuses: Sequence[float] = (),
    deductions: Sequence[float] = (),
    rates: TaxRates = DEFAULT_TAX_RATES,
) -> Dict[str, float]:
    """
    Суммы начисления по структуре оклада и табелю.

    Raises:
        NegativeNetAmountError: удержания больше начисленного
    """
    ratio = actual_days / work_days if work_days > 0 else 1.0

    result: Dict[str, float] = {"base_salary": round2(structure.base_salary * ratio)}
    for name in ALLOWANCE_FIELDS:
        result[name] = round2((getattr(structure, name) or 0) * ratio)

    overtime = 0.0
    if work_days > 0 and overtime_hours > 0:
        hourly_rate = structure.base_salary / (work_days * HOURS_PER_DAY)
        overtime = round2(hourly_rate * OVERTIME_MULTIPLIER * overtime_hours)
    result["overtime_amount"] = overtime
    result["bonus_amount"] = round2(sum(bonuses))

    gross = round2(
        result["base_salary"]
        + sum(result[name] for name in ALLOWANCE_FIELDS)
        + overtime
        + result["bonus_amount"]
    )
    result["gross_salary"] = gross

    result["ndfl"] = round2(gross * rates.ndfl)
    result["social_tax"] = round2(gross * rates.social_tax)
    result["pension_fund"] = round2(gross * rates.pension_fund)
    result["health_insurance"] = round2(gross * rates.health_insurance)
    result["trade_union"] = round2(gross * rates.trade_union)
    taxes = (
        result["ndfl"] + result["social_tax"] + result["pension_fund"]
        + result["health_insurance"] + result["trade_union"]
    )

    result["total_deductions"] = round2(taxes + sum(deductions))
    result["net_salary"] = round2(gross - result["total_deductions"])
    if result["net_salary"] < 0:
        raise NegativeNetAmountError(f"net salary is negative: {result['net_salary']}")
    return result


class SalaryRepository(SQLRepository):
    # --- Структуры ---

    def add_structure(self, values: dict) -> int:
        return self._add(SalaryStructure(**values)).id

    def list_structures(self, employee_id: Optional[int] = None) -> List[SalaryStructure]:
        query = self.db.query(SalaryStructure)
        if employee_id:
            query = query.filter(SalaryStructure.employee_id == employee_id)
        return query.order_by(SalaryStructure.effective_from.desc()).all()

    def get_active_structure(self, employee_id: int, for_date: date) -> SalaryStructure:
        """Структура, действующая на дату."""
        structure = (
            self.db.query(SalaryStructure)
            .filter(
                SalaryStructure.employee_id == employee_id,
                SalaryStructure.effective_from <= for_date,
                (SalaryStructure.effective_to.is_(None)) | (SalaryStructure.effective_to >= for_date),
            )
            .order_by(SalaryStructure.effective_from.desc())
            .first()
        )
        if structure is None:
            raise NotFoundError(f"salary structure employee_id={employee_id} date={for_date}")
        return structure

    # --- Начисления ---

    def add_salary(self, employee_id: int, period_year: int, period_month: int) -> int:
        obj = Salary(employee_id=employee_id, period_year=period_year, period_month=period_month, status="draft")
        return self._add(obj).id

    def get_salary(self, salary_id: int) -> Salary:
        return self._get(Salary, salary_id)

    def list_salaries(
        self,
        employee_id: Optional[int] = None,
        period_year: Optional[int] = None,
        period_month: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Salary]:
        query = self.db.query(Salary)
        if employee_id:
            query = query.filter(Salary.employee_id == employee_id)
        if period_year:
            query = query.filter(Salary.period_year == period_year)
        if period_month:
            query = query.filter(Salary.period_month == period_month)
        if status:
            query = query.filter(Salary.status == status)
        return query.order_by(Salary.period_year.desc(), Salary.period_month.desc(), Salary.id.desc()).all()

    def salary_exists(self, employee_id: int, period_year: int, period_month: int) -> bool:
        count = (
            self.db.query(func.count(Salary.id))
            .filter(
                Salary.employee_id == employee_id,
                Salary.period_year == period_year,
                Salary.period_month == period_month,
            )
            .scalar()
        )
        return count > 0

    def delete_salary(self, salary_id: int) -> None:
        self._delete(Salary, salary_id)

    def save_calculation(
        self,
        salary: Salary,
        amounts: Dict[str, float],
        work_days: int,
        actual_days: int,
        overtime_hours: float,
        bonuses: Sequence[dict] = (),
        deductions: Sequence[dict] = (),
    ) -> None:
        for name, value in amounts.items():
            setattr(salary, name, value)
        salary.work_days = work_days
        salary.actual_days = actual_days
        salary.overtime_hours = overtime_hours
        salary.status = "calculated"
        salary.bonuses = [SalaryBonus(**b) for b in bonuses]
        salary.deductions = [SalaryDeduction(**d) for d in deductions]
        self._commit()

    def set_salary_status(self, salary: Salary, status: str, approved_by: Optional[int] = None) -> None:
        now = datetime.now(timezone.utc)
        salary.status = status
        if status == "approved":
            salary.approved_by = approved_by
            salary.approved_at = now
        elif status == "paid":
            salary.paid_at = now
        self._commit()

    def get_active_employees_by_department(self, department_id: int) -> List[int]:
        rows = (
            self.db.query(Employee.id)
            .filter(Employee.department_id == department_id, Employee.employment_status == "active")
            .order_by(Employee.id)
            .all()
        )
        return [row[0] for row in rows]


class SalaryStore(Protocol):
    def get_salary(self, salary_id: int) -> Salary: ...

    def get_active_structure(self, employee_id: int, for_date: date) -> SalaryStructure: ...

    def save_calculation(self, salary, amounts, work_days, actual_days, overtime_hours, bonuses=(), deductions=()) -> None: ...

    def set_salary_status(self, salary: Salary, status: str, approved_by: Optional[int] = None) -> None: ...

    def get_active_employees_by_department(self, department_id: int) -> List[int]: ...

    def salary_exists(self, employee_id: int, period_year: int, period_month: int) -> bool: ...

    def add_salary(self, employee_id: int, period_year: int, period_month: int) -> int: ...


class SalaryService:
    """Машина статусов начисления: draft -> calculated -> approved -> paid."""

    def __init__(self, repo: SalaryStore, log: Optional[logging.LoggerAdapter] = None):
        self.repo = repo
        self.log = log or logger

    def calculate(
        self,
        salary_id: int,
        work_days: Optional[int] = None,
        actual_days: Optional[int] = None,
        overtime_hours: float = 0,
        bonuses: Sequence[dict] = (),
        deductions: Sequence[dict] = (),
    ) -> Salary:
        salary = self.repo.get_salary(salary_id)
        if salary.status != "draft":
            raise InvalidStatusError(f"salary {salary_id} is {salary.status}")

        period_start = date(salary.period_year, salary.period_month, 1)
        structure = self.repo.get_active_structure(salary.employee_id, period_start)

        if work_days is None:
            work_days = calculate_work_days(salary.period_year, salary.period_month)
        if actual_days is None:
            actual_days = work_days

        amounts = compute_payroll(
            structure,
            work_days,
            actual_days,
            overtime_hours,
            [b["amount"] for b in bonuses],
            [d["amount"] for d in deductions],
        )
        self.repo.save_calculation(salary, amounts, work_days, actual_days, overtime_hours, bonuses, deductions)
        return salary

    def approve(self, salary_id: int, approved_by: int) -> None:
        salary = self.repo.get_salary(salary_id)
        if salary.status != "calculated":
            raise InvalidStatusError(f"salary {salary_id} is {salary.status}")
        self.repo.set_salary_status(salary, "approved", approved_by)

    def mark_paid(self, salary_id: int) -> None:
        salary = self.repo.get_salary(salary_id)
        if salary.status != "approved":
            raise InvalidStatusError(f"salary {salary_id} is {salary.status}")
        self.repo.set_salary_status(salary, "paid")

    def bulk_calculate(self, department_id: int, period_year: int, period_month: int) -> int:
        """
        Черновик и расчёт с полной явкой для всех активных сотрудников отдела.
        Существующие начисления за период и ошибки по отдельным сотрудникам
        пропускаются. Возвращает число рассчитанных начислений.
        """
        employee_ids = self.repo.get_active_employees_by_department(department_id)
        calculated = 0
        for employee_id in employee_ids:
            try:
                if self.repo.salary_exists(employee_id, period_year, period_month):
                    continue
                salary_id = self.repo.add_salary(employee_id, period_year, period_month)
                self.calculate(salary_id)
            except Exception:
                self.log.error(
                    "failed to calculate salary",
                    exc_info=True,
                    extra={"entity_id": employee_id},
                )
                continue
            calculated += 1
        return calculated
