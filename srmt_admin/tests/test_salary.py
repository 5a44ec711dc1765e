"""
Тесты расчёта заработной платы
"""
import pytest

from srmt_admin.core.errors import InvalidStatusError, NegativeNetAmountError, NotFoundError
from srmt_admin.modules.hrm.dependencies import get_salary_repo
from srmt_admin.modules.hrm.models import Salary, SalaryStructure
from srmt_admin.modules.hrm.services.salary import (
    SalaryService,
    calculate_work_days,
    compute_payroll,
    round2,
)


def _structure(base=5_000_000, **allowances):
    return SalaryStructure(employee_id=1, base_salary=base, **allowances)


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.005, 1.0),
        (0.125, 0.13),
        (-0.125, -0.13),
        (2.344, 2.34),
        (100.0, 100.0),
        (1234567.891, 1234567.89),
    ],
)
def test_round2_half_away_from_zero(value, expected):
    assert round2(value) == expected


@pytest.mark.parametrize(
    "year, month, expected",
    [(2024, 1, 27), (2024, 2, 25), (2024, 9, 25)],
)
def test_work_days_skip_sundays(year, month, expected):
    assert calculate_work_days(year, month) == expected


def test_full_month_taxes():
    result = compute_payroll(_structure(regional_allowance=500_000), work_days=26, actual_days=26)

    assert result["base_salary"] == 5_000_000
    assert result["regional_allowance"] == 500_000
    assert result["gross_salary"] == 5_500_000
    assert result["ndfl"] == 660_000
    assert result["social_tax"] == 27_500
    assert result["pension_fund"] == 165_000
    assert result["health_insurance"] == 27_500
    assert result["trade_union"] == 55_000
    assert result["total_deductions"] == 935_000
    assert result["net_salary"] == 4_565_000


def test_proportional_to_actual_days():
    result = compute_payroll(_structure(regional_allowance=500_000), work_days=26, actual_days=13)

    assert result["base_salary"] == 2_500_000
    assert result["regional_allowance"] == 250_000
    assert result["gross_salary"] == 2_750_000


def test_overtime_rate():
    # 5 200 000 / (26 * 8) = 25 000 в час, полуторная ставка
    result = compute_payroll(_structure(base=5_200_000), work_days=26, actual_days=26, overtime_hours=4)

    assert result["overtime_amount"] == 150_000
    assert result["gross_salary"] == 5_350_000


def test_bonuses_and_deductions():
    result = compute_payroll(
        _structure(regional_allowance=500_000),
        work_days=26,
        actual_days=26,
        bonuses=[100_000],
        deductions=[50_000],
    )

    assert result["bonus_amount"] == 100_000
    assert result["gross_salary"] == 5_600_000
    assert result["total_deductions"] == 1_002_000
    assert result["net_salary"] == 4_598_000


def test_negative_net_amount():
    with pytest.raises(NegativeNetAmountError):
        compute_payroll(_structure(base=1_000_000), work_days=26, actual_days=26, deductions=[2_000_000])


class FakeSalaryRepo:
    def __init__(self, structures=None, department=()):
        self.structures = structures or {}
        self.department = list(department)
        self.salaries = {}
        self.saved = []

    def add_salary(self, employee_id, period_year, period_month):
        salary_id = len(self.salaries) + 1
        self.salaries[salary_id] = Salary(
            id=salary_id,
            employee_id=employee_id,
            period_year=period_year,
            period_month=period_month,
            status="draft",
        )
        return salary_id

    def get_salary(self, salary_id):
        if salary_id not in self.salaries:
            raise NotFoundError(f"salaries id={salary_id}")
        return self.salaries[salary_id]

    def get_active_structure(self, employee_id, for_date):
        if employee_id not in self.structures:
            raise NotFoundError(f"structure employee_id={employee_id}")
        return self.structures[employee_id]

    def save_calculation(self, salary, amounts, work_days, actual_days, overtime_hours, bonuses=(), deductions=()):
        for name, value in amounts.items():
            setattr(salary, name, value)
        salary.work_days = work_days
        salary.actual_days = actual_days
        salary.overtime_hours = overtime_hours
        salary.status = "calculated"
        self.saved.append(salary.id)

    def set_salary_status(self, salary, status, approved_by=None):
        salary.status = status
        salary.approved_by = approved_by

    def get_active_employees_by_department(self, department_id):
        return self.department

    def salary_exists(self, employee_id, period_year, period_month):
        return any(
            (s.employee_id, s.period_year, s.period_month) == (employee_id, period_year, period_month)
            for s in self.salaries.values()
        )


def test_calculate_defaults_to_month_work_days():
    repo = FakeSalaryRepo(structures={1: _structure()})
    salary_id = repo.add_salary(1, 2024, 2)

    salary = SalaryService(repo).calculate(salary_id)

    assert salary.status == "calculated"
    assert salary.work_days == 25
    assert salary.actual_days == 25
    assert salary.base_salary == 5_000_000


def test_status_flow():
    repo = FakeSalaryRepo(structures={1: _structure()})
    service = SalaryService(repo)
    salary_id = repo.add_salary(1, 2024, 3)

    with pytest.raises(InvalidStatusError):
        service.approve(salary_id, approved_by=9)
    service.calculate(salary_id)
    with pytest.raises(InvalidStatusError):
        service.calculate(salary_id)
    with pytest.raises(InvalidStatusError):
        service.mark_paid(salary_id)
    service.approve(salary_id, approved_by=9)
    service.mark_paid(salary_id)

    assert repo.salaries[salary_id].status == "paid"


def test_bulk_calculate_skips_existing_and_failures():
    # У сотрудника 3 нет структуры оклада, у сотрудника 2 уже есть начисление
    repo = FakeSalaryRepo(structures={1: _structure(), 2: _structure()}, department=[1, 2, 3])
    repo.add_salary(2, 2024, 5)

    count = SalaryService(repo).bulk_calculate(department_id=7, period_year=2024, period_month=5)

    assert count == 1
    assert repo.saved == [2]


def test_calculate_route_maps_errors(client, override, auth_headers):
    repo = FakeSalaryRepo(structures={1: _structure(base=100_000)})
    override(get_salary_repo, repo)
    salary_id = repo.add_salary(1, 2024, 4)
    url = f"/api/v1/hrm/salary/{salary_id}/calculate"
    hr = auth_headers("hr")

    response = client.post(url, json={"deductions": [{"deduction_type": "fine", "amount": 500_000}]}, headers=hr)
    assert response.status_code == 400

    response = client.post(url, json={}, headers=hr)
    assert response.status_code == 200
    assert response.json()["status"] == "calculated"

    response = client.post(url, json={}, headers=hr)
    assert response.status_code == 409

    response = client.post("/api/v1/hrm/salary/999/calculate", json={}, headers=hr)
    assert response.status_code == 404
