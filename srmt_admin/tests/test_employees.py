"""
Тесты роутов сотрудников, контактов и конверта ошибок валидации
"""
from datetime import date

import pytest

from srmt_admin.core.errors import (
    ForeignKeyViolationError,
    InvalidStatusError,
    NotFoundError,
    UniqueViolationError,
)
from srmt_admin.modules.hrm.dependencies import get_contact_repo, get_employee_repo
from srmt_admin.modules.hrm.models import Contact
from srmt_admin.modules.hrm.services.contacts import ContactRepository
from srmt_admin.modules.hrm.services.employees import EmployeeFilters, EmployeeRepository

EMPLOYEES = "/api/v1/hrm/employees/"

VALID_EMPLOYEE = {"contact_id": 1, "hire_date": "2024-01-15", "employment_type": "full_time"}


class FakeEmployeeRepo:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def _call(self, name, *args):
        self.calls.append(name)
        if self.error:
            raise self.error

    def add_employee(self, values):
        self._call("add_employee", values)
        return 42

    def get_employee(self, employee_id):
        self._call("get_employee", employee_id)

    def update_employee(self, employee_id, values):
        self._call("update_employee", employee_id, values)

    def delete_employee(self, employee_id):
        self._call("delete_employee", employee_id)

    def terminate_employee(self, employee_id, termination_date, reason):
        self._call("terminate_employee", employee_id, termination_date, reason)

    def list_employees(self, filters):
        self._call("list_employees", filters)
        return []


@pytest.fixture
def hr(auth_headers):
    return auth_headers("hr")


def test_add_employee(client, override, hr):
    repo = FakeEmployeeRepo()
    override(get_employee_repo, repo)

    response = client.post(EMPLOYEES, json=VALID_EMPLOYEE, headers=hr)

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 42}


def test_add_employee_invalid_json_makes_no_repository_call(client, override, hr):
    repo = FakeEmployeeRepo()
    override(get_employee_repo, repo)

    response = client.post(
        EMPLOYEES, content=b'{"contact_id": ', headers={**hr, "Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"status": 400, "error": "Invalid request format"}
    assert repo.calls == []


def test_add_employee_validation_lists_fields(client, override, hr):
    repo = FakeEmployeeRepo()
    override(get_employee_repo, repo)

    response = client.post(EMPLOYEES, json={"contact_id": 1, "employment_type": "freelance"}, headers=hr)

    body = response.json()
    assert response.status_code == 400
    assert "field 'hire_date' is required" in body["errors"]
    assert "field 'employment_type' is not valid" in body["errors"]
    assert "hire_date" in body["error"]
    assert repo.calls == []


@pytest.mark.parametrize(
    "error, status_code",
    [
        (ForeignKeyViolationError("contact"), 400),
        (UniqueViolationError("contact_id"), 409),
        (RuntimeError("connection reset"), 500),
    ],
)
def test_add_employee_storage_errors(client, override, hr, error, status_code):
    override(get_employee_repo, FakeEmployeeRepo(error=error))

    response = client.post(EMPLOYEES, json=VALID_EMPLOYEE, headers=hr)

    assert response.status_code == status_code
    assert "connection reset" not in response.text


def test_get_employee_not_found(client, override, hr):
    override(get_employee_repo, FakeEmployeeRepo(error=NotFoundError("employees id=5")))

    response = client.get(f"{EMPLOYEES}5", headers=hr)

    assert response.status_code == 404
    assert response.json() == {"status": 404, "error": "Employee not found"}


def test_terminate_already_terminated(client, override, hr):
    override(get_employee_repo, FakeEmployeeRepo(error=InvalidStatusError("terminated")))

    response = client.post(
        f"{EMPLOYEES}5/terminate", json={"termination_date": "2024-06-01", "reason": "по собственному"}, headers=hr
    )

    assert response.status_code == 409


def test_delete_employee(client, override, hr):
    repo = FakeEmployeeRepo()
    override(get_employee_repo, repo)

    response = client.delete(f"{EMPLOYEES}5", headers=hr)

    assert response.status_code == 204
    assert repo.calls == ["delete_employee"]


def test_employees_require_token(client, override):
    repo = FakeEmployeeRepo()
    override(get_employee_repo, repo)

    response = client.get(EMPLOYEES)

    assert response.status_code == 401
    assert repo.calls == []


def test_employees_forbidden_without_hr_role(client, override, auth_headers):
    repo = FakeEmployeeRepo()
    override(get_employee_repo, repo)

    response = client.get(EMPLOYEES, headers=auth_headers("sc"))

    assert response.status_code == 403
    assert repo.calls == []


def test_admin_passes_role_check(client, override, auth_headers):
    override(get_employee_repo, FakeEmployeeRepo())

    response = client.get(EMPLOYEES, headers=auth_headers("admin"))

    assert response.status_code == 200
    assert response.json() == []


def test_delete_contact_not_found(client, override, hr):
    class Contacts:
        def delete_contact(self, contact_id):
            raise NotFoundError("contacts")

    override(get_contact_repo, Contacts())

    response = client.delete("/api/v1/hrm/contacts/3", headers=hr)

    assert response.status_code == 404


# --- Репозиторий на SQLite ---


def _contact(db, name):
    return ContactRepository(db).add_contact({"name": name, "email": None, "phone": None})


def test_repository_employee_lifecycle(db_session):
    repo = EmployeeRepository(db_session)
    contact_id = _contact(db_session, "Каримов Алишер")

    employee_id = repo.add_employee(
        {"contact_id": contact_id, "hire_date": date(2024, 1, 15), "employment_type": "full_time"}
    )
    assert repo.get_employee(employee_id).employment_status == "active"

    found = repo.list_employees(EmployeeFilters(search="Алишер"))
    assert [e.id for e in found] == [employee_id]

    repo.terminate_employee(employee_id, date(2024, 6, 1), "сокращение")
    assert repo.get_employee(employee_id).employment_status == "terminated"
    with pytest.raises(InvalidStatusError):
        repo.terminate_employee(employee_id, date(2024, 6, 2), "повторно")


def test_repository_translates_integrity_errors(db_session):
    repo = EmployeeRepository(db_session)
    with pytest.raises(ForeignKeyViolationError):
        repo.add_employee({"contact_id": 999, "hire_date": date(2024, 1, 1), "employment_type": "contract"})

    contact_id = _contact(db_session, "Юсупова Нилуфар")
    repo.add_employee({"contact_id": contact_id, "hire_date": date(2024, 1, 1), "employment_type": "contract"})
    with pytest.raises(UniqueViolationError):
        repo.add_employee({"contact_id": contact_id, "hire_date": date(2024, 2, 1), "employment_type": "contract"})

    with pytest.raises(NotFoundError):
        repo.get_employee(12345)
    assert db_session.query(Contact).count() == 1
