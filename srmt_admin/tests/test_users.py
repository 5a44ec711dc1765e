"""
Тесты администрирования пользователей и ролей
"""
from datetime import date

import pytest

from srmt_admin.core.auth import verify_password
from srmt_admin.core.errors import (
    ContactAlreadyLinkedError,
    ForeignKeyViolationError,
    NotFoundError,
    UniqueViolationError,
)
from srmt_admin.modules.hrm.dependencies import get_user_repo
from srmt_admin.modules.hrm.models import Role, User
from srmt_admin.modules.hrm.services.contacts import ContactRepository
from srmt_admin.modules.hrm.services.employees import EmployeeRepository
from srmt_admin.modules.hrm.services.orgstructure import OrgStructureRepository
from srmt_admin.modules.hrm.services.users import UserRepository, ensure_admin
from srmt_admin.modules.telemetry.services.repository import ReservoirRepository

USERS = "/api/v1/users"
NEW_USER = {"login": "operator", "password": "s3cret-pass", "role_ids": [2]}


class FakeUserRepo:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def _call(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if self.error:
            raise self.error

    def add_user(self, name, pass_hash, role_ids, contact_id=None, contact=None):
        self._call("add_user", name, pass_hash, role_ids, contact_id=contact_id, contact=contact)
        return 12

    def get_user(self, user_id):
        self._call("get_user", user_id)
        user = User(id=user_id, name="operator", is_active=True, contact_id=None)
        user.roles = [Role(id=2, name="hr")]
        return user

    def update_user(self, user_id, values, role_ids=None):
        self._call("update_user", user_id, values, role_ids)

    def delete_user(self, user_id):
        self._call("delete_user", user_id)

    def assign_role(self, user_id, role_id):
        self._call("assign_role", user_id, role_id)

    def add_role(self, values):
        self._call("add_role", values)
        return 5


@pytest.fixture
def admin(auth_headers):
    return auth_headers("admin")


def test_add_user_with_new_contact(client, override, admin):
    repo = FakeUserRepo()
    override(get_user_repo, repo)

    response = client.post(USERS, json={**NEW_USER, "contact": {"name": "Каримов А."}}, headers=admin)

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 12}
    _, args, kwargs = repo.calls[0]
    assert args[0] == "operator"
    assert verify_password("s3cret-pass", args[1])
    assert kwargs["contact"]["name"] == "Каримов А."
    assert kwargs["contact_id"] is None


@pytest.mark.parametrize("extra", [{}, {"contact_id": 3, "contact": {"name": "Каримов А."}}])
def test_add_user_needs_exactly_one_contact(client, override, admin, extra):
    repo = FakeUserRepo()
    override(get_user_repo, repo)

    response = client.post(USERS, json={**NEW_USER, **extra}, headers=admin)

    assert response.status_code == 400
    assert response.json()["error"] == "Must provide either 'contact_id' or 'contact' object, but not both"
    assert repo.calls == []


def test_add_user_short_password(client, override, admin):
    repo = FakeUserRepo()
    override(get_user_repo, repo)

    response = client.post(USERS, json={**NEW_USER, "password": "short", "contact_id": 3}, headers=admin)

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'password' is too short"]


@pytest.mark.parametrize(
    "error, status, detail",
    [
        (ContactAlreadyLinkedError("contact id=3"), 409, "This contact is already linked to a user"),
        (UniqueViolationError("users.name"), 409, "Login already exists"),
        (NotFoundError("contacts id=3"), 400, "Contact not found"),
        (ForeignKeyViolationError("roles"), 400, "One or more role IDs are invalid"),
    ],
)
def test_add_user_errors(client, override, admin, error, status, detail):
    override(get_user_repo, FakeUserRepo(error=error))

    response = client.post(USERS, json={**NEW_USER, "contact_id": 3}, headers=admin)

    assert response.status_code == status
    assert response.json()["error"] == detail


def test_add_user_requires_admin(client, override, auth_headers):
    repo = FakeUserRepo()
    override(get_user_repo, repo)

    response = client.post(USERS, json={**NEW_USER, "contact_id": 3}, headers=auth_headers("hr"))

    assert response.status_code == 403
    assert repo.calls == []


def test_edit_user_hashes_new_password(client, override, admin):
    repo = FakeUserRepo()
    override(get_user_repo, repo)

    response = client.patch(f"{USERS}/12", json={"login": "operator2", "password": "new-password"}, headers=admin)

    assert response.status_code == 200
    _, (user_id, values, role_ids), _ = repo.calls[0]
    assert user_id == 12
    assert values["name"] == "operator2"
    assert verify_password("new-password", values["pass_hash"])
    assert "password" not in values
    assert role_ids is None


def test_edit_missing_user(client, override, admin):
    override(get_user_repo, FakeUserRepo(error=NotFoundError("users id=12")))

    response = client.patch(f"{USERS}/12", json={"is_active": False}, headers=admin)

    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_delete_referenced_user(client, override, admin):
    override(get_user_repo, FakeUserRepo(error=ForeignKeyViolationError("employees")))

    response = client.delete(f"{USERS}/12", headers=admin)

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete user: it is referenced by other records"


def test_get_user(client, override, admin):
    override(get_user_repo, FakeUserRepo())

    response = client.get(f"{USERS}/12", headers=admin)

    assert response.status_code == 200
    assert response.json()["roles"] == [{"id": 2, "name": "hr", "description": None}]


def test_assign_role_unknown(client, override, admin):
    override(get_user_repo, FakeUserRepo(error=NotFoundError("roles id=9")))

    response = client.post(f"{USERS}/12/roles", json={"role_id": 9}, headers=admin)

    assert response.status_code == 404


def test_add_role(client, override, admin):
    repo = FakeUserRepo()
    override(get_user_repo, repo)

    response = client.post("/api/v1/roles", json={"name": "security", "description": "Охрана"}, headers=admin)

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 5}


# --- Репозиторий на SQLite ---


def _roles(db_session, *names):
    repo = UserRepository(db_session)
    return [repo.add_role({"name": name}) for name in names]


def test_repository_add_user_links_contact_once(db_session):
    hr_role, sc_role = _roles(db_session, "hr", "sc")
    repo = UserRepository(db_session)
    contact_id = ContactRepository(db_session).add_contact({"name": "Юсупова Д."})

    user_id = repo.add_user("yusupova", "hash", [hr_role, sc_role], contact_id=contact_id)

    assert sorted(repo.get_user(user_id).role_names()) == ["hr", "sc"]
    with pytest.raises(ContactAlreadyLinkedError):
        repo.add_user("other", "hash", [hr_role], contact_id=contact_id)
    with pytest.raises(NotFoundError):
        repo.add_user("other", "hash", [hr_role], contact_id=999)
    with pytest.raises(ForeignKeyViolationError):
        repo.add_user("other", "hash", [hr_role, 999], contact={"name": "Новый"})


def test_repository_duplicate_login_keeps_no_contact(db_session):
    (hr_role,) = _roles(db_session, "hr")
    repo = UserRepository(db_session)
    repo.add_user("operator", "hash", [hr_role], contact={"name": "Первый"})

    with pytest.raises(UniqueViolationError):
        repo.add_user("operator", "hash", [hr_role], contact={"name": "Второй"})

    assert [c.name for c in ContactRepository(db_session).list_contacts()] == ["Первый"]


def test_repository_update_and_role_changes(db_session):
    hr_role, sc_role = _roles(db_session, "hr", "sc")
    repo = UserRepository(db_session)
    user_id = repo.add_user("operator", "hash", [hr_role], contact={"name": "Оператор"})

    repo.update_user(user_id, {"is_active": False}, role_ids=[sc_role])
    user = repo.get_user(user_id)
    assert user.is_active is False
    assert user.role_names() == ["sc"]

    repo.assign_role(user_id, hr_role)
    repo.assign_role(user_id, hr_role)
    assert sorted(repo.get_user(user_id).role_names()) == ["hr", "sc"]

    repo.revoke_role(user_id, sc_role)
    with pytest.raises(NotFoundError):
        repo.revoke_role(user_id, sc_role)
    with pytest.raises(ForeignKeyViolationError):
        repo.update_user(user_id, {}, role_ids=[999])


def test_repository_list_users_by_department(db_session):
    (hr_role,) = _roles(db_session, "hr")
    repo = UserRepository(db_session)
    org_id = ReservoirRepository(db_session).add_reservoir("Чарвак")
    department_id = OrgStructureRepository(db_session).add_department(
        {"name": "Служба эксплуатации", "organization_id": org_id}
    )
    staff = repo.add_user("staff", "hash", [hr_role], contact={"name": "Сотрудник"})
    repo.add_user("outsider", "hash", [hr_role], contact={"name": "Внешний"})
    EmployeeRepository(db_session).add_employee(
        {
            "contact_id": repo.get_user(staff).contact_id,
            "hire_date": date(2021, 2, 1),
            "employment_type": "full_time",
            "department_id": department_id,
        }
    )

    assert [u.id for u in repo.list_users(department_id=department_id)] == [staff]
    assert [u.id for u in repo.list_users(organization_id=org_id)] == [staff]
    assert len(repo.list_users()) == 2


def test_ensure_admin_is_idempotent(db_session):
    repo = UserRepository(db_session)

    ensure_admin(repo, "admin", "admin123")
    ensure_admin(repo, "admin", "admin123")

    admin = repo.get_user_by_name("admin")
    assert admin.role_names() == ["admin"]
    assert verify_password("admin123", admin.pass_hash)
    assert ContactRepository(db_session).get_contact(admin.contact_id).name == "Администратор"
    assert [r.name for r in repo.list_roles()] == ["admin"]


def test_ensure_admin_assigns_missing_role(db_session):
    (hr_role,) = _roles(db_session, "hr")
    repo = UserRepository(db_session)
    repo.add_user("admin", "hash", [hr_role], contact={"name": "Старый админ"})

    ensure_admin(repo, "admin", "admin123")

    admin = repo.get_user_by_name("admin")
    assert sorted(admin.role_names()) == ["admin", "hr"]
    assert admin.pass_hash == "hash"
