"""
Тесты контроля доступа: причины отказа и журнал проходов
"""
from datetime import date, datetime

import pytest

from srmt_admin.core.errors import NotFoundError, UniqueViolationError
from srmt_admin.modules.hrm.dependencies import get_access_repo
from srmt_admin.modules.hrm.models import AccessCard, AccessZone
from srmt_admin.modules.hrm.services.access import AccessDecision, AccessRepository, check_access
from srmt_admin.modules.hrm.services.contacts import ContactRepository
from srmt_admin.modules.hrm.services.employees import EmployeeRepository

ACCESS = "/api/v1/hrm/access"
EVENT = {"card_number": "0001-7788", "zone_id": 2, "direction": "in"}


class FakeAccessRepo:
    def __init__(self, decision=None, error=None):
        self.decision = decision or AccessDecision(log_id=31, access_granted=True)
        self.error = error
        self.calls = []

    def log_access_event(self, card_number, zone_id, direction, event_time=None):
        self.calls.append((card_number, zone_id, direction))
        if self.error:
            raise self.error
        return self.decision

    def add_zone(self, values):
        raise UniqueViolationError("access_zones.name")

    def block_card(self, card_id, reason):
        raise NotFoundError(f"access_cards id={card_id}")


@pytest.mark.parametrize(
    "card, zone, expected",
    [
        (AccessCard(is_active=True, expiry_date=None), AccessZone(is_active=True), None),
        (AccessCard(is_active=False, expiry_date=None), AccessZone(is_active=True), "card is blocked"),
        (AccessCard(is_active=True, expiry_date=date(2024, 5, 31)), AccessZone(is_active=True), "card is expired"),
        (AccessCard(is_active=True, expiry_date=date(2024, 6, 1)), AccessZone(is_active=True), None),
        (AccessCard(is_active=True, expiry_date=None), AccessZone(is_active=False), "zone is inactive"),
    ],
)
def test_check_access(card, zone, expected):
    assert check_access(card, zone, date(2024, 6, 1)) == expected


def test_route_denied_event_is_reported(client, override, auth_headers):
    decision = AccessDecision(log_id=31, access_granted=False, denial_reason="card is blocked")
    override(get_access_repo, FakeAccessRepo(decision=decision))

    response = client.post(f"{ACCESS}/logs", json=EVENT, headers=auth_headers("security"))

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 31, "access_granted": False, "denial_reason": "card is blocked"}


def test_route_unknown_card(client, override, auth_headers):
    override(get_access_repo, FakeAccessRepo(error=NotFoundError("access card number=0001-7788")))

    response = client.post(f"{ACCESS}/logs", json=EVENT, headers=auth_headers("security"))

    assert response.status_code == 404
    assert response.json()["error"] == "Card or zone not found"


def test_route_bad_direction(client, override, auth_headers):
    repo = FakeAccessRepo()
    override(get_access_repo, repo)

    response = client.post(f"{ACCESS}/logs", json={**EVENT, "direction": "sideways"}, headers=auth_headers("hr"))

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'direction' is not valid"]
    assert repo.calls == []


def test_route_duplicate_zone(client, override, auth_headers):
    override(get_access_repo, FakeAccessRepo())

    response = client.post(f"{ACCESS}/zones", json={"name": "Машинный зал"}, headers=auth_headers("hr"))

    assert response.status_code == 409


def test_route_block_missing_card(client, override, auth_headers):
    override(get_access_repo, FakeAccessRepo())

    response = client.post(f"{ACCESS}/cards/5/block", json={"reason": "Утерян"}, headers=auth_headers("hr"))

    assert response.status_code == 404


# --- Репозиторий на SQLite ---


def test_repository_logs_denials_with_reason(db_session):
    contact_id = ContactRepository(db_session).add_contact({"name": "Назаров О."})
    employee_id = EmployeeRepository(db_session).add_employee(
        {"contact_id": contact_id, "hire_date": date(2019, 5, 6), "employment_type": "full_time"}
    )
    repo = AccessRepository(db_session)
    zone_id = repo.add_zone({"name": "Плотина", "security_level": 3, "is_active": True})
    blocked = repo.add_card({"employee_id": employee_id, "card_number": "BLK-0001", "issued_date": date(2024, 1, 1)})
    repo.add_card(
        {
            "employee_id": employee_id,
            "card_number": "EXP-0001",
            "issued_date": date(2023, 1, 1),
            "expiry_date": date(2023, 12, 31),
        }
    )
    repo.block_card(blocked, "Утерян")
    when = datetime(2024, 6, 1, 8, 0)

    denied_blocked = repo.log_access_event("BLK-0001", zone_id, "in", when)
    denied_expired = repo.log_access_event("EXP-0001", zone_id, "in", when)

    assert (denied_blocked.access_granted, denied_blocked.denial_reason) == (False, "card is blocked")
    assert (denied_expired.access_granted, denied_expired.denial_reason) == (False, "card is expired")
    logs = repo.list_logs(employee_id=employee_id)
    assert sorted(log.denial_reason for log in logs) == ["card is blocked", "card is expired"]
    assert not any(log.access_granted for log in logs)

    repo.unblock_card(blocked)
    assert repo.log_access_event("BLK-0001", zone_id, "out", when).access_granted

    with pytest.raises(NotFoundError):
        repo.log_access_event("NONE-0000", zone_id, "in", when)
