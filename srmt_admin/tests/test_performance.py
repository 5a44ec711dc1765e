"""
Тесты KPI-целей и оценок эффективности
"""
from datetime import date

import pytest

from srmt_admin.core.errors import InvalidStatusError, NotFoundError
from srmt_admin.modules.hrm.dependencies import get_performance_repo
from srmt_admin.modules.hrm.services.contacts import ContactRepository
from srmt_admin.modules.hrm.services.employees import EmployeeRepository
from srmt_admin.modules.hrm.services.performance import PerformanceRepository

PERFORMANCE = "/api/v1/hrm/performance"


class FakePerformanceRepo:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.error:
            raise self.error

    def add_review(self, values):
        self._call("add_review", values)
        return 8

    def update_goal_progress(self, goal_id, progress):
        self._call("update_goal_progress", goal_id, progress)

    def complete_review(self, review_id):
        self._call("complete_review", review_id)

    def submit_self_review(self, review_id, rating, comment):
        self._call("submit_self_review", review_id, rating, comment)


@pytest.fixture
def manager(auth_headers):
    return auth_headers("manager")


def test_review_period_is_reported_on_period_end(client, override, manager):
    repo = FakePerformanceRepo()
    override(get_performance_repo, repo)

    response = client.post(
        f"{PERFORMANCE}/reviews",
        json={"employee_id": 1, "period_start": "2024-06-30", "period_end": "2024-01-01"},
        headers=manager,
    )

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'period_end' is not valid"]
    assert repo.calls == []


def test_complete_review_conflict(client, override, manager):
    override(get_performance_repo, FakePerformanceRepo(error=InvalidStatusError("self_review")))

    response = client.post(f"{PERFORMANCE}/reviews/8/complete", headers=manager)

    assert response.status_code == 409
    assert response.json()["error"] == "Review cannot be completed in its current status"


def test_complete_missing_review(client, override, manager):
    override(get_performance_repo, FakePerformanceRepo(error=NotFoundError("performance_reviews id=8")))

    response = client.post(f"{PERFORMANCE}/reviews/8/complete", headers=manager)

    assert response.status_code == 404


@pytest.mark.parametrize("progress", [-1, 101])
def test_goal_progress_out_of_range(client, override, manager, progress):
    repo = FakePerformanceRepo()
    override(get_performance_repo, repo)

    response = client.patch(f"{PERFORMANCE}/goals/3/progress", json={"progress": progress}, headers=manager)

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'progress' is not valid"]
    assert repo.calls == []


def test_self_review_rating_required(client, override, manager):
    repo = FakePerformanceRepo()
    override(get_performance_repo, repo)

    response = client.post(f"{PERFORMANCE}/reviews/8/self", json={"comment": "Справился"}, headers=manager)

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'rating' is required"]


# --- Репозиторий на SQLite ---


@pytest.fixture
def employee_id(db_session):
    contact_id = ContactRepository(db_session).add_contact({"name": "Рахимов Ж."})
    return EmployeeRepository(db_session).add_employee(
        {"contact_id": contact_id, "hire_date": date(2020, 3, 1), "employment_type": "full_time"}
    )


def test_repository_goal_completes_at_full_progress(db_session, employee_id):
    repo = PerformanceRepository(db_session)
    goal_id = repo.add_goal({"employee_id": employee_id, "title": "Снизить простои"}, created_by=None)

    repo.update_goal_progress(goal_id, 60)
    assert repo.list_goals(employee_id)[0].status == "in_progress"

    repo.update_goal_progress(goal_id, 100)
    goal = repo.list_goals(employee_id, status="completed")[0]
    assert (goal.id, goal.progress) == (goal_id, 100)


def test_repository_review_flow(db_session, employee_id):
    repo = PerformanceRepository(db_session)
    review_id = repo.add_review(
        {"employee_id": employee_id, "period_start": date(2024, 1, 1), "period_end": date(2024, 6, 30)}
    )

    with pytest.raises(InvalidStatusError):
        repo.complete_review(review_id)

    repo.submit_self_review(review_id, 4, "План выполнен")
    with pytest.raises(InvalidStatusError):
        repo.submit_self_review(review_id, 5, None)
    with pytest.raises(InvalidStatusError):
        repo.complete_review(review_id)

    repo.submit_manager_review(review_id, 5, None)
    repo.complete_review(review_id)

    review = repo.get_review(review_id)
    assert review.status == "completed"
    assert review.completed_at is not None
