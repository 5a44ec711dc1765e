"""
Тесты найма: переходы статусов вакансии и кандидаты только на открытые вакансии
"""
import pytest

from srmt_admin.core.errors import InvalidStatusError, NotFoundError, VacancyNotPublishedError
from srmt_admin.modules.hrm.dependencies import get_recruiting_repo
from srmt_admin.modules.hrm.services.recruiting import RecruitingRepository

VACANCIES = "/api/v1/hrm/vacancies/"
CANDIDATES = "/api/v1/hrm/candidates/"

VACANCY = {"title": "Инженер-гидротехник", "employment_type": "full_time", "work_format": "office"}
CANDIDATE = {"vacancy_id": 3, "first_name": "Алишер", "last_name": "Каримов"}


class FakeRecruitingRepo:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.error:
            raise self.error

    def add_vacancy(self, values, created_by):
        self._call("add_vacancy", values, created_by)
        return 3

    def get_vacancy(self, vacancy_id):
        self._call("get_vacancy", vacancy_id)

    def update_vacancy(self, vacancy_id, values):
        self._call("update_vacancy", vacancy_id, values)

    def publish_vacancy(self, vacancy_id):
        self._call("publish_vacancy", vacancy_id)

    def close_vacancy(self, vacancy_id):
        self._call("close_vacancy", vacancy_id)

    def add_candidate(self, values):
        self._call("add_candidate", values)
        return 11

    def get_candidate(self, candidate_id):
        self._call("get_candidate", candidate_id)


@pytest.fixture
def hr(auth_headers):
    return auth_headers("hr", user_id=4)


def test_add_vacancy(client, override, hr):
    repo = FakeRecruitingRepo()
    override(get_recruiting_repo, repo)

    response = client.post(VACANCIES, json={**VACANCY, "salary_min": 100, "salary_max": 150}, headers=hr)

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 3}
    assert repo.calls[0][2] == 4


def test_salary_range_is_reported_on_salary_max(client, override, hr):
    repo = FakeRecruitingRepo()
    override(get_recruiting_repo, repo)

    response = client.post(VACANCIES, json={**VACANCY, "salary_min": 100, "salary_max": 50}, headers=hr)

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'salary_max' is not valid"]
    assert repo.calls == []


def test_add_vacancy_missing_title(client, override, hr):
    repo = FakeRecruitingRepo()
    override(get_recruiting_repo, repo)
    payload = {k: v for k, v in VACANCY.items() if k != "title"}

    response = client.post(VACANCIES, json=payload, headers=hr)

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'title' is required"]
    assert repo.calls == []


def test_add_vacancy_invalid_json(client, override, hr):
    repo = FakeRecruitingRepo()
    override(get_recruiting_repo, repo)

    response = client.post(VACANCIES, content=b'{"title": ', headers={**hr, "Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"status": 400, "error": "Invalid request format"}
    assert repo.calls == []


@pytest.mark.parametrize(
    "method, url, detail",
    [
        ("get", f"{VACANCIES}9", "Vacancy not found"),
        ("post", f"{VACANCIES}9/publish", "Vacancy not found"),
        ("get", f"{CANDIDATES}9", "Candidate not found"),
    ],
)
def test_not_found(client, override, hr, method, url, detail):
    override(get_recruiting_repo, FakeRecruitingRepo(error=NotFoundError("vacancies id=9")))

    response = getattr(client, method)(url, headers=hr)

    assert response.status_code == 404
    assert response.json() == {"status": 404, "error": detail}


@pytest.mark.parametrize("action", ["publish", "close"])
def test_status_transition_conflict(client, override, hr, action):
    override(get_recruiting_repo, FakeRecruitingRepo(error=InvalidStatusError("closed")))

    response = client.post(f"{VACANCIES}3/{action}", headers=hr)

    assert response.status_code == 409


def test_candidate_on_unpublished_vacancy(client, override, hr):
    override(get_recruiting_repo, FakeRecruitingRepo(error=VacancyNotPublishedError("vacancy 3 is draft")))

    response = client.post(CANDIDATES, json=CANDIDATE, headers=hr)

    assert response.status_code == 400
    assert response.json()["error"] == "Vacancy is not published"


def test_recruiting_requires_hr_role(client, override, auth_headers):
    repo = FakeRecruitingRepo()
    override(get_recruiting_repo, repo)

    response = client.post(VACANCIES, json=VACANCY, headers=auth_headers("investment"))

    assert response.status_code == 403
    assert repo.calls == []


# --- Репозиторий на SQLite ---


def test_repository_vacancy_lifecycle(db_session):
    repo = RecruitingRepository(db_session)
    vacancy_id = repo.add_vacancy(
        {"title": "Оператор ГЭС", "employment_type": "full_time", "work_format": "office", "currency": "UZS"},
        created_by=None,
    )

    with pytest.raises(VacancyNotPublishedError):
        repo.add_candidate({**CANDIDATE, "vacancy_id": vacancy_id, "currency": "UZS"})
    with pytest.raises(InvalidStatusError):
        repo.close_vacancy(vacancy_id)

    repo.publish_vacancy(vacancy_id)
    assert repo.get_vacancy(vacancy_id).status == "open"
    assert repo.get_vacancy(vacancy_id).published_at is not None

    candidate_id = repo.add_candidate({**CANDIDATE, "vacancy_id": vacancy_id, "currency": "UZS"})
    repo.change_candidate_status(candidate_id, "interview", "technical")
    candidate = repo.get_candidate(candidate_id)
    assert (candidate.status, candidate.stage) == ("interview", "technical")

    with pytest.raises(InvalidStatusError):
        repo.publish_vacancy(vacancy_id)
    repo.close_vacancy(vacancy_id)
    with pytest.raises(InvalidStatusError):
        repo.close_vacancy(vacancy_id)
    assert [v.id for v in repo.list_vacancies(status="closed")] == [vacancy_id]
