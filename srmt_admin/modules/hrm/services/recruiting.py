from datetime import datetime, timezone
from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import InvalidStatusError, VacancyNotPublishedError
from srmt_admin.modules.hrm.models import Candidate, Vacancy

# Допустимые исходные статусы для переходов вакансии
_PUBLISH_FROM = ("draft", "on_hold")
_CLOSE_FROM = ("open", "on_hold")


class RecruitingRepository(SQLRepository):
    # --- Вакансии ---

    def add_vacancy(self, values: dict, created_by: int) -> int:
        return self._add(Vacancy(**values, status="draft", created_by=created_by)).id

    def get_vacancy(self, vacancy_id: int) -> Vacancy:
        return self._get(Vacancy, vacancy_id)

    def list_vacancies(self, status: Optional[str] = None, department_id: Optional[int] = None) -> List[Vacancy]:
        query = self.db.query(Vacancy)
        if status:
            query = query.filter(Vacancy.status == status)
        if department_id:
            query = query.filter(Vacancy.department_id == department_id)
        return query.order_by(Vacancy.id.desc()).all()

    def update_vacancy(self, vacancy_id: int, values: dict) -> None:
        self._update(Vacancy, vacancy_id, values)

    def delete_vacancy(self, vacancy_id: int) -> None:
        self._delete(Vacancy, vacancy_id)

    def publish_vacancy(self, vacancy_id: int) -> None:
        vacancy = self._get(Vacancy, vacancy_id)
        if vacancy.status not in _PUBLISH_FROM:
            raise InvalidStatusError(f"cannot publish vacancy in status {vacancy.status}")
        vacancy.status = "open"
        vacancy.published_at = datetime.now(timezone.utc)
        self._commit()

    def close_vacancy(self, vacancy_id: int) -> None:
        vacancy = self._get(Vacancy, vacancy_id)
        if vacancy.status not in _CLOSE_FROM:
            raise InvalidStatusError(f"cannot close vacancy in status {vacancy.status}")
        vacancy.status = "closed"
        vacancy.closed_at = datetime.now(timezone.utc)
        self._commit()

    # --- Кандидаты ---

    def add_candidate(self, values: dict) -> int:
        """Кандидат добавляется только на опубликованную (open) вакансию."""
        vacancy = self._get(Vacancy, values["vacancy_id"])
        if vacancy.status != "open":
            raise VacancyNotPublishedError(f"vacancy {vacancy.id} is {vacancy.status}")
        return self._add(Candidate(**values)).id

    def get_candidate(self, candidate_id: int) -> Candidate:
        return self._get(Candidate, candidate_id)

    def list_candidates(self, vacancy_id: Optional[int] = None, status: Optional[str] = None) -> List[Candidate]:
        query = self.db.query(Candidate)
        if vacancy_id:
            query = query.filter(Candidate.vacancy_id == vacancy_id)
        if status:
            query = query.filter(Candidate.status == status)
        return query.order_by(Candidate.id.desc()).all()

    def update_candidate(self, candidate_id: int, values: dict) -> None:
        self._update(Candidate, candidate_id, values)

    def change_candidate_status(self, candidate_id: int, status: str, stage: Optional[str]) -> None:
        values = {"status": status}
        if stage:
            values["stage"] = stage
        self._update(Candidate, candidate_id, values)
