from datetime import datetime, timezone
from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import InvalidStatusError
from srmt_admin.modules.hrm.models import PerformanceGoal, PerformanceReview

GOAL_COMPLETE_PROGRESS = 100


class PerformanceRepository(SQLRepository):
    # --- Цели ---

    def add_goal(self, values: dict, created_by: int) -> int:
        return self._add(PerformanceGoal(**values, created_by=created_by)).id

    def list_goals(self, employee_id: Optional[int] = None, status: Optional[str] = None) -> List[PerformanceGoal]:
        query = self.db.query(PerformanceGoal)
        if employee_id:
            query = query.filter(PerformanceGoal.employee_id == employee_id)
        if status:
            query = query.filter(PerformanceGoal.status == status)
        return query.order_by(PerformanceGoal.id.desc()).all()

    def update_goal_progress(self, goal_id: int, progress: int) -> None:
        values = {"progress": progress}
        if progress >= GOAL_COMPLETE_PROGRESS:
            values["status"] = "completed"
        self._update(PerformanceGoal, goal_id, values)

    def delete_goal(self, goal_id: int) -> None:
        self._delete(PerformanceGoal, goal_id)

    # --- Оценки ---

    def add_review(self, values: dict) -> int:
        return self._add(PerformanceReview(**values, status="self_review")).id

    def get_review(self, review_id: int) -> PerformanceReview:
        return self._get(PerformanceReview, review_id)

    def submit_self_review(self, review_id: int, rating: int, comment: Optional[str]) -> None:
        review = self._get(PerformanceReview, review_id)
        if review.status != "self_review":
            raise InvalidStatusError(f"review {review_id} is {review.status}")
        review.self_rating = rating
        review.self_comment = comment
        review.status = "manager_review"
        self._commit()

    def submit_manager_review(self, review_id: int, rating: int, comment: Optional[str]) -> None:
        review = self._get(PerformanceReview, review_id)
        if review.status != "manager_review":
            raise InvalidStatusError(f"review {review_id} is {review.status}")
        review.manager_rating = rating
        review.manager_comment = comment
        self._commit()

    def complete_review(self, review_id: int) -> None:
        """Завершить можно только оценку руководителя с выставленным баллом."""
        review = self._get(PerformanceReview, review_id)
        if review.status != "manager_review" or review.manager_rating is None:
            raise InvalidStatusError(f"review {review_id} cannot be completed")
        review.status = "completed"
        review.completed_at = datetime.now(timezone.utc)
        self._commit()
