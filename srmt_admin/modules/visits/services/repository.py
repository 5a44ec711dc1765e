"""SQL-репозиторий визитов."""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy.orm import selectinload

from srmt_admin.core.database import SQLRepository
from srmt_admin.modules.files.services.repository import load_files
from srmt_admin.modules.visits.models import Visit


class VisitRepository(SQLRepository):
    def add_visit(self, values: dict, created_by: Optional[int]) -> int:
        return self._add(Visit(**values, created_by=created_by)).id

    def get_visit(self, visit_id: int) -> Visit:
        return self._get(Visit, visit_id)

    def list_visits(self, day: date) -> List[Visit]:
        """Визиты за сутки [day 00:00, day+1 00:00) по возрастанию времени."""
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        return (
            self.db.query(Visit)
            .options(selectinload(Visit.files), selectinload(Visit.organization))
            .filter(Visit.visit_date >= start, Visit.visit_date < end)
            .order_by(Visit.visit_date.asc())
            .all()
        )

    def update_visit(self, visit_id: int, values: dict) -> None:
        if values:
            self._update(Visit, visit_id, values)
        else:
            self._get(Visit, visit_id)

    def delete_visit(self, visit_id: int) -> None:
        self._delete(Visit, visit_id)

    def link_visit_files(self, visit_id: int, file_ids: List[int]) -> None:
        if not file_ids:
            return
        visit = self._get(Visit, visit_id)
        linked = {f.id for f in visit.files}
        visit.files.extend(f for f in load_files(self.db, file_ids) if f.id not in linked)
        self._commit()

    def replace_visit_files(self, visit_id: int, file_ids: List[int]) -> None:
        visit = self._get(Visit, visit_id)
        visit.files = load_files(self.db, file_ids)
        self._commit()
