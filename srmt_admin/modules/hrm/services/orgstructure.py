from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.modules.hrm.models import Department, Position


class OrgStructureRepository(SQLRepository):
    # --- Подразделения ---

    def add_department(self, values: dict) -> int:
        return self._add(Department(**values)).id

    def get_department(self, department_id: int) -> Department:
        return self._get(Department, department_id)

    def list_departments(self, organization_id: Optional[int] = None) -> List[Department]:
        query = self.db.query(Department)
        if organization_id:
            query = query.filter(Department.organization_id == organization_id)
        return query.order_by(Department.name).all()

    def update_department(self, department_id: int, values: dict) -> None:
        self._update(Department, department_id, values)

    def delete_department(self, department_id: int) -> None:
        self._delete(Department, department_id)

    # --- Должности ---

    def add_position(self, values: dict) -> int:
        return self._add(Position(**values)).id

    def list_positions(self) -> List[Position]:
        return self.db.query(Position).order_by(Position.name).all()

    def update_position(self, position_id: int, values: dict) -> None:
        self._update(Position, position_id, values)

    def delete_position(self, position_id: int) -> None:
        self._delete(Position, position_id)
