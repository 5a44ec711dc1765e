from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy import or_

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import InvalidStatusError, NotFoundError
from srmt_admin.modules.hrm.models import Contact, Employee


@dataclass
class EmployeeFilters:
    employment_status: Optional[str] = None
    employment_type: Optional[str] = None
    manager_id: Optional[int] = None
    department_id: Optional[int] = None
    search: Optional[str] = None
    limit: int = 100
    offset: int = 0


class EmployeeRepository(SQLRepository):
    def add_employee(self, values: dict) -> int:
        return self._add(Employee(**values)).id

    def get_employee(self, employee_id: int) -> Employee:
        return self._get(Employee, employee_id)

    def get_employee_by_user_id(self, user_id: int) -> Employee:
        employee = self.db.query(Employee).filter(Employee.user_id == user_id).first()
        if employee is None:
            raise NotFoundError(f"employee user_id={user_id}")
        return employee

    def list_employees(self, filters: EmployeeFilters) -> List[Employee]:
        query = self.db.query(Employee).join(Contact, Employee.contact_id == Contact.id)
        if filters.employment_status:
            query = query.filter(Employee.employment_status == filters.employment_status)
        if filters.employment_type:
            query = query.filter(Employee.employment_type == filters.employment_type)
        if filters.manager_id:
            query = query.filter(Employee.manager_id == filters.manager_id)
        if filters.department_id:
            query = query.filter(Employee.department_id == filters.department_id)
        if filters.search:
            like = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    Contact.name.ilike(like),
                    Contact.email.ilike(like),
                    Employee.employee_number.ilike(like),
                )
            )
        return query.order_by(Employee.id).offset(filters.offset).limit(filters.limit).all()

    def update_employee(self, employee_id: int, values: dict) -> None:
        self._update(Employee, employee_id, values)

    def delete_employee(self, employee_id: int) -> None:
        self._delete(Employee, employee_id)

    def terminate_employee(self, employee_id: int, termination_date: date, reason: str) -> None:
        """Увольнение. Повторное увольнение -> InvalidStatusError."""
        employee = self._get(Employee, employee_id)
        if employee.employment_status == "terminated":
            raise InvalidStatusError("employee already terminated")
        employee.employment_status = "terminated"
        employee.termination_date = termination_date
        employee.termination_reason = reason
        self._commit()
