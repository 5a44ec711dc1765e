"""Данные личного кабинета: профиль и задачи руководителя."""
from typing import List

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import NotFoundError
from srmt_admin.modules.hrm.models import Contact, DocumentRequest, Employee, Vacation
from srmt_admin.modules.hrm.schemas.cabinet import DocumentRequestTask, Task, VacationApprovalTask


class CabinetRepository(SQLRepository):
    def get_employee_by_user_id(self, user_id: int) -> Employee:
        employee = self.db.query(Employee).filter(Employee.user_id == user_id).first()
        if employee is None:
            raise NotFoundError(f"employee user_id={user_id}")
        return employee

    def get_pending_tasks(self, manager_id: int) -> List[Task]:
        """
        Задачи руководителя: заявки на отпуск и запросы документов
        его прямых подчинённых, ожидающие решения.
        """
        tasks: List[Task] = []

        vacations = (
            self.db.query(Vacation, Contact.name)
            .join(Employee, Vacation.employee_id == Employee.id)
            .join(Contact, Employee.contact_id == Contact.id)
            .filter(Employee.manager_id == manager_id, Vacation.status == "pending")
            .order_by(Vacation.created_at, Vacation.id)
            .all()
        )
        for vacation, name in vacations:
            tasks.append(
                VacationApprovalTask(
                    vacation_id=vacation.id,
                    employee_id=vacation.employee_id,
                    employee_name=name,
                    vacation_type=vacation.vacation_type,
                    start_date=vacation.start_date,
                    end_date=vacation.end_date,
                    days_count=vacation.days_count,
                    created_at=vacation.created_at,
                )
            )

        requests = (
            self.db.query(DocumentRequest, Contact.name)
            .join(Employee, DocumentRequest.contact_id == Employee.contact_id)
            .join(Contact, Employee.contact_id == Contact.id)
            .filter(Employee.manager_id == manager_id, DocumentRequest.status == "pending")
            .order_by(DocumentRequest.created_at, DocumentRequest.id)
            .all()
        )
        for req, name in requests:
            tasks.append(
                DocumentRequestTask(
                    request_id=req.id,
                    contact_id=req.contact_id,
                    employee_name=name,
                    document_type=req.document_type,
                    purpose=req.purpose,
                    created_at=req.created_at,
                )
            )
        return tasks
