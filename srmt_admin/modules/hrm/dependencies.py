"""
Dependencies для HRM модуля.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from srmt_admin.core.database import get_db
from srmt_admin.modules.hrm.services.access import AccessRepository
from srmt_admin.modules.hrm.services.cabinet import CabinetRepository
from srmt_admin.modules.hrm.services.contacts import ContactRepository
from srmt_admin.modules.hrm.services.documents import DocumentRepository
from srmt_admin.modules.hrm.services.employees import EmployeeRepository
from srmt_admin.modules.hrm.services.notifications import NotificationRepository
from srmt_admin.modules.hrm.services.orgstructure import OrgStructureRepository
from srmt_admin.modules.hrm.services.performance import PerformanceRepository
from srmt_admin.modules.hrm.services.recruiting import RecruitingRepository
from srmt_admin.modules.hrm.services.salary import SalaryRepository
from srmt_admin.modules.hrm.services.users import UserRepository
from srmt_admin.modules.hrm.services.vacations import VacationRepository


def get_contact_repo(db: Session = Depends(get_db)) -> ContactRepository:
    return ContactRepository(db)


def get_employee_repo(db: Session = Depends(get_db)) -> EmployeeRepository:
    return EmployeeRepository(db)


def get_user_repo(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_recruiting_repo(db: Session = Depends(get_db)) -> RecruitingRepository:
    return RecruitingRepository(db)


def get_document_repo(db: Session = Depends(get_db)) -> DocumentRepository:
    return DocumentRepository(db)


def get_salary_repo(db: Session = Depends(get_db)) -> SalaryRepository:
    return SalaryRepository(db)


def get_performance_repo(db: Session = Depends(get_db)) -> PerformanceRepository:
    return PerformanceRepository(db)


def get_notification_repo(db: Session = Depends(get_db)) -> NotificationRepository:
    return NotificationRepository(db)


def get_vacation_repo(db: Session = Depends(get_db)) -> VacationRepository:
    return VacationRepository(db)


def get_access_repo(db: Session = Depends(get_db)) -> AccessRepository:
    return AccessRepository(db)


def get_cabinet_repo(db: Session = Depends(get_db)) -> CabinetRepository:
    return CabinetRepository(db)


def get_orgstructure_repo(db: Session = Depends(get_db)) -> OrgStructureRepository:
    return OrgStructureRepository(db)
