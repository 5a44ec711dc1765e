"""
Модели HRM модуля
"""
from .user import Role, User, users_roles
from .contact import Contact
from .department import Department, Position
from .employee import Employee
from .recruiting import Candidate, Vacancy
from .document import DocumentRequest, HRDocument
from .salary import Salary, SalaryBonus, SalaryDeduction, SalaryStructure
from .performance import PerformanceGoal, PerformanceReview
from .notification import Notification
from .vacation import Vacation, VacationBalance, VacationBlockedPeriod
from .access import AccessCard, AccessLog, AccessZone

__all__ = [
    "Role",
    "User",
    "users_roles",
    "Contact",
    "Department",
    "Position",
    "Employee",
    "Vacancy",
    "Candidate",
    "HRDocument",
    "DocumentRequest",
    "SalaryStructure",
    "Salary",
    "SalaryBonus",
    "SalaryDeduction",
    "PerformanceGoal",
    "PerformanceReview",
    "Notification",
    "Vacation",
    "VacationBalance",
    "VacationBlockedPeriod",
    "AccessZone",
    "AccessCard",
    "AccessLog",
]
