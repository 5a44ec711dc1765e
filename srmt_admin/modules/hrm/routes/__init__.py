from . import (
    access,
    analytics,
    cabinet,
    contacts,
    departments,
    documents,
    employees,
    notifications,
    performance,
    recruiting,
    salary,
    users,
    vacations,
)

__all__ = [
    "access",
    "analytics",
    "cabinet",
    "contacts",
    "departments",
    "documents",
    "employees",
    "notifications",
    "performance",
    "recruiting",
    "salary",
    "users",
    "vacations",
]
