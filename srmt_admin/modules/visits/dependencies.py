"""
Dependencies для модуля визитов.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from srmt_admin.core.database import get_db
from srmt_admin.modules.visits.services.repository import VisitRepository


def get_visit_repo(db: Session = Depends(get_db)) -> VisitRepository:
    return VisitRepository(db)
