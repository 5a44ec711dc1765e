"""
Dependencies для модуля инвестиций.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from srmt_admin.core.database import get_db
from srmt_admin.modules.investments.services.repository import InvestmentRepository


def get_investment_repo(db: Session = Depends(get_db)) -> InvestmentRepository:
    return InvestmentRepository(db)
