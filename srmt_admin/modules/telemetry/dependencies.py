"""
Dependencies для модуля телеметрии.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from srmt_admin.core.database import get_db
from srmt_admin.modules.telemetry.services.repository import ReservoirRepository


def get_reservoir_repo(db: Session = Depends(get_db)) -> ReservoirRepository:
    return ReservoirRepository(db)
