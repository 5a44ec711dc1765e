from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class AccessZone(Base):
    __tablename__ = "access_zones"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    code = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)
    building = Column(String(128), nullable=True)
    floor = Column(String(32), nullable=True)
    security_level = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)


class AccessCard(Base):
    """Пропуск сотрудника."""

    __tablename__ = "access_cards"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    card_number = Column(String(64), nullable=False, unique=True)
    card_type = Column(String(32), nullable=False, default="standard")
    issued_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    deactivation_reason = Column(Text, nullable=True)
    deactivated_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AccessLog(Base):
    """Событие прохода через точку доступа (в том числе отказ)."""

    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, index=True)
    card_id = Column(Integer, ForeignKey("access_cards.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    zone_id = Column(Integer, ForeignKey("access_zones.id"), nullable=False)
    direction = Column(String(8), nullable=False)
    event_time = Column(DateTime(timezone=True), nullable=False, index=True)
    access_granted = Column(Boolean, nullable=False)
    denial_reason = Column(String(255), nullable=True)
