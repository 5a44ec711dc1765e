"""
Модели телеметрии водохранилищ
"""
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class Reservoir(Base):
    __tablename__ = "reservoirs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)


class IndicatorHeight(Base):
    """Отметка индикатора (базовый уровень) водохранилища, одна на водохранилище."""

    __tablename__ = "indicator_height"

    id = Column(Integer, primary_key=True, index=True)
    res_id = Column(Integer, ForeignKey("reservoirs.id"), nullable=False, unique=True)
    height = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class LevelVolume(Base):
    """Точка кривой уровень/объём"""

    __tablename__ = "level_volume"
    __table_args__ = (UniqueConstraint("res_id", "level", name="uq_level_volume_res_level"),)

    id = Column(Integer, primary_key=True, index=True)
    res_id = Column(Integer, ForeignKey("reservoirs.id"), nullable=False, index=True)
    level = Column(Float, nullable=False)
    volume = Column(Float, nullable=False)


class ReservoirData(Base):
    """Производное измерение: уровень, температура, объём"""

    __tablename__ = "reservoir_data"

    id = Column(Integer, primary_key=True, index=True)
    res_id = Column(Integer, ForeignKey("reservoirs.id"), nullable=False, index=True)
    level = Column(Float, nullable=False)
    temperature = Column(Float, nullable=False)
    volume = Column(Float, nullable=True)
    time = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AndijanRawData(Base):
    """Сырые показания датчиков Андижанского водохранилища"""

    __tablename__ = "andijan_raw_data"

    id = Column(Integer, primary_key=True, index=True)
    current = Column(Float, nullable=False)
    resistance = Column(Float, nullable=False)
    time = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
