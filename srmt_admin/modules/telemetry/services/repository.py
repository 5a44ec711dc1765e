"""SQL-репозиторий телеметрии водохранилищ."""

from dataclasses import dataclass
from datetime import datetime

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import IndicatorNotFoundError, LevelOutOfCurveRangeError
from srmt_admin.modules.telemetry.models import (
    AndijanRawData,
    IndicatorHeight,
    LevelVolume,
    Reservoir,
    ReservoirData,
)
from srmt_admin.modules.telemetry.services.converter import DerivedMeasurement


@dataclass
class LevelVolumePoint:
    reservoir_id: int
    level: float
    volume: float


class ReservoirRepository(SQLRepository):

    def add_reservoir(self, name: str) -> int:
        return self._add(Reservoir(name=name)).id

    def set_indicator(self, res_id: int, height: float) -> int:
        """Создаёт или обновляет отметку индикатора."""
        row = self.db.query(IndicatorHeight).filter(IndicatorHeight.res_id == res_id).first()
        if row is None:
            row = IndicatorHeight(res_id=res_id, height=height)
            self.db.add(row)
        else:
            row.height = height
        self._commit()
        return row.id

    def get_indicator(self, res_id: int) -> float:
        row = self.db.query(IndicatorHeight).filter(IndicatorHeight.res_id == res_id).first()
        if row is None:
            raise IndicatorNotFoundError(f"indicator for reservoir {res_id}")
        return row.height

    def get_volume_by_level(self, res_id: int, level: float) -> float:
        """
        Объём по кривой уровень/объём.

        Ближайшие точки снизу и сверху; совпадение уровня -> объём точки,
        иначе линейная интерполяция. Нет точки с одной из сторон ->
        LevelOutOfCurveRangeError.
        """
        below = (
            self.db.query(LevelVolume)
            .filter(LevelVolume.res_id == res_id, LevelVolume.level <= level)
            .order_by(LevelVolume.level.desc())
            .first()
        )
        above = (
            self.db.query(LevelVolume)
            .filter(LevelVolume.res_id == res_id, LevelVolume.level >= level)
            .order_by(LevelVolume.level.asc())
            .first()
        )
        if below is None or above is None:
            raise LevelOutOfCurveRangeError(f"level {level} for reservoir {res_id}")
        if below.level == above.level:
            return below.volume
        return below.volume + (level - below.level) * (above.volume - below.volume) / (above.level - below.level)

    def get_level_volume(self, res_id: int, level: float) -> LevelVolumePoint:
        """Точка кривой с точным уровнем; нет точки -> нули."""
        row = (
            self.db.query(LevelVolume)
            .filter(LevelVolume.res_id == res_id, LevelVolume.level == level)
            .first()
        )
        if row is None:
            return LevelVolumePoint(reservoir_id=0, level=0.0, volume=0.0)
        return LevelVolumePoint(reservoir_id=row.res_id, level=row.level, volume=row.volume)

    def save_data(self, measurement: DerivedMeasurement) -> int:
        row = ReservoirData(
            res_id=measurement.reservoir_id,
            level=measurement.level,
            temperature=measurement.temperature,
            volume=measurement.volume,
            time=measurement.time,
        )
        return self._add(row).id

    def save_andijan_data(self, time: datetime, current: float, resistance: float) -> int:
        return self._add(AndijanRawData(time=time, current=current, resistance=resistance)).id
