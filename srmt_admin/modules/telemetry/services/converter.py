"""
Пересчёт показаний датчиков водохранилища в уровень и температуру.

Датчик уровня работает в токовой петле 4–20 мА, датчик температуры — PT100
(100 Ом при 0 °C, 0.385 Ом/°C). Формула выбирается по ID водохранилища;
для неизвестного ID формула по умолчанию не подставляется.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

ANDIJAN_RESERVOIR_ID = 1

# Калибровочная поправка уровня Андижанского водохранилища
ANDIJAN_LEVEL_OFFSET = 9.3855

LOOP_MIN_CURRENT = 4.0
LOOP_SPAN = 16.0
VIRTUAL_HEIGHT_RANGE = 60.0

PT100_BASE_RESISTANCE = 100.0
PT100_COEFFICIENT = 0.385


@dataclass
class DerivedMeasurement:
    reservoir_id: int
    level: float = 0.0
    temperature: float = 0.0
    volume: Optional[float] = None
    time: Optional[datetime] = None


class ConversionError(Exception):
    """Ошибка пересчёта показаний"""


class UnsupportedReservoirError(ConversionError):
    """Для водохранилища нет формулы пересчёта"""

    def __init__(self, reservoir_id: int):
        self.reservoir_id = reservoir_id
        super().__init__(f"unsupported reservoir id: {reservoir_id}")


def _andijan(indicator_level: float, current: float, resistance: float) -> Tuple[float, float]:
    virtual_height = ((current - LOOP_MIN_CURRENT) / LOOP_SPAN) * VIRTUAL_HEIGHT_RANGE
    raw_height = indicator_level - ANDIJAN_LEVEL_OFFSET + virtual_height
    # Округление вверх до сотых
    level = math.ceil(raw_height * 100) / 100
    temperature = (resistance - PT100_BASE_RESISTANCE) / PT100_COEFFICIENT
    return level, temperature


_FORMULAS: Dict[int, Callable[[float, float, float], Tuple[float, float]]] = {
    ANDIJAN_RESERVOIR_ID: _andijan,
}


def is_supported(reservoir_id: int) -> bool:
    return reservoir_id in _FORMULAS


def convert(reservoir_id: int, indicator_level: float, current: float, resistance: float) -> DerivedMeasurement:
    """
    Пересчитывает ток и сопротивление в уровень и температуру.

    Args:
        reservoir_id: ID водохранилища
        indicator_level: отметка индикатора (базовый уровень)
        current: ток петли, мА (4–20)
        resistance: сопротивление термодатчика, Ом

    Raises:
        UnsupportedReservoirError: для водохранилища нет формулы
        ConversionError: формула завершилась ошибкой (исходная ошибка в __cause__)
    """
    formula = _FORMULAS.get(reservoir_id)
    if formula is None:
        raise UnsupportedReservoirError(reservoir_id)
    try:
        level, temperature = formula(indicator_level, current, resistance)
    except (ArithmeticError, ValueError) as exc:
        raise ConversionError(f"failed to convert data for reservoir {reservoir_id}: {exc}") from exc
    return DerivedMeasurement(reservoir_id=reservoir_id, level=level, temperature=temperature)
