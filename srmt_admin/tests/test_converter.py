"""
Тесты пересчёта показаний датчиков
"""
import pytest

from srmt_admin.modules.telemetry.services.converter import (
    ANDIJAN_RESERVOIR_ID,
    ConversionError,
    UnsupportedReservoirError,
    convert,
    is_supported,
)


def test_andijan_reference_values():
    """10.0 / 12 мА / 120 Ом -> уровень 30.62 (округление вверх)"""
    m = convert(ANDIJAN_RESERVOIR_ID, 10.0, 12.0, 120.0)
    assert m.reservoir_id == ANDIJAN_RESERVOIR_ID
    assert m.level == 30.62
    assert m.temperature == pytest.approx(51.948, abs=1e-3)
    assert m.volume is None
    assert m.time is None


def test_loop_current_boundaries():
    # Отметка индикатора равна поправке: уровень равен виртуальной высоте
    low = convert(ANDIJAN_RESERVOIR_ID, 9.3855, 4.0, 100.0)
    high = convert(ANDIJAN_RESERVOIR_ID, 9.3855, 20.0, 100.0)
    assert low.level == 0.0
    assert high.level == 60.0
    assert low.temperature == 0.0


def test_level_rounds_up_to_cents():
    m = convert(ANDIJAN_RESERVOIR_ID, 10.001, 4.0, 100.0)
    # 10.001 - 9.3855 = 0.6155 -> 0.62
    assert m.level == 0.62


@pytest.mark.parametrize("res_id", [0, 2, 99, -1])
def test_unsupported_reservoir(res_id):
    assert not is_supported(res_id)
    with pytest.raises(UnsupportedReservoirError) as exc_info:
        convert(res_id, 10.0, 12.0, 120.0)
    assert str(res_id) in str(exc_info.value)
    assert exc_info.value.reservoir_id == res_id


def test_unsupported_is_conversion_error():
    assert issubclass(UnsupportedReservoirError, ConversionError)
