"""Роуты /data: приём показаний полевых устройств."""
from datetime import datetime
from typing import Protocol

from fastapi import APIRouter, Depends, HTTPException, Response, status

from srmt_admin.core.auth import require_api_key
from srmt_admin.core.errors import IndicatorNotFoundError, LevelOutOfCurveRangeError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.modules.telemetry.dependencies import get_reservoir_repo
from srmt_admin.modules.telemetry.schemas import SensorReadingIn
from srmt_admin.modules.telemetry.services.converter import (
    ConversionError,
    DerivedMeasurement,
    UnsupportedReservoirError,
    convert,
    is_supported,
)

router = APIRouter(prefix="/data", tags=["telemetry"], dependencies=[Depends(require_api_key)])


class DataSaver(Protocol):
    def get_indicator(self, res_id: int) -> float: ...

    def get_volume_by_level(self, res_id: int, level: float) -> float: ...

    def save_data(self, measurement: DerivedMeasurement) -> int: ...


class AndijanDataSaver(Protocol):
    def save_andijan_data(self, time: datetime, current: float, resistance: float) -> int: ...


# /andijan должен быть зарегистрирован раньше /{res_id}
@router.post("/andijan", status_code=status.HTTP_201_CREATED, response_class=Response)
def set_andijan_data(
    payload: SensorReadingIn,
    log: RequestLogger = Depends(op_log("data.andijan.set")),
    repo: AndijanDataSaver = Depends(get_reservoir_repo),
):
    """Сырые показания Андижанского водохранилища (без пересчёта)."""
    try:
        repo.save_andijan_data(payload.time, payload.current, payload.resistance)
    except Exception:
        log.exception("failed to save andijan data")
        raise HTTPException(status_code=500, detail="failed to save data")
    log.info("andijan data saved")
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/{res_id}", status_code=status.HTTP_201_CREATED, response_class=Response)
def set_data(
    res_id: int,
    payload: SensorReadingIn,
    log: RequestLogger = Depends(op_log("data.set")),
    repo: DataSaver = Depends(get_reservoir_repo),
):
    """
    Пересчитывает показания в уровень, температуру и объём и сохраняет их.

    Неподдерживаемый ID водохранилища отклоняется до обращения к хранилищу.
    """
    if not is_supported(res_id):
        log.warning("unsupported reservoir", extra={"res_id": res_id})
        raise HTTPException(status_code=400, detail=str(UnsupportedReservoirError(res_id)))

    try:
        indicator_level = repo.get_indicator(res_id)
    except IndicatorNotFoundError:
        log.warning("indicator level not set", extra={"res_id": res_id})
        raise HTTPException(status_code=404, detail="indicator level not found")
    except Exception:
        log.exception("failed to get indicator level", extra={"res_id": res_id})
        raise HTTPException(status_code=500, detail="failed to get indicator level")

    try:
        measurement = convert(res_id, indicator_level, payload.current, payload.resistance)
    except UnsupportedReservoirError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ConversionError:
        log.exception("failed to convert data", extra={"res_id": res_id})
        raise HTTPException(status_code=500, detail="failed to convert data")

    try:
        measurement.volume = repo.get_volume_by_level(res_id, measurement.level)
    except LevelOutOfCurveRangeError:
        log.warning("level out of curve range", extra={"res_id": res_id, "reason": measurement.level})
        raise HTTPException(status_code=400, detail="level is out of level/volume curve range")
    except Exception:
        log.exception("failed to get volume", extra={"res_id": res_id})
        raise HTTPException(status_code=500, detail="failed to get volume")

    measurement.time = payload.time
    try:
        repo.save_data(measurement)
    except Exception:
        log.exception("failed to save data", extra={"res_id": res_id})
        raise HTTPException(status_code=500, detail="failed to save data")

    log.info("data saved", extra={"res_id": res_id})
    return Response(status_code=status.HTTP_201_CREATED)
