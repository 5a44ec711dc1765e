"""Роуты водохранилищ: создание, отметка индикатора, кривая уровень/объём."""
from typing import Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, status

from srmt_admin.core.auth import Claims, get_claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, UniqueViolationError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.telemetry.dependencies import get_reservoir_repo
from srmt_admin.modules.telemetry.schemas import IndicatorSet, LevelVolumeOut, ReservoirCreate
from srmt_admin.modules.telemetry.services.repository import LevelVolumePoint

router = APIRouter(tags=["telemetry"])


class ReservoirAdder(Protocol):
    def add_reservoir(self, name: str) -> int: ...


class IndicatorSetter(Protocol):
    def set_indicator(self, res_id: int, height: float) -> int: ...


class LevelVolumeGetter(Protocol):
    def get_level_volume(self, res_id: int, level: float) -> LevelVolumePoint: ...


@router.post("/reservoirs", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_reservoir(
    payload: ReservoirCreate,
    log: RequestLogger = Depends(op_log("reservoirs.add")),
    claims: Claims = Depends(require_roles("sc")),
    repo: ReservoirAdder = Depends(get_reservoir_repo),
):
    try:
        res_id = repo.add_reservoir(payload.name)
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="reservoir already exists")
    except Exception:
        log.exception("failed to add reservoir")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
    log.info("reservoir added", extra={"res_id": res_id})
    return created(res_id)


@router.put("/indicators/{res_id}", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def set_indicator(
    res_id: int,
    payload: IndicatorSet,
    log: RequestLogger = Depends(op_log("indicators.set")),
    claims: Claims = Depends(require_roles("sc")),
    repo: IndicatorSetter = Depends(get_reservoir_repo),
):
    try:
        indicator_id = repo.set_indicator(res_id, payload.height)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid reservoir_id")
    except Exception:
        log.exception("failed to set indicator", extra={"res_id": res_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
    log.info("indicator set", extra={"res_id": res_id})
    return created(indicator_id)


@router.get("/level-volume", response_model=LevelVolumeOut)
def get_level_volume(
    res_id: int = Query(..., alias="id"),
    level: float = Query(...),
    log: RequestLogger = Depends(op_log("level_volume.get")),
    claims: Claims = Depends(get_claims),
    repo: LevelVolumeGetter = Depends(get_reservoir_repo),
):
    """Объём для точного уровня; нет точки -> нули."""
    try:
        point = repo.get_level_volume(res_id, level)
    except Exception:
        log.exception("failed to get level volume", extra={"res_id": res_id})
        raise HTTPException(status_code=500, detail="Failed to retrieve level volume")
    return LevelVolumeOut(organization_id=point.reservoir_id, level=point.level, volume=point.volume)
