"""Роуты /hrm/access: зоны, пропуска и журнал проходов."""
from datetime import datetime
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError, UniqueViolationError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.modules.hrm.dependencies import get_access_repo
from srmt_admin.modules.hrm.models import AccessCard, AccessLog, AccessZone
from srmt_admin.modules.hrm.schemas.access import (
    AccessEventIn,
    AccessEventOut,
    AccessLogOut,
    CardBlock,
    CardCreate,
    CardOut,
    CardUpdate,
    ZoneCreate,
    ZoneOut,
)
from srmt_admin.modules.hrm.services.access import AccessDecision

router = APIRouter(prefix="/access", tags=["hrm-access"])


class ZoneStore(Protocol):
    def add_zone(self, values: dict) -> int: ...

    def list_zones(self) -> List[AccessZone]: ...


class CardStore(Protocol):
    def add_card(self, values: dict) -> int: ...

    def list_cards(self, employee_id: Optional[int] = None, is_active: Optional[bool] = None) -> List[AccessCard]: ...

    def update_card(self, card_id: int, values: dict) -> None: ...

    def block_card(self, card_id: int, reason: str) -> None: ...

    def unblock_card(self, card_id: int) -> None: ...


class AccessLogStore(Protocol):
    def log_access_event(self, card_number: str, zone_id: int, direction: str, event_time=None) -> AccessDecision: ...

    def list_logs(self, employee_id=None, zone_id=None, date_from=None, date_to=None, limit: int = 100) -> List[AccessLog]: ...


# --- Зоны ---


@router.post("/zones", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_zone(
    payload: ZoneCreate,
    log: RequestLogger = Depends(op_log("hrm.access.zones.add")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: ZoneStore = Depends(get_access_repo),
):
    try:
        zone_id = repo.add_zone(payload.model_dump())
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Zone already exists")
    except Exception:
        log.exception("failed to add zone")
        raise HTTPException(status_code=500, detail="Failed to add zone")
    return created(zone_id)


@router.get("/zones", response_model=List[ZoneOut])
def list_zones(
    log: RequestLogger = Depends(op_log("hrm.access.zones.list")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: ZoneStore = Depends(get_access_repo),
):
    try:
        return repo.list_zones()
    except Exception:
        log.exception("failed to list zones")
        raise HTTPException(status_code=500, detail="Failed to retrieve zones")


# --- Пропуска ---


@router.post("/cards", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def issue_card(
    payload: CardCreate,
    log: RequestLogger = Depends(op_log("hrm.access.cards.add")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: CardStore = Depends(get_access_repo),
):
    try:
        card_id = repo.add_card(payload.model_dump())
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Card number already exists")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id")
    except Exception:
        log.exception("failed to issue card")
        raise HTTPException(status_code=500, detail="Failed to issue card")
    log.info("card issued", extra={"entity_id": card_id})
    return created(card_id)


@router.get("/cards", response_model=List[CardOut])
def list_cards(
    employee_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.access.cards.list")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: CardStore = Depends(get_access_repo),
):
    try:
        return repo.list_cards(employee_id, is_active)
    except Exception:
        log.exception("failed to list cards")
        raise HTTPException(status_code=500, detail="Failed to retrieve cards")


@router.patch("/cards/{card_id}")
def edit_card(
    card_id: int,
    payload: CardUpdate,
    log: RequestLogger = Depends(op_log("hrm.access.cards.edit")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: CardStore = Depends(get_access_repo),
):
    try:
        repo.update_card(card_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except Exception:
        log.exception("failed to update card", extra={"entity_id": card_id})
        raise HTTPException(status_code=500, detail="Failed to update card")
    return ok()


@router.post("/cards/{card_id}/block")
def block_card(
    card_id: int,
    payload: CardBlock,
    log: RequestLogger = Depends(op_log("hrm.access.cards.block")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: CardStore = Depends(get_access_repo),
):
    try:
        repo.block_card(card_id, payload.reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except Exception:
        log.exception("failed to block card", extra={"entity_id": card_id})
        raise HTTPException(status_code=500, detail="Failed to block card")
    log.info("card blocked", extra={"entity_id": card_id, "reason": payload.reason})
    return ok()


@router.post("/cards/{card_id}/unblock")
def unblock_card(
    card_id: int,
    log: RequestLogger = Depends(op_log("hrm.access.cards.unblock")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: CardStore = Depends(get_access_repo),
):
    try:
        repo.unblock_card(card_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except Exception:
        log.exception("failed to unblock card", extra={"entity_id": card_id})
        raise HTTPException(status_code=500, detail="Failed to unblock card")
    log.info("card unblocked", extra={"entity_id": card_id})
    return ok()


# --- Журнал ---


@router.post("/logs", status_code=status.HTTP_201_CREATED, response_model=AccessEventOut)
def log_access_event(
    payload: AccessEventIn,
    log: RequestLogger = Depends(op_log("hrm.access.logs.add")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: AccessLogStore = Depends(get_access_repo),
):
    """Событие прохода. Отказ тоже записывается, с причиной."""
    try:
        decision = repo.log_access_event(payload.card_number, payload.zone_id, payload.direction, payload.event_time)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card or zone not found")
    except Exception:
        log.exception("failed to log access event")
        raise HTTPException(status_code=500, detail="Failed to log access event")
    if not decision.access_granted:
        log.warning("access denied", extra={"entity_id": decision.log_id, "reason": decision.denial_reason})
    return AccessEventOut(
        id=decision.log_id,
        access_granted=decision.access_granted,
        denial_reason=decision.denial_reason,
    )


@router.get("/logs", response_model=List[AccessLogOut])
def list_logs(
    employee_id: Optional[int] = Query(None),
    zone_id: Optional[int] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    log: RequestLogger = Depends(op_log("hrm.access.logs.list")),
    claims: Claims = Depends(require_roles("hr", "security")),
    repo: AccessLogStore = Depends(get_access_repo),
):
    try:
        return repo.list_logs(employee_id, zone_id, date_from, date_to, limit)
    except Exception:
        log.exception("failed to list access logs")
        raise HTTPException(status_code=500, detail="Failed to retrieve access logs")
