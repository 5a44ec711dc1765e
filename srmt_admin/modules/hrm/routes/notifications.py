"""Роуты /hrm/notifications."""
from typing import List, Protocol, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created
from srmt_admin.modules.hrm.dependencies import get_notification_repo
from srmt_admin.modules.hrm.models import Notification
from srmt_admin.modules.hrm.schemas.notification import (
    BulkCreatedOut,
    NotificationBulkCreate,
    NotificationCreate,
    NotificationOut,
)

router = APIRouter(prefix="/notifications", tags=["hrm-notifications"])


class NotificationStore(Protocol):
    def add_notification(self, values: dict) -> int: ...

    def add_notifications(self, user_ids: Sequence[int], values: dict) -> int: ...

    def list_notifications(self, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]: ...


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_notification(
    payload: NotificationCreate,
    log: RequestLogger = Depends(op_log("hrm.notifications.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: NotificationStore = Depends(get_notification_repo),
):
    try:
        notification_id = repo.add_notification(payload.model_dump())
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid user_id")
    except Exception:
        log.exception("failed to add notification")
        raise HTTPException(status_code=500, detail="Failed to create notification")
    return created(notification_id)


@router.post("/bulk", status_code=status.HTTP_201_CREATED, response_model=BulkCreatedOut)
def add_notifications_bulk(
    payload: NotificationBulkCreate,
    log: RequestLogger = Depends(op_log("hrm.notifications.bulk")),
    claims: Claims = Depends(require_roles("hr")),
    repo: NotificationStore = Depends(get_notification_repo),
):
    """Одно уведомление нескольким пользователям; возвращает число созданных."""
    values = payload.model_dump(exclude={"user_ids"})
    try:
        count = repo.add_notifications(payload.user_ids, values)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid user_ids")
    except Exception:
        log.exception("failed to add notifications")
        raise HTTPException(status_code=500, detail="Failed to create notifications")
    log.info("notifications sent", extra={"count": count})
    return BulkCreatedOut(count=count)


@router.get("/", response_model=List[NotificationOut])
def list_notifications(
    user_id: int = Query(..., ge=1),
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    log: RequestLogger = Depends(op_log("hrm.notifications.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: NotificationStore = Depends(get_notification_repo),
):
    try:
        return repo.list_notifications(user_id, unread_only, limit)
    except Exception:
        log.exception("failed to list notifications")
        raise HTTPException(status_code=500, detail="Failed to retrieve notifications")
