"""Роуты /hrm/analytics."""
from fastapi import APIRouter, Depends, HTTPException, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.logging_config import RequestLogger, op_log

router = APIRouter(prefix="/analytics", tags=["hrm-analytics"])


@router.get("/export")
def export_report(
    log: RequestLogger = Depends(op_log("hrm.analytics.export")),
    claims: Claims = Depends(require_roles("hr")),
):
    # TODO: выгрузка отчётов в xlsx
    raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Export is not implemented")
