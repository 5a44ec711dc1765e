"""Роуты /hrm/performance: KPI-цели и оценки."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, InvalidStatusError, NotFoundError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_performance_repo
from srmt_admin.modules.hrm.models import PerformanceGoal, PerformanceReview
from srmt_admin.modules.hrm.schemas.performance import (
    GoalCreate,
    GoalOut,
    GoalProgress,
    ManagerReview,
    ReviewCreate,
    ReviewOut,
    SelfReview,
)

router = APIRouter(prefix="/performance", tags=["hrm-performance"])


class GoalStore(Protocol):
    def add_goal(self, values: dict, created_by: int) -> int: ...

    def list_goals(self, employee_id: Optional[int] = None, status: Optional[str] = None) -> List[PerformanceGoal]: ...

    def update_goal_progress(self, goal_id: int, progress: int) -> None: ...

    def delete_goal(self, goal_id: int) -> None: ...


class ReviewStore(Protocol):
    def add_review(self, values: dict) -> int: ...

    def get_review(self, review_id: int) -> PerformanceReview: ...

    def submit_self_review(self, review_id: int, rating: int, comment: Optional[str]) -> None: ...

    def submit_manager_review(self, review_id: int, rating: int, comment: Optional[str]) -> None: ...

    def complete_review(self, review_id: int) -> None: ...


# --- Цели ---


@router.post("/goals", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_goal(
    payload: GoalCreate,
    log: RequestLogger = Depends(op_log("hrm.performance.goals.add")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: GoalStore = Depends(get_performance_repo),
):
    try:
        goal_id = repo.add_goal(payload.model_dump(), claims.user_id)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id")
    except Exception:
        log.exception("failed to add goal")
        raise HTTPException(status_code=500, detail="Failed to add goal")
    log.info("goal added", extra={"entity_id": goal_id})
    return created(goal_id)


@router.get("/goals", response_model=List[GoalOut])
def list_goals(
    employee_id: Optional[int] = Query(None),
    goal_status: Optional[str] = Query(None, alias="status"),
    log: RequestLogger = Depends(op_log("hrm.performance.goals.list")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: GoalStore = Depends(get_performance_repo),
):
    try:
        return repo.list_goals(employee_id, goal_status)
    except Exception:
        log.exception("failed to list goals")
        raise HTTPException(status_code=500, detail="Failed to retrieve goals")


@router.patch("/goals/{goal_id}/progress")
def update_goal_progress(
    goal_id: int,
    payload: GoalProgress,
    log: RequestLogger = Depends(op_log("hrm.performance.goals.progress")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: GoalStore = Depends(get_performance_repo),
):
    """progress 0..100; при 100 цель переходит в completed."""
    try:
        repo.update_goal_progress(goal_id, payload.progress)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Goal not found")
    except Exception:
        log.exception("failed to update goal progress", extra={"entity_id": goal_id})
        raise HTTPException(status_code=500, detail="Failed to update goal progress")
    return ok()


@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: int,
    log: RequestLogger = Depends(op_log("hrm.performance.goals.delete")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: GoalStore = Depends(get_performance_repo),
):
    try:
        repo.delete_goal(goal_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Goal not found")
    except Exception:
        log.exception("failed to delete goal", extra={"entity_id": goal_id})
        raise HTTPException(status_code=500, detail="Failed to delete goal")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Оценки ---


@router.post("/reviews", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_review(
    payload: ReviewCreate,
    log: RequestLogger = Depends(op_log("hrm.performance.reviews.add")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: ReviewStore = Depends(get_performance_repo),
):
    try:
        review_id = repo.add_review(payload.model_dump())
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid employee_id or reviewer_id")
    except Exception:
        log.exception("failed to add review")
        raise HTTPException(status_code=500, detail="Failed to add review")
    log.info("review added", extra={"entity_id": review_id})
    return created(review_id)


@router.get("/reviews/{review_id}", response_model=ReviewOut)
def get_review(
    review_id: int,
    log: RequestLogger = Depends(op_log("hrm.performance.reviews.get")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: ReviewStore = Depends(get_performance_repo),
):
    try:
        return repo.get_review(review_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Review not found")
    except Exception:
        log.exception("failed to get review", extra={"entity_id": review_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/reviews/{review_id}/self")
def submit_self_review(
    review_id: int,
    payload: SelfReview,
    log: RequestLogger = Depends(op_log("hrm.performance.reviews.self")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: ReviewStore = Depends(get_performance_repo),
):
    try:
        repo.submit_self_review(review_id, payload.rating, payload.comment)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Review not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Self review is already submitted")
    except Exception:
        log.exception("failed to submit self review", extra={"entity_id": review_id})
        raise HTTPException(status_code=500, detail="Failed to submit self review")
    return ok()


@router.post("/reviews/{review_id}/manager")
def submit_manager_review(
    review_id: int,
    payload: ManagerReview,
    log: RequestLogger = Depends(op_log("hrm.performance.reviews.manager")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: ReviewStore = Depends(get_performance_repo),
):
    try:
        repo.submit_manager_review(review_id, payload.rating, payload.comment)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Review not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Review is not awaiting manager review")
    except Exception:
        log.exception("failed to submit manager review", extra={"entity_id": review_id})
        raise HTTPException(status_code=500, detail="Failed to submit manager review")
    return ok()


@router.post("/reviews/{review_id}/complete")
def complete_review(
    review_id: int,
    log: RequestLogger = Depends(op_log("hrm.performance.reviews.complete")),
    claims: Claims = Depends(require_roles("hr", "manager")),
    repo: ReviewStore = Depends(get_performance_repo),
):
    try:
        repo.complete_review(review_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Review not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Review cannot be completed in its current status")
    except Exception:
        log.exception("failed to complete review", extra={"entity_id": review_id})
        raise HTTPException(status_code=500, detail="Failed to complete review")
    log.info("review completed", extra={"entity_id": review_id})
    return ok()
