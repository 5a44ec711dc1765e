"""Роуты /files/categories."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, status

from srmt_admin.core.auth import Claims, get_claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, UniqueViolationError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.files.dependencies import get_files_repo
from srmt_admin.modules.files.models import FileCategory
from srmt_admin.modules.files.schemas import CategoryCreate, CategoryOut

router = APIRouter(prefix="/categories", tags=["files"])


class CategoryRepository(Protocol):
    def add_category(
        self, name: str, display_name: str, description: Optional[str] = None, parent_id: Optional[int] = None
    ) -> int: ...

    def list_categories(self) -> List[FileCategory]: ...


@router.get("/", response_model=List[CategoryOut])
def list_categories(
    log: RequestLogger = Depends(op_log("files.categories.list")),
    claims: Claims = Depends(get_claims),
    repo: CategoryRepository = Depends(get_files_repo),
):
    try:
        return repo.list_categories()
    except Exception:
        log.exception("failed to list categories")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_category(
    payload: CategoryCreate,
    log: RequestLogger = Depends(op_log("files.categories.add")),
    claims: Claims = Depends(require_roles("admin")),
    repo: CategoryRepository = Depends(get_files_repo),
):
    try:
        category_id = repo.add_category(**payload.model_dump())
    except UniqueViolationError:
        log.warning("category already exists", extra={"reason": payload.name})
        raise HTTPException(status_code=409, detail="Category with this name already exists")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Parent category not found")
    except Exception:
        log.exception("failed to add category")
        raise HTTPException(status_code=500, detail="Failed to add category")
    log.info("category added", extra={"entity_id": category_id})
    return created(category_id)
