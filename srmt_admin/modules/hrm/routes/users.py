"""
Роуты /users и /roles: учётные записи и роли (только admin).

Пароль хранится только в виде bcrypt-хеша; при смене пароля хеш
пересчитывается здесь же, в роуте.
"""
from typing import List, Optional, Protocol, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, get_password_hash, require_roles
from srmt_admin.core.errors import (
    ContactAlreadyLinkedError,
    ForeignKeyViolationError,
    NotFoundError,
    UniqueViolationError,
)
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_user_repo
from srmt_admin.modules.hrm.models import Role, User
from srmt_admin.modules.hrm.schemas.user import (
    RoleAssign,
    RoleCreate,
    RoleOut,
    RoleUpdate,
    UserCreate,
    UserListItem,
    UserOut,
    UserUpdate,
)

router = APIRouter(tags=["users"])

INVALID_ROLES = "One or more role IDs are invalid"


class UserAdminStore(Protocol):
    def add_user(
        self,
        name: str,
        pass_hash: str,
        role_ids: Sequence[int],
        contact_id: Optional[int] = None,
        contact: Optional[dict] = None,
    ) -> int: ...

    def get_user(self, user_id: int) -> User: ...

    def list_users(
        self,
        organization_id: Optional[int] = None,
        department_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[User]: ...

    def update_user(self, user_id: int, values: dict, role_ids: Optional[Sequence[int]] = None) -> None: ...

    def delete_user(self, user_id: int) -> None: ...

    def assign_role(self, user_id: int, role_id: int) -> None: ...

    def revoke_role(self, user_id: int, role_id: int) -> None: ...


class RoleStore(Protocol):
    def list_roles(self) -> List[Role]: ...

    def add_role(self, values: dict) -> int: ...

    def update_role(self, role_id: int, values: dict) -> None: ...

    def delete_role(self, role_id: int) -> None: ...


# --- Пользователи ---


@router.get("/users", response_model=List[UserListItem])
def list_users(
    organization_id: Optional[int] = Query(None),
    department_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    log: RequestLogger = Depends(op_log("users.list")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    try:
        users = repo.list_users(organization_id, department_id, is_active)
    except Exception:
        log.exception("failed to list users")
        raise HTTPException(status_code=500, detail="Failed to retrieve users")
    return [UserListItem(id=u.id, name=u.name, roles=u.role_names()) for u in users]


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    log: RequestLogger = Depends(op_log("users.get")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    try:
        return repo.get_user(user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except Exception:
        log.exception("failed to get user", extra={"entity_id": user_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_user(
    payload: UserCreate,
    log: RequestLogger = Depends(op_log("users.add")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    """Пользователь с привязкой к существующему контакту или к новому."""
    if (payload.contact_id is None) == (payload.contact is None):
        raise HTTPException(
            status_code=400, detail="Must provide either 'contact_id' or 'contact' object, but not both"
        )
    contact = payload.contact.model_dump() if payload.contact is not None else None
    try:
        user_id = repo.add_user(
            payload.login,
            get_password_hash(payload.password),
            payload.role_ids,
            contact_id=payload.contact_id,
            contact=contact,
        )
    except NotFoundError:
        raise HTTPException(status_code=400, detail="Contact not found")
    except ContactAlreadyLinkedError:
        log.warning("contact already linked", extra={"entity_id": payload.contact_id})
        raise HTTPException(status_code=409, detail="This contact is already linked to a user")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Login already exists")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail=INVALID_ROLES)
    except Exception:
        log.exception("failed to add user")
        raise HTTPException(status_code=500, detail="Failed to add user")
    log.info("user added", extra={"entity_id": user_id})
    return created(user_id)


@router.patch("/users/{user_id}")
def edit_user(
    user_id: int,
    payload: UserUpdate,
    log: RequestLogger = Depends(op_log("users.edit")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    values = payload.model_dump(exclude_unset=True, exclude={"login", "password", "role_ids"})
    if payload.login is not None:
        values["name"] = payload.login
    if payload.password is not None:
        values["pass_hash"] = get_password_hash(payload.password)
    try:
        repo.update_user(user_id, values, payload.role_ids)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Login already exists")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail=INVALID_ROLES)
    except Exception:
        log.exception("failed to update user", extra={"entity_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to update user")
    log.info("user updated", extra={"entity_id": user_id})
    return ok()


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    log: RequestLogger = Depends(op_log("users.delete")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    try:
        repo.delete_user(user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Cannot delete user: it is referenced by other records")
    except Exception:
        log.exception("failed to delete user", extra={"entity_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to delete user")
    log.info("user deleted", extra={"entity_id": user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users/{user_id}/roles")
def assign_role(
    user_id: int,
    payload: RoleAssign,
    log: RequestLogger = Depends(op_log("users.roles.assign")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    try:
        repo.assign_role(user_id, payload.role_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User or role not found")
    except Exception:
        log.exception("failed to assign role", extra={"entity_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to assign role")
    log.info("role assigned", extra={"entity_id": user_id, "reason": str(payload.role_id)})
    return ok()


@router.delete("/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_role(
    user_id: int,
    role_id: int,
    log: RequestLogger = Depends(op_log("users.roles.revoke")),
    claims: Claims = Depends(require_roles("admin")),
    repo: UserAdminStore = Depends(get_user_repo),
):
    try:
        repo.revoke_role(user_id, role_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User role not found")
    except Exception:
        log.exception("failed to revoke role", extra={"entity_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to revoke role")
    log.info("role revoked", extra={"entity_id": user_id, "reason": str(role_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Роли ---


@router.get("/roles", response_model=List[RoleOut])
def list_roles(
    log: RequestLogger = Depends(op_log("roles.list")),
    claims: Claims = Depends(require_roles("admin")),
    repo: RoleStore = Depends(get_user_repo),
):
    try:
        return repo.list_roles()
    except Exception:
        log.exception("failed to list roles")
        raise HTTPException(status_code=500, detail="Failed to retrieve roles")


@router.post("/roles", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_role(
    payload: RoleCreate,
    log: RequestLogger = Depends(op_log("roles.add")),
    claims: Claims = Depends(require_roles("admin")),
    repo: RoleStore = Depends(get_user_repo),
):
    try:
        role_id = repo.add_role(payload.model_dump())
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Role already exists")
    except Exception:
        log.exception("failed to add role")
        raise HTTPException(status_code=500, detail="Failed to add role")
    log.info("role added", extra={"entity_id": role_id})
    return created(role_id)


@router.patch("/roles/{role_id}")
def edit_role(
    role_id: int,
    payload: RoleUpdate,
    log: RequestLogger = Depends(op_log("roles.edit")),
    claims: Claims = Depends(require_roles("admin")),
    repo: RoleStore = Depends(get_user_repo),
):
    try:
        repo.update_role(role_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Role not found")
    except UniqueViolationError:
        raise HTTPException(status_code=409, detail="Role already exists")
    except Exception:
        log.exception("failed to update role", extra={"entity_id": role_id})
        raise HTTPException(status_code=500, detail="Failed to update role")
    return ok()


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    role_id: int,
    log: RequestLogger = Depends(op_log("roles.delete")),
    claims: Claims = Depends(require_roles("admin")),
    repo: RoleStore = Depends(get_user_repo),
):
    try:
        repo.delete_role(role_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Role not found")
    except Exception:
        log.exception("failed to delete role", extra={"entity_id": role_id})
        raise HTTPException(status_code=500, detail="Failed to delete role")
    log.info("role deleted", extra={"entity_id": role_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
