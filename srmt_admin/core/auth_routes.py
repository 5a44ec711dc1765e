"""
API роуты для аутентификации
"""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from srmt_admin.core.auth import (
    REFRESH_TOKEN_TYPE,
    Claims,
    create_token_pair,
    decode_token,
    get_claims,
    verify_password,
)
from srmt_admin.core.config import settings
from srmt_admin.core.errors import NotFoundError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_user_repo
from srmt_admin.modules.hrm.models import User

router = APIRouter(prefix=f"{settings.api_v1_prefix}/auth", tags=["auth"])

REFRESH_COOKIE = "refresh_token"


class SignInRequest(BaseModel):
    """Запрос на вход"""

    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)


class TokenPair(BaseModel):
    status: int = 200
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccessTokenResponse(BaseModel):
    status: int = 200
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    """Информация о текущем пользователе"""

    user_id: int
    name: str
    roles: List[str] = []
    contact_id: Optional[int] = None


class UserFinder(Protocol):
    def get_user_by_name(self, name: str) -> User: ...

    def get_user(self, user_id: int) -> User: ...


def _claims_for(user: User) -> Claims:
    return Claims(user_id=user.id, name=user.name, roles=user.role_names(), contact_id=user.contact_id)


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        max_age=settings.refresh_token_expire_days * 24 * 3600,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path=f"{settings.api_v1_prefix}/auth",
    )


@router.post("/sign-in", response_model=TokenPair)
def sign_in(
    payload: SignInRequest,
    response: Response,
    log: RequestLogger = Depends(op_log("auth.sign_in")),
    repo: UserFinder = Depends(get_user_repo),
):
    """
    Вход в систему.
    Принимает name и password, возвращает access и refresh токены;
    refresh дополнительно ставится в HttpOnly cookie.
    """
    try:
        user = repo.get_user_by_name(payload.name)
    except NotFoundError:
        log.info("sign-in: unknown user")
        raise HTTPException(status_code=400, detail="invalid credentials")
    except Exception:
        log.exception("failed to get user")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    if not verify_password(payload.password, user.pass_hash):
        log.info("sign-in: wrong password", extra={"user_id": user.id})
        raise HTTPException(status_code=400, detail="invalid credentials")

    if not user.is_active:
        log.warning("sign-in: user is deactivated", extra={"user_id": user.id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="user is deactivated")

    tokens = create_token_pair(_claims_for(user))
    _set_refresh_cookie(response, tokens["refresh_token"])
    log.info("user signed in", extra={"user_id": user.id})
    return TokenPair(**tokens)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    log: RequestLogger = Depends(op_log("auth.refresh")),
    repo: UserFinder = Depends(get_user_repo),
):
    """Новый access-токен по refresh-cookie; cookie ротируется."""
    unauthorized = HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid refresh token")
    if not refresh_token:
        raise unauthorized
    claims = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    if claims is None:
        raise unauthorized

    # Роли и активность берутся из БД, а не из старого токена
    try:
        user = repo.get_user(claims.user_id)
    except NotFoundError:
        raise unauthorized
    except Exception:
        log.exception("failed to get user", extra={"user_id": claims.user_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="user is deactivated")

    tokens = create_token_pair(_claims_for(user))
    _set_refresh_cookie(response, tokens["refresh_token"])
    return AccessTokenResponse(access_token=tokens["access_token"])


@router.post("/sign-out")
def sign_out(response: Response):
    response.delete_cookie(REFRESH_COOKIE, path=f"{settings.api_v1_prefix}/auth")
    return ok()


@router.get("/me", response_model=MeResponse)
def me(claims: Claims = Depends(get_claims)):
    return MeResponse(user_id=claims.user_id, name=claims.name, roles=claims.roles, contact_id=claims.contact_id)
