"""
Единая аутентификация для всех модулей SRMT Admin
"""
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import bcrypt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from .config import settings

# Алгоритм JWT
ALGORITHM = settings.algorithm

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Роль администратора проходит любую проверку ролей
ADMIN_ROLE = "admin"

# OAuth2 схема для получения токена из заголовка Authorization
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_v1_prefix}/auth/sign-in",
    auto_error=False
)


@dataclass
class Claims:
    """Идентичность пользователя из access-токена"""

    user_id: int
    name: str
    roles: List[str] = field(default_factory=list)
    contact_id: Optional[int] = None

    def has_role(self, *roles: str) -> bool:
        return ADMIN_ROLE in self.roles or any(r in self.roles for r in roles)


def _to_bytes(s: str, max_len: int = 72) -> bytes:
    b = s.encode("utf-8")
    return b[:max_len] if len(b) > max_len else b


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверяет пароль против хеша (bcrypt, до 72 байт)."""
    try:
        plain = _to_bytes(plain_password)
        h = hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password
        return bcrypt.checkpw(plain, h)
    except ValueError:
        # Битый хеш в БД
        return False


def get_password_hash(password: str) -> str:
    """Хеширует пароль (bcrypt, до 72 байт)."""
    plain = _to_bytes(password)
    return bcrypt.hashpw(plain, bcrypt.gensalt()).decode("utf-8")


def _create_token(claims: Claims, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    to_encode = {
        "sub": str(claims.user_id),
        "name": claims.name,
        "roles": list(claims.roles),
        "type": token_type,
        "exp": now + expires_delta,
        "iat": now,
    }
    if claims.contact_id is not None:
        to_encode["contact_id"] = claims.contact_id
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(claims: Claims, expires_delta: Optional[timedelta] = None) -> str:
    """
    Создаёт access-токен.

    Payload структура:
        {
            "sub": "42",
            "name": "ivanov",
            "roles": ["hr", "sc"],
            "contact_id": 7,
            "type": "access",
            "exp": 1234567890,
            "iat": 1234567890
        }
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _create_token(claims, ACCESS_TOKEN_TYPE, expires_delta)


def create_refresh_token(claims: Claims, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _create_token(claims, REFRESH_TOKEN_TYPE, expires_delta)


def create_token_pair(claims: Claims) -> Dict[str, str]:
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
    }


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Optional[Claims]:
    """
    Декодирует JWT токен.

    Returns:
        Claims или None, если токен невалиден, просрочен или другого типа
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return Claims(
        user_id=user_id,
        name=payload.get("name", ""),
        roles=list(payload.get("roles") or []),
        contact_id=payload.get("contact_id"),
    )


def get_claims(token: Optional[str] = Depends(oauth2_scheme)) -> Claims:
    """
    Claims текущего пользователя.
    Используется как dependency в FastAPI.

    Raises:
        HTTPException: 401, если токен невалиден или отсутствует
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    claims = decode_token(token)
    if claims is None:
        raise credentials_exception
    return claims


def require_roles(*allowed_roles: str):
    """
    Проверяет наличие хотя бы одной из ролей. Роль admin разрешена всегда.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles("hr"))])
    """

    def _checker(claims: Claims = Depends(get_claims)) -> Claims:
        if claims.has_role(*allowed_roles):
            return claims
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="forbidden",
        )

    return _checker


def require_contact_id(claims: Claims = Depends(get_claims)) -> int:
    """ID контакта текущего пользователя; без привязки к контакту 401."""
    if claims.contact_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="user is not linked to a contact",
        )
    return claims.contact_id


def require_api_key(x_api_key: Optional[str] = Header(default=None, alias="X-API-Key")) -> None:
    """Проверка ключа полевых устройств."""
    expected = settings.api_key
    if not expected or not x_api_key or not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid api key",
        )
