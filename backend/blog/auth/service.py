from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from ..config import settings

BEARER_PREFIX = "Bearer "


class InvalidToken(Exception):
    """서명이 맞지 않거나 만료된 토큰."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


def _claim_value(user: Any, name: str) -> Any:
    if isinstance(user, dict):
        return user.get(name)
    return getattr(user, name, None)


def issue_token(user: Any, expires_delta: Optional[timedelta] = None) -> str:
    """
    사용자(모델 객체 또는 dict)의 id/username/email/role을 담은 토큰을 발급합니다.
    만료 기본값은 settings.JWT_EXPIRE_DAYS 입니다.
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_EXPIRE_DAYS)
    now = datetime.now(timezone.utc)
    role = _claim_value(user, "role") or "user"
    to_encode = {
        "id": str(_claim_value(user, "id")),
        "username": _claim_value(user, "username"),
        "email": _claim_value(user, "email"),
        "role": getattr(role, "value", role),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        # 변조, 형식 오류, 만료 모두 동일하게 취급
        raise InvalidToken() from e


def extract_token(auth_header: Optional[str]) -> Optional[str]:
    """`Bearer <token>` 형식의 Authorization 헤더에서 토큰만 꺼냅니다."""
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):]
