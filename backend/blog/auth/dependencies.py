import logging
from typing import Annotated, Iterable, Optional

from fastapi import Depends, Header

from ..database import SessionDep
from ..exceptions import AppError
from ..users.models import User, Role
from ..users import service as user_service
from . import service as auth_service

logger = logging.getLogger(__name__)


async def get_current_user(
    db: SessionDep,
    authorization: Optional[str] = Header(default=None),
) -> User:
    token = auth_service.extract_token(authorization)
    if not token:
        logger.warning("Authentication failed: No token provided")
        raise AppError("Access denied. No token provided.", 401)

    try:
        claims = auth_service.verify_token(token)
    except auth_service.InvalidToken:
        logger.warning("Authentication failed: invalid or expired token")
        raise AppError("Invalid or expired token.", 401)

    user = await user_service.get_user_by_id(str(claims.get("id")), db)
    if user is None:
        logger.warning(f"Authentication failed: User not found - {claims.get('id')}")
        raise AppError("Invalid token. User not found.", 401)

    if not user.is_active:
        logger.warning(f"Authentication failed: Inactive user - {user.id}")
        raise AppError("Account is inactive.", 401)

    logger.debug(f"User authenticated: {user.username} ({user.id})")
    return user


async def get_optional_user(
    db: SessionDep,
    authorization: Optional[str] = Header(default=None),
) -> Optional[User]:
    """토큰이 없거나 잘못되어도 요청을 거부하지 않습니다."""
    token = auth_service.extract_token(authorization)
    if not token:
        return None
    try:
        claims = auth_service.verify_token(token)
    except auth_service.InvalidToken:
        return None
    user = await user_service.get_user_by_id(str(claims.get("id")), db)
    if user is None or not user.is_active:
        return None
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


def check_roles(user: Optional[User], roles: Iterable[Role]) -> None:
    """
    권한 판정 함수. 사용자 정보가 없으면 401, 역할이 허용 집합에 없으면 403.
    """
    if user is None:
        logger.warning("Authorization failed: No user in request")
        raise AppError("Authentication required.", 401)

    allowed = {Role(r) for r in roles}
    if Role(user.role) not in allowed:
        logger.warning(
            f"Authorization failed: User {user.username} with role {Role(user.role).value} "
            "attempted to access restricted resource"
        )
        raise AppError("Access denied. Insufficient permissions.", 403)


def require_roles(*roles: Role):
    """허용 역할 목록을 받아 FastAPI 의존성을 만듭니다."""
    async def _dependency(current_user: CurrentUser) -> User:
        check_roles(current_user, roles)
        return current_user

    return _dependency


require_admin = require_roles(Role.ADMIN)
