import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional

from passlib.context import CryptContext

from ..config import settings
from ..exceptions import AppError
from ..utils.validation import validate_email
from .models import User as UserModel, Role
from .schema import UserCreate, UserUpdate, UserUpdatePassword

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def set_password(user: UserModel, plain_password: str) -> None:
    """평문 비밀번호를 해시하여 사용자에 저장합니다. 평문은 보관하지 않습니다."""
    user.hashed_password = hash_password(plain_password)


async def get_user_by_id(user_id: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def find_conflicting_user(
    db: AsyncSession,
    *,
    email: str | None = None,
    username: str | None = None,
    exclude_id: str | None = None,
) -> Optional[UserModel]:
    """이메일 또는 사용자명이 겹치는 다른 사용자를 찾습니다."""
    conditions = []
    if email:
        conditions.append(UserModel.email == email)
    if username:
        conditions.append(UserModel.username == username)
    if not conditions:
        return None
    stmt = select(UserModel).where(or_(*conditions))
    if exclude_id is not None:
        stmt = stmt.where(UserModel.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


async def create_user(user_data: UserCreate, db: AsyncSession, role: Role = Role.USER) -> UserModel:
    username = (user_data.username or "").strip()
    email = (user_data.email or "").strip().lower()
    password = user_data.password or ""

    if not username or not email or not password:
        raise AppError("Please provide all required fields", 400)
    if not validate_email(email):
        raise AppError("Please provide a valid email", 400)
    if not 3 <= len(username) <= 30:
        raise AppError("Username must be between 3 and 30 characters", 400)

    if await find_conflicting_user(db, email=email, username=username):
        raise AppError("User with this email or username already exists", 400)

    db_user = UserModel(username=username, email=email, role=role, is_active=True)
    set_password(db_user, password)
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"New user registered: {db_user.username} ({db_user.id})")
    return db_user


async def authenticate_user(db: AsyncSession, email: str | None, password: str | None) -> UserModel:
    """
    이메일/비밀번호로 인증합니다.
    실패 사유는 AppError(401)로 전달되며, 비활성 계정은 비밀번호 확인 이후에만 알려줍니다.
    """
    if not email or not password:
        raise AppError("Please provide email and password", 400)

    user = await get_user_by_email(email, db)
    if user is None:
        logger.warning(f"Failed login attempt for email: {email}")
        raise AppError("Invalid credentials", 401)

    if not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login attempt for user: {user.username}")
        raise AppError("Invalid credentials", 401)

    if not user.is_active:
        raise AppError("Account is inactive", 401)

    logger.info(f"User logged in: {user.username} ({user.id})")
    return user


async def update_user(db: AsyncSession, db_user: UserModel, user_in: UserUpdate) -> UserModel:
    """사용자 정보를 수정합니다. 값이 주어진 필드만 반영합니다."""
    fields = {}
    if user_in.username and user_in.username.strip():
        username = user_in.username.strip()
        if not 3 <= len(username) <= 30:
            raise AppError("Username must be between 3 and 30 characters", 400)
        fields["username"] = username
    if user_in.email and user_in.email.strip():
        email = user_in.email.strip().lower()
        if not validate_email(email):
            raise AppError("Please provide a valid email", 400)
        fields["email"] = email

    if fields and await find_conflicting_user(
        db, email=fields.get("email"), username=fields.get("username"), exclude_id=db_user.id
    ):
        raise AppError("User with this email or username already exists", 400)

    for field, value in fields.items():
        setattr(db_user, field, value)
    db_user.touch()

    await db.commit()
    await db.refresh(db_user)
    logger.info(f"User profile updated: {db_user.username} ({db_user.id})")
    return db_user


async def change_password(db: AsyncSession, db_user: UserModel, body: UserUpdatePassword) -> None:
    if not body.current_password or not body.new_password:
        raise AppError("Please provide current and new password", 400)

    if not verify_password(body.current_password, db_user.hashed_password):
        raise AppError("Current password is incorrect", 401)

    set_password(db_user, body.new_password)
    db_user.touch()
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Password changed for user: {db_user.username} ({db_user.id})")
