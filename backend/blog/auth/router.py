from fastapi import APIRouter, status

from ..database import SessionDep
from ..models import MessageResponse
from ..users import service as user_service
from ..users.schema import (
    AuthResponse,
    UserCreate,
    UserLogin,
    UserMe,
    UserPublic,
    UserResponse,
    UserUpdate,
    UserUpdatePassword,
)
from .dependencies import CurrentUser
from .service import issue_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: UserCreate, db: SessionDep):
    user = await user_service.create_user(body, db)
    return AuthResponse(token=issue_token(user), user=UserPublic.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(body: UserLogin, db: SessionDep):
    user = await user_service.authenticate_user(db, body.email, body.password)
    return AuthResponse(token=issue_token(user), user=UserPublic.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def read_me(current_user: CurrentUser):
    return UserResponse(user=UserMe.model_validate(current_user))


@router.put("/me", response_model=UserResponse)
async def update_me(body: UserUpdate, db: SessionDep, current_user: CurrentUser):
    user = await user_service.update_user(db, db_user=current_user, user_in=body)
    return UserResponse(user=UserMe.model_validate(user))


@router.put("/password", response_model=MessageResponse)
async def change_password(body: UserUpdatePassword, db: SessionDep, current_user: CurrentUser):
    await user_service.change_password(db, db_user=current_user, body=body)
    return MessageResponse(message="Password updated successfully")
