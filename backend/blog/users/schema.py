from pydantic import Field
from typing import Optional
from datetime import datetime

from ..models import CustomModel, Envelope
from .models import Role


class UserCreate(CustomModel):
    username: Optional[str] = Field(None, json_schema_extra={"example": "johndoe"})
    email: Optional[str] = Field(None, json_schema_extra={"example": "user@example.com"})
    password: Optional[str] = Field(None, json_schema_extra={"example": "Strongpass123"})


class UserLogin(CustomModel):
    email: Optional[str] = Field(None, json_schema_extra={"example": "user@example.com"})
    password: Optional[str] = Field(None, json_schema_extra={"example": "Strongpass123"})


class UserUpdate(CustomModel):
    username: Optional[str] = Field(None, json_schema_extra={"example": "johnny"})
    email: Optional[str] = Field(None, json_schema_extra={"example": "new_email@example.com"})


class UserUpdatePassword(CustomModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class UserPublic(CustomModel):
    id: str
    username: str
    email: str
    role: Role


class UserMe(UserPublic):
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthResponse(Envelope):
    token: str
    user: UserPublic


class UserResponse(Envelope):
    user: UserMe
