# backend/blog/posts/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models import CustomModel, Envelope
from ..categories.schemas import CategoryRef
from .models import PostStatus


class PostCreate(CustomModel):
    title: Optional[str] = Field(None, json_schema_extra={"example": "Hello world"})
    content: Optional[str] = Field(None, json_schema_extra={"example": "The first post on this blog."})
    category: Optional[str] = Field(None, description="카테고리 ID (24자리 16진수)")
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, v):
        if v is None:
            return v
        return [tag.strip() for tag in v if tag and tag.strip()]


class PostUpdate(PostCreate):
    """부분 수정: 값이 주어진 필드만 반영됩니다."""


class AuthorRef(CustomModel):
    id: str
    username: str
    email: str


class PostOut(CustomModel):
    id: str
    title: str
    content: str
    slug: str
    author: AuthorRef
    category: Optional[CategoryRef] = None
    tags: List[str] = Field(default_factory=list)
    status: PostStatus
    views: int
    likes: int
    featured: bool
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class PostResponse(Envelope):
    data: PostOut


class PostListResponse(Envelope):
    count: int
    total: int
    page: int
    pages: int
    data: List[PostOut]


class LikeResponse(Envelope):
    likes: int
