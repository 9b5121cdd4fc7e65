# backend/blog/posts/router.py
import logging
import math
from typing import Optional

from fastapi import APIRouter, status as http_status

from ..auth.dependencies import CurrentUser, OptionalUser
from ..database import SessionDep
from ..exceptions import AppError
from ..models import MessageResponse
from ..utils.validation import validate_object_id, validate_pagination
from . import service
from .schemas import LikeResponse, PostCreate, PostListResponse, PostOut, PostResponse, PostUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])


def _check_post_id(post_id: str) -> None:
    # DB 조회 전에 형식부터 확인
    if not validate_object_id(post_id):
        raise AppError("Invalid post ID", 400)


@router.get("", response_model=PostListResponse)
async def list_posts(
    db: SessionDep,
    category: Optional[str] = None,
    status: Optional[str] = None,
    author: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
):
    pagination = validate_pagination(page, limit)
    posts, total = await service.list_posts(
        db,
        pagination=pagination,
        category=category,
        status=status,
        author=author,
        oldest_first=sort == "oldest",
    )
    return PostListResponse(
        count=len(posts),
        total=total,
        page=pagination.page,
        pages=math.ceil(total / pagination.limit),
        data=[PostOut.model_validate(p) for p in posts],
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, db: SessionDep, viewer: OptionalUser):
    _check_post_id(post_id)
    post = await service.get_post_or_404(db, post_id)
    post = await service.record_view(db, post)
    logger.info(f"Post retrieved: {post.title} ({post.id}) by {viewer.username if viewer else 'anonymous'}")
    return PostResponse(data=PostOut.model_validate(post))


@router.post("", response_model=PostResponse, status_code=http_status.HTTP_201_CREATED)
async def create_post(body: PostCreate, db: SessionDep, current_user: CurrentUser):
    post = await service.create_post(db, author=current_user, data=body)
    return PostResponse(data=PostOut.model_validate(post))


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(post_id: str, body: PostUpdate, db: SessionDep, current_user: CurrentUser):
    _check_post_id(post_id)
    post = await service.get_post_or_404(db, post_id)
    post = await service.update_post(db, post, body, actor=current_user)
    return PostResponse(data=PostOut.model_validate(post))


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, db: SessionDep, current_user: CurrentUser):
    _check_post_id(post_id)
    post = await service.get_post_or_404(db, post_id)
    await service.delete_post(db, post, actor=current_user)
    return MessageResponse(message="Post deleted successfully")


@router.put("/{post_id}/like", response_model=LikeResponse)
async def like_post(post_id: str, db: SessionDep, current_user: CurrentUser):
    _check_post_id(post_id)
    post = await service.get_post_or_404(db, post_id)
    likes = await service.like_post(db, post)
    return LikeResponse(likes=likes)
