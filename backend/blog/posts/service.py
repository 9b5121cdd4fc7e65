import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..categories import service as category_service
from ..categories.models import Category
from ..exceptions import AppError
from ..users.models import User, Role
from ..utils.validation import Pagination, validate_object_id
from .models import Post, PostStatus
from .schemas import PostCreate, PostUpdate

logger = logging.getLogger(__name__)

TITLE_MIN, TITLE_MAX = 3, 200
CONTENT_MIN = 10


def _with_refs(stmt):
    return stmt.options(selectinload(Post.author), selectinload(Post.category))


def _check_title(title: str) -> str:
    title = title.strip()
    if len(title) < TITLE_MIN:
        raise AppError(f"Title must be at least {TITLE_MIN} characters long", 400)
    if len(title) > TITLE_MAX:
        raise AppError(f"Title cannot exceed {TITLE_MAX} characters", 400)
    return title


def _check_content(content: str) -> str:
    if len(content) < CONTENT_MIN:
        raise AppError(f"Content must be at least {CONTENT_MIN} characters long", 400)
    return content


async def _resolve_category(db: AsyncSession, category_id: str) -> Category:
    if not validate_object_id(category_id):
        raise AppError("Invalid category ID", 400)
    category = await category_service.get_by_id(db, category_id)
    if category is None:
        raise AppError("Category not found", 400)
    return category


async def _slug_taken(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(Post.id).where(Post.slug == slug).limit(1))
    return result.first() is not None


async def get_post(db: AsyncSession, post_id: str) -> Optional[Post]:
    stmt = _with_refs(select(Post).where(Post.id == post_id)).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_post_or_404(db: AsyncSession, post_id: str) -> Post:
    post = await get_post(db, post_id)
    if post is None:
        raise AppError("Post not found", 404)
    return post


async def list_posts(
    db: AsyncSession,
    *,
    pagination: Pagination,
    category: Optional[str] = None,
    status: Optional[str] = None,
    author: Optional[str] = None,
    oldest_first: bool = False,
) -> Tuple[List[Post], int]:
    conditions = []
    if category:
        conditions.append(Post.category_id == category)
    if status:
        # 정의되지 않은 상태값은 일치하는 글이 없음
        if status not in {s.value for s in PostStatus}:
            return [], 0
        conditions.append(Post.status == PostStatus(status))
    if author:
        conditions.append(Post.author_id == author)

    order = Post.created_at.asc() if oldest_first else Post.created_at.desc()
    stmt = (
        _with_refs(select(Post))
        .where(*conditions)
        .order_by(order, Post.id)
        .offset(pagination.skip)
        .limit(pagination.limit)
    )
    posts = list((await db.execute(stmt)).scalars().all())

    total = (await db.execute(select(func.count(Post.id)).where(*conditions))).scalar_one()
    logger.info(f"Posts retrieved: {len(posts)} of {total}")
    return posts, total


async def create_post(db: AsyncSession, author: User, data: PostCreate) -> Post:
    if not data.title or not data.title.strip() or not data.content:
        raise AppError("Please provide title and content", 400)

    post = Post(
        title=_check_title(data.title),
        content=_check_content(data.content),
        tags=data.tags or [],
        status=data.status or PostStatus.DRAFT,
        views=0,
        likes=0,
        featured=False,
        published_at=None,
    )
    post.author = author
    post.category = await _resolve_category(db, data.category) if data.category else None

    post.assign_slug()
    if await _slug_taken(db, post.slug):
        post.slug = None
        post.assign_slug(taken=True)
    post.mark_published()

    db.add(post)
    await db.commit()
    logger.info(f"Post created: {post.title} by {author.username}")
    return post


def ensure_can_modify(post: Post, user: User, action: str) -> None:
    """작성자 본인 또는 admin만 수정/삭제할 수 있습니다."""
    if post.author_id != user.id and Role(user.role) != Role.ADMIN:
        raise AppError(f"Not authorized to {action} this post", 403)


async def update_post(db: AsyncSession, post: Post, data: PostUpdate, actor: User) -> Post:
    ensure_can_modify(post, actor, "update")

    provided = data.model_fields_set
    if "title" in provided and data.title is not None:
        post.title = _check_title(data.title)
    if "content" in provided and data.content is not None:
        post.content = _check_content(data.content)
    if "tags" in provided and data.tags is not None:
        post.tags = data.tags
    if "status" in provided and data.status is not None:
        post.status = data.status
    if "category" in provided and data.category is not None:
        post.category = await _resolve_category(db, data.category)

    # slug는 최초 생성 후 변경하지 않음
    post.mark_published()
    post.touch()
    await db.commit()
    logger.info(f"Post updated: {post.title} by {actor.username}")
    return post


async def delete_post(db: AsyncSession, post: Post, actor: User) -> None:
    ensure_can_modify(post, actor, "delete")
    await db.delete(post)
    await db.commit()
    logger.info(f"Post deleted: {post.title} by {actor.username}")


async def record_view(db: AsyncSession, post: Post) -> Post:
    # 읽은 값에 1을 더해 전체를 저장 (동시 요청 시 갱신 유실 가능)
    post.views = post.views + 1
    post.touch()
    await db.commit()
    return post


async def like_post(db: AsyncSession, post: Post) -> int:
    post.likes = post.likes + 1
    post.touch()
    await db.commit()
    return post.likes
