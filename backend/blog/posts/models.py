# backend/blog/posts/models.py
import secrets
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Boolean, JSON,
    Enum as SQLEnum, Index
)
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.time import utcnow
from ..utils.validation import new_object_id, slugify


class PostStatus(str, PyEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_author_created", "author_id", "created_at"),
        Index("ix_posts_category_status", "category_id", "status"),
    )

    id = Column(String(24), primary_key=True, default=new_object_id)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    slug = Column(String(220), unique=True, nullable=False, index=True)
    # User/Category는 조회용 참조일 뿐, 게시글 삭제 시 함께 지우지 않음
    author_id = Column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(String(24), ForeignKey("categories.id"), nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    status = Column(
        SQLEnum(PostStatus, name="post_status", values_callable=lambda e: [m.value for m in e]),
        default=PostStatus.DRAFT,
        nullable=False,
    )
    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    author = relationship("User")
    category = relationship("Category")

    def assign_slug(self, taken: bool = False) -> None:
        """
        제목에서 slug를 만듭니다. 이미 slug가 있으면 바꾸지 않습니다.
        taken=True면 중복을 피하기 위해 짧은 난수 접미사를 붙입니다.
        """
        if self.slug:
            return
        base = slugify(self.title or "") or "post"
        self.slug = f"{base}-{secrets.token_hex(3)}" if taken else base

    def touch(self) -> None:
        self.updated_at = utcnow()

    def mark_published(self) -> None:
        # published_at은 처음 published가 될 때 한 번만 기록
        if self.status == PostStatus.PUBLISHED and self.published_at is None:
            self.published_at = utcnow()

    def __repr__(self) -> str:
        return f"Post(id={self.id!r}, slug={self.slug!r}, status={self.status!r})"
    def __str__(self) -> str:
        return f"{self.title} ({self.id})"
