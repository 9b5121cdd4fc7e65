# backend/blog/categories/models.py
from sqlalchemy import Column, String, DateTime
from ..database import Base
from ..utils.time import utcnow
from ..utils.validation import new_object_id, slugify


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(50), unique=True, nullable=False)
    slug = Column(String(60), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    color = Column(String(20), default="#000000", nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def assign_slug(self) -> None:
        """이름에서 slug를 한 번만 만듭니다."""
        if not self.slug and self.name:
            self.slug = slugify(self.name)

    def __repr__(self) -> str:
        return f"Category(id={self.id!r}, name={self.name!r}, slug={self.slug!r})"
    def __str__(self) -> str:
        return self.name
