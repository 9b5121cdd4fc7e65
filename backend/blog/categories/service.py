import logging
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import AppError
from ..utils.validation import sanitize_input, slugify
from .models import Category
from .schemas import CategoryCreate

logger = logging.getLogger(__name__)


async def get_by_id(db: AsyncSession, category_id: str) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.id == category_id))
    return result.scalar_one_or_none()


async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    name = data.name.strip()
    slug = slugify(name)
    if not slug:
        raise AppError("Category name must contain letters or digits", 400)

    existing = await db.execute(
        select(Category).where(or_(Category.name == name, Category.slug == slug)).limit(1)
    )
    if existing.scalar_one_or_none():
        raise AppError(f"Category '{name}' already exists", 400)

    category = Category(
        name=name,
        description=sanitize_input(data.description.strip()) if data.description else None,
        color=data.color,
    )
    category.assign_slug()
    db.add(category)
    await db.commit()
    logger.info(f"Category created: {category.name} ({category.id})")
    return category
