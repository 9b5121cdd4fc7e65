from typing import Optional

from pydantic import Field

from ..models import CustomModel


class CategoryCreate(CustomModel):
    name: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    color: str = Field("#000000", pattern=r"^#[0-9a-fA-F]{6}$")


class CategoryRef(CustomModel):
    """게시글 응답에 포함되는 카테고리 요약."""
    id: str
    name: str
    slug: str

