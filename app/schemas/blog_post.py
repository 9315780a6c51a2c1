from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.base import ApiModel, reject_null

DEFAULT_BLOG_CATEGORY = "교육경험"


class BlogPostCreate(ApiModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    summary: Optional[str]
    category: str
    tags: Optional[List[str]]
    is_published: bool


class BlogPostCreateRelaxed(BlogPostCreate):
    """Create payload accepted by POST /api/blog-posts: the store fills the gaps."""

    summary: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

    @field_validator("category", "is_published", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class BlogPostUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    summary: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

    @field_validator("title", "content", "category", "is_published", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class BlogPostOut(ApiModel):
    id: str
    title: str
    content: str
    summary: Optional[str] = None
    category: str
    tags: Optional[List[str]] = None
    is_published: bool
    created_at: datetime
    updated_at: datetime
