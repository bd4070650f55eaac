from typing import Any, Literal

from pydantic import BaseModel, Field

from blogcms.domain.entities import ImageRef

# --- Shared Enums/Types ---
PostStatus = Literal["draft", "published", "archived"]
ContentFormat = Literal["html", "markdown"]


# --- Posts ---
class PostCreateRequest(BaseModel):
    # Required fields default to "" so the service reports every missing one at once.
    title: str = ""
    excerpt: str = ""
    content: str = ""
    category: str = ""
    tags: list[str] = []
    slug: str | None = None
    content_format: ContentFormat = "html"
    featured_image: ImageRef | str | None = None
    author_id: str | None = None
    status: PostStatus = "draft"
    is_featured: bool = False
    allow_comments: bool = True
    seo: dict[str, Any] = {}
    ai_optimization: dict[str, Any] = {}


class PostUpdateRequest(BaseModel):
    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    content_format: ContentFormat | None = None
    category: str | None = None
    tags: list[str] | None = None
    featured_image: ImageRef | str | None = None
    status: PostStatus | None = None
    is_featured: bool | None = None
    allow_comments: bool | None = None
    seo: dict[str, Any] | None = None
    ai_optimization: dict[str, Any] | None = None


class PostDuplicateRequest(BaseModel):
    author_id: str | None = None


# --- Categories ---
class CategoryCreateRequest(BaseModel):
    name: str = ""
    description: str = ""
    image: ImageRef | None = None
    color: str | None = None
    parent_id: str | None = None
    order: int = 0
    seo: dict[str, Any] = {}


class CategoryUpdateRequest(BaseModel):
    """An explicit ``"parent_id": null`` moves the category to the top level."""

    name: str | None = None
    description: str | None = None
    image: ImageRef | None = None
    color: str | None = None
    parent_id: str | None = None
    order: int | None = None
    is_active: bool | None = None
    seo: dict[str, Any] | None = None


class CategoryOrderItem(BaseModel):
    id: str
    order: int


class CategoryReorderRequest(BaseModel):
    categories: list[CategoryOrderItem] = Field(min_length=1)


# --- Tags ---
class TagCreateRequest(BaseModel):
    name: str = ""
    description: str = ""
    color: str | None = None
    seo: dict[str, Any] = {}


class TagUpdateRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    color: str | None = None
    is_active: bool | None = None
    seo: dict[str, Any] | None = None


class TagBulkRequest(BaseModel):
    tags: list[str] = Field(min_length=1)
