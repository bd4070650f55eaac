"""
Posts component input/output models.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, get_args

from blogcms.domain.entities import ContentFormat, ImageRef, PostStatus, PostView

# --- Sorting ---

# Public sort keys mapped onto stored field paths.
SORT_KEYS: dict[str, tuple[str, ...]] = {
    "-published_at": ("-published_at",),
    "published_at": ("published_at",),
    "-views": ("-analytics.views", "-published_at"),
    "title": ("title",),
    "-created_at": ("-created_at",),
    "created_at": ("created_at",),
    "-updated_at": ("-updated_at",),
}
DEFAULT_SORT = "-published_at"
ADMIN_DEFAULT_SORT = "-created_at"

POST_STATUSES: tuple[str, ...] = get_args(PostStatus)


# --- Input Models ---


@dataclass(frozen=True)
class ListPostsQuery:
    """Filters and paging for the public post list."""

    page: int = 1
    limit: int | None = None
    category: str | None = None  # category slug
    tag: str | None = None  # tag slug
    author: str | None = None  # author id
    featured: bool | None = None
    search: str | None = None
    sort: str = DEFAULT_SORT


@dataclass(frozen=True)
class AdminPostsQuery:
    """Filters for the editorial post list, which covers every status."""

    page: int = 1
    limit: int | None = None
    status: str | None = None  # validated against POST_STATUSES
    category: str | None = None  # category slug
    tag: str | None = None  # tag slug
    author: str | None = None  # author id
    search: str | None = None
    sort: str = ADMIN_DEFAULT_SORT


@dataclass(frozen=True)
class CreatePostInput:
    """Input for creating a post."""

    title: str
    excerpt: str
    content: str
    category: str  # category id
    tags: Sequence[str] = ()  # tag ids or tag names
    slug: str | None = None
    content_format: ContentFormat = "html"
    featured_image: ImageRef | str | None = None
    author_id: str | None = None
    status: PostStatus = "draft"
    is_featured: bool = False
    allow_comments: bool = True
    seo: dict[str, Any] = field(default_factory=dict)
    ai_optimization: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdatePostInput:
    """Partial update; ``None`` leaves a field untouched."""

    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    content_format: ContentFormat | None = None
    category: str | None = None
    tags: Sequence[str] | None = None
    featured_image: ImageRef | str | None = None
    status: PostStatus | None = None
    is_featured: bool | None = None
    allow_comments: bool | None = None
    seo: dict[str, Any] | None = None
    ai_optimization: dict[str, Any] | None = None


# --- Output Models ---


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


@dataclass(frozen=True)
class PostPage:
    posts: list[PostView]
    pagination: Pagination


@dataclass(frozen=True)
class PostDetail:
    post: PostView
    related: list[PostView]
