"""
Taxonomy component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from blogcms.domain.entities import BlogCategory, BlogTag, ImageRef

# Public tag sort keys mapped onto stored field paths.
TAG_SORTS: dict[str, tuple[str, ...]] = {
    "usage": ("-usage_count", "name"),
    "name": ("name",),
    "recent": ("-created_at",),
}


# --- Categories ---


@dataclass(frozen=True)
class CreateCategoryInput:
    name: str
    description: str = ""
    image: ImageRef | None = None
    color: str | None = None
    parent_id: str | None = None
    order: int = 0
    seo: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateCategoryInput:
    """Partial update; ``None`` leaves a field untouched.

    ``clear_parent`` moves the category to the top level.
    """

    name: str | None = None
    description: str | None = None
    image: ImageRef | None = None
    color: str | None = None
    parent_id: str | None = None
    clear_parent: bool = False
    order: int | None = None
    is_active: bool | None = None
    seo: dict[str, Any] | None = None


@dataclass(frozen=True)
class CategoryOrder:
    id: str
    order: int


@dataclass
class CategoryNode:
    category: BlogCategory
    children: list[CategoryNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.category.model_dump(mode="json"),
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class CategoryDetail:
    category: BlogCategory
    parent: BlogCategory | None
    subcategories: list[BlogCategory]


# --- Tags ---


@dataclass(frozen=True)
class CreateTagInput:
    name: str
    description: str = ""
    color: str | None = None
    seo: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateTagInput:
    name: str | None = None
    description: str | None = None
    color: str | None = None
    is_active: bool | None = None
    seo: dict[str, Any] | None = None


@dataclass(frozen=True)
class BulkTagResult:
    created: list[BlogTag]
    skipped: list[str]
