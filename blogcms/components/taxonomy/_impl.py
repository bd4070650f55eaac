"""
CategoryService and TagService - taxonomy reads and admin writes.

Counters (``post_count`` / ``usage_count``) are owned by the posts
component; these services only read them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from blogcms.core.ports.store import CATEGORIES, POSTS, TAGS, ClockPort, DocumentStorePort, Filter
from blogcms.core.services.slugs import to_slug, unique_slug_for
from blogcms.core.services.views import PostViewLoader
from blogcms.domain.entities import BlogCategory, BlogTag, TaxonomySeo, format_utc
from blogcms.domain.errors import Conflict, InvalidInput, NotFound

from .fc import build_tree, creates_cycle
from .models import (
    TAG_SORTS,
    BulkTagResult,
    CategoryDetail,
    CategoryNode,
    CategoryOrder,
    CreateCategoryInput,
    CreateTagInput,
    UpdateCategoryInput,
    UpdateTagInput,
)

logger = logging.getLogger(__name__)

CATEGORY_SORT = ("order", "name")


def _require_name(name: str | None, what: str) -> str:
    if not name or not name.strip():
        raise InvalidInput(f"{what} name is required", "name_required")
    return name.strip()


def _merge_seo(current: TaxonomySeo, changes: dict[str, Any] | None) -> TaxonomySeo:
    if not changes:
        return current
    return TaxonomySeo.model_validate({**current.model_dump(), **changes})


class CategoryService:
    def __init__(self, store: DocumentStorePort, clock: ClockPort, slug_max_attempts: int = 10000) -> None:
        self._store = store
        self._clock = clock
        self._slug_max_attempts = slug_max_attempts

    # --- Reads ---

    def list_categories(self, include_inactive: bool = False) -> list[BlogCategory]:
        query: Filter = {} if include_inactive else {"is_active": True}
        return [BlogCategory.model_validate(d) for d in self._store.find(CATEGORIES, query, sort=CATEGORY_SORT)]

    def tree(self) -> list[CategoryNode]:
        return build_tree(self.list_categories())

    def get(self, category_id: str) -> BlogCategory:
        doc = self._store.get(CATEGORIES, category_id)
        if doc is None:
            raise NotFound(f"Category {category_id} not found", "category_not_found")
        return BlogCategory.model_validate(doc)

    def get_by_slug(self, slug: str) -> CategoryDetail:
        """An active category with its parent and active subcategories."""
        category = PostViewLoader(self._store).active_category_by_slug(slug)
        parent_doc = self._store.get(CATEGORIES, category.parent_id) if category.parent_id else None
        children = self._store.find(
            CATEGORIES, {"parent_id": category.id, "is_active": True}, sort=CATEGORY_SORT
        )
        return CategoryDetail(
            category=category,
            parent=BlogCategory.model_validate(parent_doc) if parent_doc else None,
            subcategories=[BlogCategory.model_validate(d) for d in children],
        )

    # --- Writes ---

    def create(self, inp: CreateCategoryInput) -> BlogCategory:
        name = _require_name(inp.name, "Category")
        if inp.parent_id:
            self.get(inp.parent_id)
        now = self._clock.now_utc()
        category = BlogCategory(
            name=name,
            slug=self._unique_slug(name),
            description=inp.description,
            image=inp.image,
            parent_id=inp.parent_id or None,
            order=inp.order,
            seo=TaxonomySeo.model_validate(inp.seo),
            created_at=now,
            updated_at=now,
            **({"color": inp.color} if inp.color else {}),
        )
        self._store.insert(CATEGORIES, category.model_dump(mode="json"))
        logger.info("Created category %s (%s)", category.id, category.slug)
        return category

    def update(self, category_id: str, inp: UpdateCategoryInput) -> BlogCategory:
        category = self.get(category_id)
        changes: dict[str, Any] = {}

        if inp.name is not None:
            name = _require_name(inp.name, "Category")
            if name != category.name:
                changes["name"] = name
                changes["slug"] = self._unique_slug(name, exclude_id=category.id)
        if inp.clear_parent:
            changes["parent_id"] = None
        elif inp.parent_id is not None and inp.parent_id != category.parent_id:
            self.get(inp.parent_id)
            if creates_cycle(category.id, inp.parent_id, self._parents()):
                raise InvalidInput("A category cannot be nested under itself", "invalid_parent")
            changes["parent_id"] = inp.parent_id
        if inp.description is not None:
            changes["description"] = inp.description
        if inp.image is not None:
            changes["image"] = inp.image
        if inp.color is not None:
            changes["color"] = inp.color
        if inp.order is not None:
            changes["order"] = inp.order
        if inp.is_active is not None:
            changes["is_active"] = inp.is_active
        if inp.seo:
            changes["seo"] = _merge_seo(category.seo, inp.seo)

        updated = category.model_copy(update={**changes, "updated_at": self._clock.now_utc()})
        self._store.replace(CATEGORIES, updated.model_dump(mode="json"))
        logger.info("Updated category %s (%s)", updated.id, updated.slug)
        return updated

    def delete(self, category_id: str) -> None:
        """Refuses while any post (of any status) or subcategory references the category."""
        category = self.get(category_id)
        with self._store.transaction():
            posts = self._store.count(POSTS, {"category_id": category.id})
            if posts:
                raise Conflict(f"Category has {posts} post(s) and cannot be deleted", "category_has_posts")
            children = self._store.count(CATEGORIES, {"parent_id": category.id})
            if children:
                raise Conflict(
                    f"Category has {children} subcategories and cannot be deleted",
                    "category_has_children",
                )
            self._store.delete(CATEGORIES, category.id)
        logger.info("Deleted category %s (%s)", category.id, category.slug)

    def reorder(self, orders: Sequence[CategoryOrder]) -> list[BlogCategory]:
        if not orders:
            raise InvalidInput("Expected a list of category orders", "orders_required")
        now = self._clock.now_utc()
        updated: list[BlogCategory] = []
        with self._store.transaction():
            for item in orders:
                category = self.get(item.id).model_copy(update={"order": item.order, "updated_at": now})
                self._store.replace(CATEGORIES, category.model_dump(mode="json"))
                updated.append(category)
        logger.info("Reordered %d categories", len(updated))
        return updated

    # --- Internals ---

    def _unique_slug(self, name: str, exclude_id: str | None = None) -> str:
        return unique_slug_for(name, CATEGORIES, self._store, exclude_id, self._slug_max_attempts)

    def _parents(self) -> dict[str, str | None]:
        return {d["id"]: d.get("parent_id") for d in self._store.find(CATEGORIES)}


class TagService:
    def __init__(self, store: DocumentStorePort, clock: ClockPort, slug_max_attempts: int = 10000) -> None:
        self._store = store
        self._clock = clock
        self._slug_max_attempts = slug_max_attempts

    # --- Reads ---

    def list_tags(
        self,
        include_inactive: bool = False,
        sort: str = "usage",
        limit: int | None = None,
    ) -> list[BlogTag]:
        if sort not in TAG_SORTS:
            raise InvalidInput(f"Unsupported tag sort '{sort}'", "invalid_sort")
        if limit is not None and limit < 1:
            raise InvalidInput("limit must be a positive integer", "invalid_limit")
        query: Filter = {} if include_inactive else {"is_active": True}
        docs = self._store.find(TAGS, query, sort=TAG_SORTS[sort], limit=limit)
        return [BlogTag.model_validate(d) for d in docs]

    def popular(self, limit: int = 10) -> list[BlogTag]:
        """Active tags by usage, most used first."""
        return self.list_tags(sort="usage", limit=limit)

    def get(self, tag_id: str) -> BlogTag:
        doc = self._store.get(TAGS, tag_id)
        if doc is None:
            raise NotFound(f"Tag {tag_id} not found", "tag_not_found")
        return BlogTag.model_validate(doc)

    def get_by_slug(self, slug: str) -> BlogTag:
        return PostViewLoader(self._store).active_tag_by_slug(slug)

    # --- Writes ---

    def create(self, inp: CreateTagInput) -> BlogTag:
        name = _require_name(inp.name, "Tag")
        tag = self._new_tag(name, inp.description, inp.color, inp.seo)
        self._store.insert(TAGS, tag.model_dump(mode="json"))
        logger.info("Created tag %s (%s)", tag.id, tag.slug)
        return tag

    def bulk_create(self, names: Sequence[str]) -> BulkTagResult:
        """Create tags by name; names matching an existing tag are skipped."""
        if not names:
            raise InvalidInput("Expected a non-empty list of tag names", "tags_required")
        created: list[BlogTag] = []
        skipped: list[str] = []
        with self._store.transaction():
            for raw in names:
                name = (raw or "").strip()
                if not name or self._exists(name):
                    skipped.append(raw)
                    continue
                tag = self._new_tag(name)
                self._store.insert(TAGS, tag.model_dump(mode="json"))
                created.append(tag)
        logger.info("Bulk-created %d tag(s), skipped %d", len(created), len(skipped))
        return BulkTagResult(created=created, skipped=skipped)

    def update(self, tag_id: str, inp: UpdateTagInput) -> BlogTag:
        tag = self.get(tag_id)
        changes: dict[str, Any] = {}
        if inp.name is not None:
            name = _require_name(inp.name, "Tag")
            if name != tag.name:
                changes["name"] = name
                changes["slug"] = self._unique_slug(name, exclude_id=tag.id)
        if inp.description is not None:
            changes["description"] = inp.description
        if inp.color is not None:
            changes["color"] = inp.color
        if inp.is_active is not None:
            changes["is_active"] = inp.is_active
        if inp.seo:
            changes["seo"] = _merge_seo(tag.seo, inp.seo)

        updated = tag.model_copy(update={**changes, "updated_at": self._clock.now_utc()})
        self._store.replace(TAGS, updated.model_dump(mode="json"))
        logger.info("Updated tag %s (%s)", updated.id, updated.slug)
        return updated

    def delete(self, tag_id: str, force: bool = False) -> int:
        """
        Delete a tag. Returns the number of posts it was removed from.

        Without ``force`` a tag still referenced by any post is refused.
        """
        tag = self.get(tag_id)
        with self._store.transaction():
            posts = self._store.find(POSTS, {"tag_ids": tag.id})
            if posts and not force:
                raise Conflict(
                    f"Tag is used by {len(posts)} post(s); use force=true to remove it",
                    "tag_in_use",
                )
            now = self._clock.now_utc()
            for doc in posts:
                doc["tag_ids"] = [t for t in doc.get("tag_ids", []) if t != tag.id]
                doc["updated_at"] = format_utc(now)
                self._store.replace(POSTS, doc)
            self._store.delete(TAGS, tag.id)
        logger.info("Deleted tag %s (%s), detached from %d post(s)", tag.id, tag.slug, len(posts))
        return len(posts)

    # --- Internals ---

    def _new_tag(
        self,
        name: str,
        description: str = "",
        color: str | None = None,
        seo: dict[str, Any] | None = None,
    ) -> BlogTag:
        now = self._clock.now_utc()
        return BlogTag(
            name=name,
            slug=self._unique_slug(name),
            description=description,
            seo=TaxonomySeo.model_validate(seo or {}),
            created_at=now,
            updated_at=now,
            **({"color": color} if color else {}),
        )

    def _exists(self, name: str) -> bool:
        return self._store.find_one(TAGS, {"$or": [{"name": name}, {"slug": to_slug(name)}]}) is not None

    def _unique_slug(self, name: str, exclude_id: str | None = None) -> str:
        return unique_slug_for(name, TAGS, self._store, exclude_id, self._slug_max_attempts)


def create_category_service(
    store: DocumentStorePort, clock: ClockPort, slug_max_attempts: int = 10000
) -> CategoryService:
    """Factory for the category service."""
    return CategoryService(store, clock, slug_max_attempts)


def create_tag_service(store: DocumentStorePort, clock: ClockPort, slug_max_attempts: int = 10000) -> TagService:
    """Factory for the tag service."""
    return TagService(store, clock, slug_max_attempts)
