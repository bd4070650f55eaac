"""
Post view population.

Resolves a post's category, tags and author into a PostView. Lookups are
cached per loader instance, so populating a page of posts reads each
category/tag/author at most once.
"""

from __future__ import annotations

from blogcms.core.ports.store import (
    AUTHORS,
    CATEGORIES,
    POSTS,
    TAGS,
    DocumentStorePort,
    Filter,
)
from blogcms.domain.entities import Author, BlogCategory, BlogPost, BlogTag, PostView
from blogcms.domain.errors import NotFound

PUBLISHED: Filter = {"status": "published"}
NEWEST_FIRST = ("-published_at",)


class PostViewLoader:
    """Builds PostViews from stored posts."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._categories: dict[str, BlogCategory | None] = {}
        self._tags: dict[str, BlogTag | None] = {}
        self._authors: dict[str, Author | None] = {}

    def _category(self, category_id: str | None) -> BlogCategory | None:
        if not category_id:
            return None
        if category_id not in self._categories:
            doc = self._store.get(CATEGORIES, category_id)
            self._categories[category_id] = BlogCategory.model_validate(doc) if doc else None
        return self._categories[category_id]

    def _tag(self, tag_id: str) -> BlogTag | None:
        if tag_id not in self._tags:
            doc = self._store.get(TAGS, tag_id)
            self._tags[tag_id] = BlogTag.model_validate(doc) if doc else None
        return self._tags[tag_id]

    def _author(self, author_id: str | None) -> Author | None:
        if not author_id:
            return None
        if author_id not in self._authors:
            doc = self._store.get(AUTHORS, author_id)
            self._authors[author_id] = Author.model_validate(doc) if doc else None
        return self._authors[author_id]

    def populate(self, post: BlogPost) -> PostView:
        # Dangling tag references are skipped rather than failing the view.
        tags = [tag for tag in (self._tag(tid) for tid in post.tag_ids) if tag is not None]
        return PostView(
            **post.model_dump(exclude={"is_published"}),
            category=self._category(post.category_id),
            tags=tags,
            author=self._author(post.author_id),
        )

    def populate_many(self, posts: list[BlogPost]) -> list[PostView]:
        return [self.populate(post) for post in posts]

    def published(
        self,
        filter: Filter | None = None,
        *,
        sort: tuple[str, ...] = NEWEST_FIRST,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[PostView]:
        """Published posts matching ``filter``, newest first by default."""
        query = {**PUBLISHED, **(filter or {})}
        docs = self._store.find(POSTS, query, sort=sort, skip=skip, limit=limit)
        return self.populate_many([BlogPost.model_validate(doc) for doc in docs])

    def published_by_slug(self, slug: str) -> PostView:
        """Raises NotFound unless ``slug`` names a published post."""
        doc = self._store.find_one(POSTS, {**PUBLISHED, "slug": slug})
        if doc is None:
            raise NotFound(f"Post '{slug}' not found", "post_not_found")
        return self.populate(BlogPost.model_validate(doc))

    def by_slug(self, slug: str) -> PostView:
        """Any post by slug, drafts and archived posts included."""
        doc = self._store.find_one(POSTS, {"slug": slug})
        if doc is None:
            raise NotFound(f"Post '{slug}' not found", "post_not_found")
        return self.populate(BlogPost.model_validate(doc))

    def active_category_by_slug(self, slug: str) -> BlogCategory:
        doc = self._store.find_one(CATEGORIES, {"slug": slug, "is_active": True})
        if doc is None:
            raise NotFound(f"Category '{slug}' not found", "category_not_found")
        return BlogCategory.model_validate(doc)

    def active_tag_by_slug(self, slug: str) -> BlogTag:
        doc = self._store.find_one(TAGS, {"slug": slug, "is_active": True})
        if doc is None:
            raise NotFound(f"Tag '{slug}' not found", "tag_not_found")
        return BlogTag.model_validate(doc)
