"""
PostService - listing, lookup and lifecycle of blog posts.

Every write that touches more than one document (the post plus category and
tag counters, or auto-created tags) runs inside ``store.transaction()``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta

from blogcms.core.ports.store import AUTHORS, CATEGORIES, POSTS, TAGS, ClockPort, DocumentStorePort, Filter
from blogcms.core.services.reading_time import calculate_reading_time
from blogcms.core.services.slugs import to_slug, unique_slug_for
from blogcms.core.services.views import PUBLISHED, PostViewLoader
from blogcms.domain.entities import (
    AiOptimization,
    BlogCategory,
    BlogPost,
    BlogTag,
    PostAnalytics,
    PostSeo,
    PostView,
    new_id,
)
from blogcms.domain.errors import Conflict, InvalidInput, NotFound
from blogcms.rules.models import PostRules, SeoRules, SiteRules

from .fc import (
    Contribution,
    clamp_limit,
    clamp_page,
    copy_title,
    counter_deltas,
    default_post_seo,
    normalize_featured_image,
    related_filter,
    require_fields,
    resolve_sort,
    search_filter,
)
from .models import (
    DEFAULT_SORT,
    POST_STATUSES,
    AdminPostsQuery,
    CreatePostInput,
    ListPostsQuery,
    Pagination,
    PostDetail,
    PostPage,
    UpdatePostInput,
)

logger = logging.getLogger(__name__)

POPULAR_SORT = ("-analytics.views", "-analytics.likes")
RELATED_SORT = ("-analytics.views", "-published_at")


class PostService:
    def __init__(
        self,
        store: DocumentStorePort,
        clock: ClockPort,
        rules: PostRules,
        site: SiteRules,
        seo: SeoRules | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._rules = rules
        self._site = site
        self._seo = seo

    # --- Reads ---

    def list_published(self, query: ListPostsQuery) -> PostPage:
        """Published posts, filtered, sorted and paginated."""
        page = clamp_page(query.page)
        limit = clamp_limit(query.limit, self._rules.default_page_size, self._rules.max_page_size)
        sort = resolve_sort(query.sort)

        conditions = self._conditions(query.category, query.tag, query.author, query.search)
        if conditions is None:
            return self._empty_page(page, limit)
        if query.featured is not None:
            conditions["is_featured"] = query.featured
        return self._page(PostViewLoader(self._store), conditions, sort, page, limit)

    def search(self, q: str | None, page: int = 1, limit: int | None = None) -> PostPage:
        if not q or not q.strip():
            raise InvalidInput("Search query 'q' is required", "query_required")
        return self.list_published(ListPostsQuery(page=page, limit=limit, search=q))

    def by_category(self, slug: str, page: int = 1, limit: int | None = None) -> PostPage:
        """Posts of an active category; NotFound when the category is unknown or inactive."""
        PostViewLoader(self._store).active_category_by_slug(slug)
        return self.list_published(ListPostsQuery(page=page, limit=limit, category=slug))

    def by_tag(self, slug: str, page: int = 1, limit: int | None = None) -> PostPage:
        PostViewLoader(self._store).active_tag_by_slug(slug)
        return self.list_published(ListPostsQuery(page=page, limit=limit, tag=slug))

    def by_author_username(
        self, username: str, page: int = 1, limit: int | None = None, sort: str = DEFAULT_SORT
    ) -> PostPage:
        """Published posts of an author with a public profile."""
        author = self._store.find_one(AUTHORS, {"username": username})
        if author is None or not author.get("public_profile", True):
            raise NotFound(f"Author '{username}' not found", "author_not_found")
        return self.list_published(ListPostsQuery(page=page, limit=limit, author=author["id"], sort=sort))

    def list_all(self, query: AdminPostsQuery) -> PostPage:
        """Every post regardless of status, for editors."""
        page = clamp_page(query.page)
        limit = clamp_limit(query.limit, self._rules.default_page_size, self._rules.max_page_size)
        sort = resolve_sort(query.sort)

        if query.status and query.status not in POST_STATUSES:
            allowed = ", ".join(POST_STATUSES)
            raise InvalidInput(f"Unknown status '{query.status}' (allowed: {allowed})", "invalid_status")
        conditions = self._conditions(query.category, query.tag, query.author, query.search)
        if conditions is None:
            return self._empty_page(page, limit)
        if query.status:
            conditions["status"] = query.status

        total = self._store.count(POSTS, conditions)
        docs = self._store.find(POSTS, conditions, sort=sort, skip=(page - 1) * limit, limit=limit)
        posts = PostViewLoader(self._store).populate_many([BlogPost.model_validate(d) for d in docs])
        return PostPage(posts=posts, pagination=Pagination(page=page, limit=limit, total=total))

    def featured(self, limit: int | None = None) -> list[PostView]:
        limit = clamp_limit(limit, self._rules.featured_limit, self._rules.max_page_size)
        return PostViewLoader(self._store).published({"is_featured": True}, limit=limit)

    def popular(self, limit: int | None = None, days: int | None = None) -> list[PostView]:
        """Most viewed posts published within the last ``days``."""
        limit = clamp_limit(limit, self._rules.popular_limit, self._rules.max_page_size)
        window = days if days is not None else self._rules.popular_days
        if window < 1:
            raise InvalidInput("days must be a positive integer", "invalid_days")
        since = self._clock.now_utc() - timedelta(days=window)
        return PostViewLoader(self._store).published(
            {"published_at": {"$gte": since}}, sort=POPULAR_SORT, limit=limit
        )

    def get_by_slug(self, slug: str, increment_views: bool = True) -> PostDetail:
        loader = PostViewLoader(self._store)
        view = loader.published_by_slug(slug)
        if increment_views:
            self._store.increment(POSTS, view.id, "analytics.views")
            view.analytics.views += 1
        return PostDetail(post=view, related=self.related(view, loader))

    def related(self, post: BlogPost, loader: PostViewLoader | None = None) -> list[PostView]:
        query = related_filter(post)
        if query is None:
            return []
        loader = loader or PostViewLoader(self._store)
        return loader.published(query, sort=RELATED_SORT, limit=self._rules.related_limit)

    def get(self, post_id: str) -> BlogPost:
        """Any post by id, regardless of status."""
        doc = self._store.get(POSTS, post_id)
        if doc is None:
            raise NotFound(f"Post {post_id} not found", "post_not_found")
        return BlogPost.model_validate(doc)

    def view(self, post_id: str) -> PostView:
        return PostViewLoader(self._store).populate(self.get(post_id))

    # --- Writes ---

    def create(self, inp: CreatePostInput) -> PostView:
        require_fields(title=inp.title, excerpt=inp.excerpt, content=inp.content, category=inp.category)
        self._require_category(inp.category)
        now = self._clock.now_utc()

        with self._store.transaction():
            tags = self._resolve_tags(inp.tags)
            slug = self._unique_slug(inp.slug or inp.title)
            image = normalize_featured_image(inp.featured_image, inp.title)
            post = BlogPost(
                title=inp.title.strip(),
                slug=slug,
                excerpt=inp.excerpt.strip(),
                content=inp.content,
                content_format=inp.content_format,
                featured_image=image,
                author_id=inp.author_id,
                category_id=inp.category,
                tag_ids=[t.id for t in tags],
                is_featured=inp.is_featured,
                allow_comments=inp.allow_comments,
                reading_time=self._reading_time(inp.content, inp.content_format),
                seo=default_post_seo(
                    title=inp.title,
                    excerpt=inp.excerpt,
                    slug=slug,
                    tag_names=[t.name for t in tags],
                    image=image,
                    site=self._site,
                    seo=self._seo,
                    overrides=inp.seo,
                ),
                ai_optimization=AiOptimization.model_validate(inp.ai_optimization),
                created_at=now,
                updated_at=now,
            )
            self._store.insert(POSTS, post.model_dump(mode="json"))

            if inp.status == "published":
                post = self._transition(post, "published")
            elif inp.status == "archived":
                post = self._transition(post, "archived")

        logger.info("Created post %s (%s) as %s", post.id, post.slug, post.status)
        return PostViewLoader(self._store).populate(post)

    def update(self, post_id: str, inp: UpdatePostInput) -> PostView:
        with self._store.transaction():
            post = self.get(post_id)
            before = Contribution.of(post)
            changes: dict[str, object] = {}

            if inp.title is not None:
                require_fields(title=inp.title)
                if inp.title.strip() != post.title:
                    changes["title"] = inp.title.strip()
                    if inp.slug is None:
                        changes["slug"] = self._unique_slug(inp.title, exclude_id=post.id)
            if inp.slug is not None and to_slug(inp.slug) != post.slug:
                changes["slug"] = self._unique_slug(inp.slug, exclude_id=post.id)
            if inp.excerpt is not None:
                changes["excerpt"] = inp.excerpt.strip()
            if inp.content is not None or inp.content_format is not None:
                content = inp.content if inp.content is not None else post.content
                content_format = inp.content_format or post.content_format
                require_fields(content=content)
                changes["content"] = content
                changes["content_format"] = content_format
                changes["reading_time"] = self._reading_time(content, content_format)
            if inp.category is not None and inp.category != post.category_id:
                self._require_category(inp.category)
                changes["category_id"] = inp.category
            if inp.tags is not None:
                changes["tag_ids"] = [t.id for t in self._resolve_tags(inp.tags)]
            if inp.featured_image is not None:
                changes["featured_image"] = normalize_featured_image(
                    inp.featured_image, str(changes.get("title", post.title))
                )
            if inp.is_featured is not None:
                changes["is_featured"] = inp.is_featured
            if inp.allow_comments is not None:
                changes["allow_comments"] = inp.allow_comments
            if inp.seo:
                changes["seo"] = PostSeo.model_validate({**post.seo.model_dump(), **inp.seo})
            if inp.ai_optimization:
                changes["ai_optimization"] = AiOptimization.model_validate(
                    {**post.ai_optimization.model_dump(), **inp.ai_optimization}
                )

            updated = post.model_copy(update={**changes, "updated_at": self._clock.now_utc()})
            if inp.status is not None and inp.status != post.status:
                updated = self._with_status(updated, inp.status)

            self._apply_counters(before, Contribution.of(updated))
            self._store.replace(POSTS, updated.model_dump(mode="json"))

        logger.info("Updated post %s (%s)", updated.id, updated.slug)
        return PostViewLoader(self._store).populate(updated)

    def delete(self, post_id: str) -> None:
        with self._store.transaction():
            post = self.get(post_id)
            self._apply_counters(Contribution.of(post), None)
            self._store.delete(POSTS, post.id)
        logger.info("Deleted post %s (%s)", post.id, post.slug)

    def publish(self, post_id: str) -> PostView:
        with self._store.transaction():
            post = self.get(post_id)
            if post.is_published:
                raise Conflict("Post is already published", "already_published")
            post = self._transition(post, "published")
        logger.info("Published post %s (%s)", post.id, post.slug)
        return PostViewLoader(self._store).populate(post)

    def unpublish(self, post_id: str) -> PostView:
        with self._store.transaction():
            post = self.get(post_id)
            if not post.is_published:
                raise Conflict("Post is not published", "not_published")
            post = self._transition(post, "draft")
        logger.info("Unpublished post %s (%s)", post.id, post.slug)
        return PostViewLoader(self._store).populate(post)

    def archive(self, post_id: str) -> PostView:
        with self._store.transaction():
            post = self.get(post_id)
            if post.status == "archived":
                raise Conflict("Post is already archived", "already_archived")
            post = self._transition(post, "archived")
        logger.info("Archived post %s (%s)", post.id, post.slug)
        return PostViewLoader(self._store).populate(post)

    def duplicate(self, post_id: str, author_id: str | None = None) -> PostView:
        """Draft copy with a fresh slug and zeroed analytics."""
        with self._store.transaction():
            original = self.get(post_id)
            now = self._clock.now_utc()
            title = copy_title(original.title)
            copy = original.model_copy(
                update={
                    "id": new_id(),
                    "title": title,
                    "slug": self._unique_slug(title),
                    "status": "draft",
                    "published_at": None,
                    "is_featured": False,
                    "analytics": PostAnalytics(),
                    "author_id": author_id or original.author_id,
                    "created_at": now,
                    "updated_at": now,
                },
                deep=True,
            )
            self._store.insert(POSTS, copy.model_dump(mode="json"))
        logger.info("Duplicated post %s as %s (%s)", original.id, copy.id, copy.slug)
        return PostViewLoader(self._store).populate(copy)

    # --- Internals ---

    def _conditions(
        self, category: str | None, tag: str | None, author: str | None, search: str | None
    ) -> Filter | None:
        """Shared list filters; None when a category or tag slug matches nothing."""
        conditions: Filter = {}
        if category:
            doc = self._store.find_one(CATEGORIES, {"slug": category})
            if doc is None:
                return None
            conditions["category_id"] = doc["id"]
        if tag:
            doc = self._store.find_one(TAGS, {"slug": tag})
            if doc is None:
                return None
            conditions["tag_ids"] = doc["id"]
        if author:
            conditions["author_id"] = author
        if search and search.strip():
            conditions.update(search_filter(search))
        return conditions

    def _empty_page(self, page: int, limit: int) -> PostPage:
        return PostPage(posts=[], pagination=Pagination(page=page, limit=limit, total=0))

    def _page(
        self, loader: PostViewLoader, conditions: Filter, sort: tuple[str, ...], page: int, limit: int
    ) -> PostPage:
        total = self._store.count(POSTS, {**PUBLISHED, **conditions})
        posts = loader.published(conditions, sort=sort, skip=(page - 1) * limit, limit=limit)
        return PostPage(posts=posts, pagination=Pagination(page=page, limit=limit, total=total))

    def _reading_time(self, content: str, content_format: str) -> int:
        return calculate_reading_time(content, content_format, self._rules.words_per_minute)

    def _unique_slug(self, text: str, exclude_id: str | None = None) -> str:
        return unique_slug_for(text, POSTS, self._store, exclude_id, self._rules.slug_max_attempts)

    def _require_category(self, category_id: str) -> BlogCategory:
        doc = self._store.get(CATEGORIES, category_id)
        if doc is None:
            raise NotFound(f"Category {category_id} not found", "category_not_found")
        return BlogCategory.model_validate(doc)

    def _resolve_tags(self, values: Sequence[str]) -> list[BlogTag]:
        """Map tag ids or names onto tags, creating unknown names."""
        resolved: dict[str, BlogTag] = {}
        for raw in values:
            value = raw.strip()
            if not value:
                continue
            doc = self._store.get(TAGS, value)
            if doc is None:
                doc = self._store.find_one(
                    TAGS, {"$or": [{"name": value}, {"slug": to_slug(value)}]}
                )
            tag = BlogTag.model_validate(doc) if doc else self._create_tag(value)
            resolved.setdefault(tag.id, tag)
        return list(resolved.values())

    def _create_tag(self, name: str) -> BlogTag:
        now = self._clock.now_utc()
        tag = BlogTag(
            name=name,
            slug=unique_slug_for(name, TAGS, self._store, max_attempts=self._rules.slug_max_attempts),
            description=f"Tag: {name}",
            created_at=now,
            updated_at=now,
        )
        self._store.insert(TAGS, tag.model_dump(mode="json"))
        logger.info("Auto-created tag %s (%s)", tag.id, tag.slug)
        return tag

    def _with_status(self, post: BlogPost, status: str) -> BlogPost:
        update: dict[str, object] = {"status": status}
        if status == "published" and post.published_at is None:
            update["published_at"] = self._clock.now_utc()
        return post.model_copy(update=update)

    def _transition(self, post: BlogPost, status: str) -> BlogPost:
        """Persist a status change and move counters accordingly."""
        before = Contribution.of(post)
        updated = self._with_status(post, status).model_copy(update={"updated_at": self._clock.now_utc()})
        self._apply_counters(before, Contribution.of(updated))
        self._store.replace(POSTS, updated.model_dump(mode="json"))
        return updated

    def _apply_counters(self, before: Contribution | None, after: Contribution | None) -> None:
        deltas = counter_deltas(before, after)
        if deltas.empty:
            return
        for category_id, amount in deltas.categories.items():
            self._store.increment(CATEGORIES, category_id, "post_count", amount)
        for tag_id, amount in deltas.tags.items():
            self._store.increment(TAGS, tag_id, "usage_count", amount)


def create_post_service(
    store: DocumentStorePort,
    clock: ClockPort,
    rules: PostRules,
    site: SiteRules,
    seo: SeoRules | None = None,
) -> PostService:
    """Factory for the post service."""
    return PostService(store, clock, rules, site, seo)
