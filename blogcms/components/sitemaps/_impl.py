"""
SitemapService - sitemap documents, statistics and validation.

Collects published posts, active categories and used tags from the store
and renders them through the pure builders in ``fc``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from blogcms.core.ports.store import CATEGORIES, POSTS, TAGS, ClockPort, DocumentStorePort
from blogcms.core.services.views import PUBLISHED
from blogcms.domain.entities import BlogCategory, BlogPost, BlogTag, format_utc
from blogcms.domain.errors import NotFound
from blogcms.rules.models import RobotsRules, SiteRules, SitemapRules

from .fc import (
    SitemapEntry,
    build_blog_entries,
    paginate_entries,
    render_image_sitemap,
    render_news_sitemap,
    render_robots_txt,
    render_sitemap_index,
    render_urlset,
)

logger = logging.getLogger(__name__)


class SitemapService:
    def __init__(
        self,
        store: DocumentStorePort,
        clock: ClockPort,
        site: SiteRules,
        rules: SitemapRules | None = None,
        robots: RobotsRules | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._site = site
        self._rules = rules or SitemapRules()
        self._robots = robots or RobotsRules()

    # --- Collection ---

    def _published_posts(self) -> list[BlogPost]:
        docs = self._store.find(POSTS, PUBLISHED, sort=("-published_at",))
        return [BlogPost.model_validate(d) for d in docs]

    def _active_categories(self) -> list[BlogCategory]:
        docs = self._store.find(CATEGORIES, {"is_active": True}, sort=("order", "name"))
        return [BlogCategory.model_validate(d) for d in docs]

    def _used_tags(self) -> list[BlogTag]:
        docs = self._store.find(TAGS, {"is_active": True, "usage_count": {"$gt": 0}}, sort=("name",))
        return [BlogTag.model_validate(d) for d in docs]

    def entries(self) -> list[SitemapEntry]:
        return build_blog_entries(
            self._site,
            self._published_posts(),
            self._active_categories(),
            self._used_tags(),
        )

    def pages(self) -> list[list[SitemapEntry]]:
        return paginate_entries(self.entries(), self._rules.max_urls, self._rules.max_bytes)

    # --- Documents ---

    def page_url(self, number: int) -> str:
        return self._site.url(f"{self._site.api_prefix}/sitemap-{number}.xml")

    def blog_sitemap(self) -> str:
        """A single urlset, or a sitemap index once the entries need more than one page."""
        pages = self.pages()
        if len(pages) == 1:
            return render_urlset(pages[0])

        logger.info("Blog sitemap split into %d pages", len(pages))
        refs = []
        for number, page in enumerate(pages, start=1):
            stamps = [e.lastmod for e in page if e.lastmod is not None]
            refs.append((self.page_url(number), max(stamps) if stamps else None))
        return render_sitemap_index(refs)

    def blog_sitemap_page(self, number: int) -> str:
        """Page ``number`` (1-based) of the paginated blog sitemap."""
        pages = self.pages()
        if number < 1 or number > len(pages):
            raise NotFound(f"Sitemap page {number} not found", "sitemap_page_not_found")
        return render_urlset(pages[number - 1])

    def image_sitemap(self) -> str:
        return render_image_sitemap(self._published_posts(), self._site)

    def news_sitemap(self) -> str:
        cutoff = self._clock.now_utc() - timedelta(days=self._rules.news_days)
        docs = self._store.find(
            POSTS,
            {**PUBLISHED, "published_at": {"$gte": cutoff}},
            sort=("-published_at",),
        )
        return render_news_sitemap([BlogPost.model_validate(d) for d in docs], self._site)

    def robots_txt(self) -> str:
        return render_robots_txt(self._site, self._robots)

    # --- Reporting ---

    def stats(self) -> dict[str, Any]:
        posts = self._store.count(POSTS, PUBLISHED)
        categories = self._store.count(CATEGORIES, {"is_active": True})
        tags = self._store.count(TAGS, {"is_active": True, "usage_count": {"$gt": 0}})
        latest = self._store.find(POSTS, PUBLISHED, sort=("-updated_at",), limit=1)
        last_update = latest[0]["updated_at"] if latest else format_utc(self._clock.now_utc())
        return {
            "total_urls": 1 + posts + categories + tags,
            "posts": posts,
            "categories": categories,
            "tags": tags,
            "last_update": last_update,
        }

    def validate(self) -> dict[str, Any]:
        stats = self.stats()
        errors: list[str] = []
        warnings: list[str] = []

        if stats["total_urls"] > self._rules.max_urls:
            errors.append(
                f"Sitemap has {stats['total_urls']} URLs, above the {self._rules.max_urls} URL limit"
            )

        stale_cutoff = self._clock.now_utc() - timedelta(days=self._rules.stale_after_days)
        stale = self._store.count(POSTS, {**PUBLISHED, "updated_at": {"$lt": stale_cutoff}})
        if stale > self._rules.stale_warning_threshold:
            warnings.append(
                f"{stale} posts have not been updated in over {self._rules.stale_after_days} days"
            )

        if errors:
            logger.warning("Sitemap validation failed: %s", "; ".join(errors))
        return {
            "is_valid": not errors,
            "stats": stats,
            "warnings": warnings,
            "errors": errors,
        }


def create_sitemap_service(
    store: DocumentStorePort,
    clock: ClockPort,
    site: SiteRules,
    rules: SitemapRules | None = None,
    robots: RobotsRules | None = None,
) -> SitemapService:
    """Factory for the sitemap service."""
    return SitemapService(store, clock, site, rules, robots)
