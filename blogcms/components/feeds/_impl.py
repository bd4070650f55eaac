"""
FeedService - syndication feeds over the published posts.

Reads the most recently published posts, populates them and hands them to
the pure builders in ``fc``. Limits come from the ``feeds`` rules section.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from blogcms.core.ports.store import POSTS, ClockPort, DocumentStorePort
from blogcms.core.services.views import PUBLISHED, PostViewLoader
from blogcms.domain.entities import PostView
from blogcms.rules.models import FeedRules, SiteRules

from .fc import render_atom, render_category_rss, render_json_feed, render_rss

logger = logging.getLogger(__name__)


class FeedService:
    """Builds RSS, Atom and JSON feeds plus feed statistics."""

    def __init__(
        self,
        store: DocumentStorePort,
        clock: ClockPort,
        site: SiteRules,
        rules: FeedRules | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._site = site
        self._rules = rules or FeedRules()

    def _limit(self, limit: int | None) -> int:
        if limit is None or limit < 1:
            return self._rules.default_limit
        return min(limit, self._rules.max_limit)

    def _latest(self, views: list[PostView]) -> datetime:
        if views and views[0].published_at:
            return views[0].published_at
        return self._clock.now_utc()

    def recent_posts(self, limit: int | None = None, category_id: str | None = None) -> list[PostView]:
        loader = PostViewLoader(self._store)
        query = {"category_id": category_id} if category_id else None
        return loader.published(query, limit=self._limit(limit))

    def rss(self, limit: int | None = None) -> str:
        views = self.recent_posts(limit)
        return render_rss(views, self._site, self._latest(views), self._rules.description_max_chars)

    def atom(self, limit: int | None = None) -> str:
        views = self.recent_posts(limit)
        return render_atom(views, self._site, self._latest(views), self._rules.description_max_chars)

    def json_feed(self, limit: int | None = None) -> dict[str, Any]:
        return render_json_feed(self.recent_posts(limit), self._site)

    def category_rss(self, slug: str, limit: int | None = None) -> str:
        category = PostViewLoader(self._store).active_category_by_slug(slug)
        views = self.recent_posts(limit, category_id=category.id)
        return render_category_rss(
            category,
            views,
            self._site,
            self._latest(views),
            self._rules.description_max_chars,
        )

    def stats(self) -> dict[str, Any]:
        now = self._clock.now_utc()
        total = self._store.count(POSTS, PUBLISHED)
        latest = self._store.find(POSTS, PUBLISHED, sort=("-published_at",), limit=1)
        recent = self._store.count(
            POSTS,
            {**PUBLISHED, "published_at": {"$gte": now - timedelta(days=30)}},
        )

        last_post = None
        if latest:
            last_post = {
                "title": latest[0]["title"],
                "published_at": latest[0].get("published_at"),
            }

        if recent > 0:
            frequency = f"~{round(30 / recent)} days between posts"
        else:
            frequency = "No recent posts"

        logger.debug("Feed stats computed: %d published, %d in last 30 days", total, recent)
        return {
            "total_posts": total,
            "last_post": last_post,
            "posts_last_30_days": recent,
            "update_frequency": frequency,
        }


def create_feed_service(
    store: DocumentStorePort,
    clock: ClockPort,
    site: SiteRules,
    rules: FeedRules | None = None,
) -> FeedService:
    """Factory for the feed service."""
    return FeedService(store, clock, site, rules)
