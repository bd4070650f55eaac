"""
Feed builder and FeedService tests.

- RSS 2.0: channel, escaping, items with author / categories / enclosure
- Atom 1.0 and JSON Feed 1.1 item shapes
- FeedService limits, category feeds and statistics
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from blogcms.adapters.clock import FixedClock
from blogcms.adapters.memory import InMemoryDocumentStore
from blogcms.components.feeds import (
    FeedService,
    clean_html_for_feed,
    feed_description,
    render_atom,
    render_category_rss,
    render_json_feed,
    render_rss,
)
from blogcms.domain.entities import Author, BlogCategory, BlogTag, ImageRef, PostView
from blogcms.domain.errors import InvalidInput, NotFound
from blogcms.rules.models import FeedRules, Rules

PUBLISHED_AT = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


def _view(**fields: object) -> PostView:
    data: dict[str, object] = {
        "title": "Tips & Tricks <2024>",
        "slug": "tips-and-tricks",
        "excerpt": "Short summary",
        "content": "<p>Body</p>",
        "status": "published",
        "published_at": PUBLISHED_AT,
        "updated_at": PUBLISHED_AT,
        "author": Author(first_name="Ana", last_name="García", email="ana@example.com"),
        "category": BlogCategory(name="Desarrollo Web", slug="desarrollo-web"),
        "tags": [BlogTag(name="Python", slug="python"), BlogTag(name="FastAPI", slug="fastapi")],
        "featured_image": ImageRef(url="https://cdn.example.com/cover.jpg"),
    }
    data.update(fields)
    return PostView(**data)


class TestDescriptions:
    def test_excerpt_wins(self) -> None:
        assert feed_description(_view()) == "Short summary"

    def test_falls_back_to_stripped_content(self) -> None:
        view = _view(excerpt="", content="<p>Hello <b>world</b></p>")
        assert feed_description(view) == "Hello world"

    def test_clean_html_cuts_hard(self) -> None:
        assert clean_html_for_feed("<p>abcdefghij</p>", 4) == "abcd..."


class TestRss:
    def test_channel(self, rules: Rules) -> None:
        xml = render_rss([], rules.site, PUBLISHED_AT)
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<title>Northwind Studio Blog</title>" in xml
        assert "<link>https://example.com/blog</link>" in xml
        assert "<language>es-ES</language>" in xml
        assert "<lastBuildDate>Sat, 15 Jun 2024 12:00:00 GMT</lastBuildDate>" in xml
        assert 'href="https://example.com/api/blog/feed.xml" rel="self"' in xml
        assert "<item>" not in xml

    def test_item(self, rules: Rules) -> None:
        xml = render_rss([_view()], rules.site, PUBLISHED_AT)
        assert "<title>Tips &amp; Tricks &lt;2024&gt;</title>" in xml
        assert "<link>https://example.com/blog/tips-and-tricks</link>" in xml
        assert '<guid isPermaLink="true">https://example.com/blog/tips-and-tricks</guid>' in xml
        assert "<pubDate>Sat, 15 Jun 2024 12:00:00 GMT</pubDate>" in xml
        assert "<author>ana@example.com (Ana García)</author>" in xml
        assert "<category>Desarrollo Web</category>" in xml
        assert "<category>Python</category>" in xml
        assert "<description><![CDATA[Short summary]]></description>" in xml
        assert '<enclosure url="https://cdn.example.com/cover.jpg" length="0" type="image/jpeg" />' in xml

    def test_optional_parts_are_omitted(self, rules: Rules) -> None:
        view = _view(author=None, category=None, tags=[], featured_image=None)
        xml = render_rss([view], rules.site, PUBLISHED_AT)
        assert "<author>" not in xml
        assert "<category>" not in xml
        assert "<enclosure" not in xml

    def test_unpublished_date_falls_back_to_created(self, rules: Rules) -> None:
        view = _view(published_at=None, created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))
        assert "<pubDate>Tue, 02 Jan 2024 03:04:05 GMT</pubDate>" in render_rss([view], rules.site, PUBLISHED_AT)

    def test_post_without_content_is_rejected(self, rules: Rules) -> None:
        with pytest.raises(InvalidInput) as exc:
            render_rss([_view(content=" ")], rules.site, PUBLISHED_AT)
        assert exc.value.error == "content_required"

    def test_category_feed(self, rules: Rules) -> None:
        category = BlogCategory(name="Diseño", slug="diseno")
        xml = render_category_rss(category, [_view()], rules.site, PUBLISHED_AT)
        assert "<title>Northwind Studio Blog - Diseño</title>" in xml
        assert "<link>https://example.com/blog/category/diseno</link>" in xml
        assert "<description>Articles about Diseño</description>" in xml
        assert "<category>Diseño</category>" in xml
        assert "<author>" not in xml


class TestAtom:
    def test_feed_and_entry(self, rules: Rules) -> None:
        xml = render_atom([_view()], rules.site, PUBLISHED_AT)
        assert '<feed xmlns="http://www.w3.org/2005/Atom">' in xml
        assert "<updated>2024-06-15T12:00:00Z</updated>" in xml
        assert "<published>2024-06-15T12:00:00Z</published>" in xml
        assert "<id>https://example.com/blog/tips-and-tricks</id>" in xml
        assert "<name>Ana García</name>" in xml
        assert "<email>ana@example.com</email>" in xml
        assert '<category term="FastAPI" />' in xml
        assert '<summary type="html"><![CDATA[Short summary]]></summary>' in xml
        assert xml.endswith("</feed>")


class TestJsonFeed:
    def test_shape(self, rules: Rules) -> None:
        feed = render_json_feed([_view()], rules.site)
        assert feed["version"] == "https://jsonfeed.org/version/1.1"
        assert feed["feed_url"] == "https://example.com/api/blog/feed.json"
        item = feed["items"][0]
        assert item["id"] == item["url"] == "https://example.com/blog/tips-and-tricks"
        assert item["authors"] == [{"name": "Ana García"}]
        assert item["tags"] == ["Python", "FastAPI"]
        assert item["date_published"] == "2024-06-15T12:00:00Z"
        assert item["image"] == "https://cdn.example.com/cover.jpg"
        json.dumps(feed)

    def test_absent_values_are_dropped(self, rules: Rules) -> None:
        item = render_json_feed([_view(author=None, excerpt="", featured_image=None)], rules.site)["items"][0]
        assert "authors" not in item
        assert "summary" not in item
        assert "image" not in item


class TestFeedService:
    def test_limits(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        for i in range(4):
            make_post(f"Post {i}")
            clock.advance(hours=1)
        service = FeedService(store, clock, rules.site, FeedRules(default_limit=2, max_limit=3))
        assert len(service.recent_posts()) == 2
        assert len(service.recent_posts(10)) == 3
        assert service.recent_posts(1)[0].title == "Post 3"

    def test_rss_uses_latest_post_as_build_date(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        make_post()
        clock.advance(days=2)
        xml = FeedService(store, clock, rules.site, rules.feeds).rss()
        assert "<lastBuildDate>Sat, 15 Jun 2024 12:00:00 GMT</lastBuildDate>" in xml

    def test_empty_feed_uses_clock(self, store: InMemoryDocumentStore, clock: FixedClock, rules: Rules) -> None:
        xml = FeedService(store, clock, rules.site).atom()
        assert "<updated>2024-06-15T12:00:00Z</updated>" in xml
        assert "<entry>" not in xml

    def test_category_rss(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        category: BlogCategory,
        make_post: Callable[..., PostView],
    ) -> None:
        make_post("In category")
        service = FeedService(store, clock, rules.site, rules.feeds)
        xml = service.category_rss(category.slug)
        assert "<title>In category</title>" in xml
        with pytest.raises(NotFound):
            service.category_rss("missing")

    def test_stats(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        make_post("First")
        clock.advance(days=5)
        make_post("Second")
        clock.advance(days=5)
        make_post("Third")
        make_post("Draft", status="draft")

        stats = FeedService(store, clock, rules.site).stats()
        assert stats["total_posts"] == 3
        assert stats["posts_last_30_days"] == 3
        assert stats["update_frequency"] == "~10 days between posts"
        assert stats["last_post"]["title"] == "Third"

    def test_stats_without_recent_posts(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        make_post()
        clock.advance(days=90)
        stats = FeedService(store, clock, rules.site).stats()
        assert stats["posts_last_30_days"] == 0
        assert stats["update_frequency"] == "No recent posts"
