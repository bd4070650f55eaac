"""
Post lifecycle against the SQLite store.

Runs the same service code the API uses over a migrated database file and
checks that counters and views survive the JSON round trip.
"""

from __future__ import annotations

import pytest

from blogcms.adapters.clock import FixedClock
from blogcms.adapters.sqlite import SQLiteDocumentStore
from blogcms.components.posts import CreatePostInput, ListPostsQuery, PostService, create_post_service
from blogcms.components.taxonomy import (
    CategoryService,
    CreateCategoryInput,
    TagService,
    create_category_service,
    create_tag_service,
)
from blogcms.core.ports.store import TAGS
from blogcms.domain.errors import Conflict, UpstreamStoreError
from blogcms.rules.models import Rules


@pytest.fixture
def posts(sqlite_store: SQLiteDocumentStore, clock: FixedClock, rules: Rules) -> PostService:
    return create_post_service(sqlite_store, clock, rules.posts, rules.site, rules.seo)


@pytest.fixture
def categories(sqlite_store: SQLiteDocumentStore, clock: FixedClock) -> CategoryService:
    return create_category_service(sqlite_store, clock)


@pytest.fixture
def tags(sqlite_store: SQLiteDocumentStore, clock: FixedClock) -> TagService:
    return create_tag_service(sqlite_store, clock)


class TestSqlitePostFlow:
    def test_publish_read_and_delete(
        self,
        posts: PostService,
        categories: CategoryService,
        tags: TagService,
        clock: FixedClock,
    ) -> None:
        category = categories.create(CreateCategoryInput(name="Backend"))
        post = posts.create(
            CreatePostInput(
                title="Colas con SQLite",
                excerpt="Persistencia sencilla",
                content="<p>Una base de datos en un fichero.</p>",
                category=category.id,
                tags=("SQLite", "Python"),
            )
        )
        assert post.status == "draft"

        clock.advance(minutes=1)
        posts.publish(post.id)
        assert categories.get(category.id).post_count == 1
        assert tags.get_by_slug("sqlite").usage_count == 1

        detail = posts.get_by_slug("colas-con-sqlite")
        assert detail.post.analytics.views == 1
        assert posts.get_by_slug("colas-con-sqlite").post.analytics.views == 2

        page = posts.list_published(ListPostsQuery(tag="python"))
        assert [p.slug for p in page.posts] == ["colas-con-sqlite"]
        assert page.posts[0].published_at == clock.now_utc()

        posts.delete(post.id)
        assert categories.get(category.id).post_count == 0
        assert tags.get_by_slug("python").usage_count == 0

    def test_conflicts_leave_state_unchanged(
        self,
        posts: PostService,
        categories: CategoryService,
    ) -> None:
        category = categories.create(CreateCategoryInput(name="Backend"))
        post = posts.create(
            CreatePostInput(
                title="Publicado",
                excerpt="E",
                content="C",
                category=category.id,
                status="published",
            )
        )
        with pytest.raises(Conflict):
            posts.publish(post.id)
        assert categories.get(category.id).post_count == 1

    def test_failed_write_rolls_back_tag_creation(
        self,
        posts: PostService,
        categories: CategoryService,
        sqlite_store: SQLiteDocumentStore,
    ) -> None:
        category = categories.create(CreateCategoryInput(name="Backend"))
        first = posts.create(CreatePostInput(title="Uno", excerpt="E", content="C", category=category.id))

        original_insert = sqlite_store.insert

        def insert_with_clash(collection: str, doc: dict) -> dict:
            if collection == TAGS:
                original_insert(collection, doc)
                # Re-using the first post's id makes the post insert fail.
                return doc
            return original_insert(collection, {**doc, "id": first.id})

        sqlite_store.insert = insert_with_clash  # type: ignore[method-assign]
        with pytest.raises(UpstreamStoreError):
            posts.create(
                CreatePostInput(title="Dos", excerpt="E", content="C", category=category.id, tags=("Nueva",))
            )
        assert sqlite_store.find_one(TAGS, {"slug": "nueva"}) is None
