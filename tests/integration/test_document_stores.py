"""
Document store contract tests.

Both store implementations run the same cases, so the in-memory store used
by unit tests and the SQLite store used in deployment cannot drift apart.
"""

from __future__ import annotations

import sqlite3

import pytest

from blogcms.adapters.sqlite import SQLiteDocumentStore
from blogcms.core.ports.store import CATEGORIES, POSTS, TAGS, DocumentStorePort
from blogcms.domain.errors import UpstreamStoreError


@pytest.fixture(params=["memory", "sqlite"])
def doc_store(request: pytest.FixtureRequest) -> DocumentStorePort:
    name = "store" if request.param == "memory" else "sqlite_store"
    return request.getfixturevalue(name)


def _post(id: str, **fields: object) -> dict:
    return {
        "id": id,
        "title": f"Post {id}",
        "slug": f"post-{id}",
        "status": "published",
        "tag_ids": [],
        "analytics": {"views": 0, "likes": 0},
        **fields,
    }


@pytest.fixture
def seeded(doc_store: DocumentStorePort) -> DocumentStorePort:
    doc_store.insert(POSTS, _post("a", published_at="2024-06-01T00:00:00.000000Z", tag_ids=["t1"]))
    doc_store.insert(POSTS, _post("b", published_at="2024-06-03T00:00:00.000000Z", status="draft"))
    doc_store.insert(POSTS, _post("c", published_at="2024-06-02T00:00:00.000000Z", tag_ids=["t1", "t2"]))
    return doc_store


class TestCrud:
    def test_insert_and_get(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(POSTS, _post("a"))
        assert doc_store.get(POSTS, "a") == _post("a")
        assert doc_store.get(POSTS, "missing") is None

    def test_collections_are_separate(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(CATEGORIES, {"id": "x", "slug": "same"})
        doc_store.insert(TAGS, {"id": "x", "slug": "same"})
        assert doc_store.count(CATEGORIES) == 1
        assert doc_store.get(POSTS, "x") is None

    def test_duplicate_id_fails(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(POSTS, _post("a"))
        with pytest.raises(UpstreamStoreError):
            doc_store.insert(POSTS, _post("a"))

    def test_replace(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(POSTS, _post("a"))
        doc_store.replace(POSTS, _post("a", title="Changed", slug="changed"))
        assert doc_store.get(POSTS, "a")["title"] == "Changed"
        assert doc_store.find_one(POSTS, {"slug": "changed"}) is not None
        assert doc_store.find_one(POSTS, {"slug": "post-a"}) is None

    def test_replace_missing_fails(self, doc_store: DocumentStorePort) -> None:
        with pytest.raises(UpstreamStoreError):
            doc_store.replace(POSTS, _post("ghost"))

    def test_delete(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(POSTS, _post("a"))
        assert doc_store.delete(POSTS, "a") is True
        assert doc_store.delete(POSTS, "a") is False

    def test_returned_documents_are_copies(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(POSTS, _post("a"))
        doc = doc_store.get(POSTS, "a")
        doc["analytics"]["views"] = 99
        assert doc_store.get(POSTS, "a")["analytics"]["views"] == 0


class TestQueries:
    def test_filter_and_sort(self, seeded: DocumentStorePort) -> None:
        docs = seeded.find(POSTS, {"status": "published"}, sort=("-published_at",))
        assert [d["id"] for d in docs] == ["c", "a"]

    def test_array_membership(self, seeded: DocumentStorePort) -> None:
        assert {d["id"] for d in seeded.find(POSTS, {"tag_ids": "t2"})} == {"c"}
        assert {d["id"] for d in seeded.find(POSTS, {"tag_ids": {"$in": ["t1"]}})} == {"a", "c"}

    def test_slug_lookup_with_extra_clauses(self, seeded: DocumentStorePort) -> None:
        assert seeded.find_one(POSTS, {"slug": "post-b", "status": "published"}) is None
        assert seeded.find_one(POSTS, {"slug": "post-b", "status": "draft"})["id"] == "b"

    def test_skip_limit_and_count(self, seeded: DocumentStorePort) -> None:
        page = seeded.find(POSTS, sort=("published_at",), skip=1, limit=1)
        assert [d["id"] for d in page] == ["c"]
        assert seeded.count(POSTS) == 3
        assert seeded.count(POSTS, {"status": {"$ne": "draft"}}) == 2

    def test_range_and_or(self, seeded: DocumentStorePort) -> None:
        docs = seeded.find(
            POSTS,
            {"$or": [{"published_at": {"$gte": "2024-06-03T00:00:00.000000Z"}}, {"id": "a"}]},
            sort=("id",),
        )
        assert [d["id"] for d in docs] == ["a", "b"]

    def test_and_combines_clauses(self, seeded: DocumentStorePort) -> None:
        docs = seeded.find(POSTS, {"$and": [{"tag_ids": "t1"}, {"status": "published"}]}, sort=("id",))
        assert [d["id"] for d in docs] == ["a", "c"]
        assert seeded.count(POSTS, {"$and": [{"tag_ids": "t2"}, {"id": "a"}]}) == 0


class TestIncrement:
    def test_nested_counter(self, seeded: DocumentStorePort) -> None:
        seeded.increment(POSTS, "a", "analytics.views")
        seeded.increment(POSTS, "a", "analytics.views", 4)
        seeded.increment(POSTS, "a", "analytics.views", -2)
        assert seeded.get(POSTS, "a")["analytics"]["views"] == 3

    def test_missing_field_starts_at_zero(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(CATEGORIES, {"id": "c1", "slug": "c1"})
        doc_store.increment(CATEGORIES, "c1", "post_count")
        assert doc_store.get(CATEGORIES, "c1")["post_count"] == 1

    def test_missing_document_is_ignored(self, doc_store: DocumentStorePort) -> None:
        doc_store.increment(CATEGORIES, "ghost", "post_count")
        assert doc_store.get(CATEGORIES, "ghost") is None


class TestTransactions:
    def test_commit(self, doc_store: DocumentStorePort) -> None:
        with doc_store.transaction():
            doc_store.insert(POSTS, _post("a"))
            doc_store.increment(POSTS, "a", "analytics.likes")
        assert doc_store.get(POSTS, "a")["analytics"]["likes"] == 1

    def test_rollback_on_error(self, doc_store: DocumentStorePort) -> None:
        doc_store.insert(POSTS, _post("a"))
        with pytest.raises(RuntimeError), doc_store.transaction():
            doc_store.insert(POSTS, _post("b"))
            doc_store.increment(POSTS, "a", "analytics.views", 5)
            doc_store.delete(POSTS, "a")
            raise RuntimeError("boom")
        assert doc_store.get(POSTS, "b") is None
        assert doc_store.get(POSTS, "a")["analytics"]["views"] == 0

    def test_reads_inside_transaction_see_writes(self, doc_store: DocumentStorePort) -> None:
        with doc_store.transaction():
            doc_store.insert(POSTS, _post("a"))
            assert doc_store.count(POSTS) == 1

    def test_nested_transactions_join_the_outer_one(self, doc_store: DocumentStorePort) -> None:
        with pytest.raises(ValueError), doc_store.transaction():
            with doc_store.transaction():
                doc_store.insert(POSTS, _post("inner"))
            raise ValueError("outer fails")
        assert doc_store.get(POSTS, "inner") is None

    def test_store_usable_after_rollback(self, doc_store: DocumentStorePort) -> None:
        with pytest.raises(UpstreamStoreError), doc_store.transaction():
            doc_store.insert(POSTS, _post("a"))
            doc_store.insert(POSTS, _post("a"))
        doc_store.insert(POSTS, _post("z"))
        assert [d["id"] for d in doc_store.find(POSTS)] == ["z"]


class _UnstartableConnection:
    """Connection stand-in whose BEGIN fails."""

    isolation_level: str | None = ""

    def __init__(self) -> None:
        self.closed = False

    def execute(self, sql: str) -> None:
        raise sqlite3.OperationalError("database is locked")

    def close(self) -> None:
        self.closed = True


class TestSQLiteTransactionStart:
    def test_failed_begin_closes_connection(
        self, sqlite_store: SQLiteDocumentStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        conn = _UnstartableConnection()
        monkeypatch.setattr(sqlite_store, "_get_conn", lambda: conn)
        with pytest.raises(UpstreamStoreError), sqlite_store.transaction():
            pass
        assert conn.closed is True
        monkeypatch.undo()
        with sqlite_store.transaction():
            sqlite_store.insert(POSTS, _post("a"))
        assert sqlite_store.get(POSTS, "a") is not None
