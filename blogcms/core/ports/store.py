"""
Content store port.

Protocol-based interface for the document store behind every service.
Implementations: in-memory (tests, dev) and SQLite (JSON documents).

Documents are plain dicts produced by ``model_dump(mode="json")`` and always
carry a string ``id``. Filters use a small Mongo-like vocabulary:

- ``{"field": value}`` equality; when the stored value is a list, membership
- ``{"field": {"$ne" | "$in" | "$nin" | "$gt" | "$gte" | "$lt" | "$lte": v}}``
- ``{"field": {"$exists": bool}}``
- ``{"field": {"$icontains": "text"}}`` case-insensitive substring
- ``{"$or": [filter, ...]}``

Dotted paths (``"analytics.views"``) address nested fields. Sort keys are
field paths, prefixed with ``-`` for descending order.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, Protocol

POSTS = "posts"
CATEGORIES = "categories"
TAGS = "tags"
AUTHORS = "authors"

COLLECTIONS = (POSTS, CATEGORIES, TAGS, AUTHORS)

Document = dict[str, Any]
Filter = dict[str, Any]


class DocumentStorePort(Protocol):
    """Document store keyed by id, with secondary lookups by filter."""

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Get a document by id."""
        ...

    def find_one(self, collection: str, filter: Filter) -> Document | None:
        """First document matching the filter, or None."""
        ...

    def find(
        self,
        collection: str,
        filter: Filter | None = None,
        *,
        sort: Sequence[str] = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        """Find documents with filter, sort and pagination."""
        ...

    def count(self, collection: str, filter: Filter | None = None) -> int:
        """Count documents matching the filter."""
        ...

    def insert(self, collection: str, doc: Document) -> Document:
        """Insert a new document. Raises UpstreamStoreError on duplicate id."""
        ...

    def replace(self, collection: str, doc: Document) -> Document:
        """Replace an existing document (matched by ``doc["id"]``)."""
        ...

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        ...

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        """Atomically add ``amount`` to a numeric (possibly nested) field."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """
        Group writes so they commit together or not at all.

        Nested use joins the outer transaction.
        """
        ...


class ClockPort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
