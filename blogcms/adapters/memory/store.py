"""
In-memory document store.

Used by tests and by the ``memory`` store mode. All operations serialise on a
re-entrant lock; a transaction holds the lock for its whole duration and
restores a snapshot of every collection if the block raises.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from blogcms.adapters.query import MISSING, apply_query, get_path, matches, set_path
from blogcms.core.ports.store import COLLECTIONS, Document, Filter
from blogcms.domain.errors import UpstreamStoreError


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._data: dict[str, dict[str, Document]] = {name: {} for name in COLLECTIONS}
        self._lock = threading.RLock()
        self._depth = 0

    def _collection(self, name: str) -> dict[str, Document]:
        if name not in self._data:
            self._data[name] = {}
        return self._data[name]

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def find_one(self, collection: str, filter: Filter) -> Document | None:
        found = self.find(collection, filter, limit=1)
        return found[0] if found else None

    def find(
        self,
        collection: str,
        filter: Filter | None = None,
        *,
        sort: Sequence[str] = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        with self._lock:
            docs = apply_query(self._collection(collection).values(), filter, sort, skip, limit)
            return copy.deepcopy(docs)

    def count(self, collection: str, filter: Filter | None = None) -> int:
        with self._lock:
            return sum(1 for d in self._collection(collection).values() if matches(d, filter))

    def insert(self, collection: str, doc: Document) -> Document:
        with self._lock:
            docs = self._collection(collection)
            if doc["id"] in docs:
                raise UpstreamStoreError(f"Duplicate id {doc['id']} in {collection}")
            docs[doc["id"]] = copy.deepcopy(doc)
            return copy.deepcopy(doc)

    def replace(self, collection: str, doc: Document) -> Document:
        with self._lock:
            docs = self._collection(collection)
            if doc["id"] not in docs:
                raise UpstreamStoreError(f"Document {doc['id']} not found in {collection}")
            docs[doc["id"]] = copy.deepcopy(doc)
            return copy.deepcopy(doc)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collection(collection).pop(doc_id, None) is not None

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            if doc is None:
                return
            current: Any = get_path(doc, field)
            if current is MISSING or current is None:
                current = 0
            set_path(doc, field, current + amount)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            snapshot = copy.deepcopy(self._data)
            self._depth = 1
            try:
                yield
            except BaseException:
                self._data = snapshot
                raise
            finally:
                self._depth = 0

    def clear(self) -> None:
        """Drop all documents (for testing)."""
        with self._lock:
            self._data = {name: {} for name in COLLECTIONS}
