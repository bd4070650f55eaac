"""
SQLite document store.

Each collection lives in the ``documents`` table as JSON bodies. Lookups by
id and slug use the table's keys; every other filter clause is evaluated on
the decoded documents with blogcms.adapters.query, so both store
implementations agree on semantics.

``increment`` is a single ``json_set`` UPDATE. ``transaction`` pins one
connection per thread with ``BEGIN IMMEDIATE`` so a group of writes commits
together or not at all.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from blogcms.adapters.query import apply_query
from blogcms.core.ports.store import Document, Filter
from blogcms.domain.errors import UpstreamStoreError

logger = logging.getLogger(__name__)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        logger.error("SQLite %s failed: %s", action, e)
        raise UpstreamStoreError(f"Content store {action} failed") from e


def _json_path(field: str) -> str:
    return "$." + field


class SQLiteDocumentStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._local = threading.local()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0)
        conn.row_factory = dict_factory
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        pinned: sqlite3.Connection | None = getattr(self._local, "conn", None)
        if pinned is not None:
            yield pinned
            return

        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- Reads ---

    def _load(self, conn: sqlite3.Connection, collection: str, filter: Filter | None) -> list[Document]:
        sql = "SELECT body FROM documents WHERE collection = ?"
        params: list[Any] = [collection]
        if filter:
            # Push plain id/slug equality down to the index.
            for column in ("id", "slug"):
                value = filter.get(column)
                if isinstance(value, str):
                    sql += f" AND {column} = ?"
                    params.append(value)
        rows = conn.execute(sql, params).fetchall()
        return [json.loads(row["body"]) for row in rows]

    def get(self, collection: str, doc_id: str) -> Document | None:
        with _store_errors("get"), self._connection() as conn:
            row = conn.execute(
                "SELECT body FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        return json.loads(row["body"]) if row else None

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
        with _store_errors("find"), self._connection() as conn:
            docs = self._load(conn, collection, filter)
        return apply_query(docs, filter, sort, skip, limit)

    def count(self, collection: str, filter: Filter | None = None) -> int:
        return len(self.find(collection, filter))

    # --- Writes ---

    def insert(self, collection: str, doc: Document) -> Document:
        with _store_errors("insert"), self._connection() as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, slug, body) VALUES (?, ?, ?, ?)",
                (collection, doc["id"], doc.get("slug"), json.dumps(doc)),
            )
        return doc

    def replace(self, collection: str, doc: Document) -> Document:
        with _store_errors("replace"), self._connection() as conn:
            cursor = conn.execute(
                "UPDATE documents SET slug = ?, body = ? WHERE collection = ? AND id = ?",
                (doc.get("slug"), json.dumps(doc), collection, doc["id"]),
            )
            if cursor.rowcount == 0:
                raise UpstreamStoreError(f"Document {doc['id']} not found in {collection}")
        return doc

    def delete(self, collection: str, doc_id: str) -> bool:
        with _store_errors("delete"), self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            return cursor.rowcount > 0

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> None:
        path = _json_path(field)
        with _store_errors("increment"), self._connection() as conn:
            conn.execute(
                """
                UPDATE documents
                SET body = json_set(body, ?, COALESCE(json_extract(body, ?), 0) + ?)
                WHERE collection = ? AND id = ?
                """,
                (path, path, amount, collection, doc_id),
            )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "conn", None) is not None:
            # Nested: join the outer transaction.
            yield
            return

        with _store_errors("connect"):
            conn = self._get_conn()
        try:
            with _store_errors("begin"):
                conn.isolation_level = None
                conn.execute("BEGIN IMMEDIATE")
        except UpstreamStoreError:
            conn.close()
            raise
        self._local.conn = conn
        try:
            yield
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        else:
            with _store_errors("commit"):
                conn.execute("COMMIT")
        finally:
            self._local.conn = None
            conn.close()
