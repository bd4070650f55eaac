"""
Filter matching and sorting over JSON documents.

Shared by the in-memory and SQLite stores so both honour the same filter
vocabulary (see blogcms.core.ports.store).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from blogcms.core.ports.store import Document, Filter
from blogcms.domain.entities import format_utc

MISSING = object()


def get_path(doc: Document, path: str) -> Any:
    """Resolve a dotted path; returns MISSING when absent."""
    current: Any = doc
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return MISSING
    return current


def set_path(doc: Document, path: str, value: Any) -> None:
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def normalize(value: Any) -> Any:
    """Bring filter operands into stored (JSON) form."""
    if isinstance(value, datetime):
        return format_utc(value)
    if isinstance(value, (list, tuple, set)):
        return [normalize(v) for v in value]
    return value


def _equals(stored: Any, expected: Any) -> bool:
    if stored is MISSING:
        stored = None
    if isinstance(stored, list) and not isinstance(expected, list):
        return expected in stored
    return bool(stored == expected)


def _ordered(stored: Any, op: str, operand: Any) -> bool:
    if stored is MISSING or stored is None or operand is None:
        return False
    try:
        if op == "$gt":
            return bool(stored > operand)
        if op == "$gte":
            return bool(stored >= operand)
        if op == "$lt":
            return bool(stored < operand)
        return bool(stored <= operand)
    except TypeError:
        return False


def _is_operator_block(cond: Any) -> bool:
    return isinstance(cond, dict) and bool(cond) and all(str(k).startswith("$") for k in cond)


def _match_condition(stored: Any, cond: Any) -> bool:
    if not _is_operator_block(cond):
        return _equals(stored, normalize(cond))

    for op, raw in cond.items():
        operand = normalize(raw)
        if op == "$ne":
            ok = not _equals(stored, operand)
        elif op == "$in":
            ok = any(_equals(stored, v) for v in operand)
        elif op == "$nin":
            ok = not any(_equals(stored, v) for v in operand)
        elif op in ("$gt", "$gte", "$lt", "$lte"):
            ok = _ordered(stored, op, operand)
        elif op == "$exists":
            present = stored is not MISSING and stored not in (None, "")
            ok = present == bool(operand)
        elif op == "$icontains":
            ok = isinstance(stored, str) and str(operand).lower() in stored.lower()
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
        if not ok:
            return False
    return True


def matches(doc: Document, filter: Filter | None) -> bool:
    """True when the document satisfies every clause of the filter."""
    if not filter:
        return True
    for key, cond in filter.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in cond):
                return False
            continue
        if key == "$and":
            if not all(matches(doc, sub) for sub in cond):
                return False
            continue
        if not _match_condition(get_path(doc, key), cond):
            return False
    return True


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing and null values sort first in ascending order.
    if value is MISSING or value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    return (1, value)


def sort_documents(docs: Iterable[Document], sort: Sequence[str]) -> list[Document]:
    result = list(docs)
    # Stable sorts applied from the least significant key.
    for key in reversed(list(sort)):
        descending = key.startswith("-")
        path = key.lstrip("-+")
        result.sort(key=lambda d, p=path: _sort_key(get_path(d, p)), reverse=descending)
    return result


def apply_query(
    docs: Iterable[Document],
    filter: Filter | None,
    sort: Sequence[str],
    skip: int,
    limit: int | None,
) -> list[Document]:
    selected = [d for d in docs if matches(d, filter)]
    selected = sort_documents(selected, sort)
    if skip:
        selected = selected[skip:]
    if limit is not None:
        selected = selected[:limit]
    return selected
