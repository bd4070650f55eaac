"""
Per-request conditional caching.

One request moves AwaitingResponse -> ComputingETag -> NotModified | Sending.
``evaluate`` performs the last two transitions for an already serialized
body and returns the headers to send with either outcome.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from enum import StrEnum
from typing import Any

from blogcms.components.http_cache.policy import CacheDirectives, build_cache_control


class CacheState(StrEnum):
    AWAITING_RESPONSE = "awaiting-response"
    COMPUTING_ETAG = "computing-etag"
    NOT_MODIFIED = "not-modified"
    SENDING = "sending"


@dataclass(frozen=True)
class CacheDecision:
    state: CacheState
    etag: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def not_modified(self) -> bool:
        return self.state is CacheState.NOT_MODIFIED


def serialize_body(body: Any) -> bytes:
    """Bytes as-is, str as UTF-8, anything else as canonical JSON."""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(
        body,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def compute_etag(body: Any) -> str:
    """Quoted MD5 hex digest of the serialized body."""
    digest = hashlib.md5(serialize_body(body), usedforsecurity=False).hexdigest()
    return f'"{digest}"'


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """If-None-Match check: comma lists, weak validators and '*' are accepted."""
    if not if_none_match:
        return False
    bare = etag.strip('"')
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate.strip('"') == bare:
            return True
    return False


def http_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


def not_modified_since(if_modified_since: str | None, last_modified: datetime | None) -> bool:
    if not if_modified_since or last_modified is None:
        return False
    try:
        since = parsedate_to_datetime(if_modified_since)
    except (TypeError, ValueError):
        return False
    if since.tzinfo is None:
        since = since.replace(tzinfo=UTC)
    if last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=UTC)
    # HTTP dates carry whole seconds only.
    return last_modified.replace(microsecond=0) <= since


def cache_headers(
    directives: CacheDirectives,
    etag: str | None = None,
    last_modified: datetime | None = None,
) -> dict[str, str]:
    headers = {"Cache-Control": build_cache_control(directives)}
    if etag:
        headers["ETag"] = etag
    if last_modified is not None:
        headers["Last-Modified"] = http_date(last_modified)
    if directives.vary:
        headers["Vary"] = "Accept-Encoding"
    if directives.no_store_headers:
        headers["Pragma"] = "no-cache"
        headers["Expires"] = "0"
    return headers


def evaluate(
    body: bytes,
    directives: CacheDirectives,
    *,
    if_none_match: str | None = None,
    if_modified_since: str | None = None,
    last_modified: datetime | None = None,
) -> CacheDecision:
    """
    Decide between 304 and a full response for a serialized body.

    If-Modified-Since is only consulted when the route supplies
    ``last_modified`` and the client sent no If-None-Match.
    """
    etag = compute_etag(body)
    headers = cache_headers(directives, etag, last_modified)

    if if_none_match:
        fresh = etag_matches(if_none_match, etag)
    else:
        fresh = not_modified_since(if_modified_since, last_modified)

    state = CacheState.NOT_MODIFIED if fresh else CacheState.SENDING
    return CacheDecision(state=state, etag=etag, headers=headers)
