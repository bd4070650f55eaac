"""
FastAPI side of the HTTP cache.

``cache_for(route_class)`` builds a dependency that hands the route a
CacheResponder bound to that class's directives and the request's
conditional headers. The route passes its body to ``respond`` and gets back
either a 304 or the full response with cache headers attached.
"""

import json
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from fastapi import Depends, Request, Response
from fastapi.encoders import jsonable_encoder

from blogcms.api.deps import get_cache_policies
from blogcms.components.http_cache import (
    DEFAULT_POLICIES,
    CacheDecision,
    CacheDirectives,
    CacheState,
    PolicyTable,
    RouteClass,
    evaluate,
)

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


def success(data: Any, **extra: Any) -> dict[str, Any]:
    """The standard ``{"success": true, "data": ...}`` envelope, JSON-ready."""
    return jsonable_encoder({"success": True, "data": data, **extra})


def encode_json(payload: Any) -> bytes:
    return json.dumps(
        jsonable_encoder(payload),
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


class CacheResponder:
    def __init__(
        self,
        route_class: RouteClass,
        directives: CacheDirectives,
        if_none_match: str | None = None,
        if_modified_since: str | None = None,
    ) -> None:
        self.route_class = route_class
        self.directives = directives
        self.if_none_match = if_none_match
        self.if_modified_since = if_modified_since
        self.state = CacheState.AWAITING_RESPONSE
        self.decision: CacheDecision | None = None

    def respond(
        self,
        body: str | bytes,
        media_type: str,
        last_modified: datetime | None = None,
    ) -> Response:
        raw = body.encode("utf-8") if isinstance(body, str) else body
        self.state = CacheState.COMPUTING_ETAG
        self.decision = evaluate(
            raw,
            self.directives,
            if_none_match=self.if_none_match,
            if_modified_since=self.if_modified_since,
            last_modified=last_modified,
        )
        self.state = self.decision.state

        if self.decision.not_modified:
            headers = {k: v for k, v in self.decision.headers.items() if k in ("ETag", "Cache-Control")}
            logger.debug("304 for %s route (etag %s)", self.route_class, self.decision.etag)
            return Response(status_code=304, headers=headers)
        return Response(content=raw, media_type=media_type, headers=self.decision.headers)

    def json(self, payload: Any, last_modified: datetime | None = None) -> Response:
        return self.respond(encode_json(payload), JSON_MEDIA_TYPE, last_modified)


def cache_for(route_class: RouteClass) -> Callable[..., CacheResponder]:
    """Dependency factory: a CacheResponder for ``route_class``."""

    def dependency(
        request: Request,
        policies: PolicyTable = Depends(get_cache_policies),
    ) -> CacheResponder:
        directives = policies.get(route_class) or DEFAULT_POLICIES[route_class]
        return CacheResponder(
            route_class,
            directives,
            if_none_match=request.headers.get("if-none-match"),
            if_modified_since=request.headers.get("if-modified-since"),
        )

    return dependency
