"""
HTTP cache component - ETag computation, conditional checks and the
route-class policy table.
"""

from blogcms.components.http_cache.conditional import (
    CacheDecision,
    CacheState,
    cache_headers,
    compute_etag,
    etag_matches,
    evaluate,
    http_date,
    not_modified_since,
    serialize_body,
)
from blogcms.components.http_cache.policy import (
    DEFAULT_POLICIES,
    CacheDirectives,
    PolicyTable,
    RouteClass,
    build_cache_control,
    build_policy_table,
)

__all__ = [
    "DEFAULT_POLICIES",
    "CacheDecision",
    "CacheDirectives",
    "CacheState",
    "PolicyTable",
    "RouteClass",
    "build_cache_control",
    "build_policy_table",
    "cache_headers",
    "compute_etag",
    "etag_matches",
    "evaluate",
    "http_date",
    "not_modified_since",
    "serialize_body",
]
