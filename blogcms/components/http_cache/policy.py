"""
HTTP cache policy table.

Each route class maps to one immutable CacheDirectives set. The table is
built once at startup from the rules file (``cache:`` section) and handed to
the HTTP layer as a read-only mapping; DEFAULT_POLICIES only fills classes
the rules file leaves out.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from blogcms.rules.models import CacheDirectiveRules


class RouteClass(StrEnum):
    PUBLIC_STATIC = "public-static"
    POST_LIST = "post-list"
    POST_DETAIL = "post-detail"
    POST_FEATURED = "post-featured"
    TAXONOMY = "taxonomy"
    SEO_FILES = "seo-files"
    ASSETS = "assets"
    NO_CACHE = "no-cache"


@dataclass(frozen=True)
class CacheDirectives:
    """Directive set for one route class."""

    max_age: int
    public: bool = True
    stale_while_revalidate: int | None = None
    immutable: bool = False
    must_revalidate: bool = False
    vary: bool = True
    no_store_headers: bool = False

    @classmethod
    def from_rules(cls, rules: CacheDirectiveRules) -> CacheDirectives:
        return cls(
            max_age=rules.max_age,
            public=rules.scope == "public",
            stale_while_revalidate=rules.stale_while_revalidate,
            immutable=rules.immutable,
            must_revalidate=rules.must_revalidate,
            vary=rules.vary,
            no_store_headers=rules.no_store_headers,
        )


PolicyTable = Mapping[RouteClass, CacheDirectives]

DEFAULT_POLICIES: PolicyTable = MappingProxyType(
    {
        RouteClass.PUBLIC_STATIC: CacheDirectives(max_age=86400),
        RouteClass.POST_LIST: CacheDirectives(max_age=300, stale_while_revalidate=60),
        RouteClass.POST_DETAIL: CacheDirectives(max_age=600, stale_while_revalidate=120),
        RouteClass.POST_FEATURED: CacheDirectives(max_age=600, stale_while_revalidate=60),
        RouteClass.TAXONOMY: CacheDirectives(max_age=1800, stale_while_revalidate=300),
        RouteClass.SEO_FILES: CacheDirectives(max_age=3600, vary=False),
        RouteClass.ASSETS: CacheDirectives(max_age=31536000, immutable=True),
        RouteClass.NO_CACHE: CacheDirectives(
            max_age=0,
            public=False,
            must_revalidate=True,
            no_store_headers=True,
        ),
    }
)


def build_policy_table(configured: Mapping[str, CacheDirectiveRules]) -> PolicyTable:
    """
    Merge configured directives over the defaults.

    Raises ValueError for a route class name the service does not know.
    """
    table: dict[RouteClass, CacheDirectives] = dict(DEFAULT_POLICIES)
    for name, rules in configured.items():
        try:
            route_class = RouteClass(name)
        except ValueError:
            valid = ", ".join(rc.value for rc in RouteClass)
            raise ValueError(f"Unknown cache route class '{name}' (expected one of: {valid})") from None
        table[route_class] = CacheDirectives.from_rules(rules)
    return MappingProxyType(table)


def build_cache_control(directives: CacheDirectives) -> str:
    """Render directives in fixed order: scope, max-age, swr, immutable, must-revalidate."""
    parts = ["public" if directives.public else "private", f"max-age={directives.max_age}"]
    if directives.stale_while_revalidate is not None:
        parts.append(f"stale-while-revalidate={directives.stale_while_revalidate}")
    if directives.immutable:
        parts.append("immutable")
    if directives.must_revalidate:
        parts.append("must-revalidate")
    return ", ".join(parts)
