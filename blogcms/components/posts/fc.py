"""
Posts functional core - pure helpers for the post lifecycle.

Counter bookkeeping is expressed as a diff between what a post contributed
to category ``post_count`` / tag ``usage_count`` before a change and what it
contributes after. Only published posts contribute.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from blogcms.core.ports.store import Filter
from blogcms.core.services.text import clean_text
from blogcms.domain.entities import BlogPost, ImageRef, PostSeo
from blogcms.domain.errors import InvalidInput
from blogcms.rules.models import SeoRules, SiteRules

from .models import DEFAULT_SORT, SORT_KEYS

DEFAULT_TWITTER_CARD = "summary_large_image"
COPY_SUFFIX = " (copy)"


# --- Counters ---


@dataclass(frozen=True)
class Contribution:
    """The counters a single post currently holds."""

    category_id: str | None
    tag_ids: tuple[str, ...]

    @classmethod
    def of(cls, post: BlogPost) -> Contribution | None:
        if not post.is_published:
            return None
        return cls(post.category_id, tuple(dict.fromkeys(post.tag_ids)))


@dataclass(frozen=True)
class CounterDeltas:
    categories: dict[str, int]
    tags: dict[str, int]

    @property
    def empty(self) -> bool:
        return not self.categories and not self.tags


def counter_deltas(before: Contribution | None, after: Contribution | None) -> CounterDeltas:
    """Net counter changes needed to move from ``before`` to ``after``."""
    categories: Counter[str] = Counter()
    tags: Counter[str] = Counter()
    if before is not None:
        if before.category_id:
            categories[before.category_id] -= 1
        for tag_id in before.tag_ids:
            tags[tag_id] -= 1
    if after is not None:
        if after.category_id:
            categories[after.category_id] += 1
        for tag_id in after.tag_ids:
            tags[tag_id] += 1
    return CounterDeltas(
        categories={k: v for k, v in categories.items() if v},
        tags={k: v for k, v in tags.items() if v},
    )


# --- Input normalisation ---


def require_fields(**values: str | None) -> None:
    missing = [name for name, value in values.items() if not value or not str(value).strip()]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}", "missing_fields")


def normalize_featured_image(value: ImageRef | str | None, title: str) -> ImageRef | None:
    """A bare URL becomes an ImageRef with the post title as alt text."""
    if value is None:
        return None
    if isinstance(value, str):
        url = value.strip()
        return ImageRef(url=url, alt=title) if url else None
    return value if value.url else None


def default_post_seo(
    *,
    title: str,
    excerpt: str,
    slug: str,
    tag_names: Sequence[str],
    image: ImageRef | None,
    site: SiteRules,
    seo: SeoRules | None,
    overrides: dict[str, Any] | None = None,
) -> PostSeo:
    """Fill SEO fields from the post itself; explicit ``overrides`` win."""
    title_max = seo.title_max_length if seo else 60
    description_max = seo.description_max_length if seo else 160
    meta_title = clean_text(title, title_max)
    meta_description = clean_text(excerpt, description_max)
    image_url = image.url if image else None

    defaults: dict[str, Any] = {
        "meta_title": meta_title,
        "meta_description": meta_description,
        "focus_keyphrase": tag_names[0] if tag_names else None,
        "canonical_url": site.url(f"/blog/{slug}"),
        "og_title": meta_title,
        "og_description": meta_description,
        "og_image": image_url,
        "twitter_card": DEFAULT_TWITTER_CARD,
        "twitter_title": meta_title,
        "twitter_description": meta_description,
        "twitter_image": image_url,
    }
    given = {k: v for k, v in (overrides or {}).items() if v not in (None, "", [])}
    return PostSeo.model_validate({**defaults, **given})


def copy_title(title: str) -> str:
    return f"{title}{COPY_SUFFIX}"


# --- Queries ---


def resolve_sort(sort: str | None) -> tuple[str, ...]:
    key = sort or DEFAULT_SORT
    if key not in SORT_KEYS:
        allowed = ", ".join(SORT_KEYS)
        raise InvalidInput(f"Unsupported sort '{key}' (allowed: {allowed})", "invalid_sort")
    return SORT_KEYS[key]


def search_filter(text: str) -> Filter:
    needle = text.strip()
    return {
        "$or": [
            {"title": {"$icontains": needle}},
            {"excerpt": {"$icontains": needle}},
            {"content": {"$icontains": needle}},
        ]
    }


def related_filter(post: BlogPost) -> Filter | None:
    """Posts sharing the category or any tag, excluding the post itself."""
    either: list[Filter] = []
    if post.category_id:
        either.append({"category_id": post.category_id})
    if post.tag_ids:
        either.append({"tag_ids": {"$in": list(post.tag_ids)}})
    if not either:
        return None
    return {"id": {"$ne": post.id}, "$or": either}


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    if limit is None:
        return default
    if limit < 1:
        raise InvalidInput("limit must be a positive integer", "invalid_limit")
    return min(limit, maximum)


def clamp_page(page: int) -> int:
    if page < 1:
        raise InvalidInput("page must be a positive integer", "invalid_page")
    return page
