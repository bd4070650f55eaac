"""
Slug generation.

``to_slug`` is deterministic: lowercase, strip diacritics, collapse every run
of characters outside ``[a-z0-9]`` into one hyphen, trim hyphens.

``unique_slug_for`` tries ``base``, ``base-1``, ``base-2``... against one
store collection and gives up with SlugExhausted after ``max_attempts``
suffixed candidates.
"""

from __future__ import annotations

import logging
import re
import unicodedata

from blogcms.core.ports.store import DocumentStorePort, Filter
from blogcms.domain.errors import InvalidInput, SlugExhausted

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10000

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def to_slug(text: str) -> str:
    """
    Turn arbitrary text into a URL-safe slug.

    Raises InvalidInput when nothing slug-worthy remains (empty or
    punctuation-only input).
    """
    slug = _strip_diacritics((text or "").strip().lower())
    slug = _NON_ALNUM_RE.sub("-", slug).strip("-")
    if not slug:
        raise InvalidInput(f"Cannot derive a slug from {text!r}", "slug_empty")
    return slug


def is_valid_slug(slug: str) -> bool:
    """Check if slug is valid (lowercase alphanumeric + single hyphens)."""
    return bool(_SLUG_RE.match(slug))


def sanitize_slug(slug: str) -> str:
    """Normalise a user-supplied slug."""
    return to_slug(slug)


def _slug_taken(
    store: DocumentStorePort,
    collection: str,
    candidate: str,
    exclude_id: str | None,
) -> bool:
    query: Filter = {"slug": candidate}
    if exclude_id:
        query["id"] = {"$ne": exclude_id}
    return store.find_one(collection, query) is not None


def unique_slug_for(
    text: str,
    collection: str,
    store: DocumentStorePort,
    exclude_id: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """Return the first free slug for ``text`` within ``collection``."""
    base = to_slug(text)
    if not _slug_taken(store, collection, base, exclude_id):
        return base

    for n in range(1, max_attempts + 1):
        candidate = f"{base}-{n}"
        if not _slug_taken(store, collection, candidate, exclude_id):
            return candidate

    logger.warning("Slug space exhausted for %r in %s", base, collection)
    raise SlugExhausted(
        f"No free slug for '{base}' after {max_attempts} attempts",
    )
