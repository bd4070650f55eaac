"""
SeoService - resolves slugs and feeds the schema, meta-tag and validation
builders.
"""

from __future__ import annotations

from typing import Any

from blogcms.core.ports.store import DocumentStorePort
from blogcms.core.services.views import PostViewLoader
from blogcms.rules.models import SeoRules, SiteRules

from .meta_tags import blog_home_meta_tags, category_meta_tags, post_meta_tags, tag_meta_tags
from .schema import blog_schema, organization_schema, post_schemas, website_schema
from .validation import SeoReport, validate_post_seo


class SeoService:
    def __init__(self, store: DocumentStorePort, site: SiteRules, seo: SeoRules) -> None:
        self._store = store
        self._site = site
        self._seo = seo

    def _loader(self) -> PostViewLoader:
        return PostViewLoader(self._store)

    # --- JSON-LD ---

    def organization_schema(self) -> dict[str, Any]:
        return organization_schema(self._site)

    def website_schema(self) -> dict[str, Any]:
        return website_schema(self._site)

    def blog_schema(self) -> dict[str, Any]:
        return blog_schema(self._site)

    def post_schemas(self, slug: str) -> list[dict[str, Any]]:
        return post_schemas(self._loader().published_by_slug(slug), self._site)

    # --- Meta tags ---

    def home_meta(self) -> dict[str, Any]:
        return blog_home_meta_tags(self._site, self._seo)

    def category_meta(self, slug: str) -> dict[str, Any]:
        category = self._loader().active_category_by_slug(slug)
        return category_meta_tags(category, self._site, self._seo)

    def tag_meta(self, slug: str) -> dict[str, Any]:
        tag = self._loader().active_tag_by_slug(slug)
        return tag_meta_tags(tag, self._site, self._seo)

    def post_meta(self, slug: str) -> dict[str, Any]:
        return post_meta_tags(self._loader().published_by_slug(slug), self._site, self._seo)

    # --- Validation ---

    def validate_post(self, slug: str) -> SeoReport:
        return validate_post_seo(self._loader().published_by_slug(slug))


def create_seo_service(store: DocumentStorePort, site: SiteRules, seo: SeoRules) -> SeoService:
    """Factory for the SEO service."""
    return SeoService(store, site, seo)
