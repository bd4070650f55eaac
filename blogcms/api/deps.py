import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Request

from blogcms.adapters.clock import SystemClock
from blogcms.adapters.memory import InMemoryDocumentStore
from blogcms.adapters.sqlite import SQLiteDocumentStore
from blogcms.components.ai_content import AiContentService, create_ai_content_service
from blogcms.components.feeds import FeedService, create_feed_service
from blogcms.components.http_cache import PolicyTable, build_policy_table
from blogcms.components.posts import PostService, create_post_service
from blogcms.components.seo import SeoService, create_seo_service
from blogcms.components.sitemaps import SitemapService, create_sitemap_service
from blogcms.components.taxonomy import (
    CategoryService,
    TagService,
    create_category_service,
    create_tag_service,
)
from blogcms.core.ports.store import ClockPort, DocumentStorePort
from blogcms.rules.loader import load_rules
from blogcms.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("BLOG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "blog.db")
        self.rules_path = Path(os.environ.get("BLOG_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.base_url_override = os.environ.get("SITEMAP_BASE_URL") or None
        self.store_kind = os.environ.get("BLOG_STORE", "sqlite").lower()
        self.log_level = os.environ.get("BLOG_LOG_LEVEL", "INFO").upper()
        self.host = os.environ.get("BLOG_HOST", "127.0.0.1")
        self.port = int(os.environ.get("BLOG_PORT", "8000"))
        self.reload = os.environ.get("BLOG_RELOAD", "").lower() in {"1", "true", "yes"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
def apply_overrides(rules: Rules, settings: Settings) -> Rules:
    """Apply environment overrides (currently the public base URL)."""
    if not settings.base_url_override:
        return rules
    site = rules.site.model_copy(update={"base_url": settings.base_url_override})
    return rules.model_copy(update={"site": site})


@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return apply_overrides(load_rules(settings.rules_path), settings)


def get_cache_policies(request: Request, rules: Rules = Depends(get_rules)) -> PolicyTable:
    """The table built at startup, or one built from the current rules."""
    table: PolicyTable | None = getattr(request.app.state, "cache_policies", None)
    if table is not None:
        return table
    return build_policy_table(rules.cache_policies)


# --- Store / Clock ---
@lru_cache
def _memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


def get_store(settings: Settings = Depends(get_settings)) -> DocumentStorePort:
    if settings.store_kind == "memory":
        return _memory_store()
    return SQLiteDocumentStore(settings.db_path)


def get_clock() -> ClockPort:
    return SystemClock()


# --- Component Services ---
def get_post_service(
    store: DocumentStorePort = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PostService:
    """Get posts component service."""
    return create_post_service(store, clock, rules.posts, rules.site, rules.seo)


def get_category_service(
    store: DocumentStorePort = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> CategoryService:
    return create_category_service(store, clock, rules.posts.slug_max_attempts)


def get_tag_service(
    store: DocumentStorePort = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> TagService:
    return create_tag_service(store, clock, rules.posts.slug_max_attempts)


def get_feed_service(
    store: DocumentStorePort = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> FeedService:
    return create_feed_service(store, clock, rules.site, rules.feeds)


def get_sitemap_service(
    store: DocumentStorePort = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> SitemapService:
    return create_sitemap_service(store, clock, rules.site, rules.sitemaps, rules.robots)


def get_seo_service(
    store: DocumentStorePort = Depends(get_store),
    rules: Rules = Depends(get_rules),
) -> SeoService:
    return create_seo_service(store, rules.site, rules.seo)


def get_ai_content_service(
    store: DocumentStorePort = Depends(get_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> AiContentService:
    return create_ai_content_service(store, clock, rules.site)
