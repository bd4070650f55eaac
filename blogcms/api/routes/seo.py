"""
Crawler-facing documents: sitemaps, feeds, robots.txt, JSON-LD and meta tags.

Static paths are registered before their parameterised siblings
(``/sitemap-images.xml`` before ``/sitemap-{page}.xml``, ``/schema/blog``
before ``/schema/{slug}``).
"""

from fastapi import APIRouter, Depends, Query, Response

from blogcms.api.deps import get_feed_service, get_seo_service, get_sitemap_service
from blogcms.api.http_cache import CacheResponder, cache_for, encode_json, success
from blogcms.components.feeds import ATOM_MEDIA_TYPE, JSON_FEED_MEDIA_TYPE, RSS_MEDIA_TYPE, FeedService
from blogcms.components.http_cache import RouteClass
from blogcms.components.seo import SeoService, meta_tags_html
from blogcms.components.sitemaps import XML_MEDIA_TYPE, SitemapService

router = APIRouter()

TEXT_MEDIA_TYPE = "text/plain"
HTML_MEDIA_TYPE = "text/html"

seo_files = cache_for(RouteClass.SEO_FILES)
no_cache = cache_for(RouteClass.NO_CACHE)


# --- Sitemaps ---


@router.get("/sitemap.xml")
def sitemap(
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.blog_sitemap(), XML_MEDIA_TYPE)


@router.get("/sitemap-images.xml")
def image_sitemap(
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.image_sitemap(), XML_MEDIA_TYPE)


@router.get("/sitemap-news.xml")
def news_sitemap(
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.news_sitemap(), XML_MEDIA_TYPE)


@router.get("/sitemap-stats")
def sitemap_stats(
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.stats()))


@router.get("/sitemap-validation")
def sitemap_validation(
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.validate()))


@router.get("/sitemap-{page:int}.xml")
def sitemap_page(
    page: int,
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.blog_sitemap_page(page), XML_MEDIA_TYPE)


@router.get("/robots.txt")
def robots_txt(
    service: SitemapService = Depends(get_sitemap_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.robots_txt(), TEXT_MEDIA_TYPE)


# --- Feeds ---


@router.get("/feed.xml")
def rss_feed(
    limit: int | None = Query(None, ge=1),
    service: FeedService = Depends(get_feed_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.rss(limit), RSS_MEDIA_TYPE)


@router.get("/feed.atom")
def atom_feed(
    limit: int | None = Query(None, ge=1),
    service: FeedService = Depends(get_feed_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.atom(limit), ATOM_MEDIA_TYPE)


@router.get("/feed.json")
def json_feed(
    limit: int | None = Query(None, ge=1),
    service: FeedService = Depends(get_feed_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(encode_json(service.json_feed(limit)), JSON_FEED_MEDIA_TYPE)


@router.get("/feed/category/{slug}")
def category_feed(
    slug: str,
    limit: int | None = Query(None, ge=1),
    service: FeedService = Depends(get_feed_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.respond(service.category_rss(slug, limit), RSS_MEDIA_TYPE)


@router.get("/feed-stats")
def feed_stats(
    service: FeedService = Depends(get_feed_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.stats()))


# --- Schema.org ---


@router.get("/schema/organization")
def organization_schema(
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.organization_schema()))


@router.get("/schema/website")
def website_schema(
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.website_schema()))


@router.get("/schema/blog")
def blog_schema(
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.blog_schema()))


@router.get("/schema/{slug}")
def post_schemas(
    slug: str,
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    """Article, breadcrumb, organization and (when present) FAQ schemas for a post."""
    return cache.json(success(service.post_schemas(slug)))


# --- Meta tags ---


@router.get("/meta/home")
def home_meta(
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.home_meta()))


@router.get("/meta/category/{slug}")
def category_meta(
    slug: str,
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.category_meta(slug)))


@router.get("/meta/tag/{slug}")
def tag_meta(
    slug: str,
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.tag_meta(slug)))


@router.get("/meta/{slug}")
def post_meta(
    slug: str,
    format: str = Query("json", pattern="^(json|html)$"),
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    """Meta tags for a post; ``format=html`` returns a ready-to-embed ``<head>`` snippet."""
    tags = service.post_meta(slug)
    if format == "html":
        return cache.respond(meta_tags_html(tags), HTML_MEDIA_TYPE)
    return cache.json(success(tags))


# --- Validation ---


@router.get("/seo-validation/{slug}")
def seo_validation(
    slug: str,
    service: SeoService = Depends(get_seo_service),
    cache: CacheResponder = Depends(seo_files),
) -> Response:
    return cache.json(success(service.validate_post(slug).to_dict()))
