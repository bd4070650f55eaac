"""
Sitemaps component - XML sitemaps, sitemap index and robots.txt.
"""

from ._impl import SitemapService, create_sitemap_service
from .fc import (
    MAX_BYTES_PER_SITEMAP,
    MAX_URLS_PER_SITEMAP,
    XML_MEDIA_TYPE,
    SitemapEntry,
    build_blog_entries,
    format_lastmod,
    paginate_entries,
    render_image_sitemap,
    render_news_sitemap,
    render_robots_txt,
    render_sitemap_index,
    render_urlset,
)

__all__ = [
    "MAX_BYTES_PER_SITEMAP",
    "MAX_URLS_PER_SITEMAP",
    "XML_MEDIA_TYPE",
    "SitemapEntry",
    "SitemapService",
    "build_blog_entries",
    "create_sitemap_service",
    "format_lastmod",
    "paginate_entries",
    "render_image_sitemap",
    "render_news_sitemap",
    "render_robots_txt",
    "render_sitemap_index",
    "render_urlset",
]
