"""
Sitemaps functional core.

Pure builders for the blog urlset, image and news sitemaps, the sitemap
index and robots.txt, plus protocol-limit pagination.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from blogcms.core.services.text import escape_xml
from blogcms.domain.entities import BlogCategory, BlogPost, BlogTag
from blogcms.rules.models import RobotsRules, SiteRules

XML_MEDIA_TYPE = "application/xml"
MAX_URLS_PER_SITEMAP = 50000
MAX_BYTES_PER_SITEMAP = 50 * 1024 * 1024

_XML_DECL = '<?xml version="1.0" encoding="UTF-8"?>'
_URLSET_OPEN = (
    '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" '
    'xmlns:news="http://www.google.com/schemas/sitemap-news/0.9" '
    'xmlns:xhtml="http://www.w3.org/1999/xhtml" '
    'xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">'
)
_URLSET_CLOSE = "</urlset>"


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    changefreq: str
    priority: float
    lastmod: datetime | None = None


def format_lastmod(value: datetime) -> str:
    """ISO-8601 UTC at seconds precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


# --- Entry collection ---


def build_blog_entries(
    site: SiteRules,
    posts: Iterable[BlogPost],
    categories: Iterable[BlogCategory],
    tags: Iterable[BlogTag],
) -> list[SitemapEntry]:
    """
    Blog home, then published posts, active categories and used tags.

    Callers pass already-filtered collections; this only shapes entries.
    """
    entries = [SitemapEntry(loc=site.blog_url, changefreq="daily", priority=0.9)]
    for post in posts:
        entries.append(
            SitemapEntry(
                loc=site.url(f"/blog/{post.slug}"),
                changefreq="weekly",
                priority=0.8,
                lastmod=post.updated_at or post.published_at,
            )
        )
    for category in categories:
        entries.append(
            SitemapEntry(loc=site.url(f"/blog/category/{category.slug}"), changefreq="weekly", priority=0.7)
        )
    for tag in tags:
        entries.append(SitemapEntry(loc=site.url(f"/blog/tag/{tag.slug}"), changefreq="weekly", priority=0.6))
    return entries


# --- urlset ---


def _url_element(entry: SitemapEntry) -> str:
    lines = ["  <url>", f"    <loc>{escape_xml(entry.loc)}</loc>"]
    if entry.lastmod is not None:
        lines.append(f"    <lastmod>{format_lastmod(entry.lastmod)}</lastmod>")
    lines.append(f"    <changefreq>{entry.changefreq}</changefreq>")
    lines.append(f"    <priority>{entry.priority:.1f}</priority>")
    lines.append("  </url>")
    return "\n".join(lines)


def render_urlset(entries: Sequence[SitemapEntry]) -> str:
    return "\n".join([_XML_DECL, _URLSET_OPEN, *(_url_element(e) for e in entries), _URLSET_CLOSE])


def paginate_entries(
    entries: Sequence[SitemapEntry],
    max_urls: int = MAX_URLS_PER_SITEMAP,
    max_bytes: int = MAX_BYTES_PER_SITEMAP,
) -> list[list[SitemapEntry]]:
    """
    Split entries so every rendered page stays within both protocol limits.

    Always returns at least one (possibly empty) page.
    """
    overhead = len(f"{_XML_DECL}\n{_URLSET_OPEN}\n{_URLSET_CLOSE}".encode())
    pages: list[list[SitemapEntry]] = []
    current: list[SitemapEntry] = []
    size = overhead

    for entry in entries:
        entry_size = len(_url_element(entry).encode()) + 1
        if current and (len(current) >= max_urls or size + entry_size > max_bytes):
            pages.append(current)
            current = []
            size = overhead
        current.append(entry)
        size += entry_size

    pages.append(current)
    return pages


# --- Index ---


def render_sitemap_index(sitemaps: Sequence[tuple[str, datetime | None]]) -> str:
    lines = [_XML_DECL, '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">']
    for loc, lastmod in sitemaps:
        lines.append("  <sitemap>")
        lines.append(f"    <loc>{escape_xml(loc)}</loc>")
        if lastmod is not None:
            lines.append(f"    <lastmod>{format_lastmod(lastmod)}</lastmod>")
        lines.append("  </sitemap>")
    lines.append("</sitemapindex>")
    return "\n".join(lines)


# --- Image / news ---


def render_image_sitemap(posts: Iterable[BlogPost], site: SiteRules) -> str:
    lines = [
        _XML_DECL,
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" '
        'xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">',
    ]
    for post in posts:
        if not post.featured_image or not post.featured_image.url:
            continue
        caption = post.featured_image.caption or post.excerpt
        lines.append("  <url>")
        lines.append(f"    <loc>{escape_xml(site.url(f'/blog/{post.slug}'))}</loc>")
        lines.append("    <image:image>")
        lines.append(f"      <image:loc>{escape_xml(post.featured_image.url)}</image:loc>")
        lines.append(f"      <image:title>{escape_xml(post.title)}</image:title>")
        if caption:
            lines.append(f"      <image:caption>{escape_xml(caption)}</image:caption>")
        lines.append("    </image:image>")
        lines.append("  </url>")
    lines.append(_URLSET_CLOSE)
    return "\n".join(lines)


def render_news_sitemap(posts: Iterable[BlogPost], site: SiteRules) -> str:
    """Callers pass only posts inside the news window."""
    lines = [
        _XML_DECL,
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" '
        'xmlns:news="http://www.google.com/schemas/sitemap-news/0.9">',
    ]
    for post in posts:
        published = post.published_at or post.created_at
        lines.append("  <url>")
        lines.append(f"    <loc>{escape_xml(site.url(f'/blog/{post.slug}'))}</loc>")
        lines.append("    <news:news>")
        lines.append("      <news:publication>")
        lines.append(f"        <news:name>{escape_xml(site.blog_name)}</news:name>")
        lines.append(f"        <news:language>{escape_xml(site.language_code)}</news:language>")
        lines.append("      </news:publication>")
        lines.append(f"      <news:publication_date>{format_lastmod(published)}</news:publication_date>")
        lines.append(f"      <news:title>{escape_xml(post.title)}</news:title>")
        if post.seo.keywords:
            lines.append(f"      <news:keywords>{escape_xml(', '.join(post.seo.keywords))}</news:keywords>")
        lines.append("    </news:news>")
        lines.append("  </url>")
    lines.append(_URLSET_CLOSE)
    return "\n".join(lines)


# --- robots.txt ---


def render_robots_txt(site: SiteRules, robots: RobotsRules) -> str:
    lines = [f"User-agent: {robots.user_agent}"]
    lines.extend(f"Allow: {path}" for path in robots.allow)
    lines.extend(f"Disallow: {path}" for path in robots.disallow)
    lines.append("")
    # Sitemap paths are served under the API prefix.
    lines.extend(f"Sitemap: {site.url(site.api_prefix + path)}" for path in robots.sitemaps)
    if robots.crawl_delay is not None:
        lines.append("")
        lines.append(f"Crawl-delay: {robots.crawl_delay}")
    return "\n".join(lines) + "\n"
