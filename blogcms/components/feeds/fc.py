"""
Feeds functional core: RSS 2.0, Atom 1.0 and JSON Feed 1.1 builders.

No I/O. Every text value interpolated into XML goes through escape_xml;
free-form descriptions are wrapped in CDATA.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any

from blogcms.core.services.guards import require_renderable
from blogcms.core.services.text import cdata, escape_xml, strip_html, truncate
from blogcms.domain.entities import BlogCategory, PostView
from blogcms.rules.models import SiteRules

RSS_MEDIA_TYPE = "application/rss+xml"
ATOM_MEDIA_TYPE = "application/atom+xml"
JSON_FEED_MEDIA_TYPE = "application/feed+json"
JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"


def clean_html_for_feed(markup: str | None, max_length: int = 500) -> str:
    """Plain-text rendition of a body, hard-cut at ``max_length``."""
    return truncate(strip_html(markup), max_length)


def feed_description(view: PostView, max_length: int = 500) -> str:
    return view.excerpt or clean_html_for_feed(view.content, max_length)


def post_url(site: SiteRules, slug: str) -> str:
    return site.url(f"/blog/{slug}")


def _utc(value: datetime) -> datetime:
    return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)


def rfc822(value: datetime) -> str:
    return format_datetime(_utc(value), usegmt=True)


def iso8601(value: datetime) -> str:
    return _utc(value).isoformat().replace("+00:00", "Z")


def _published(view: PostView) -> datetime:
    return view.published_at or view.created_at


# ═══════════════════════════════════════════════════════════════════════════
# RSS 2.0
# ═══════════════════════════════════════════════════════════════════════════


def _rss_item(
    view: PostView,
    site: SiteRules,
    max_chars: int,
    category_name: str | None = None,
    include_author: bool = True,
) -> list[str]:
    require_renderable(view)
    url = escape_xml(post_url(site, view.slug))
    parts = [
        "  <item>",
        f"    <title>{escape_xml(view.title)}</title>",
        f"    <link>{url}</link>",
        f'    <guid isPermaLink="true">{url}</guid>',
        f"    <pubDate>{rfc822(_published(view))}</pubDate>",
    ]
    if include_author and view.author and view.author.email:
        author = f"{view.author.email} ({view.author.full_name})"
        parts.append(f"    <author>{escape_xml(author)}</author>")

    section = category_name or (view.category.name if view.category else None)
    if section:
        parts.append(f"    <category>{escape_xml(section)}</category>")
    for tag in view.tags:
        parts.append(f"    <category>{escape_xml(tag.name)}</category>")

    parts.append(f"    <description>{cdata(feed_description(view, max_chars))}</description>")
    if view.featured_image and view.featured_image.url:
        parts.append(
            f'    <enclosure url="{escape_xml(view.featured_image.url)}" length="0" type="image/jpeg" />'
        )
    parts.append("  </item>")
    return parts


def render_rss(
    views: list[PostView],
    site: SiteRules,
    build_date: datetime,
    description_max_chars: int = 500,
) -> str:
    blog_url = escape_xml(site.blog_url)
    self_url = escape_xml(site.url(f"{site.api_prefix}/feed.xml"))

    xml_parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/" '
        'xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{escape_xml(site.blog_name)}</title>",
        f"    <link>{blog_url}</link>",
        f"    <description>{escape_xml(site.description)}</description>",
        f"    <language>{escape_xml(site.language)}</language>",
        f"    <lastBuildDate>{rfc822(build_date)}</lastBuildDate>",
        f'    <atom:link href="{self_url}" rel="self" type="{RSS_MEDIA_TYPE}" />',
        f"    <generator>{escape_xml(site.generator)}</generator>",
        "    <image>",
        f"      <url>{escape_xml(site.logo_url)}</url>",
        f"      <title>{escape_xml(site.blog_name)}</title>",
        f"      <link>{blog_url}</link>",
        "    </image>",
    ]
    for view in views:
        xml_parts.extend(_rss_item(view, site, description_max_chars))
    xml_parts.extend(["  </channel>", "</rss>"])
    return "\n".join(xml_parts)


def render_category_rss(
    category: BlogCategory,
    views: list[PostView],
    site: SiteRules,
    build_date: datetime,
    description_max_chars: int = 500,
) -> str:
    description = category.description or f"Articles about {category.name}"
    xml_parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0">',
        "  <channel>",
        f"    <title>{escape_xml(site.blog_name)} - {escape_xml(category.name)}</title>",
        f"    <link>{escape_xml(site.url(f'/blog/category/{category.slug}'))}</link>",
        f"    <description>{escape_xml(description)}</description>",
        f"    <language>{escape_xml(site.language)}</language>",
        f"    <lastBuildDate>{rfc822(build_date)}</lastBuildDate>",
    ]
    for view in views:
        xml_parts.extend(
            _rss_item(
                view,
                site,
                description_max_chars,
                category_name=category.name,
                include_author=False,
            )
        )
    xml_parts.extend(["  </channel>", "</rss>"])
    return "\n".join(xml_parts)


# ═══════════════════════════════════════════════════════════════════════════
# Atom 1.0
# ═══════════════════════════════════════════════════════════════════════════


def _atom_entry(view: PostView, site: SiteRules, max_chars: int) -> list[str]:
    require_renderable(view)
    url = escape_xml(post_url(site, view.slug))
    parts = [
        "  <entry>",
        f"    <title>{escape_xml(view.title)}</title>",
        f'    <link href="{url}" />',
        f"    <id>{url}</id>",
        f"    <published>{iso8601(_published(view))}</published>",
        f"    <updated>{iso8601(view.updated_at)}</updated>",
    ]
    if view.author:
        parts.append("    <author>")
        parts.append(f"      <name>{escape_xml(view.author.full_name)}</name>")
        if view.author.email:
            parts.append(f"      <email>{escape_xml(view.author.email)}</email>")
        parts.append("    </author>")
    for tag in view.tags:
        parts.append(f'    <category term="{escape_xml(tag.name)}" />')
    parts.append(f'    <summary type="html">{cdata(feed_description(view, max_chars))}</summary>')
    if view.featured_image and view.featured_image.url:
        parts.append(
            f'    <link rel="enclosure" type="image/jpeg" href="{escape_xml(view.featured_image.url)}" />'
        )
    parts.append("  </entry>")
    return parts


def render_atom(
    views: list[PostView],
    site: SiteRules,
    updated: datetime,
    description_max_chars: int = 500,
) -> str:
    blog_url = escape_xml(site.blog_url)
    self_url = escape_xml(site.url(f"{site.api_prefix}/feed.atom"))

    xml_parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<feed xmlns="http://www.w3.org/2005/Atom">',
        f"  <title>{escape_xml(site.blog_name)}</title>",
        f"  <subtitle>{escape_xml(site.description)}</subtitle>",
        f'  <link href="{blog_url}" />',
        f'  <link href="{self_url}" rel="self" type="{ATOM_MEDIA_TYPE}" />',
        f"  <id>{blog_url}</id>",
        f"  <updated>{iso8601(updated)}</updated>",
        f"  <generator>{escape_xml(site.generator)}</generator>",
        f"  <icon>{escape_xml(site.url(site.favicon_path))}</icon>",
        f"  <logo>{escape_xml(site.logo_url)}</logo>",
    ]
    for view in views:
        xml_parts.extend(_atom_entry(view, site, description_max_chars))
    xml_parts.append("</feed>")
    return "\n".join(xml_parts)


# ═══════════════════════════════════════════════════════════════════════════
# JSON Feed 1.1
# ═══════════════════════════════════════════════════════════════════════════


def _json_item(view: PostView, site: SiteRules) -> dict[str, Any]:
    require_renderable(view)
    url = post_url(site, view.slug)
    item: dict[str, Any] = {
        "id": url,
        "url": url,
        "title": view.title,
        "content_html": view.content,
        "summary": view.excerpt or None,
        "image": view.featured_image.url if view.featured_image and view.featured_image.url else None,
        "date_published": iso8601(_published(view)),
        "date_modified": iso8601(view.updated_at),
        "authors": [{"name": view.author.full_name}] if view.author else None,
        "tags": view.tag_names,
    }
    return {k: v for k, v in item.items() if v is not None}


def render_json_feed(views: list[PostView], site: SiteRules) -> dict[str, Any]:
    return {
        "version": JSON_FEED_VERSION,
        "title": site.blog_name,
        "description": site.description,
        "home_page_url": site.blog_url,
        "feed_url": site.url(f"{site.api_prefix}/feed.json"),
        "icon": site.logo_url,
        "favicon": site.url(site.favicon_path),
        "language": site.language,
        "items": [_json_item(view, site) for view in views],
    }
