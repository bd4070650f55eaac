"""
Meta-tag objects for posts, taxonomy pages and the blog home, and their
rendering into an HTML ``<head>`` snippet.

The dict keys (``openGraph``, ``siteName`` ...) are the wire format the
frontend consumes.
"""

from __future__ import annotations

from typing import Any

from blogcms.core.services.guards import require_renderable
from blogcms.core.services.text import clean_text, escape_html
from blogcms.domain.entities import BlogCategory, BlogTag, PostView, format_utc
from blogcms.rules.models import SeoRules, SiteRules

DEFAULT_OG_TYPE = "article"
DEFAULT_TWITTER_CARD = "summary_large_image"


def _default_image(site: SiteRules) -> str:
    return site.url(site.default_image_path)


def post_meta_tags(view: PostView, site: SiteRules, seo: SeoRules | None = None) -> dict[str, Any]:
    require_renderable(view)
    title_max = seo.title_max_length if seo else 60
    description_max = seo.description_max_length if seo else 160
    robots_default = seo.robots_default if seo else "index, follow"

    post_url = site.url(f"/blog/{view.slug}")
    s = view.seo

    title = s.meta_title or clean_text(view.title, title_max)
    description = s.meta_description or clean_text(view.excerpt, description_max)
    og_image = s.og_image or (view.featured_image.url if view.featured_image else "") or _default_image(site)
    author = view.author_name or ""
    published = format_utc(view.published_at) if view.published_at else None
    modified = format_utc(view.updated_at)
    section = view.category.name if view.category else ""

    return {
        "title": title,
        "description": description,
        "keywords": ", ".join(s.keywords),
        "canonical": s.canonical_url or post_url,
        "robots": s.robots or robots_default,
        "openGraph": {
            "type": s.og_type or DEFAULT_OG_TYPE,
            "url": post_url,
            "title": s.og_title or title,
            "description": s.og_description or description,
            "image": og_image,
            "siteName": site.name,
            "locale": site.locale,
            "article": {
                "publishedTime": published,
                "modifiedTime": modified,
                "author": author,
                "section": section,
                "tags": view.tag_names,
            },
        },
        "twitter": {
            "card": s.twitter_card or DEFAULT_TWITTER_CARD,
            "site": site.twitter_handle,
            "creator": site.twitter_handle,
            "title": s.twitter_title or title,
            "description": s.twitter_description or description,
            "image": s.twitter_image or og_image,
        },
        "additional": {
            "author": author,
            "publishDate": published,
            "modifiedDate": modified,
            "readingTime": f"{view.reading_time} min",
            "category": section,
            "tags": view.tag_names,
        },
    }


def category_meta_tags(category: BlogCategory, site: SiteRules, seo: SeoRules) -> dict[str, Any]:
    url = site.url(f"/blog/category/{category.slug}")
    title = category.seo.meta_title or seo.category_title_template.format(
        name=category.name, blog_name=site.blog_name
    )
    description = category.seo.meta_description or clean_text(
        category.description or seo.category_description_template.format(name=category.name),
        seo.description_max_length,
    )
    image = (category.image.url if category.image else "") or _default_image(site)
    return {
        "title": title,
        "description": description,
        "canonical": url,
        "robots": seo.robots_default,
        "openGraph": {
            "type": "website",
            "url": url,
            "title": title,
            "description": description,
            "image": image,
            "siteName": site.name,
        },
        "twitter": {"card": "summary", "title": title, "description": description, "image": image},
    }


def tag_meta_tags(tag: BlogTag, site: SiteRules, seo: SeoRules) -> dict[str, Any]:
    url = site.url(f"/blog/tag/{tag.slug}")
    title = tag.seo.meta_title or seo.tag_title_template.format(name=tag.name, blog_name=site.blog_name)
    description = tag.seo.meta_description or clean_text(
        tag.description or seo.tag_description_template.format(name=tag.name),
        seo.description_max_length,
    )
    return {
        "title": title,
        "description": description,
        "canonical": url,
        "robots": seo.robots_default,
        "openGraph": {
            "type": "website",
            "url": url,
            "title": title,
            "description": description,
            "siteName": site.name,
        },
        "twitter": {"card": "summary", "title": title, "description": description},
    }


def blog_home_meta_tags(site: SiteRules, seo: SeoRules) -> dict[str, Any]:
    short_title = f"Blog - {site.name}"
    return {
        "title": seo.home_title,
        "description": seo.home_description,
        "canonical": site.blog_url,
        "robots": seo.robots_default,
        "openGraph": {
            "type": "website",
            "url": site.blog_url,
            "title": short_title,
            "description": seo.home_og_description,
            "siteName": site.name,
        },
        "twitter": {"card": "summary", "title": short_title, "description": seo.home_og_description},
    }


# --- HTML rendering ---


def _meta(attr: str, key: str, value: Any) -> str:
    return f'<meta {attr}="{key}" content="{escape_html(value)}">'


def meta_tags_html(tags: dict[str, Any]) -> str:
    """
    Render a meta-tag object as ``<head>`` markup.

    Works for every object this module builds; sections a page kind does
    not carry are skipped, as are empty values.
    """
    lines = [f"<title>{escape_html(tags['title'])}</title>"]
    lines.append(_meta("name", "description", tags["description"]))
    if tags.get("keywords"):
        lines.append(_meta("name", "keywords", tags["keywords"]))
    lines.append(f'<link rel="canonical" href="{escape_html(tags["canonical"])}">')
    lines.append(_meta("name", "robots", tags["robots"]))

    additional = tags.get("additional") or {}
    if additional.get("author"):
        lines.append(_meta("name", "author", additional["author"]))

    og = tags.get("openGraph") or {}
    for key in ("type", "url", "title", "description", "image"):
        if og.get(key):
            lines.append(_meta("property", f"og:{key}", og[key]))
    if og.get("siteName"):
        lines.append(_meta("property", "og:site_name", og["siteName"]))
    if og.get("locale"):
        lines.append(_meta("property", "og:locale", og["locale"]))

    article = og.get("article") or {}
    if article.get("publishedTime"):
        lines.append(_meta("property", "article:published_time", article["publishedTime"]))
    if article.get("modifiedTime"):
        lines.append(_meta("property", "article:modified_time", article["modifiedTime"]))
    if article.get("author"):
        lines.append(_meta("property", "article:author", article["author"]))
    if article.get("section"):
        lines.append(_meta("property", "article:section", article["section"]))
    for tag in article.get("tags") or []:
        lines.append(_meta("property", "article:tag", tag))

    twitter = tags.get("twitter") or {}
    for key in ("card", "site", "creator", "title", "description", "image"):
        if twitter.get(key):
            lines.append(_meta("name", f"twitter:{key}", twitter[key]))

    return "\n".join(lines)
