"""
Schema.org JSON-LD builders.

Each builder returns a plain dict ready for ``json.dumps``. Optional values
that resolve to None are dropped from the top level of article schemas.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Literal

from blogcms.core.services.guards import require_renderable
from blogcms.domain.entities import Author, BlogCategory, BlogPost, PostView, format_utc
from blogcms.rules.models import SiteRules

SCHEMA_CONTEXT = "https://schema.org"

PageKind = Literal["post", "category", "blog-home", "post-list"]


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _publisher(site: SiteRules, with_logo_size: bool = False) -> dict[str, Any]:
    logo: dict[str, Any] = {"@type": "ImageObject", "url": site.logo_url}
    if with_logo_size:
        logo.update({"width": 250, "height": 60})
    publisher: dict[str, Any] = {"@type": "Organization", "name": site.name}
    if with_logo_size:
        publisher["url"] = site.base_url
    publisher["logo"] = logo
    return publisher


def _author_url(site: SiteRules, author: Author) -> str:
    return site.url(f"/author/{author.id}")


def article_schema(view: PostView, site: SiteRules) -> dict[str, Any]:
    require_renderable(view)
    post_url = site.url(f"/blog/{view.slug}")

    image = None
    if view.featured_image and view.featured_image.url:
        image = {
            "@type": "ImageObject",
            "url": view.featured_image.url,
            "width": 1200,
            "height": 630,
            "caption": view.featured_image.alt or view.title,
        }

    author = None
    if view.author:
        author = _drop_none(
            {
                "@type": "Person",
                "name": view.author.full_name,
                "email": view.author.email or None,
                "url": _author_url(site, view.author),
            }
        )

    # Tag names win over SEO keywords when the post has tags.
    if view.tags:
        keywords = ", ".join(view.tag_names)
    else:
        keywords = ", ".join(view.seo.keywords) or None

    shares = view.analytics.shares.total
    schema: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "BlogPosting",
        "@id": post_url,
        "mainEntityOfPage": {"@type": "WebPage", "@id": post_url},
        "headline": view.title,
        "description": view.excerpt or None,
        "image": image,
        "datePublished": format_utc(view.published_at) if view.published_at else None,
        "dateModified": format_utc(view.updated_at),
        "author": author,
        "publisher": _publisher(site, with_logo_size=True),
        "articleSection": view.category.name if view.category else None,
        "keywords": keywords,
        "wordCount": len(view.content.split()),
        "timeRequired": f"PT{view.reading_time or 1}M",
        "articleBody": view.excerpt or None,
        "url": post_url,
        "isAccessibleForFree": True,
        "inLanguage": site.language,
        "interactionStatistic": [
            {
                "@type": "InteractionCounter",
                "interactionType": "https://schema.org/ReadAction",
                "userInteractionCount": view.analytics.views,
            },
            {
                "@type": "InteractionCounter",
                "interactionType": "https://schema.org/LikeAction",
                "userInteractionCount": view.analytics.likes,
            },
            {
                "@type": "InteractionCounter",
                "interactionType": "https://schema.org/ShareAction",
                "userInteractionCount": shares,
            },
        ],
    }

    faq = view.ai_optimization.faq_items
    if faq:
        schema["mainEntity"] = {
            "@type": "FAQPage",
            "mainEntity": [
                {
                    "@type": "Question",
                    "name": item.question,
                    "acceptedAnswer": {"@type": "Answer", "text": item.answer},
                }
                for item in faq
            ],
        }
    return _drop_none(schema)


def breadcrumb_schema(view: PostView, site: SiteRules) -> dict[str, Any]:
    crumbs = [("Home", site.base_url), ("Blog", site.blog_url)]
    if view.category:
        crumbs.append((view.category.name, site.url(f"/blog/category/{view.category.slug}")))
    crumbs.append((view.title, site.url(f"/blog/{view.slug}")))
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": i, "name": name, "item": url}
            for i, (name, url) in enumerate(crumbs, start=1)
        ],
    }


def organization_schema(site: SiteRules) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Organization",
        "name": site.name,
        "url": site.base_url,
        "logo": site.logo_url,
        "description": site.description,
    }
    if site.same_as:
        schema["sameAs"] = list(site.same_as)
    if site.contact:
        schema["contactPoint"] = _drop_none(
            {
                "@type": "ContactPoint",
                "telephone": site.contact.telephone,
                "contactType": site.contact.contact_type,
                "areaServed": site.contact.area_served,
                "availableLanguage": site.contact.available_languages or None,
            }
        )
    return schema


def website_schema(site: SiteRules) -> dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "WebSite",
        "name": site.blog_name,
        "url": site.blog_url,
        "description": site.description,
        "publisher": _publisher(site),
        "potentialAction": {
            "@type": "SearchAction",
            "target": {
                "@type": "EntryPoint",
                "urlTemplate": site.url("/blog/search?q={search_term_string}"),
            },
            "query-input": "required name=search_term_string",
        },
    }


def blog_schema(site: SiteRules) -> dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "Blog",
        "@id": site.blog_url,
        "url": site.blog_url,
        "name": site.blog_name,
        "description": site.description,
        "publisher": _publisher(site),
        "inLanguage": site.language,
    }


def item_list_schema(posts: Sequence[BlogPost], site: SiteRules) -> dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "ItemList",
        "itemListElement": [
            _drop_none(
                {
                    "@type": "ListItem",
                    "position": i,
                    "url": site.url(f"/blog/{post.slug}"),
                    "name": post.title,
                    "image": post.featured_image.url if post.featured_image and post.featured_image.url else None,
                }
            )
            for i, post in enumerate(posts, start=1)
        ],
    }


def category_schema(category: BlogCategory, site: SiteRules) -> dict[str, Any]:
    url = site.url(f"/blog/category/{category.slug}")
    return _drop_none(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "CollectionPage",
            "@id": url,
            "url": url,
            "name": category.name,
            "description": category.description or None,
            "isPartOf": {"@type": "Blog", "@id": site.blog_url, "name": site.blog_name},
            "inLanguage": site.language,
        }
    )


def author_schema(author: Author, site: SiteRules) -> dict[str, Any]:
    url = _author_url(site, author)
    return _drop_none(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "Person",
            "@id": url,
            "name": author.full_name,
            "email": author.email or None,
            "url": url,
            "jobTitle": author.role or "Content Writer",
            "worksFor": {"@type": "Organization", "name": site.name},
        }
    )


def post_schemas(view: PostView, site: SiteRules) -> list[dict[str, Any]]:
    """Article and breadcrumb, plus the author when one is resolved."""
    schemas = [article_schema(view, site), breadcrumb_schema(view, site)]
    if view.author:
        schemas.append(author_schema(view.author, site))
    return schemas


def schema_to_script_tag(schema: dict[str, Any] | list[dict[str, Any]]) -> str:
    """Render one ``<script type="application/ld+json">`` block per schema."""
    schemas = schema if isinstance(schema, list) else [schema]
    blocks = []
    for item in schemas:
        # "<" is escaped so a "</script>" inside a value cannot close the tag.
        body = json.dumps(item, indent=2, ensure_ascii=False).replace("<", "\\u003c")
        blocks.append(f'<script type="application/ld+json">\n{body}\n</script>')
    return "\n".join(blocks)


def all_schemas(kind: PageKind | str, data: Any, site: SiteRules) -> list[dict[str, Any]]:
    """
    Every schema a page of the given kind needs.

    ``data`` is a PostView for "post", a BlogCategory for "category", a
    sequence of posts for "post-list" and ignored for "blog-home". Unknown
    kinds yield an empty list.
    """
    if kind == "post":
        return post_schemas(data, site)
    if kind == "category":
        return [category_schema(data, site)]
    if kind == "blog-home":
        return [blog_schema(site), website_schema(site), organization_schema(site)]
    if kind == "post-list":
        return [item_list_schema(data, site), blog_schema(site)]
    return []
