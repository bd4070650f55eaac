"""
HTML to Markdown conversion and the Markdown rendition of a post.

The converter is a fixed regex chain over the trusted tag subset the
editor produces; it is not a general HTML parser.
"""

from __future__ import annotations

import re

from blogcms.core.services.guards import require_renderable
from blogcms.core.services.text import unescape_entities
from blogcms.domain.entities import PostView
from blogcms.rules.models import SiteRules

from .extract import extract_main_points

MARKDOWN_MEDIA_TYPE = "text/markdown"

_I = re.IGNORECASE
_IS = re.IGNORECASE | re.DOTALL

_PRE_RE = re.compile(r"<pre\b[^>]*>(.*?)</pre\s*>", _IS)
_CODE_TAG_RE = re.compile(r"</?code\b[^>]*>", _I)

# (pattern, replacement) applied in order after <pre> blocks are fenced.
_CHAIN: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<h1\b[^>]*>(.*?)</h1\s*>", _I), r"# \1\n\n"),
    (re.compile(r"<h2\b[^>]*>(.*?)</h2\s*>", _I), r"## \1\n\n"),
    (re.compile(r"<h3\b[^>]*>(.*?)</h3\s*>", _I), r"### \1\n\n"),
    (re.compile(r"<h4\b[^>]*>(.*?)</h4\s*>", _I), r"#### \1\n\n"),
    (re.compile(r"<strong\b[^>]*>(.*?)</strong\s*>", _I), r"**\1**"),
    (re.compile(r"<b\b[^>]*>(.*?)</b\s*>", _I), r"**\1**"),
    (re.compile(r"<em\b[^>]*>(.*?)</em\s*>", _I), r"*\1*"),
    (re.compile(r"<i\b[^>]*>(.*?)</i\s*>", _I), r"*\1*"),
    (re.compile(r"<a\b[^>]*href=\"([^\"]*)\"[^>]*>(.*?)</a\s*>", _I), r"[\2](\1)"),
    (re.compile(r"</?(?:ul|ol)\b[^>]*>", _I), "\n"),
    (re.compile(r"<li\b[^>]*>(.*?)</li\s*>", _I), r"- \1\n"),
    (re.compile(r"<p\b[^>]*>", _I), ""),
    (re.compile(r"</p\s*>", _I), "\n\n"),
    (re.compile(r"<br\s*/?>", _I), "\n"),
    (re.compile(r"<code\b[^>]*>(.*?)</code\s*>", _I), r"`\1`"),
)

_ANY_TAG_RE = re.compile(r"<[^>]+>")
_MANY_NEWLINES_RE = re.compile(r"\n{3,}")


def _fence(match: re.Match[str]) -> str:
    body = _CODE_TAG_RE.sub("", match.group(1)).strip("\n")
    return f"\n```\n{body}\n```\n"


def html_to_markdown(markup: str | None) -> str:
    if not markup:
        return ""
    text = _PRE_RE.sub(_fence, markup)
    for pattern, replacement in _CHAIN:
        text = pattern.sub(replacement, text)
    text = _ANY_TAG_RE.sub("", text)
    text = unescape_entities(text)
    text = _MANY_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def content_as_markdown(view: PostView) -> str:
    """Markdown-format posts pass through untouched."""
    if view.content_format == "markdown":
        return view.content.strip()
    return html_to_markdown(view.content)


def render_markdown(view: PostView, site: SiteRules) -> str:
    require_renderable(view)
    published = view.published_at or view.created_at
    author = view.author_name or site.default_author
    category = view.category.name if view.category else "General"
    tags = ", ".join(view.tag_names) or "N/A"

    parts = [
        f"# {view.title}\n",
        "---",
        f"**Author:** {author}",
        f"**Category:** {category}",
        f"**Tags:** {tags}",
        f"**Date:** {published.date().isoformat()}",
        f"**Reading time:** {view.reading_time} min",
        "---\n",
    ]

    if view.excerpt:
        parts.append(f"## Summary\n\n{view.excerpt}\n")

    parts.append(f"## Content\n\n{content_as_markdown(view)}\n")

    points = extract_main_points(view.content)
    if points:
        parts.append("## Key Points\n")
        parts.extend(f"{i}. {point}" for i, point in enumerate(points, start=1))
        parts.append("")

    if view.tags:
        parts.append("## Related Topics\n")
        parts.extend(f"- {name}" for name in view.tag_names)

    return "\n".join(parts).rstrip() + "\n"
