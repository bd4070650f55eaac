"""
Text helpers shared by the formatters.

Pure functions: HTML stripping, truncation, escaping and simple counting.
"""

from __future__ import annotations

import html
import re

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_INLINE_WS_RE = re.compile(r"[ \t\r\f\v]+")
_MANY_NEWLINES_RE = re.compile(r"\n\s*\n\s*(\n\s*)+")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

# Fixed entity table used where full HTML unescaping is not wanted.
# "&amp;" goes last so "&amp;lt;" decodes to "&lt;", not "<".
ENTITY_TABLE: tuple[tuple[str, str], ...] = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def unescape_entities(text: str) -> str:
    for entity, replacement in ENTITY_TABLE:
        text = text.replace(entity, replacement)
    return text


def strip_html(markup: str | None, *, keep_breaks: bool = False) -> str:
    """
    Reduce markup to plain text.

    Drops script/style blocks and comments, maps ``<br>`` to a newline and
    ``</p>`` to a paragraph break, removes remaining tags and unescapes
    entities. Whitespace collapses to single spaces unless ``keep_breaks``
    is set, in which case paragraph breaks survive.
    """
    if not markup:
        return ""
    text = _SCRIPT_RE.sub("", markup)
    text = _STYLE_RE.sub("", text)
    text = _COMMENT_RE.sub("", text)
    text = _BR_RE.sub("\n", text)
    text = _P_CLOSE_RE.sub("\n\n", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")

    if not keep_breaks:
        return _WS_RE.sub(" ", text).strip()

    text = _INLINE_WS_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return _MANY_NEWLINES_RE.sub("\n\n", text).strip()


def clean_text(text: str | None, max_length: int = 160) -> str:
    """Strip tags and cut at the last word boundary before ``max_length``."""
    if not text:
        return ""
    cleaned = _WS_RE.sub(" ", _TAG_RE.sub(" ", text)).strip()
    if len(cleaned) <= max_length:
        return cleaned

    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space] + "..."
    return truncated + "..."


def truncate(text: str, max_length: int) -> str:
    """Hard cut at ``max_length`` characters, marking the cut with '...'."""
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def escape_xml(value: object) -> str:
    """Escape the five XML special characters."""
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def escape_html(value: object) -> str:
    """Escape text for HTML content and attribute values."""
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


def cdata(text: str) -> str:
    """Wrap text in a CDATA section, splitting any embedded terminator."""
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def count_words(text: str) -> int:
    return len(text.split())


def split_sentences(text: str) -> list[str]:
    """Sentences are runs ending in '.', '!' or '?'; the tail without one is dropped."""
    return [s.strip() for s in _SENTENCE_RE.findall(text) if s.strip()]
