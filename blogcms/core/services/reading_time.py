"""Reading time estimation for HTML and Markdown bodies."""

from __future__ import annotations

import math
import re

from blogcms.core.services.text import strip_html

WORDS_PER_MINUTE = 220

_TAG_RE = re.compile(r"<[^>]+>")
_MD_FENCE_RE = re.compile(r"```.*?```", re.DOTALL)
_MD_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]+\)")
_MD_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_MD_HEADING_RE = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_MD_EMPHASIS_RE = re.compile(r"[*_]{1,2}([^*_]+)[*_]{1,2}")
_MD_RULE_RE = re.compile(r"^[-*]{3,}$", re.MULTILINE)


def _minutes(word_count: int, words_per_minute: int) -> int:
    return max(1, math.ceil(word_count / words_per_minute))


def markdown_to_text(markdown: str) -> str:
    text = _MD_FENCE_RE.sub("", markdown)
    text = _MD_INLINE_CODE_RE.sub("", text)
    text = _MD_IMAGE_RE.sub("", text)
    text = _MD_LINK_RE.sub(r"\1", text)
    text = _MD_HEADING_RE.sub("", text)
    text = _MD_EMPHASIS_RE.sub(r"\1", text)
    return _MD_RULE_RE.sub("", text)


def calculate_reading_time(
    content: str | None,
    content_format: str = "html",
    words_per_minute: int = WORDS_PER_MINUTE,
) -> int:
    """Minutes to read ``content``, rounded up, never less than one."""
    if not content:
        return 1
    if content_format == "markdown":
        text = markdown_to_text(content)
    else:
        # Tags become spaces so adjacent block elements do not fuse words.
        text = strip_html(_TAG_RE.sub(lambda m: m.group(0) + " ", content))
    return _minutes(len(text.split()), words_per_minute)
