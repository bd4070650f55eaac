"""
Content extraction heuristics shared by the AI-oriented formats.

All functions take post markup (or already stripped text where noted) and
return plain values; nothing here reads the store.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from blogcms.core.services.text import split_sentences, strip_html
from blogcms.domain.entities import BlogTag

_LI_RE = re.compile(r"<li\b[^>]*>(.*?)</li\s*>", re.IGNORECASE | re.DOTALL)
_H23_RE = re.compile(r"<h([23])\b[^>]*>(.*?)</h\1\s*>", re.IGNORECASE | re.DOTALL)
_BOLD_RE = re.compile(r"<(strong|b)\b[^>]*>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL)
_BLOCKQUOTE_RE = re.compile(r"<blockquote\b[^>]*>(.*?)</blockquote\s*>", re.IGNORECASE | re.DOTALL)
_LINK_RE = re.compile(r"<a\b[^>]*href=\"([^\"]*)\"[^>]*>(.*?)</a\s*>", re.IGNORECASE | re.DOTALL)
_OL_RE = re.compile(r"<ol\b", re.IGNORECASE)
_STAT_RE = re.compile(
    r"\d+%|\d+\s*(?:años|meses|días|usuarios|empresas|millones|mil|"
    r"years|months|days|users|companies|million|thousand)\b",
    re.IGNORECASE,
)
_DATE_RE = re.compile(r"\d{1,2}\s*de\s*\w+\s*de\s*\d{4}|\b\d{4}\b", re.IGNORECASE)
_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_VERSION_RE = re.compile(r"\bv?\d+\.\d+(?:\.\d+)?\b", re.IGNORECASE)
_PUNCT_RUN_RE = re.compile(r"[.!?]+")

CONCLUSION_CUES = (
    "conclusión", "resumen", "importante", "clave", "esencial", "fundamental",
    "conclusion", "summary", "important", "key", "essential",
)

TECH_TERMS = (
    "desarrollo", "development", "web", "aplicación", "application", "software",
    "código", "code", "programación", "programming", "diseño", "design", "api",
    "base de datos", "database", "servidor", "server", "frontend", "backend",
    "usuario", "user", "interfaz", "interface", "sistema", "system",
)

FORMAL_WORDS = ("consecuentemente", "adicionalmente", "por consiguiente", "mediante", "respectivamente",
                "consequently", "additionally", "therefore", "furthermore", "respectively")
CASUAL_WORDS = ("genial", "increíble", "súper", "fácil", "simple", "awesome", "amazing", "super", "easy")
TECHNICAL_WORDS = ("implementación", "configuración", "algoritmo", "arquitectura", "infraestructura",
                   "implementation", "configuration", "algorithm", "architecture", "infrastructure")


def _inner_texts(pattern: re.Pattern[str], markup: str, group: int) -> list[str]:
    return [strip_html(m.group(group)) for m in pattern.finditer(markup)]


# --- Points / takeaways ---


def extract_main_points(markup: str | None) -> list[str]:
    """
    List items (20-200 chars, first five), then h2/h3 headings (10-100
    chars, first five); opening sentences fill in when fewer than three
    points were found. At most seven points.
    """
    if not markup:
        return []
    points = [t for t in _inner_texts(_LI_RE, markup, 1)[:5] if 20 < len(t) < 200]
    points += [t for t in _inner_texts(_H23_RE, markup, 2)[:5] if 10 < len(t) < 100]

    if len(points) < 3:
        sentences = split_sentences(strip_html(markup))[:5]
        points += [s for s in sentences if 30 < len(s) < 200]
    return points[:7]


def extract_key_points(markup: str | None) -> list[dict[str, str]]:
    """Typed key points: headings, then list items, then emphasised text. At most ten."""
    if not markup:
        return []
    points: list[dict[str, str]] = []
    for text in _inner_texts(_H23_RE, markup, 2)[:5]:
        if 10 < len(text) < 150:
            points.append({"type": "heading", "text": text, "importance": "high"})
    for text in _inner_texts(_LI_RE, markup, 1)[:7]:
        if 15 < len(text) < 200:
            points.append({"type": "list-item", "text": text, "importance": "medium"})
    for text in _inner_texts(_BOLD_RE, markup, 2)[:5]:
        if 10 < len(text) < 100:
            points.append({"type": "emphasis", "text": text, "importance": "medium"})
    return points[:10]


def extract_key_takeaways(markup: str | None) -> list[str]:
    sentences = split_sentences(strip_html(markup))
    takeaways = [s for s in sentences if any(cue in s.lower() for cue in CONCLUSION_CUES)][:3]
    return takeaways or sentences[-3:]


# --- Facts / mentions / references ---


def extract_facts(text: str) -> list[dict[str, str]]:
    facts = [{"type": "statistic", "value": m} for m in _STAT_RE.findall(text)[:5]]
    facts += [{"type": "date", "value": m} for m in _DATE_RE.findall(text)[:3]]
    return facts


def extract_mentioned_items(text: str) -> list[dict[str, str]]:
    items = [{"type": "url", "value": url} for url in _URL_RE.findall(text)]
    items += [{"type": "version", "value": v} for v in _VERSION_RE.findall(_URL_RE.sub(" ", text))]
    return items


def extract_citations(markup: str | None) -> list[dict[str, str]]:
    if not markup:
        return []
    return [{"type": "quote", "text": text} for text in _inner_texts(_BLOCKQUOTE_RE, markup, 1)]


def extract_references(markup: str | None, limit: int = 10) -> list[dict[str, str]]:
    if not markup:
        return []
    references = []
    for match in _LINK_RE.finditer(markup):
        url = match.group(1)
        if not url:
            continue
        references.append(
            {
                "url": url,
                "text": strip_html(match.group(2)),
                "type": "external" if url.startswith("http") else "internal",
            }
        )
    return references[:limit]


# --- Keywords / level / tone ---


def extract_semantic_keywords(markup: str | None, tags: Iterable[BlogTag] = ()) -> str:
    """Tag names first, then technical terms present in the text, comma separated."""
    text = strip_html(markup).lower()
    keywords = [tag.name.lower() for tag in tags]
    for term in TECH_TERMS:
        if re.search(r"\b" + re.escape(term), text) and term not in keywords:
            keywords.append(term)
    return ", ".join(keywords)


def estimate_reading_level(text: str) -> str:
    words = text.split()
    if not words:
        return "basic"
    avg = sum(len(w) for w in words) / len(words)
    if avg < 5:
        return "basic"
    if avg < 6.5:
        return "intermediate"
    return "advanced"


def estimate_tone(text: str) -> str:
    lower = text.lower()
    formal = sum(1 for w in FORMAL_WORDS if w in lower)
    casual = sum(1 for w in CASUAL_WORDS if w in lower)
    technical = sum(1 for w in TECHNICAL_WORDS if w in lower)
    if technical >= 3:
        return "technical"
    if formal > casual:
        return "formal"
    if casual > formal:
        return "casual"
    return "professional"


def determine_content_format(markup: str | None) -> str:
    """tutorial, guide, reference, opinion or article."""
    markup = markup or ""
    text = strip_html(markup).lower()
    if any(cue in text for cue in ("paso", "tutorial", "step")) or _OL_RE.search(markup):
        return "tutorial"
    if any(cue in text for cue in ("guía", "cómo", "guide", "how to")):
        return "guide"
    if any(cue in text for cue in ("referencia", "documentación", "reference", "documentation")):
        return "reference"
    if any(cue in text for cue in ("creo que", "en mi opinión", "i think", "in my opinion")):
        return "opinion"
    return "article"


# --- Counting ---


def count_paragraphs(markup: str | None) -> int:
    text = strip_html(markup, keep_breaks=True)
    return text.count("\n\n") + 1 if text else 0


def count_sentences(text: str) -> int:
    return len(_PUNCT_RUN_RE.findall(text))


def structure_flags(markup: str | None) -> dict[str, Any]:
    markup = (markup or "").lower()
    return {
        "has_code": "<code" in markup or "<pre" in markup,
        "has_list": "<ul" in markup or "<ol" in markup,
        "has_structure": "<h2" in markup or "<h3" in markup,
    }
