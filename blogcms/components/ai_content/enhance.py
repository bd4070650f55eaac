"""
Editorial suggestions for a post: tags, keywords, SEO, readability,
structure and engagement, plus a weighted content score.

Pure functions over a populated post. Thresholds follow common SEO
guidance (titles of 30-60 characters, descriptions of 120-160, 3-7 tags,
300+ words).
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from typing import Any

from blogcms.core.services.text import count_words, strip_html
from blogcms.domain.entities import PostView

from .semantic import Readability, analyze_readability, extract_entities, extract_keywords, extract_topics

MAX_TAG_SUGGESTIONS = 10
DENSITY_HIGH = 0.03
FOCUS_DENSITY_MIN = 0.5
FOCUS_DENSITY_MAX = 3.0

SCORE_WEIGHTS: dict[str, float] = {
    "seo": 0.35,
    "readability": 0.25,
    "structure": 0.25,
    "engagement": 0.15,
}

_CTA_RE = re.compile(
    r"descargar|registr|suscrib|compartir|comentar|contactar|download|sign up|subscribe|share|comment|contact",
    re.IGNORECASE,
)
_SOCIAL_RE = re.compile(r"compartir|síguenos|redes sociales|share|follow us|social media", re.IGNORECASE)


def _round(value: float) -> int:
    return math.floor(value + 0.5)


# --- Results ---


@dataclass(frozen=True)
class Improvement:
    area: str
    priority: str  # critical, high, medium or low
    issue: str
    suggestion: str


@dataclass(frozen=True)
class TagSuggestion:
    tag: str
    source: str  # keyword, technology or topic
    confidence: float
    reason: str


@dataclass
class TagSuggestions:
    current: list[str]
    suggested: list[TagSuggestion]
    optimal: bool
    recommendation: str


@dataclass(frozen=True)
class KeywordSuggestion:
    keyword: str
    type: str  # long-tail or focus
    frequency: int
    density: str
    recommendation: str


@dataclass
class KeywordSuggestions:
    suggested: list[KeywordSuggestion]
    focus_keyphrase: str
    total_unique: int


@dataclass
class SeoReport:
    score: int
    improvements: list[Improvement]
    status: str
    max_score: int = 100


@dataclass
class ReadabilityReport:
    current: Readability
    improvements: list[Improvement]
    recommendation: str

    @property
    def score(self) -> int:
        return 100 - len(self.improvements) * 10


@dataclass
class StructureReport:
    improvements: list[Improvement]
    score: int
    status: str


@dataclass
class EngagementReport:
    improvements: list[Improvement]
    score: int
    recommendation: str


@dataclass
class ContentScore:
    total: int
    breakdown: dict[str, int]
    grade: str
    status: str


@dataclass
class Suggestions:
    tags: TagSuggestions
    keywords: KeywordSuggestions
    seo: SeoReport
    readability: ReadabilityReport
    structure: StructureReport
    engagement: EngagementReport
    score: ContentScore

    def to_dict(self) -> dict[str, Any]:
        return {
            "tags": asdict(self.tags),
            "keywords": asdict(self.keywords),
            "seo": asdict(self.seo),
            "readability": {**asdict(self.readability), "score": self.readability.score},
            "structure": asdict(self.structure),
            "engagement": asdict(self.engagement),
            "score": asdict(self.score),
        }


# --- Tags / keywords ---


def suggest_tags(view: PostView, text: str | None = None) -> TagSuggestions:
    """Tags drawn from top keywords, mentioned technologies and main topics."""
    if text is None:
        text = strip_html(view.content)
    existing = [tag.name.lower() for tag in view.tags]
    candidates: list[TagSuggestion] = []

    for kw in extract_keywords(text, 15)[:5]:
        if kw.word not in existing:
            candidates.append(
                TagSuggestion(
                    tag=kw.word.capitalize(),
                    source="keyword",
                    confidence=min(kw.relevance * 10, 1),
                    reason=f"Appears {kw.frequency} times in the content",
                )
            )
    for tech in extract_entities(text).technologies:
        if tech.name not in existing:
            candidates.append(
                TagSuggestion(
                    tag=tech.name.capitalize(),
                    source="technology",
                    confidence=0.9,
                    reason=f"Technology mentioned {tech.occurrences} times",
                )
            )
    for topic in extract_topics(text)[:3]:
        name = " ".join(part.capitalize() for part in topic.name.split("-"))
        if name.lower() not in existing:
            candidates.append(
                TagSuggestion(
                    tag=name,
                    source="topic",
                    confidence=topic.confidence,
                    reason=f"Main topic of the content (weight {topic.weight})",
                )
            )

    candidates.sort(key=lambda s: s.confidence, reverse=True)
    suggested: list[TagSuggestion] = []
    seen: set[str] = set()
    for candidate in candidates:
        if candidate.tag.lower() in seen:
            continue
        seen.add(candidate.tag.lower())
        suggested.append(candidate)

    count = len(existing)
    if count < 3:
        recommendation = "Add at least 3 tags"
    elif count > 7:
        recommendation = "Reduce to at most 7 tags to avoid dilution"
    else:
        recommendation = "Tag count is optimal"
    return TagSuggestions(
        current=existing,
        suggested=suggested[:MAX_TAG_SUGGESTIONS],
        optimal=3 <= count <= 7,
        recommendation=recommendation,
    )


def _focus_recommendation(count: int, density: float) -> str:
    if count == 0:
        return "The focus keyphrase does not appear in the content"
    if density > FOCUS_DENSITY_MAX:
        return "Over-optimised: reduce the keyphrase density"
    if density < FOCUS_DENSITY_MIN:
        return "Rarely used: mention the keyphrase more naturally"
    return "Density is optimal (0.5-3%)"


def suggest_keywords(text: str, focus_keyphrase: str | None = None) -> KeywordSuggestions:
    keywords = extract_keywords(text, 20)
    total_words = max(len(text.split()), 1)
    suggested = [
        KeywordSuggestion(
            keyword=kw.word,
            type="long-tail",
            frequency=kw.frequency,
            density=f"{kw.frequency / total_words * 100:.2f}%",
            recommendation=(
                "High density, consider reducing" if kw.frequency / total_words > DENSITY_HIGH else "Density is optimal"
            ),
        )
        for kw in keywords
        if len(kw.word) > 6
    ][:5]

    if focus_keyphrase:
        count = text.lower().count(focus_keyphrase.lower())
        density = count / total_words * 100
        suggested.append(
            KeywordSuggestion(
                keyword=focus_keyphrase,
                type="focus",
                frequency=count,
                density=f"{density:.2f}%",
                recommendation=_focus_recommendation(count, density),
            )
        )

    return KeywordSuggestions(
        suggested=suggested,
        focus_keyphrase=focus_keyphrase or (keywords[0].word if keywords else "undefined"),
        total_unique=len(keywords),
    )


# --- SEO ---


def _status(score: float) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "poor"


def suggest_seo_improvements(view: PostView) -> SeoReport:
    improvements: list[Improvement] = []
    score = 0

    title_length = len(view.title)
    if not view.title:
        improvements.append(Improvement("title", "critical", "Missing title", "Add a 50-60 character title"))
    elif title_length < 30:
        improvements.append(
            Improvement("title", "high", f"Title too short ({title_length} characters)", "Expand to 50-60 characters")
        )
    elif title_length > 60:
        improvements.append(
            Improvement("title", "medium", f"Title too long ({title_length} characters)", "Trim to 50-60 characters")
        )
    else:
        score += 20

    excerpt_length = len(view.excerpt)
    if not view.excerpt:
        improvements.append(Improvement("excerpt", "critical", "Missing excerpt", "Add a 150-160 character summary"))
    elif excerpt_length < 120:
        improvements.append(
            Improvement("excerpt", "high", f"Excerpt too short ({excerpt_length} chars)", "Expand to 150-160 chars")
        )
    elif excerpt_length > 160:
        improvements.append(
            Improvement("excerpt", "medium", f"Excerpt too long ({excerpt_length} chars)", "Trim to 150-160 characters")
        )
    else:
        score += 20

    if view.featured_image and view.featured_image.url:
        score += 15
    else:
        improvements.append(
            Improvement("featured_image", "high", "No featured image", "Add a 1200x630 image for social previews")
        )

    tag_count = len(view.tags)
    if tag_count == 0:
        improvements.append(Improvement("tags", "high", "No tags", "Add 3-7 relevant tags"))
    elif tag_count < 3:
        improvements.append(Improvement("tags", "medium", f"Few tags ({tag_count})", "Add at least 3 tags"))
    elif tag_count > 7:
        improvements.append(Improvement("tags", "low", f"Too many tags ({tag_count})", "Keep the 5-7 most relevant"))
    else:
        score += 15

    if view.category:
        score += 10
    else:
        improvements.append(Improvement("category", "critical", "No category", "Assign a main category"))

    words = count_words(strip_html(view.content))
    if words < 300:
        improvements.append(
            Improvement("content", "critical", f"Content too short ({words} words)", "Expand to at least 300 words")
        )
    elif words < 500:
        improvements.append(
            Improvement("content", "medium", f"Short content ({words} words)", "Consider 800-1500 words")
        )
    elif words > 3000:
        improvements.append(
            Improvement("content", "low", f"Very long content ({words} words)", "Consider splitting into several posts")
        )
    else:
        score += 20

    return SeoReport(score=score, improvements=improvements, status=_status(score))


# --- Readability / structure / engagement ---


def suggest_readability_improvements(text: str) -> ReadabilityReport:
    readability = analyze_readability(text)
    improvements: list[Improvement] = []
    if readability.avg_sentence_length > 25:
        improvements.append(
            Improvement(
                "sentence-length",
                "high",
                f"Sentences are too long (average {readability.avg_sentence_length} words)",
                "Split long sentences",
            )
        )
    if readability.avg_word_length > 7:
        improvements.append(
            Improvement("word-complexity", "medium", "Complex vocabulary", "Prefer simpler words where possible")
        )
    if readability.reading_level in ("difficult", "very-difficult"):
        improvements.append(
            Improvement(
                "reading-level",
                "medium",
                f"Reading level: {readability.reading_level}",
                "Simplify the language to reach a wider audience",
            )
        )
    recommendation = (
        "Readability is optimal" if not improvements else f"{len(improvements)} aspect(s) to improve"
    )
    return ReadabilityReport(current=readability, improvements=improvements, recommendation=recommendation)


def _count(markup: str, pattern: str) -> int:
    return len(re.findall(pattern, markup, re.IGNORECASE))


def suggest_structural_improvements(markup: str) -> StructureReport:
    improvements: list[Improvement] = []

    if not _count(markup, r"<h1\b[^>]*>"):
        improvements.append(Improvement("h1", "high", "No H1 heading", "Add a main H1 (usually the title)"))
    h2_count = _count(markup, r"<h2\b[^>]*>")
    if h2_count == 0:
        improvements.append(Improvement("h2", "medium", "No H2 subheadings", "Break the content up with H2 headings"))
    elif h2_count < 2:
        improvements.append(Improvement("h2", "low", "Few subheadings", "Add more H2 headings"))

    if not _count(markup, r"<(?:ul|ol)\b[^>]*>"):
        improvements.append(Improvement("lists", "low", "No lists", "Use lists for structured information"))

    images = _count(markup, r"<img\b[^>]*>")
    words = count_words(strip_html(markup))
    if images == 0 and words > 500:
        improvements.append(
            Improvement("images", "medium", "No images", "Add an image every 300-500 words")
        )
    elif words > 1000 and images / (words / 300) < 0.5:
        improvements.append(Improvement("images", "low", "Few images for the length", "Add more illustrations"))

    if not _count(markup, r"<a\b[^>]*href"):
        improvements.append(Improvement("links", "low", "No links", "Link to relevant resources"))

    paragraphs = [p for p in re.split(r"\n\s*\n", strip_html(markup, keep_breaks=True)) if p.strip()]
    long_paragraphs = sum(1 for p in paragraphs if count_words(p) > 150)
    if paragraphs and long_paragraphs > len(paragraphs) * 0.3:
        improvements.append(
            Improvement("paragraphs", "medium", "Paragraphs are too long", "Keep paragraphs under 100-150 words")
        )

    count = len(improvements)
    if count == 0:
        status = "excellent"
    elif count <= 2:
        status = "good"
    elif count <= 4:
        status = "fair"
    else:
        status = "poor"
    return StructureReport(improvements=improvements, score=max(0, 100 - count * 10), status=status)


def suggest_engagement_improvements(view: PostView) -> EngagementReport:
    improvements: list[Improvement] = []
    if not _CTA_RE.search(view.content):
        improvements.append(
            Improvement("call-to-action", "medium", "No visible call to action", "End with a call to action")
        )
    if not view.allow_comments:
        improvements.append(Improvement("comments", "low", "Comments are disabled", "Enable comments"))
    if not _SOCIAL_RE.search(view.content):
        improvements.append(
            Improvement("social-sharing", "low", "No invitation to share", "Invite readers to share on social media")
        )
    if not view.reading_time or view.reading_time > 15:
        improvements.append(
            Improvement("reading-time", "low", "Very long read", "Consider splitting into a series of shorter posts")
        )
    recommendation = (
        "Optimised for engagement" if not improvements else f"{len(improvements)} opportunity(ies) to improve"
    )
    return EngagementReport(
        improvements=improvements,
        score=max(0, 100 - len(improvements) * 15),
        recommendation=recommendation,
    )


# --- Scoring ---


def grade_for(total: int) -> str:
    if total >= 90:
        return "A+"
    if total >= 80:
        return "A"
    if total >= 70:
        return "B"
    if total >= 60:
        return "C"
    if total >= 50:
        return "D"
    return "F"


def calculate_content_score(view: PostView) -> ContentScore:
    """Weighted SEO, readability, structure and engagement score with a letter grade."""
    breakdown = {
        "seo": suggest_seo_improvements(view).score,
        "readability": suggest_readability_improvements(strip_html(view.content)).score,
        "structure": suggest_structural_improvements(view.content).score,
        "engagement": suggest_engagement_improvements(view).score,
    }
    total = _round(sum(breakdown[name] * weight for name, weight in SCORE_WEIGHTS.items()))
    status = _status(total) if total >= 40 else "needs-work"
    return ContentScore(total=total, breakdown=breakdown, grade=grade_for(total), status=status)


def suggest_improvements(view: PostView) -> Suggestions:
    text = strip_html(view.content)
    return Suggestions(
        tags=suggest_tags(view, text),
        keywords=suggest_keywords(text, view.seo.focus_keyphrase),
        seo=suggest_seo_improvements(view),
        readability=suggest_readability_improvements(text),
        structure=suggest_structural_improvements(view.content),
        engagement=suggest_engagement_improvements(view),
        score=calculate_content_score(view),
    )
