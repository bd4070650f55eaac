"""
AI discovery metadata for a post.

Combines the semantic analysis with post attributes into one document
aimed at LLM crawlers and retrieval pipelines.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from blogcms.core.services.guards import require_renderable
from blogcms.core.services.text import count_words, split_sentences, strip_html
from blogcms.domain.entities import PostView, format_utc
from blogcms.rules.models import SiteRules

from .extract import (
    determine_content_format,
    estimate_tone,
    extract_citations,
    extract_key_points,
    extract_mentioned_items,
    extract_references,
    structure_flags,
)
from .semantic import ContentAnalysis, analyze_content

SUMMARY_MAX_CHARS = 300
TECHNICAL_KEYWORDS = frozenset({"api", "backend", "frontend", "database"})


def generate_summary(view: PostView) -> str:
    """The excerpt, or the first three sentences capped at 300 characters."""
    if view.excerpt:
        return view.excerpt
    summary = " ".join(split_sentences(strip_html(view.content))[:3]).strip()
    if len(summary) > SUMMARY_MAX_CHARS:
        return summary[: SUMMARY_MAX_CHARS - 3] + "..."
    return summary


def generate_answered_questions(view: PostView) -> list[dict[str, str]]:
    questions = [{"question": f"What is {view.title}?", "confidence": "high", "type": "definition"}]
    if view.category:
        questions.append(
            {
                "question": f"How does {view.title} relate to {view.category.name}?",
                "confidence": "high",
                "type": "relationship",
            }
        )
    for tag in view.tags[:3]:
        questions.append(
            {"question": f"What do I need to know about {tag.name}?", "confidence": "medium", "type": "knowledge"}
        )

    text = strip_html(view.content).lower()
    if any(cue in text for cue in ("cómo", "paso", "tutorial", "how to", "step")):
        questions.append({"question": f"How do I implement {view.title}?", "confidence": "high", "type": "how-to"})
    if any(cue in text for cue in ("beneficio", "ventaja", "mejor", "benefit", "advantage", "better")):
        questions.append(
            {"question": f"What are the benefits of {view.title}?", "confidence": "medium", "type": "benefits"}
        )
    return questions


def determine_audience(view: PostView, analysis: ContentAnalysis) -> dict[str, Any]:
    primary = "developers"
    secondary: list[str] = []
    characteristics: list[str] = []

    category = view.category.name.lower() if view.category else ""
    if "diseño" in category or "design" in category:
        primary = "designers"
        secondary.append("developers")
    elif any(word in category for word in ("negocio", "business", "marketing")):
        primary = "business-professionals"
        secondary.append("entrepreneurs")

    level = analysis.readability.reading_level
    if level in ("very-easy", "easy"):
        characteristics.append("beginners")
    elif level in ("difficult", "very-difficult"):
        characteristics.append("advanced-users")
    else:
        characteristics.append("intermediate-users")

    if analysis.entities.technologies:
        characteristics.append("technical-audience")

    return {"primary": primary, "secondary": secondary, "characteristics": characteristics}


def determine_expertise_level(analysis: ContentAnalysis) -> str:
    """beginner, intermediate, advanced or expert."""
    level = analysis.readability.reading_level
    if level in ("very-easy", "easy"):
        score = 1
    elif level in ("intermediate", "fairly-easy"):
        score = 2
    else:
        score = 3

    if len(analysis.entities.technologies) > 5:
        score += 1
    technical = sum(1 for k in analysis.keywords if len(k.word) > 8 or k.word in TECHNICAL_KEYWORDS)
    if technical > 5:
        score += 1

    if score <= 2:
        return "beginner"
    if score <= 4:
        return "intermediate"
    if score <= 6:
        return "advanced"
    return "expert"


def calculate_seo_score(view: PostView) -> int:
    """0-100 completeness score over title, excerpt, image, taxonomy and length."""
    score = 0
    if view.title and 30 <= len(view.title) <= 60:
        score += 20
    elif view.title:
        score += 10

    if view.excerpt and 120 <= len(view.excerpt) <= 160:
        score += 20
    elif view.excerpt:
        score += 10

    if view.featured_image and view.featured_image.url:
        score += 15
    if view.category:
        score += 10

    if 3 <= len(view.tags) <= 7:
        score += 15
    elif view.tags:
        score += 7

    words = count_words(strip_html(view.content))
    if 300 <= words <= 2000:
        score += 20
    elif words >= 200:
        score += 10
    return score


def generate_ai_metadata(
    view: PostView,
    site: SiteRules,
    generated_at: datetime,
    analysis: ContentAnalysis | None = None,
) -> dict[str, Any]:
    require_renderable(view)
    text = strip_html(view.content)
    if analysis is None:
        analysis = analyze_content(view.content, max_keywords=15)
    flags = structure_flags(view.content)

    return {
        "id": view.id,
        "slug": view.slug,
        "url": site.url(f"/blog/{view.slug}"),
        "title": view.title,
        "summary": generate_summary(view),
        "excerpt": view.excerpt,
        "primary_keywords": [k.word for k in analysis.keywords[:5]],
        "secondary_keywords": [k.word for k in analysis.keywords[5:15]],
        "topics": [t.name for t in analysis.topics],
        "entities": {
            "technologies": [e.name for e in analysis.entities.technologies],
            "concepts": [e.name for e in analysis.entities.concepts],
            "mentioned": extract_mentioned_items(text),
        },
        "context": {
            "category": view.category.name if view.category else "General",
            "tags": view.tag_names,
            "author": view.author_name or site.default_author,
            "publish_date": format_utc(view.published_at) if view.published_at else None,
            "last_modified": format_utc(view.updated_at),
            "language": site.language,
            "domain": "technology",
        },
        "content_features": {
            "word_count": count_words(text),
            "reading_time": view.reading_time,
            "reading_level": analysis.readability.reading_level,
            "has_code": flags["has_code"],
            "has_images": bool(view.featured_image and view.featured_image.url),
            "has_list": flags["has_list"],
            "tone": estimate_tone(text),
            "format": determine_content_format(view.content),
        },
        "key_points": extract_key_points(view.content),
        "answers_questions": generate_answered_questions(view),
        "target_audience": determine_audience(view, analysis),
        "expertise_level": determine_expertise_level(analysis),
        "engagement": {
            "views": view.analytics.views,
            "likes": view.analytics.likes,
            "bookmarks": view.analytics.bookmarks,
            "shares": view.analytics.shares.total,
        },
        "seo": {
            "score": calculate_seo_score(view),
            "focus_keyphrase": view.seo.focus_keyphrase,
            "is_optimized": view.ai_optimization.is_optimized,
        },
        "rag_optimized": {
            "chunk_size": math.ceil(len(text) / 1000),
            "has_structure": flags["has_structure"],
            "citations": extract_citations(view.content),
            "references": extract_references(view.content),
        },
        "generated_at": format_utc(generated_at),
    }
