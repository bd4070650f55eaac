"""
AI-oriented renditions of a post: FAQ/HowTo JSON-LD, a conversational
context object, generated Q&A pairs, extended JSON-LD and LLM metadata.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from blogcms.core.services.guards import require_renderable
from blogcms.core.services.text import count_words, strip_html
from blogcms.domain.entities import FaqItem, PostView, format_utc
from blogcms.rules.models import SiteRules

from .extract import (
    count_paragraphs,
    count_sentences,
    estimate_reading_level,
    estimate_tone,
    extract_facts,
    extract_key_takeaways,
    extract_main_points,
    extract_semantic_keywords,
)

SCHEMA_CONTEXT = "https://schema.org"
QA_ANSWER_CHARS = 300


@dataclass(frozen=True)
class HowToStep:
    name: str
    text: str
    image: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class HowTo:
    name: str
    description: str
    steps: Sequence[HowToStep] = ()
    total_time: str | None = None  # ISO-8601 duration, e.g. "PT30M"
    tools: Sequence[str] = ()
    supplies: Sequence[str] = ()


def _iso(value: Any) -> str | None:
    return format_utc(value) if value is not None else None


# --- Schema.org ---


def faq_schema(faqs: Sequence[FaqItem]) -> dict[str, Any] | None:
    if not faqs:
        return None
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": faq.question,
                "acceptedAnswer": {"@type": "Answer", "text": faq.answer},
            }
            for faq in faqs
        ],
    }


def howto_schema(howto: HowTo | None) -> dict[str, Any] | None:
    if howto is None or not howto.steps:
        return None
    schema: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "HowTo",
        "name": howto.name,
        "description": howto.description,
    }
    if howto.total_time:
        schema["totalTime"] = howto.total_time
    if howto.tools:
        schema["tool"] = [{"@type": "HowToTool", "name": t} for t in howto.tools]
    if howto.supplies:
        schema["supply"] = [{"@type": "HowToSupply", "name": s} for s in howto.supplies]

    steps = []
    for position, step in enumerate(howto.steps, start=1):
        item: dict[str, Any] = {"@type": "HowToStep", "position": position, "name": step.name, "text": step.text}
        if step.image:
            item["image"] = step.image
        if step.url:
            item["url"] = step.url
        steps.append(item)
    schema["step"] = steps
    return schema


# --- Q&A / conversational ---


def qa_from_content(view: PostView) -> list[dict[str, str]]:
    require_renderable(view)
    qa = [
        {
            "question": f"What is {view.title}?",
            "answer": view.excerpt or strip_html(view.content)[:QA_ANSWER_CHARS],
            "confidence": "high",
        }
    ]
    if view.category:
        qa.append(
            {
                "question": "What is this article about?",
                "answer": f"This article is about {view.category.name}, specifically {view.title}. {view.excerpt}".strip(),
                "confidence": "high",
            }
        )
    qa.append(
        {
            "question": f"What are the key points about {view.title}?",
            "answer": ". ".join(extract_main_points(view.content)),
            "confidence": "medium",
        }
    )
    if view.tags:
        qa.append(
            {
                "question": f"Which topics are related to {view.title}?",
                "answer": f"Related topics include: {', '.join(view.tag_names)}.",
                "confidence": "high",
            }
        )
    return qa


def conversational_format(view: PostView, site: SiteRules) -> dict[str, Any]:
    require_renderable(view)
    text = strip_html(view.content)
    return {
        "format": "conversational",
        "context": {
            "topic": view.title,
            "category": view.category.name if view.category else "General",
            "tags": view.tag_names,
            "publish_date": _iso(view.published_at),
            "author": view.author_name or site.default_author,
        },
        "content": {
            "summary": view.excerpt,
            "main_points": extract_main_points(view.content),
            "full_text": text,
            "key_takeaways": extract_key_takeaways(view.content),
        },
        "metadata": {
            "reading_time": view.reading_time,
            "word_count": count_words(text),
            "language": site.language,
            "tone": estimate_tone(text),
            "target_audience": view.category.name if view.category else "general",
        },
        "qa_format": qa_from_content(view),
        "related_topics": view.tag_names,
    }


# --- JSON-LD / LLM metadata ---


def extended_json_ld(view: PostView, site: SiteRules) -> dict[str, Any]:
    require_renderable(view)
    post_url = site.url(f"/blog/{view.slug}")

    schema: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "BlogPosting",
        "@id": post_url,
        "headline": view.title,
        "description": view.excerpt or None,
        "articleBody": strip_html(view.content),
        "url": post_url,
        "datePublished": _iso(view.published_at),
        "dateModified": _iso(view.updated_at),
        "publisher": {
            "@type": "Organization",
            "name": site.name,
            "url": site.base_url,
            "logo": {"@type": "ImageObject", "url": site.logo_url},
        },
        "keywords": ", ".join(view.tag_names) or None,
        "about": [{"@type": "Thing", "name": name} for name in view.tag_names],
        "interactionStatistic": [
            {
                "@type": "InteractionCounter",
                "interactionType": "https://schema.org/ViewAction",
                "userInteractionCount": view.analytics.views,
            },
            {
                "@type": "InteractionCounter",
                "interactionType": "https://schema.org/LikeAction",
                "userInteractionCount": view.analytics.likes,
            },
        ],
        "articleSection": view.category.name if view.category else None,
        "timeRequired": f"PT{view.reading_time or 1}M",
        "additionalProperty": {
            "@type": "PropertyValue",
            "name": "semanticKeywords",
            "value": extract_semantic_keywords(view.content, view.tags),
        },
        "mainEntity": [
            {"@type": "Thing", "@id": f"{post_url}#point-{i}", "name": point}
            for i, point in enumerate(extract_main_points(view.content), start=1)
        ],
    }
    if view.author:
        schema["author"] = {"@type": "Person", "name": view.author.full_name}
        if view.author.email:
            schema["author"]["email"] = view.author.email
    if view.featured_image and view.featured_image.url:
        image: dict[str, Any] = {"@type": "ImageObject", "url": view.featured_image.url}
        if view.featured_image.width:
            image["width"] = view.featured_image.width
        if view.featured_image.height:
            image["height"] = view.featured_image.height
        schema["image"] = image
    return {k: v for k, v in schema.items() if v is not None}


def llm_metadata(view: PostView, site: SiteRules) -> dict[str, Any]:
    require_renderable(view)
    text = strip_html(view.content)
    return {
        "title": view.title,
        "summary": view.excerpt or text[:QA_ANSWER_CHARS],
        "key_points": extract_main_points(view.content),
        "facts": extract_facts(text),
        "entities": {
            "topics": view.tag_names,
            "category": view.category.name if view.category else "General",
            "author": view.author_name or "Unknown",
        },
        "context": {
            "language": site.language,
            "domain": "technology",
            "publish_date": _iso(view.published_at),
            "last_update": _iso(view.updated_at),
            "reading_level": estimate_reading_level(text),
            "tone": estimate_tone(text),
        },
        "stats": {
            "word_count": count_words(text),
            "reading_time": view.reading_time,
            "paragraphs": count_paragraphs(view.content),
            "sentences": count_sentences(text),
        },
        "engagement": {
            "views": view.analytics.views,
            "likes": view.analytics.likes,
            "bookmarks": view.analytics.bookmarks,
        },
        "seo": {
            "focus_keyphrase": view.seo.focus_keyphrase,
            "meta_description": view.seo.meta_description,
            "score": view.ai_optimization.seo_score,
        },
    }
