"""
AiContentService - resolves a published post and runs the AI-oriented
formatters and the semantic analyzer over it.

The editorial helpers (suggestions, content score, optimize) accept posts in
any status, and ``optimize`` is the only operation that writes.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from blogcms.core.ports.store import POSTS, ClockPort, DocumentStorePort
from blogcms.core.services.text import strip_html
from blogcms.core.services.views import PostViewLoader
from blogcms.domain.entities import BlogPost, PostView, format_utc
from blogcms.domain.errors import NotFound
from blogcms.rules.models import SiteRules

from .enhance import calculate_content_score, suggest_improvements, suggest_keywords, suggest_tags
from .formats import conversational_format, extended_json_ld, llm_metadata, qa_from_content
from .markdown import render_markdown
from .metadata import generate_ai_metadata, generate_summary
from .semantic import (
    analyze_content,
    analyze_readability,
    analyze_sentiment,
    analyze_structure,
    extract_entities,
    extract_keywords,
    extract_topics,
)

logger = logging.getLogger(__name__)


class AiContentService:
    def __init__(self, store: DocumentStorePort, clock: ClockPort, site: SiteRules) -> None:
        self._store = store
        self._clock = clock
        self._site = site

    def _view(self, slug: str) -> PostView:
        return PostViewLoader(self._store).published_by_slug(slug)

    def _text(self, slug: str) -> str:
        return strip_html(self._view(slug).content)

    # --- Formats ---

    def metadata(self, slug: str) -> dict[str, Any]:
        return generate_ai_metadata(self._view(slug), self._site, self._clock.now_utc())

    def conversational(self, slug: str) -> dict[str, Any]:
        return conversational_format(self._view(slug), self._site)

    def qa(self, slug: str) -> list[dict[str, str]]:
        return qa_from_content(self._view(slug))

    def llm_metadata(self, slug: str) -> dict[str, Any]:
        return llm_metadata(self._view(slug), self._site)

    def markdown(self, slug: str) -> str:
        return render_markdown(self._view(slug), self._site)

    def extended_json_ld(self, slug: str) -> dict[str, Any]:
        return extended_json_ld(self._view(slug), self._site)

    # --- Semantic analysis ---

    def semantic_analysis(self, slug: str) -> dict[str, Any]:
        return analyze_content(self._view(slug).content).to_dict()

    def keywords(self, slug: str, limit: int = 20) -> list[dict[str, Any]]:
        return [asdict(k) for k in extract_keywords(self._text(slug), limit)]

    def entities(self, slug: str) -> dict[str, Any]:
        return asdict(extract_entities(self._text(slug)))

    def topics(self, slug: str) -> list[dict[str, Any]]:
        return [asdict(t) for t in extract_topics(self._text(slug))]

    def readability(self, slug: str) -> dict[str, Any]:
        return asdict(analyze_readability(self._text(slug)))

    def sentiment(self, slug: str) -> dict[str, Any]:
        return asdict(analyze_sentiment(self._text(slug)))

    def structure(self, slug: str) -> dict[str, Any]:
        return asdict(analyze_structure(self._view(slug).content))

    # --- Editorial ---

    def _any_view(self, slug: str) -> PostView:
        return PostViewLoader(self._store).by_slug(slug)

    def suggestions(self, slug: str) -> dict[str, Any]:
        view = self._any_view(slug)
        return {
            "post_title": view.title,
            "post_slug": view.slug,
            "suggestions": suggest_improvements(view).to_dict(),
            "generated_at": format_utc(self._clock.now_utc()),
        }

    def suggest_tags(self, slug: str) -> dict[str, Any]:
        view = self._any_view(slug)
        return {"post_title": view.title, "post_slug": view.slug, **asdict(suggest_tags(view))}

    def suggest_keywords(self, slug: str) -> dict[str, Any]:
        view = self._any_view(slug)
        suggestions = suggest_keywords(strip_html(view.content), view.seo.focus_keyphrase)
        return {"post_title": view.title, "post_slug": view.slug, **asdict(suggestions)}

    def content_score(self, slug: str) -> dict[str, Any]:
        view = self._any_view(slug)
        return {
            "post_title": view.title,
            "post_slug": view.slug,
            "score": asdict(calculate_content_score(view)),
            "calculated_at": format_utc(self._clock.now_utc()),
        }

    def optimize(self, slug: str) -> BlogPost:
        """Store the analysis, content score and summary on the post and mark it optimized."""
        view = self._any_view(slug)
        now = self._clock.now_utc()
        analysis = analyze_content(view.content, max_keywords=20)
        metadata = generate_ai_metadata(view, self._site, now, analysis)
        score = calculate_content_score(view)

        doc = self._store.get(POSTS, view.id)
        if doc is None:
            raise NotFound(f"Post '{slug}' not found", "post_not_found")
        post = BlogPost.model_validate(doc)
        optimization = post.ai_optimization.model_copy(
            update={
                "keywords": metadata["primary_keywords"] + metadata["secondary_keywords"],
                "seo_score": score.breakdown["seo"],
                "summary": generate_summary(view),
                "topics": metadata["topics"],
                "expertise_level": metadata["expertise_level"],
                "content_score": score.total,
                "grade": score.grade,
                "is_optimized": True,
                "optimized_at": now,
            }
        )
        updated = post.model_copy(update={"ai_optimization": optimization, "updated_at": now})
        self._store.replace(POSTS, updated.model_dump(mode="json"))
        logger.info("Optimized post %s (score %d, grade %s)", updated.slug, score.total, score.grade)
        return updated


def create_ai_content_service(store: DocumentStorePort, clock: ClockPort, site: SiteRules) -> AiContentService:
    """Factory for the AI content service."""
    return AiContentService(store, clock, site)
