"""SEO health check for a single post."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from blogcms.domain.entities import BlogPost

ISSUE_PENALTY = 20
WARNING_PENALTY = 10
SUGGESTION_PENALTY = 5


@dataclass
class SeoReport:
    score: int
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "is_valid": self.is_valid}


def validate_post_seo(post: BlogPost) -> SeoReport:
    issues: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []

    if not post.title or len(post.title) < 10:
        issues.append("Title is too short (minimum 10 characters)")
    elif len(post.title) > 70:
        warnings.append("Title is too long (60-70 characters recommended)")

    description = post.seo.meta_description or post.excerpt
    if not description or len(description) < 50:
        issues.append("Meta description is too short (minimum 50 characters)")
    elif len(description) > 160:
        warnings.append("Meta description is too long (160 characters recommended)")

    image = post.featured_image
    if not image or not image.url:
        warnings.append("No featured image (recommended for social sharing)")
    elif not image.alt:
        suggestions.append("Add alt text to the featured image")

    keywords = post.seo.keywords
    if not keywords:
        suggestions.append("Add keywords for better indexing")
    elif len(keywords) > 10:
        warnings.append("Too many keywords (5-10 recommended)")

    if not post.slug or len(post.slug) < 3:
        issues.append("Slug is too short")
    elif len(post.slug) > 100:
        warnings.append("Slug is too long (50-75 characters recommended)")

    if not post.content or len(post.content) < 300:
        warnings.append("Content is too short (300 characters recommended)")

    score = 100 - ISSUE_PENALTY * len(issues) - WARNING_PENALTY * len(warnings) - SUGGESTION_PENALTY * len(suggestions)
    return SeoReport(
        score=max(0, score),
        issues=issues,
        warnings=warnings,
        suggestions=suggestions,
    )
