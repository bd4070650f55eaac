"""
AI content component - Markdown, conversational and Q&A renditions, LLM
metadata, heuristic semantic analysis and editorial improvement suggestions.
"""

from ._impl import AiContentService, create_ai_content_service
from .enhance import (
    ContentScore,
    Suggestions,
    calculate_content_score,
    grade_for,
    suggest_improvements,
    suggest_keywords,
    suggest_tags,
)
from .extract import (
    estimate_reading_level,
    estimate_tone,
    extract_facts,
    extract_key_takeaways,
    extract_main_points,
    extract_semantic_keywords,
)
from .formats import (
    HowTo,
    HowToStep,
    conversational_format,
    extended_json_ld,
    faq_schema,
    howto_schema,
    llm_metadata,
    qa_from_content,
)
from .markdown import MARKDOWN_MEDIA_TYPE, html_to_markdown, render_markdown
from .metadata import generate_ai_metadata
from .semantic import ContentAnalysis, analyze_content

__all__ = [
    # Service
    "AiContentService",
    "create_ai_content_service",
    # Markdown
    "MARKDOWN_MEDIA_TYPE",
    "html_to_markdown",
    "render_markdown",
    # Editorial enhancer
    "ContentScore",
    "Suggestions",
    "calculate_content_score",
    "grade_for",
    "suggest_improvements",
    "suggest_keywords",
    "suggest_tags",
    # Extraction
    "estimate_reading_level",
    "estimate_tone",
    "extract_facts",
    "extract_key_takeaways",
    "extract_main_points",
    "extract_semantic_keywords",
    # Formats
    "HowTo",
    "HowToStep",
    "conversational_format",
    "extended_json_ld",
    "faq_schema",
    "howto_schema",
    "llm_metadata",
    "qa_from_content",
    # Metadata / analysis
    "ContentAnalysis",
    "analyze_content",
    "generate_ai_metadata",
]
