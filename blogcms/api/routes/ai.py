"""
AI content routes: alternative renditions of published posts, heuristic
semantic analysis, and the editorial enhancer (suggestions, content score
and optimize), which also sees drafts.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from blogcms.api.deps import get_ai_content_service
from blogcms.api.http_cache import CacheResponder, cache_for, success
from blogcms.components.ai_content import MARKDOWN_MEDIA_TYPE, AiContentService
from blogcms.components.http_cache import RouteClass

router = APIRouter(prefix="/ai")

post_detail = cache_for(RouteClass.POST_DETAIL)
no_cache = cache_for(RouteClass.NO_CACHE)


# --- Formats ---


@router.get("/metadata/{slug}")
def ai_metadata(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.metadata(slug)))


@router.get("/conversational/{slug}")
def conversational(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.conversational(slug)))


@router.get("/qa/{slug}")
def question_answers(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    pairs = service.qa(slug)
    return cache.json(success(pairs, count=len(pairs)))


@router.get("/llm-metadata/{slug}")
def llm_metadata(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.llm_metadata(slug)))


@router.get("/markdown/{slug}")
def markdown(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.respond(service.markdown(slug), MARKDOWN_MEDIA_TYPE)


@router.get("/json-ld-extended/{slug}")
def json_ld_extended(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.extended_json_ld(slug)))


# --- Semantic analysis ---


@router.get("/semantic-analysis/{slug}")
def semantic_analysis(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.semantic_analysis(slug)))


@router.get("/keywords/{slug}")
def keywords(
    slug: str,
    limit: int = Query(20, ge=1, le=100),
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    found = service.keywords(slug, limit)
    return cache.json(success(found, count=len(found)))


@router.get("/entities/{slug}")
def entities(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.entities(slug)))


@router.get("/topics/{slug}")
def topics(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    found = service.topics(slug)
    return cache.json(success(found, count=len(found)))


@router.get("/readability/{slug}")
def readability(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.readability(slug)))


@router.get("/sentiment/{slug}")
def sentiment(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.sentiment(slug)))


@router.get("/structure/{slug}")
def structure(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(post_detail),
) -> Response:
    return cache.json(success(service.structure(slug)))


# --- Editorial enhancer ---


@router.get("/suggestions/{slug}")
def suggestions(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.suggestions(slug)))


@router.get("/suggest-tags/{slug}")
def suggest_tags(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.suggest_tags(slug)))


@router.get("/suggest-keywords/{slug}")
def suggest_keywords(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.suggest_keywords(slug)))


@router.get("/content-score/{slug}")
def content_score(
    slug: str,
    service: AiContentService = Depends(get_ai_content_service),
    cache: CacheResponder = Depends(no_cache),
) -> Response:
    return cache.json(success(service.content_score(slug)))


@router.post("/optimize/{slug}")
def optimize(slug: str, service: AiContentService = Depends(get_ai_content_service)) -> dict[str, Any]:
    post = service.optimize(slug)
    optimization = post.ai_optimization.model_dump(mode="json")
    return success(
        {
            "post_title": post.title,
            "post_slug": post.slug,
            "content_score": optimization["content_score"],
            "grade": optimization["grade"],
            "is_optimized": optimization["is_optimized"],
            "optimized_at": optimization["optimized_at"],
        },
        message="Post optimized",
    )
