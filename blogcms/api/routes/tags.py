"""
Tag routes: listing, popularity, tagged posts, and admin writes.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from blogcms.api.deps import get_post_service, get_tag_service
from blogcms.api.http_cache import CacheResponder, cache_for, success
from blogcms.api.routes.posts import page_payload
from blogcms.api.schemas import TagBulkRequest, TagCreateRequest, TagUpdateRequest
from blogcms.components.http_cache import RouteClass
from blogcms.components.posts import PostService
from blogcms.components.taxonomy import CreateTagInput, TagService, UpdateTagInput

router = APIRouter()


@router.get("/tags")
def list_tags(
    include_inactive: bool = False,
    sort: str = "usage",
    limit: int | None = Query(None, ge=1),
    service: TagService = Depends(get_tag_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.TAXONOMY)),
) -> Response:
    """Tags sorted by ``usage`` (default), ``name`` or ``recent``."""
    tags = service.list_tags(include_inactive, sort, limit)
    return cache.json(success(tags, count=len(tags)))


@router.get("/tags/popular")
def popular_tags(
    limit: int = Query(10, ge=1),
    service: TagService = Depends(get_tag_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.TAXONOMY)),
) -> Response:
    tags = service.popular(limit)
    return cache.json(success(tags, count=len(tags)))


@router.get("/tags/{slug}")
def get_tag(
    slug: str,
    service: TagService = Depends(get_tag_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.TAXONOMY)),
) -> Response:
    return cache.json(success(service.get_by_slug(slug)))


@router.get("/tags/{slug}/posts")
def tag_posts(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    tags: TagService = Depends(get_tag_service),
    posts: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_LIST)),
) -> Response:
    tag = tags.get_by_slug(slug)
    result = posts.by_tag(slug, page, limit)
    summary = {
        "id": tag.id,
        "name": tag.name,
        "slug": tag.slug,
        "description": tag.description,
        "color": tag.color,
        "usage_count": tag.usage_count,
    }
    return cache.json(success(page_payload(result, tag=summary)))


@router.post("/tags", status_code=201)
def create_tag(req: TagCreateRequest, service: TagService = Depends(get_tag_service)) -> dict[str, Any]:
    tag = service.create(
        CreateTagInput(name=req.name, description=req.description, color=req.color, seo=req.seo)
    )
    return success(tag, message="Tag created")


@router.post("/tags/bulk", status_code=201)
def bulk_create_tags(req: TagBulkRequest, service: TagService = Depends(get_tag_service)) -> dict[str, Any]:
    result = service.bulk_create(req.tags)
    return success(
        result.created,
        message=f"{len(result.created)} tag(s) created",
        skipped=result.skipped,
    )


@router.put("/tags/{tag_id}")
def update_tag(
    tag_id: str,
    req: TagUpdateRequest,
    service: TagService = Depends(get_tag_service),
) -> dict[str, Any]:
    tag = service.update(
        tag_id,
        UpdateTagInput(
            name=req.name,
            description=req.description,
            color=req.color,
            is_active=req.is_active,
            seo=req.seo,
        ),
    )
    return success(tag, message="Tag updated")


@router.delete("/tags/{tag_id}")
def delete_tag(
    tag_id: str,
    force: bool = False,
    service: TagService = Depends(get_tag_service),
) -> dict[str, Any]:
    detached = service.delete(tag_id, force=force)
    return {"success": True, "message": "Tag deleted", "detached_from": detached}
