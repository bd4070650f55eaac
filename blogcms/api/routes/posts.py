"""
Blog post routes: public listings and detail, the editorial list, and post writes.

Public reads go through the post-list, post-featured and post-detail cache
policies; editorial reads are never cached.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from blogcms.api.deps import get_post_service
from blogcms.api.http_cache import CacheResponder, cache_for, success
from blogcms.api.schemas import PostCreateRequest, PostDuplicateRequest, PostUpdateRequest
from blogcms.components.http_cache import RouteClass
from blogcms.components.posts import (
    AdminPostsQuery,
    CreatePostInput,
    ListPostsQuery,
    PostPage,
    PostService,
    UpdatePostInput,
)

router = APIRouter()


def page_payload(page: PostPage, **extra: Any) -> dict[str, Any]:
    """Paginated list body: ``{"data": [...], "pagination": {...}}``."""
    return {**extra, "data": page.posts, "pagination": page.pagination.to_dict()}


# --- Public reads ---


@router.get("/posts")
def list_posts(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    category: str | None = None,
    tag: str | None = None,
    author: str | None = None,
    featured: bool | None = None,
    search: str | None = None,
    sort: str = "-published_at",
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_LIST)),
) -> Response:
    """List published posts with filters and pagination."""
    query = ListPostsQuery(
        page=page,
        limit=limit,
        category=category,
        tag=tag,
        author=author,
        featured=featured,
        search=search,
        sort=sort,
    )
    return cache.json(success(page_payload(service.list_published(query))))


@router.get("/posts/featured")
def featured_posts(
    limit: int | None = Query(None, ge=1),
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_FEATURED)),
) -> Response:
    posts = service.featured(limit)
    return cache.json(success(posts, count=len(posts)))


@router.get("/posts/popular")
def popular_posts(
    limit: int | None = Query(None, ge=1),
    days: int | None = Query(None, ge=1),
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_FEATURED)),
) -> Response:
    posts = service.popular(limit, days)
    return cache.json(success(posts, count=len(posts)))


@router.get("/posts/search")
def search_posts(
    q: str | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_LIST)),
) -> Response:
    """Full-text search over title, excerpt and content. ``q`` is required."""
    return cache.json(success(page_payload(service.search(q, page, limit), query=q)))


@router.get("/posts/user/{username}")
def posts_by_user(
    username: str,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    sort: str = "-published_at",
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_LIST)),
) -> Response:
    """Published posts of an author with a public profile."""
    return cache.json(success(page_payload(service.by_author_username(username, page, limit, sort))))


@router.get("/posts/{slug}")
def get_post(
    slug: str,
    increment_views: bool = True,
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_DETAIL)),
) -> Response:
    """A published post with its related posts."""
    detail = service.get_by_slug(slug, increment_views=increment_views)
    body = success({"post": detail.post, "related_posts": detail.related})
    return cache.json(body, last_modified=detail.post.updated_at)


# --- Admin reads ---


@router.get("/admin/posts")
def list_all_posts(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    status: str | None = None,
    category: str | None = None,
    tag: str | None = None,
    author: str | None = None,
    search: str | None = None,
    sort: str = "-created_at",
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.NO_CACHE)),
) -> Response:
    """Posts in every status, newest first, for the editorial dashboard."""
    query = AdminPostsQuery(
        page=page,
        limit=limit,
        status=status,
        category=category,
        tag=tag,
        author=author,
        search=search,
        sort=sort,
    )
    return cache.json(success(page_payload(service.list_all(query))))


@router.get("/admin/posts/{post_id}")
def get_post_by_id(
    post_id: str,
    service: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.NO_CACHE)),
) -> Response:
    """Any post by id, drafts included."""
    return cache.json(success(service.view(post_id)))


# --- Writes ---


@router.post("/posts", status_code=201)
def create_post(
    req: PostCreateRequest,
    service: PostService = Depends(get_post_service),
) -> dict[str, Any]:
    post = service.create(
        CreatePostInput(
            title=req.title,
            excerpt=req.excerpt,
            content=req.content,
            category=req.category,
            tags=tuple(req.tags),
            slug=req.slug,
            content_format=req.content_format,
            featured_image=req.featured_image,
            author_id=req.author_id,
            status=req.status,
            is_featured=req.is_featured,
            allow_comments=req.allow_comments,
            seo=req.seo,
            ai_optimization=req.ai_optimization,
        )
    )
    return success(post, message="Post created")


@router.put("/posts/{post_id}")
def update_post(
    post_id: str,
    req: PostUpdateRequest,
    service: PostService = Depends(get_post_service),
) -> dict[str, Any]:
    post = service.update(
        post_id,
        UpdatePostInput(
            title=req.title,
            slug=req.slug,
            excerpt=req.excerpt,
            content=req.content,
            content_format=req.content_format,
            category=req.category,
            tags=tuple(req.tags) if req.tags is not None else None,
            featured_image=req.featured_image,
            status=req.status,
            is_featured=req.is_featured,
            allow_comments=req.allow_comments,
            seo=req.seo,
            ai_optimization=req.ai_optimization,
        ),
    )
    return success(post, message="Post updated")


@router.delete("/posts/{post_id}")
def delete_post(post_id: str, service: PostService = Depends(get_post_service)) -> dict[str, Any]:
    service.delete(post_id)
    return {"success": True, "message": "Post deleted"}


@router.patch("/posts/{post_id}/publish")
def publish_post(post_id: str, service: PostService = Depends(get_post_service)) -> dict[str, Any]:
    return success(service.publish(post_id), message="Post published")


@router.patch("/posts/{post_id}/unpublish")
def unpublish_post(post_id: str, service: PostService = Depends(get_post_service)) -> dict[str, Any]:
    return success(service.unpublish(post_id), message="Post unpublished")


@router.patch("/posts/{post_id}/archive")
def archive_post(post_id: str, service: PostService = Depends(get_post_service)) -> dict[str, Any]:
    return success(service.archive(post_id), message="Post archived")


@router.post("/posts/{post_id}/duplicate", status_code=201)
def duplicate_post(
    post_id: str,
    req: PostDuplicateRequest | None = None,
    service: PostService = Depends(get_post_service),
) -> dict[str, Any]:
    copy = service.duplicate(post_id, author_id=req.author_id if req else None)
    return success(copy, message="Post duplicated")
