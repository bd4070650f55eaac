"""
Category routes: the flat list and tree, detail with post listings, and
admin writes (create, update, reorder, delete).
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response

from blogcms.api.deps import get_category_service, get_post_service
from blogcms.api.http_cache import CacheResponder, cache_for, success
from blogcms.api.routes.posts import page_payload
from blogcms.api.schemas import CategoryCreateRequest, CategoryReorderRequest, CategoryUpdateRequest
from blogcms.components.http_cache import RouteClass
from blogcms.components.posts import PostService
from blogcms.components.taxonomy import (
    CategoryOrder,
    CategoryService,
    CreateCategoryInput,
    UpdateCategoryInput,
)

router = APIRouter()


@router.get("/categories")
def list_categories(
    include_inactive: bool = False,
    tree: bool = False,
    service: CategoryService = Depends(get_category_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.TAXONOMY)),
) -> Response:
    """Flat list ordered by ``order`` then name, or the nested tree with ``tree=true``."""
    if tree:
        nodes = [node.to_dict() for node in service.tree()]
        return cache.json(success(nodes, count=len(nodes)))
    categories = service.list_categories(include_inactive)
    return cache.json(success(categories, count=len(categories)))


@router.get("/categories/tree")
def category_tree(
    service: CategoryService = Depends(get_category_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.TAXONOMY)),
) -> Response:
    nodes = [node.to_dict() for node in service.tree()]
    return cache.json(success(nodes, count=len(nodes)))


@router.get("/categories/{slug}")
def get_category(
    slug: str,
    service: CategoryService = Depends(get_category_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.TAXONOMY)),
) -> Response:
    detail = service.get_by_slug(slug)
    data = {
        **detail.category.model_dump(mode="json"),
        "parent": detail.parent,
        "subcategories": detail.subcategories,
    }
    return cache.json(success(data))


@router.get("/categories/{slug}/posts")
def category_posts(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    categories: CategoryService = Depends(get_category_service),
    posts: PostService = Depends(get_post_service),
    cache: CacheResponder = Depends(cache_for(RouteClass.POST_LIST)),
) -> Response:
    category = categories.get_by_slug(slug).category
    result = posts.by_category(slug, page, limit)
    summary = {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "color": category.color,
    }
    return cache.json(success(page_payload(result, category=summary)))


@router.post("/categories", status_code=201)
def create_category(
    req: CategoryCreateRequest,
    service: CategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    category = service.create(
        CreateCategoryInput(
            name=req.name,
            description=req.description,
            image=req.image,
            color=req.color,
            parent_id=req.parent_id,
            order=req.order,
            seo=req.seo,
        )
    )
    return success(category, message="Category created")


@router.put("/categories/reorder")
def reorder_categories(
    req: CategoryReorderRequest,
    service: CategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    updated = service.reorder([CategoryOrder(id=item.id, order=item.order) for item in req.categories])
    return success(updated, message="Categories reordered")


@router.put("/categories/{category_id}")
def update_category(
    category_id: str,
    req: CategoryUpdateRequest,
    service: CategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    category = service.update(
        category_id,
        UpdateCategoryInput(
            name=req.name,
            description=req.description,
            image=req.image,
            color=req.color,
            parent_id=req.parent_id,
            clear_parent="parent_id" in req.model_fields_set and req.parent_id is None,
            order=req.order,
            is_active=req.is_active,
            seo=req.seo,
        ),
    )
    return success(category, message="Category updated")


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    service.delete(category_id)
    return {"success": True, "message": "Category deleted"}
