"""
Taxonomy component - categories (hierarchical) and tags.
"""

from ._impl import CategoryService, TagService, create_category_service, create_tag_service
from .fc import build_tree, creates_cycle
from .models import (
    TAG_SORTS,
    BulkTagResult,
    CategoryDetail,
    CategoryNode,
    CategoryOrder,
    CreateCategoryInput,
    CreateTagInput,
    UpdateCategoryInput,
    UpdateTagInput,
)

__all__ = [
    # Services
    "CategoryService",
    "TagService",
    "create_category_service",
    "create_tag_service",
    # Inputs
    "CategoryOrder",
    "CreateCategoryInput",
    "CreateTagInput",
    "UpdateCategoryInput",
    "UpdateTagInput",
    "TAG_SORTS",
    # Outputs
    "BulkTagResult",
    "CategoryDetail",
    "CategoryNode",
    # Functional core
    "build_tree",
    "creates_cycle",
]
