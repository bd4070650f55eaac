"""
Posts component - listing, lookup and publication lifecycle.
"""

from ._impl import PostService, create_post_service
from .fc import Contribution, CounterDeltas, counter_deltas, default_post_seo
from .models import (
    SORT_KEYS,
    AdminPostsQuery,
    CreatePostInput,
    ListPostsQuery,
    Pagination,
    PostDetail,
    PostPage,
    UpdatePostInput,
)

__all__ = [
    # Service
    "PostService",
    "create_post_service",
    # Inputs
    "AdminPostsQuery",
    "CreatePostInput",
    "ListPostsQuery",
    "UpdatePostInput",
    "SORT_KEYS",
    # Outputs
    "Pagination",
    "PostDetail",
    "PostPage",
    # Functional core
    "Contribution",
    "CounterDeltas",
    "counter_deltas",
    "default_post_seo",
]
