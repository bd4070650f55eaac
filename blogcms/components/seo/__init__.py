"""
SEO component - schema.org JSON-LD, meta tags and post SEO validation.
"""

from ._impl import SeoService, create_seo_service
from .meta_tags import (
    blog_home_meta_tags,
    category_meta_tags,
    meta_tags_html,
    post_meta_tags,
    tag_meta_tags,
)
from .schema import (
    all_schemas,
    article_schema,
    author_schema,
    blog_schema,
    breadcrumb_schema,
    category_schema,
    item_list_schema,
    organization_schema,
    post_schemas,
    schema_to_script_tag,
    website_schema,
)
from .validation import SeoReport, validate_post_seo

__all__ = [
    # Service
    "SeoService",
    "create_seo_service",
    # Schema.org
    "all_schemas",
    "article_schema",
    "author_schema",
    "blog_schema",
    "breadcrumb_schema",
    "category_schema",
    "item_list_schema",
    "organization_schema",
    "post_schemas",
    "schema_to_script_tag",
    "website_schema",
    # Meta tags
    "blog_home_meta_tags",
    "category_meta_tags",
    "meta_tags_html",
    "post_meta_tags",
    "tag_meta_tags",
    # Validation
    "SeoReport",
    "validate_post_seo",
]
