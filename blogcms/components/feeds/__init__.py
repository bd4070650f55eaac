"""
Feeds component - RSS 2.0, Atom 1.0 and JSON Feed 1.1.
"""

from ._impl import FeedService, create_feed_service
from .fc import (
    ATOM_MEDIA_TYPE,
    JSON_FEED_MEDIA_TYPE,
    JSON_FEED_VERSION,
    RSS_MEDIA_TYPE,
    clean_html_for_feed,
    feed_description,
    render_atom,
    render_category_rss,
    render_json_feed,
    render_rss,
)

__all__ = [
    # Service
    "FeedService",
    "create_feed_service",
    # Builders
    "clean_html_for_feed",
    "feed_description",
    "render_atom",
    "render_category_rss",
    "render_json_feed",
    "render_rss",
    # Media types
    "ATOM_MEDIA_TYPE",
    "JSON_FEED_MEDIA_TYPE",
    "JSON_FEED_VERSION",
    "RSS_MEDIA_TYPE",
]
