"""
Port definitions (Protocol interfaces) for the store and the clock.
"""

from blogcms.core.ports.store import (
    AUTHORS,
    CATEGORIES,
    COLLECTIONS,
    POSTS,
    TAGS,
    ClockPort,
    Document,
    DocumentStorePort,
    Filter,
)

__all__ = [
    "AUTHORS",
    "CATEGORIES",
    "COLLECTIONS",
    "POSTS",
    "TAGS",
    "ClockPort",
    "Document",
    "DocumentStorePort",
    "Filter",
]
