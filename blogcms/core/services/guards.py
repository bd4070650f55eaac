"""Input guards shared by the per-post formatters."""

from __future__ import annotations

from blogcms.domain.entities import BlogPost
from blogcms.domain.errors import InvalidInput


def require_renderable(post: BlogPost) -> None:
    """Raise InvalidInput unless the post has a title and a body."""
    if not post.title or not post.title.strip():
        raise InvalidInput(f"Post '{post.slug}' has no title", "title_required")
    if not post.content or not post.content.strip():
        raise InvalidInput(f"Post '{post.slug}' has no content", "content_required")
