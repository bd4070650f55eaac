"""
Error taxonomy shared by services, formatters and the HTTP layer.

Every error carries a human readable ``message`` and a stable machine code in
``error``. The HTTP layer maps the class to a status code; nothing below the
routes knows about HTTP.
"""

from __future__ import annotations


class BlogError(Exception):
    """Base class for all domain errors."""

    code = "internal_error"

    def __init__(self, message: str, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error or self.code


class NotFound(BlogError):
    """Referenced slug or id does not exist (or is not visible)."""

    code = "not_found"


class InvalidInput(BlogError):
    """A required field is missing or malformed."""

    code = "invalid_input"


class Conflict(BlogError):
    """Operation is not allowed in the document's current state."""

    code = "conflict"


class UpstreamStoreError(BlogError):
    """The content store call failed."""

    code = "store_error"


class SlugExhausted(BlogError):
    """No free slug candidate was found within the attempt budget."""

    code = "slug_exhausted"
