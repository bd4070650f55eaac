"""
Exception handlers mapping the domain error taxonomy onto HTTP responses.

Every error body has the shape ``{"success": false, "message", "error"}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blogcms.domain.errors import (
    BlogError,
    Conflict,
    InvalidInput,
    NotFound,
    SlugExhausted,
    UpstreamStoreError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[BlogError], int] = {
    NotFound: 404,
    InvalidInput: 400,
    Conflict: 400,
    UpstreamStoreError: 500,
    SlugExhausted: 500,
}


def status_for(exc: BlogError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]  # type: ignore[index]
    return 500


def error_body(message: str, error: str) -> dict[str, object]:
    return {"success": False, "message": message, "error": error}


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
    return JSONResponse(status_code=status, content=error_body(exc.message, exc.error))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body(problems or "Invalid request", "validation_error"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error", "internal_error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, blog_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
