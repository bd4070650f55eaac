import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogcms.adapters.sqlite import SQLiteMigrator
from blogcms.api.deps import apply_overrides, get_settings
from blogcms.api.errors import register_error_handlers
from blogcms.components.http_cache import build_policy_table
from blogcms.rules.loader import load_rules

API_PREFIX = "/api/blog"

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and build the cache policy table on startup (fail-fast)
    try:
        rules = apply_overrides(load_rules(settings.rules_path), settings)
        app.state.cache_policies = build_policy_table(rules.cache_policies)
        logger.info("Rules loaded from %s (site %s)", settings.rules_path, rules.site.base_url)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    if settings.store_kind == "sqlite":
        try:
            applied = SQLiteMigrator(settings.db_path).run_migrations()
        except RuntimeError as e:
            logger.critical("Database migration failed: %s", e)
            sys.exit(1)
        logger.info("SQLite store ready at %s (%d migration(s) applied)", settings.db_path, len(applied))
    else:
        logger.info("Using in-memory content store")

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Blog CMS API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

register_error_handlers(app)

# --- Routers ---
from blogcms.api.routes import ai, categories, posts, seo, tags  # noqa: E402

app.include_router(posts.router, prefix=API_PREFIX, tags=["Posts"])
app.include_router(categories.router, prefix=API_PREFIX, tags=["Categories"])
app.include_router(tags.router, prefix=API_PREFIX, tags=["Tags"])
app.include_router(seo.router, prefix=API_PREFIX, tags=["SEO"])
app.include_router(ai.router, prefix=API_PREFIX, tags=["AI"])


# CORS (Allow Frontend); adds Origin to Vary alongside the cache layer's Accept-Encoding
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag", "Last-Modified", "Cache-Control"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "blog-api"}


def run() -> None:
    """Serve the API with uvicorn using the BLOG_HOST / BLOG_PORT settings."""
    settings = get_settings()
    uvicorn.run(
        "blogcms.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
