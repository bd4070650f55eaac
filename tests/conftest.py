from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from blogcms.adapters.clock import FixedClock
from blogcms.adapters.memory import InMemoryDocumentStore
from blogcms.adapters.sqlite import SQLiteDocumentStore, SQLiteMigrator
from blogcms.api.deps import get_clock, get_rules, get_store
from blogcms.api.main import app
from blogcms.components.posts import CreatePostInput, PostService, create_post_service
from blogcms.components.taxonomy import (
    CategoryService,
    CreateCategoryInput,
    TagService,
    create_category_service,
    create_tag_service,
)
from blogcms.core.ports.store import AUTHORS
from blogcms.domain.entities import Author, BlogCategory, PostView
from blogcms.rules.loader import load_rules
from blogcms.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

SAMPLE_CONTENT = (
    "<h2>Introducción a FastAPI</h2>"
    "<p>FastAPI es un framework moderno y rápido para construir APIs con Python. "
    "Es fácil de aprender y muy eficiente en producción.</p>"
    "<ul><li>Validación automática de datos con pydantic</li>"
    "<li>Documentación interactiva generada automáticamente</li></ul>"
    "<p>En conclusión, FastAPI es una excelente opción para servicios web.</p>"
)


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh in-memory store for each test."""
    return InMemoryDocumentStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SQLiteDocumentStore:
    """SQLite store in a temporary directory, fully migrated."""
    db_path = str(tmp_path / "blog.db")
    SQLiteMigrator(db_path).run_migrations()
    return SQLiteDocumentStore(db_path)


# --- Services ---


@pytest.fixture
def post_service(store: InMemoryDocumentStore, clock: FixedClock, rules: Rules) -> PostService:
    return create_post_service(store, clock, rules.posts, rules.site, rules.seo)


@pytest.fixture
def category_service(store: InMemoryDocumentStore, clock: FixedClock) -> CategoryService:
    return create_category_service(store, clock)


@pytest.fixture
def tag_service(store: InMemoryDocumentStore, clock: FixedClock) -> TagService:
    return create_tag_service(store, clock)


# --- Sample data ---


@pytest.fixture
def author(store: InMemoryDocumentStore) -> Author:
    author = Author(first_name="Ana", last_name="García", email="ana@example.com", role="editor")
    store.insert(AUTHORS, author.model_dump(mode="json"))
    return author


@pytest.fixture
def category(category_service: CategoryService) -> BlogCategory:
    return category_service.create(
        CreateCategoryInput(name="Desarrollo Web", description="Artículos sobre desarrollo web")
    )


@pytest.fixture
def make_post(
    post_service: PostService,
    category: BlogCategory,
    author: Author,
) -> Callable[..., PostView]:
    """Create a post through the service; published unless ``status`` says otherwise."""

    def _make(title: str = "Primeros pasos con FastAPI", **overrides: Any) -> PostView:
        fields: dict[str, Any] = {
            "title": title,
            "excerpt": "Una guía práctica para construir tu primera API con FastAPI y Python.",
            "content": SAMPLE_CONTENT,
            "category": category.id,
            "tags": ("Python", "FastAPI"),
            "author_id": author.id,
            "status": "published",
        }
        fields.update(overrides)
        return post_service.create(CreatePostInput(**fields))

    return _make


# --- HTTP ---


@pytest.fixture
def client(store: InMemoryDocumentStore, clock: FixedClock, rules: Rules) -> Iterator[TestClient]:
    """Test client for the real app, wired to the test store, clock and rules."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rules] = lambda: rules
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
