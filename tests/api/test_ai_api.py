"""
AI-oriented content endpoints under /api/blog/ai.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from blogcms.domain.entities import PostView

BASE = "/api/blog/ai"


@pytest.fixture
def post(make_post: Callable[..., PostView]) -> PostView:
    return make_post()


class TestFormats:
    def test_metadata(self, client: TestClient, post: PostView) -> None:
        data = client.get(f"{BASE}/metadata/{post.slug}").json()["data"]
        assert data["slug"] == post.slug
        assert data["url"] == f"https://example.com/blog/{post.slug}"
        assert data["primary_keywords"]

    def test_conversational(self, client: TestClient, post: PostView) -> None:
        data = client.get(f"{BASE}/conversational/{post.slug}").json()["data"]
        assert data["format"] == "conversational"
        assert data["context"]["category"] == "Desarrollo Web"
        assert data["context"]["author"] == "Ana García"
        assert data["related_topics"] == ["Python", "FastAPI"]

    def test_qa(self, client: TestClient, post: PostView) -> None:
        body = client.get(f"{BASE}/qa/{post.slug}").json()
        assert body["count"] == len(body["data"])
        assert body["data"][0]["question"] == f"What is {post.title}?"
        assert body["data"][0]["answer"] == post.excerpt

    def test_llm_metadata_and_json_ld(self, client: TestClient, post: PostView) -> None:
        assert client.get(f"{BASE}/llm-metadata/{post.slug}").status_code == 200
        json_ld = client.get(f"{BASE}/json-ld-extended/{post.slug}").json()["data"]
        assert json_ld["@type"] == "BlogPosting"
        assert json_ld["headline"] == post.title

    def test_markdown(self, client: TestClient, post: PostView) -> None:
        res = client.get(f"{BASE}/markdown/{post.slug}")
        assert res.headers["content-type"] == "text/markdown; charset=utf-8"
        assert res.text.startswith(f"# {post.title}\n")
        assert "**Author:** Ana García" in res.text
        assert "## Introducción a FastAPI" in res.text

    def test_formats_use_post_detail_caching(self, client: TestClient, post: PostView) -> None:
        res = client.get(f"{BASE}/qa/{post.slug}")
        assert res.headers["cache-control"] == "public, max-age=600, stale-while-revalidate=120"
        again = client.get(f"{BASE}/qa/{post.slug}", headers={"If-None-Match": res.headers["etag"]})
        assert again.status_code == 304


class TestSemanticAnalysis:
    def test_full_analysis(self, client: TestClient, post: PostView) -> None:
        data = client.get(f"{BASE}/semantic-analysis/{post.slug}").json()["data"]
        assert set(data) >= {"keywords", "entities", "topics", "sentiment", "readability", "structure"}

    def test_keywords(self, client: TestClient, post: PostView) -> None:
        body = client.get(f"{BASE}/keywords/{post.slug}", params={"limit": 3}).json()
        assert body["count"] == 3
        assert set(body["data"][0]) == {"word", "frequency", "relevance", "score"}

    @pytest.mark.parametrize("limit", [0, 101])
    def test_keyword_limit_bounds(self, client: TestClient, post: PostView, limit: int) -> None:
        res = client.get(f"{BASE}/keywords/{post.slug}", params={"limit": limit})
        assert res.status_code == 400
        assert res.json()["error"] == "validation_error"

    def test_entities_and_topics(self, client: TestClient, post: PostView) -> None:
        entities = client.get(f"{BASE}/entities/{post.slug}").json()["data"]
        assert set(entities) == {"technologies", "concepts", "companies", "people", "locations"}
        topics = client.get(f"{BASE}/topics/{post.slug}").json()
        assert topics["count"] == len(topics["data"])

    def test_readability_sentiment_structure(self, client: TestClient, post: PostView) -> None:
        readability = client.get(f"{BASE}/readability/{post.slug}").json()["data"]
        assert readability["word_count"] > 0
        sentiment = client.get(f"{BASE}/sentiment/{post.slug}").json()["data"]
        assert sentiment["sentiment"] in {"positive", "negative", "neutral"}
        structure = client.get(f"{BASE}/structure/{post.slug}").json()["data"]
        assert structure["has_headings"] is True
        assert structure["has_list"] is True

    @pytest.mark.parametrize(
        "path",
        ["metadata", "conversational", "qa", "llm-metadata", "markdown", "json-ld-extended", "semantic-analysis",
         "keywords", "entities", "topics", "readability", "sentiment", "structure"],
    )
    def test_unknown_slug(self, client: TestClient, path: str) -> None:
        res = client.get(f"{BASE}/{path}/nada")
        assert res.status_code == 404
        assert res.json()["error"] == "post_not_found"

    def test_drafts_are_not_analysed(self, client: TestClient, make_post: Callable[..., PostView]) -> None:
        draft = make_post("Borrador", status="draft")
        assert client.get(f"{BASE}/structure/{draft.slug}").status_code == 404


class TestEditorialEnhancer:
    def test_suggestions_for_a_draft(self, client: TestClient, make_post: Callable[..., PostView]) -> None:
        draft = make_post("Borrador", status="draft")
        res = client.get(f"{BASE}/suggestions/{draft.slug}")
        assert res.status_code == 200
        assert res.headers["cache-control"] == "private, max-age=0, must-revalidate"
        data = res.json()["data"]
        assert data["post_slug"] == "borrador"
        assert set(data["suggestions"]) == {"tags", "keywords", "seo", "readability", "structure", "engagement", "score"}

    def test_tags_keywords_and_score(self, client: TestClient, post: PostView) -> None:
        tags = client.get(f"{BASE}/suggest-tags/{post.slug}").json()["data"]
        assert tags["current"] == ["python", "fastapi"]
        keywords = client.get(f"{BASE}/suggest-keywords/{post.slug}").json()["data"]
        assert keywords["total_unique"] > 0
        score = client.get(f"{BASE}/content-score/{post.slug}").json()["data"]["score"]
        assert set(score["breakdown"]) == {"seo", "readability", "structure", "engagement"}
        assert 0 <= score["total"] <= 100

    def test_optimize(self, client: TestClient, post: PostView) -> None:
        res = client.post(f"{BASE}/optimize/{post.slug}")
        assert res.status_code == 200
        body = res.json()
        assert body["message"] == "Post optimized"
        assert body["data"]["is_optimized"] is True
        assert body["data"]["optimized_at"] == "2024-06-15T12:00:00.000000Z"

        stored = client.get(f"/api/blog/admin/posts/{post.id}").json()["data"]
        assert stored["ai_optimization"]["grade"] == body["data"]["grade"]

    @pytest.mark.parametrize("path", ["suggestions", "suggest-tags", "suggest-keywords", "content-score"])
    def test_unknown_slug(self, client: TestClient, path: str) -> None:
        res = client.get(f"{BASE}/{path}/nada")
        assert res.status_code == 404
        assert res.json()["error"] == "post_not_found"

    def test_optimize_unknown_slug(self, client: TestClient) -> None:
        assert client.post(f"{BASE}/optimize/nada").status_code == 404
