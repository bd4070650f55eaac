"""
AI content component tests.

- HTML to Markdown conversion and the Markdown post rendition
- Heuristic analysis: keywords, entities, topics, sentiment, readability, structure
- Q&A / conversational / metadata documents and the slug-based service
- Editorial suggestions, the content score and optimize
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from blogcms.adapters.clock import FixedClock
from blogcms.adapters.memory import InMemoryDocumentStore
from blogcms.components.ai_content import (
    AiContentService,
    HowTo,
    HowToStep,
    analyze_content,
    calculate_content_score,
    conversational_format,
    extended_json_ld,
    faq_schema,
    generate_ai_metadata,
    grade_for,
    howto_schema,
    html_to_markdown,
    llm_metadata,
    qa_from_content,
    render_markdown,
    suggest_improvements,
    suggest_keywords,
    suggest_tags,
)
from blogcms.components.ai_content.enhance import (
    SCORE_WEIGHTS,
    suggest_engagement_improvements,
    suggest_readability_improvements,
    suggest_seo_improvements,
    suggest_structural_improvements,
)
from blogcms.components.ai_content.semantic import (
    Entity,
    KeyPhrase,
    Topic,
    analyze_readability,
    analyze_sentiment,
    analyze_structure,
    calculate_similarity,
    extract_entities,
    extract_key_phrases,
    extract_keywords,
    extract_topics,
)
from blogcms.core.ports.store import POSTS
from blogcms.core.services.text import strip_html
from blogcms.domain.entities import Author, BlogCategory, BlogTag, FaqItem, ImageRef, PostView
from blogcms.domain.errors import InvalidInput, NotFound
from blogcms.rules.models import Rules

PUBLISHED_AT = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

CONTENT = (
    "<h2>Introducción a FastAPI</h2>"
    "<p>FastAPI es un framework moderno para construir APIs con Python.</p>"
    "<ul><li>Validación automática de datos con pydantic.</li>"
    "<li>Documentación interactiva generada automáticamente.</li></ul>"
    "<p>En conclusión, es una opción excelente.</p>"
)


def _view(**fields: object) -> PostView:
    data: dict[str, object] = {
        "title": "Primeros pasos con FastAPI",
        "slug": "primeros-pasos",
        "excerpt": "Una guía práctica",
        "content": CONTENT,
        "status": "published",
        "published_at": PUBLISHED_AT,
        "updated_at": PUBLISHED_AT,
        "reading_time": 2,
        "author": Author(first_name="Ana", last_name="García", email="ana@example.com"),
        "category": BlogCategory(name="Desarrollo Web", slug="desarrollo-web"),
        "tags": [BlogTag(name="Python", slug="python"), BlogTag(name="FastAPI", slug="fastapi")],
    }
    data.update(fields)
    return PostView(**data)


class TestHtmlToMarkdown:
    @pytest.mark.parametrize(
        ("markup", "expected"),
        [
            ("<h2>Title</h2><p>Hello <strong>world</strong></p>", "## Title\n\nHello **world**"),
            ('<p>See <a href="https://x.com">docs</a></p>', "See [docs](https://x.com)"),
            ("<ul><li>One</li><li>Two</li></ul>", "- One\n- Two"),
            ("<pre><code>x = 1</code></pre>", "```\nx = 1\n```"),
            ("<p>Use <code>pip</code> and <em>relax</em></p>", "Use `pip` and *relax*"),
            ("<p>&lt;div&gt; &amp; more</p>", "<div> & more"),
            ("<p>a</p><p></p><p></p><p>b</p>", "a\n\nb"),
        ],
    )
    def test_conversions(self, markup: str, expected: str) -> None:
        assert html_to_markdown(markup) == expected

    def test_empty(self) -> None:
        assert html_to_markdown(None) == ""
        assert html_to_markdown("") == ""


class TestRenderMarkdown:
    def test_section_order(self, rules: Rules) -> None:
        md = render_markdown(_view(), rules.site)
        markers = [
            "# Primeros pasos con FastAPI",
            "---",
            "**Author:** Ana García",
            "**Category:** Desarrollo Web",
            "**Tags:** Python, FastAPI",
            "**Date:** 2024-06-15",
            "**Reading time:** 2 min",
            "## Summary",
            "## Content",
            "## Key Points",
            "## Related Topics",
        ]
        positions = [md.index(marker) for marker in markers]
        assert positions == sorted(positions)
        assert "1. Validación automática de datos con pydantic" in md
        assert "- Python" in md
        assert md.endswith("\n")

    def test_defaults_without_taxonomy(self, rules: Rules) -> None:
        md = render_markdown(_view(author=None, category=None, tags=[], excerpt=""), rules.site)
        assert "**Author:** Northwind Studio Team" in md
        assert "**Category:** General" in md
        assert "**Tags:** N/A" in md
        assert "## Summary" not in md
        assert "## Related Topics" not in md

    def test_markdown_posts_pass_through(self, rules: Rules) -> None:
        md = render_markdown(_view(content="## Ya en markdown", content_format="markdown"), rules.site)
        assert "## Content\n\n## Ya en markdown" in md

    def test_requires_title(self, rules: Rules) -> None:
        with pytest.raises(InvalidInput) as exc:
            render_markdown(_view(title=""), rules.site)
        assert exc.value.error == "title_required"


class TestKeywords:
    def test_frequency_and_stopwords(self) -> None:
        keywords = extract_keywords("Python python PYTHON rápido para con")
        assert keywords[0].word == "python"
        assert keywords[0].frequency == 3
        words = {k.word for k in keywords}
        assert "para" not in words
        assert "con" not in words
        assert "rápido" in words

    def test_limit_and_empty(self) -> None:
        assert len(extract_keywords("alpha beta gamma delta", max_keywords=2)) == 2
        assert extract_keywords("") == []

    def test_key_phrases(self) -> None:
        phrases = extract_key_phrases("fast api rocks. fast api rules")
        assert phrases == [KeyPhrase(phrase="fast api", frequency=2, relevance=2 / 5)]

    def test_similarity(self) -> None:
        assert calculate_similarity("python docker", "python kubernetes") == pytest.approx(1 / 3)
        assert calculate_similarity("", "") == 0.0


class TestEntitiesAndTopics:
    def test_technologies_match_whole_words(self) -> None:
        entities = extract_entities("I use Java and JavaScript daily with Docker")
        assert {e.name for e in entities.technologies} == {"javascript", "java", "docker"}

    def test_repeated_capitalised_runs_are_concepts(self) -> None:
        entities = extract_entities("Hoy usamos Fast Api. Luego Fast Api otra vez con Fast Api.")
        assert entities.concepts == [Entity(name="Fast Api", occurrences=3)]

    def test_run_after_sentence_opener_still_counts(self) -> None:
        entities = extract_entities("Nota Docker Compose arranca. Nota Docker Compose para.")
        assert entities.concepts == [Entity(name="Docker Compose", occurrences=2)]

    def test_topics(self) -> None:
        assert extract_topics("docker kubernetes deploy") == [Topic(name="devops", weight=3, confidence=0.3)]

    def test_topics_are_capped_at_five(self) -> None:
        text = "web code database design docker security testing endpoint"
        assert len(extract_topics(text)) == 5


class TestSentiment:
    def test_positive(self) -> None:
        result = analyze_sentiment("Es excelente, rápido y fácil")
        assert result.sentiment == "positive"
        assert result.positive_count == 3
        assert result.confidence == pytest.approx(0.15)

    def test_negative(self) -> None:
        result = analyze_sentiment("This is slow and a problem with bad failure")
        assert result.sentiment == "negative"
        assert result.negative_count == 4

    def test_neutral_without_cues(self) -> None:
        result = analyze_sentiment("Hola mundo")
        assert result.sentiment == "neutral"
        assert result.score == 0.0
        assert result.confidence == 0


class TestReadabilityAndStructure:
    def test_empty_text(self) -> None:
        result = analyze_readability("")
        assert result.reading_level == "very-difficult"
        assert result.word_count == 0
        assert result.flesch_score == 0.0

    def test_short_sentences_are_easy(self) -> None:
        result = analyze_readability("El sol sale. El mar es azul. Yo leo.")
        assert result.sentence_count == 3
        assert result.word_count == 9
        assert 0 <= result.flesch_score <= 100
        assert result.reading_level in {"very-easy", "easy"}

    def test_full_structure(self) -> None:
        markup = (
            "<h2>T</h2><ul><li>x</li></ul><img src=\"a.png\"><a href=\"/x\">l</a>"
            "<p>1</p><p>2</p><p>3</p><p>4</p><pre><code>c</code></pre>"
        )
        result = analyze_structure(markup)
        assert result.score == 100
        assert result.quality == "excellent"
        assert result.code_block_count == 2
        assert result.paragraph_count == 4

    def test_plain_text_is_poor(self) -> None:
        result = analyze_structure("just text")
        assert result.score == 0
        assert result.quality == "poor"

    def test_analyze_content_bundle(self) -> None:
        data = analyze_content(CONTENT).to_dict()
        assert set(data) == {"keywords", "entities", "topics", "sentiment", "readability", "structure", "density"}
        assert data["structure"]["has_headings"] is True
        assert any(e["name"] == "python" for e in data["entities"]["technologies"])


class TestFormats:
    def test_qa_with_taxonomy(self) -> None:
        qa = qa_from_content(_view())
        assert [q["question"] for q in qa] == [
            "What is Primeros pasos con FastAPI?",
            "What is this article about?",
            "What are the key points about Primeros pasos con FastAPI?",
            "Which topics are related to Primeros pasos con FastAPI?",
        ]
        assert qa[0]["answer"] == "Una guía práctica"
        assert qa[3]["answer"] == "Related topics include: Python, FastAPI."

    def test_qa_without_taxonomy(self) -> None:
        assert len(qa_from_content(_view(category=None, tags=[]))) == 2

    def test_conversational(self, rules: Rules) -> None:
        doc = conversational_format(_view(), rules.site)
        assert doc["format"] == "conversational"
        assert doc["context"]["author"] == "Ana García"
        assert doc["context"]["publish_date"] == "2024-06-15T12:00:00.000000Z"
        assert doc["content"]["key_takeaways"] == ["En conclusión, es una opción excelente."]
        assert doc["related_topics"] == ["Python", "FastAPI"]
        assert doc["qa_format"] == qa_from_content(_view())

    def test_extended_json_ld(self, rules: Rules) -> None:
        schema = extended_json_ld(_view(), rules.site)
        assert schema["@type"] == "BlogPosting"
        assert schema["keywords"] == "Python, FastAPI"
        assert schema["author"] == {"@type": "Person", "name": "Ana García", "email": "ana@example.com"}
        assert schema["additionalProperty"]["value"].startswith("python, fastapi")
        assert schema["mainEntity"][0]["@id"] == "https://example.com/blog/primeros-pasos#point-1"
        assert "image" not in schema

    def test_llm_metadata(self, rules: Rules) -> None:
        doc = llm_metadata(_view(), rules.site)
        assert doc["entities"]["category"] == "Desarrollo Web"
        assert doc["context"]["language"] == "es-ES"
        assert doc["stats"]["sentences"] >= 2

    def test_faq_schema(self) -> None:
        assert faq_schema([]) is None
        schema = faq_schema([FaqItem(question="Q?", answer="A.")])
        assert schema is not None
        assert schema["mainEntity"][0]["acceptedAnswer"]["text"] == "A."

    def test_howto_schema(self) -> None:
        assert howto_schema(None) is None
        assert howto_schema(HowTo(name="n", description="d")) is None
        schema = howto_schema(
            HowTo(
                name="Install",
                description="How to install",
                steps=[HowToStep(name="Download", text="Get it"), HowToStep(name="Run", text="Run it", url="/run")],
                total_time="PT5M",
                tools=["terminal"],
            )
        )
        assert schema is not None
        assert schema["totalTime"] == "PT5M"
        assert schema["tool"] == [{"@type": "HowToTool", "name": "terminal"}]
        assert [s["position"] for s in schema["step"]] == [1, 2]
        assert schema["step"][1]["url"] == "/run"
        assert "supply" not in schema


class TestAiMetadata:
    def test_document(self, rules: Rules) -> None:
        generated = datetime(2024, 7, 1, 9, 30, tzinfo=UTC)
        doc = generate_ai_metadata(_view(), rules.site, generated)
        assert doc["generated_at"] == "2024-07-01T09:30:00.000000Z"
        assert doc["url"] == "https://example.com/blog/primeros-pasos"
        assert doc["summary"] == "Una guía práctica"
        assert doc["context"]["category"] == "Desarrollo Web"
        assert doc["content_features"]["has_list"] is True
        assert doc["content_features"]["has_code"] is False
        assert doc["rag_optimized"]["has_structure"] is True
        assert "python" in doc["entities"]["technologies"]
        assert doc["expertise_level"] in {"beginner", "intermediate", "advanced", "expert"}

    def test_summary_from_content_when_no_excerpt(self, rules: Rules) -> None:
        doc = generate_ai_metadata(_view(excerpt=""), rules.site, PUBLISHED_AT)
        assert doc["summary"].startswith("Introducción a FastAPI")


def _complete_view(**fields: object) -> PostView:
    """A post that meets every SEO threshold."""
    data: dict[str, object] = {
        "title": "Guía completa para construir APIs con FastAPI",
        "excerpt": "Una guía práctica. " * 7,
        "featured_image": ImageRef(url="https://cdn.example.com/cover.jpg"),
        "tags": [BlogTag(name=name, slug=name.lower()) for name in ("Python", "FastAPI", "APIs")],
        "content": "<p>" + "palabra " * 600 + "</p>",
    }
    data.update(fields)
    return _view(**data)


class TestSuggestions:
    def test_tags_skip_existing(self) -> None:
        result = suggest_tags(_view())
        assert result.current == ["python", "fastapi"]
        assert result.optimal is False
        assert result.recommendation == "Add at least 3 tags"
        names = [s.tag.lower() for s in result.suggested]
        assert "python" not in names
        assert "fastapi" not in names
        assert len(names) == len(set(names))
        confidences = [s.confidence for s in result.suggested]
        assert confidences == sorted(confidences, reverse=True)

    def test_keywords_with_focus_keyphrase(self) -> None:
        text = strip_html(CONTENT)
        result = suggest_keywords(text, "FastAPI")
        focus = result.suggested[-1]
        assert focus.type == "focus"
        assert focus.frequency == 2
        assert result.focus_keyphrase == "FastAPI"
        assert all(len(s.keyword) > 6 for s in result.suggested if s.type == "long-tail")

    def test_keywords_focus_fallbacks(self) -> None:
        text = strip_html(CONTENT)
        missing = suggest_keywords(text, "Django").suggested[-1]
        assert missing.frequency == 0
        assert missing.recommendation == "The focus keyphrase does not appear in the content"
        assert suggest_keywords(text).focus_keyphrase == extract_keywords(text, 20)[0].word
        assert suggest_keywords("").focus_keyphrase == "undefined"

    def test_seo_full_marks(self) -> None:
        report = suggest_seo_improvements(_complete_view())
        assert report.improvements == []
        assert report.score == 100
        assert report.status == "excellent"

    def test_seo_gaps(self) -> None:
        report = suggest_seo_improvements(_view())
        areas = {i.area: i.priority for i in report.improvements}
        assert areas == {
            "title": "high",
            "excerpt": "high",
            "featured_image": "high",
            "tags": "medium",
            "content": "critical",
        }
        assert report.score == 10
        assert report.status == "poor"

    def test_readability_flags_long_sentences(self) -> None:
        report = suggest_readability_improvements("palabra " * 30 + ".")
        areas = [i.area for i in report.improvements]
        assert "sentence-length" in areas
        assert "reading-level" in areas
        assert report.score == 100 - 10 * len(areas)

    def test_structure(self) -> None:
        report = suggest_structural_improvements(CONTENT)
        assert [i.area for i in report.improvements] == ["h1", "h2", "links"]
        assert report.score == 70
        assert report.status == "fair"

    def test_engagement(self) -> None:
        bare = suggest_engagement_improvements(_view())
        assert [i.area for i in bare.improvements] == ["call-to-action", "social-sharing"]
        assert bare.score == 70

        engaging = suggest_engagement_improvements(
            _view(content=CONTENT + "<p>Puedes comentar y compartir en redes sociales.</p>")
        )
        assert engaging.improvements == []
        assert engaging.recommendation == "Optimised for engagement"

    def test_suggest_improvements_document(self) -> None:
        doc = suggest_improvements(_view()).to_dict()
        assert set(doc) == {"tags", "keywords", "seo", "readability", "structure", "engagement", "score"}
        assert doc["readability"]["score"] == 100 - 10 * len(doc["readability"]["improvements"])
        assert doc["seo"]["max_score"] == 100


class TestContentScore:
    @pytest.mark.parametrize(
        ("total", "grade"),
        [(100, "A+"), (90, "A+"), (89, "A"), (80, "A"), (70, "B"), (60, "C"), (50, "D"), (49, "F"), (0, "F")],
    )
    def test_grades(self, total: int, grade: str) -> None:
        assert grade_for(total) == grade

    def test_weighted_total(self) -> None:
        view = _view()
        score = calculate_content_score(view)
        assert score.breakdown == {
            "seo": 10,
            "readability": suggest_readability_improvements(strip_html(CONTENT)).score,
            "structure": 70,
            "engagement": 70,
        }
        expected = sum(score.breakdown[name] * weight for name, weight in SCORE_WEIGHTS.items())
        assert abs(score.total - expected) <= 0.5
        assert score.grade == grade_for(score.total)

    def test_sparse_post_fails(self) -> None:
        score = calculate_content_score(
            _view(content="<p>Hola.</p>", tags=[], category=None, allow_comments=False, reading_time=20)
        )
        assert score.breakdown["seo"] == 0
        assert score.grade == "F"


class TestAiContentService:
    def test_routes_through_published_posts(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        post = make_post()
        service = AiContentService(store, clock, rules.site)
        assert service.metadata(post.slug)["generated_at"] == "2024-06-15T12:00:00.000000Z"
        assert service.markdown(post.slug).startswith(f"# {post.title}\n")
        assert len(service.keywords(post.slug, limit=3)) == 3
        assert service.sentiment(post.slug)["sentiment"] == "positive"
        assert service.structure(post.slug)["has_list"] is True
        assert set(service.entities(post.slug)) == {"technologies", "concepts", "companies", "people", "locations"}
        assert service.readability(post.slug)["word_count"] > 0
        assert isinstance(service.topics(post.slug), list)
        assert service.qa(post.slug)[0]["question"] == f"What is {post.title}?"

    def test_drafts_are_not_found(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        draft = make_post(status="draft")
        with pytest.raises(NotFound):
            AiContentService(store, clock, rules.site).markdown(draft.slug)


class TestEditorialService:
    def test_suggestions_include_drafts(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        draft = make_post("Borrador", status="draft")
        service = AiContentService(store, clock, rules.site)
        doc = service.suggestions(draft.slug)
        assert doc["post_slug"] == "borrador"
        assert doc["generated_at"] == "2024-06-15T12:00:00.000000Z"
        assert set(doc["suggestions"]) >= {"seo", "score"}
        assert service.content_score(draft.slug)["score"]["grade"] == doc["suggestions"]["score"]["grade"]
        assert service.suggest_tags(draft.slug)["current"] == ["python", "fastapi"]
        assert service.suggest_keywords(draft.slug)["post_title"] == "Borrador"

    def test_unknown_slug(self, store: InMemoryDocumentStore, clock: FixedClock, rules: Rules) -> None:
        with pytest.raises(NotFound):
            AiContentService(store, clock, rules.site).suggestions("nada")

    def test_optimize_writes_the_analysis(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        post = make_post()
        clock.advance(hours=2)
        updated = AiContentService(store, clock, rules.site).optimize(post.slug)

        optimization = updated.ai_optimization
        assert optimization.is_optimized is True
        assert optimization.optimized_at == clock.now_utc()
        assert optimization.grade == grade_for(optimization.content_score or 0)
        assert optimization.summary == post.excerpt
        assert optimization.keywords
        assert updated.updated_at == clock.now_utc()

        stored = store.get(POSTS, post.id)
        assert stored is not None
        assert stored["ai_optimization"]["is_optimized"] is True
        assert stored["ai_optimization"]["content_score"] == optimization.content_score
        assert stored["status"] == "published"

    def test_optimize_needs_content(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        rules: Rules,
        make_post: Callable[..., PostView],
    ) -> None:
        post = make_post(status="draft")
        doc = store.get(POSTS, post.id)
        assert doc is not None
        store.replace(POSTS, {**doc, "content": ""})
        with pytest.raises(InvalidInput):
            AiContentService(store, clock, rules.site).optimize(post.slug)
