"""
Heuristic semantic analysis of post content.

Word-list and regex heuristics only: keyword scoring, entity and topic
spotting, sentiment, readability (Flesch, Spanish adaptation), structure
and keyword density. Lexicons cover Spanish and English content.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any

from blogcms.core.services.text import split_sentences, strip_html

# --- Lexicons ---

STOPWORDS: frozenset[str] = frozenset(
    {
        # Spanish
        "el", "la", "de", "que", "y", "a", "en", "un", "ser", "se", "no", "haber",
        "por", "con", "su", "para", "como", "estar", "tener", "le", "lo", "todo",
        "pero", "más", "hacer", "o", "poder", "decir", "este", "ir", "otro", "ese",
        "si", "me", "ya", "ver", "porque", "dar", "cuando", "él", "muy",
        "sin", "vez", "mucho", "saber", "qué", "sobre", "mi", "alguno", "mismo",
        "yo", "también", "hasta", "año", "dos", "querer", "entre", "así", "primero",
        "desde", "grande", "eso", "ni", "nos", "llegar", "pasar", "tiempo", "ella",
        "sí", "día", "uno", "bien", "poco", "deber", "entonces", "poner", "cosa",
        "tanto", "hombre", "parecer", "nuestro", "tan", "donde", "ahora", "parte",
        "después", "vida", "quedar", "siempre", "creer", "hablar", "llevar", "dejar",
        "nada", "cada", "seguir", "menos", "nuevo", "encontrar", "algo", "solo",
        "estos", "trabajar", "primera", "puede", "todos", "ante", "bajo", "cabe",
        "contra", "durante", "mediante", "según", "siendo", "tal", "tras", "cual",
        "cuales", "quien", "quienes", "esta", "estas", "esto", "pueden", "tiene",
        # English
        "about", "after", "also", "been", "before", "being", "between", "both",
        "could", "does", "each", "even", "from", "have", "here", "into", "just",
        "like", "make", "many", "more", "most", "much", "must", "only", "other",
        "over", "same", "should", "some", "such", "than", "that", "their", "them",
        "then", "there", "these", "they", "this", "those", "through", "very",
        "want", "well", "were", "what", "when", "where", "which", "while", "will",
        "with", "would", "your", "you're", "it's",
    }
)

TECHNOLOGIES: tuple[str, ...] = (
    "javascript", "typescript", "python", "java", "react", "vue", "angular",
    "node", "express", "mongodb", "sql", "api", "rest", "graphql",
    "html", "css", "sass", "webpack", "docker", "kubernetes", "aws",
    "azure", "git", "github", "vscode", "npm", "yarn", "redux", "nextjs",
)

TOPICS: dict[str, tuple[str, ...]] = {
    "web-development": ("desarrollo", "development", "web", "frontend", "backend", "fullstack", "html", "css", "javascript"),
    "programming": ("código", "code", "programación", "programming", "algoritmo", "algorithm", "función", "function", "variable", "clase", "class", "objeto", "object"),
    "databases": ("base de datos", "database", "sql", "mongodb", "query", "tabla", "table", "colección", "collection", "modelo", "model"),
    "design": ("diseño", "design", "ui", "ux", "interfaz", "interface", "experiencia", "experience", "usuario", "user", "visual"),
    "devops": ("devops", "docker", "kubernetes", "ci/cd", "deploy", "servidor", "server", "cloud"),
    "security": ("seguridad", "security", "autenticación", "authentication", "autorización", "authorization", "encriptación", "encryption", "token", "jwt"),
    "testing": ("test", "testing", "prueba", "qa", "unitario", "unit", "integración", "integration"),
    "api": ("api", "rest", "endpoint", "request", "response", "http", "json"),
}

POSITIVE_WORDS: tuple[str, ...] = (
    "bueno", "excelente", "genial", "increíble", "mejor", "perfecto", "útil",
    "eficiente", "rápido", "fácil", "simple", "innovador", "moderno", "potente",
    "robusto", "flexible", "escalable", "optimizado", "efectivo", "éxito",
    "good", "excellent", "great", "amazing", "better", "best", "perfect", "useful",
    "efficient", "fast", "easy", "innovative", "modern", "powerful", "robust",
    "scalable", "optimized", "effective", "success",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "malo", "peor", "difícil", "complicado", "lento", "problema", "error",
    "fallo", "defecto", "vulnerable", "obsoleto", "limitado", "costoso",
    "bad", "worse", "worst", "difficult", "complicated", "slow", "problem",
    "failure", "defect", "obsolete", "limited", "expensive",
)

NEUTRAL_WORDS: tuple[str, ...] = (
    "función", "método", "clase", "variable", "parámetro", "configuración",
    "implementación", "estructura", "sistema", "proceso",
    "function", "method", "class", "parameter", "configuration",
    "implementation", "structure", "system", "process",
)

SENTIMENT_THRESHOLD = 0.15
OPTIMAL_DENSITY = 0.03

_NON_WORD_RE = re.compile(r"[^\w\s]")
_VOWEL_RE = re.compile(r"[aeiouáéíóúü]")
_VOWEL_PAIR_RE = re.compile(r"[aeiouáéíóúü]{2}")
# Capitalised runs that do not open the text or follow ". "
_CONCEPT_RE = re.compile(r"(?<!^)(?<!\. )[A-ZÁÉÍÓÚÑ][a-záéíóúñü]+(?:\s+[A-ZÁÉÍÓÚÑ][a-záéíóúñü]+)*")


# --- Results ---


@dataclass(frozen=True)
class Keyword:
    word: str
    frequency: int
    relevance: float
    score: float


@dataclass(frozen=True)
class Entity:
    name: str
    occurrences: int


@dataclass
class Entities:
    technologies: list[Entity] = field(default_factory=list)
    concepts: list[Entity] = field(default_factory=list)
    companies: list[Entity] = field(default_factory=list)
    people: list[Entity] = field(default_factory=list)
    locations: list[Entity] = field(default_factory=list)


@dataclass(frozen=True)
class Topic:
    name: str
    weight: int
    confidence: float


@dataclass(frozen=True)
class Sentiment:
    sentiment: str
    score: float
    positive_count: int
    negative_count: int
    neutral_count: int
    confidence: float


@dataclass(frozen=True)
class Readability:
    reading_level: str
    flesch_score: float
    word_count: int
    sentence_count: int
    avg_word_length: float
    avg_sentence_length: float
    avg_syllables_per_word: float


@dataclass(frozen=True)
class Structure:
    has_headings: bool
    heading_count: int
    has_list: bool
    list_count: int
    has_images: bool
    image_count: int
    has_links: bool
    link_count: int
    has_code: bool
    code_block_count: int
    paragraph_count: int
    score: int
    quality: str


@dataclass(frozen=True)
class KeywordDensity:
    keyword: str
    frequency: int
    density: str
    is_optimal: bool


@dataclass(frozen=True)
class KeyPhrase:
    phrase: str
    frequency: int
    relevance: float


@dataclass
class ContentAnalysis:
    keywords: list[Keyword]
    entities: Entities
    topics: list[Topic]
    sentiment: Sentiment
    readability: Readability
    structure: Structure
    density: list[KeywordDensity]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# --- Helpers ---


def _tokens(text: str, min_length: int) -> list[str]:
    return [w for w in _NON_WORD_RE.sub(" ", text.lower()).split() if len(w) > min_length]


def _count_prefixed(lower_text: str, word: str) -> int:
    """Occurrences of ``word`` starting at a word boundary (so "error" also counts "errores")."""
    return len(re.findall(r"\b" + re.escape(word), lower_text))


def _count_whole(lower_text: str, word: str) -> int:
    return len(re.findall(r"\b" + re.escape(word) + r"\b", lower_text))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# --- Keywords ---


def _relevance(word: str, frequency: int, total_words: int) -> float:
    tf = frequency / total_words
    length_bonus = min(len(word) / 15, 1)
    common_penalty = 0.5 if frequency > total_words * 0.05 else 1
    return tf * 100 * length_bonus * common_penalty


def extract_keywords(text: str, max_keywords: int = 20) -> list[Keyword]:
    """Words longer than 3 characters, stopwords removed, ranked by frequency times relevance."""
    words = _tokens(text, 3)
    if not words:
        return []
    counts = Counter(w for w in words if w not in STOPWORDS)
    keywords = []
    for word, count in counts.items():
        relevance = _relevance(word, count, len(words))
        keywords.append(Keyword(word=word, frequency=count, relevance=relevance, score=count * relevance))
    keywords.sort(key=lambda k: k.score, reverse=True)
    return keywords[:max_keywords]


# --- Entities / topics ---


def extract_entities(text: str) -> Entities:
    entities = Entities()
    lower = text.lower()
    for tech in TECHNOLOGIES:
        occurrences = _count_whole(lower, tech)
        if occurrences:
            entities.technologies.append(Entity(name=tech, occurrences=occurrences))

    concepts = Counter(match.group(0) for match in _CONCEPT_RE.finditer(text))
    for name, count in concepts.items():
        if count > 1 and len(name) > 3:
            entities.concepts.append(Entity(name=name, occurrences=count))
    return entities


def extract_topics(text: str) -> list[Topic]:
    lower = text.lower()
    topics = []
    for name, keywords in TOPICS.items():
        weight = sum(_count_prefixed(lower, kw) for kw in keywords)
        if weight > 0:
            topics.append(Topic(name=name, weight=weight, confidence=min(weight / 10, 1)))
    topics.sort(key=lambda t: t.weight, reverse=True)
    return topics[:5]


# --- Sentiment ---


def analyze_sentiment(text: str) -> Sentiment:
    lower = text.lower()
    positive = sum(_count_prefixed(lower, w) for w in POSITIVE_WORDS)
    negative = sum(_count_prefixed(lower, w) for w in NEGATIVE_WORDS)
    neutral = sum(_count_prefixed(lower, w) for w in NEUTRAL_WORDS)
    total = positive + negative + neutral

    label = "neutral"
    score = 0.0
    if total > 0:
        score = (positive - negative) / total
        if score > SENTIMENT_THRESHOLD:
            label = "positive"
        elif score < -SENTIMENT_THRESHOLD:
            label = "negative"

    return Sentiment(
        sentiment=label,
        score=score,
        positive_count=positive,
        negative_count=negative,
        neutral_count=neutral,
        confidence=min(total / 20, 1),
    )


# --- Readability ---


def count_syllables(text: str) -> int:
    """Vowel groups, with adjacent vowel pairs counted as half a syllable less."""
    total = 0.0
    for word in text.lower().split():
        total += len(_VOWEL_RE.findall(word)) - 0.5 * len(_VOWEL_PAIR_RE.findall(word))
    return max(1, _round_half_up(total))


def reading_level_for(score: float) -> str:
    if score >= 80:
        return "very-easy"
    if score >= 70:
        return "easy"
    if score >= 60:
        return "fairly-easy"
    if score >= 50:
        return "intermediate"
    if score >= 30:
        return "difficult"
    return "very-difficult"


def analyze_readability(text: str) -> Readability:
    words = text.split()
    if not words:
        return Readability(
            reading_level=reading_level_for(0),
            flesch_score=0.0,
            word_count=0,
            sentence_count=0,
            avg_word_length=0.0,
            avg_sentence_length=0.0,
            avg_syllables_per_word=0.0,
        )

    sentence_count = len(split_sentences(text))
    word_count = len(words)
    avg_word_length = sum(len(w) for w in words) / word_count
    avg_sentence_length = word_count / max(sentence_count, 1)
    avg_syllables = count_syllables(text) / word_count

    flesch = 206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables
    return Readability(
        reading_level=reading_level_for(flesch),
        flesch_score=max(0.0, min(100.0, flesch)),
        word_count=word_count,
        sentence_count=sentence_count,
        avg_word_length=round(avg_word_length, 1),
        avg_sentence_length=round(avg_sentence_length, 1),
        avg_syllables_per_word=round(avg_syllables, 1),
    )


# --- Structure ---


def _count_tags(markup: str, pattern: str) -> int:
    return len(re.findall(pattern, markup, re.IGNORECASE))


def analyze_structure(markup: str) -> Structure:
    headings = _count_tags(markup, r"<h[1-6]\b[^>]*>")
    lists = _count_tags(markup, r"<(?:ul|ol)\b[^>]*>")
    images = _count_tags(markup, r"<img\b[^>]*>")
    links = _count_tags(markup, r"<a\b[^>]*href")
    code = _count_tags(markup, r"<(?:pre|code)\b[^>]*>")
    paragraphs = _count_tags(markup, r"<p\b[^>]*>")

    score = 0
    if headings:
        score += 25
    if lists:
        score += 20
    if images:
        score += 15
    if links:
        score += 15
    if paragraphs > 3:
        score += 25

    if score >= 80:
        quality = "excellent"
    elif score >= 60:
        quality = "good"
    elif score >= 40:
        quality = "fair"
    else:
        quality = "poor"

    return Structure(
        has_headings=headings > 0,
        heading_count=headings,
        has_list=lists > 0,
        list_count=lists,
        has_images=images > 0,
        image_count=images,
        has_links=links > 0,
        link_count=links,
        has_code=code > 0,
        code_block_count=code,
        paragraph_count=paragraphs,
        score=score,
        quality=quality,
    )


# --- Density / phrases / similarity ---


def analyze_keyword_density(text: str) -> list[KeywordDensity]:
    total = len(text.split())
    if not total:
        return []
    return [
        KeywordDensity(
            keyword=kw.word,
            frequency=kw.frequency,
            density=f"{kw.frequency / total * 100:.2f}%",
            is_optimal=kw.frequency / total <= OPTIMAL_DENSITY,
        )
        for kw in extract_keywords(text, 10)
    ]


def extract_key_phrases(text: str, n: int = 2) -> list[KeyPhrase]:
    """Repeated n-grams of words longer than two characters."""
    words = _tokens(text, 2)
    windows = len(words) - n + 1
    if windows <= 0:
        return []
    counts = Counter(" ".join(words[i : i + n]) for i in range(windows))
    phrases = [
        KeyPhrase(phrase=phrase, frequency=count, relevance=count / windows)
        for phrase, count in counts.items()
        if count > 1
    ]
    phrases.sort(key=lambda p: p.frequency, reverse=True)
    return phrases[:15]


def calculate_similarity(text_a: str, text_b: str) -> float:
    """Jaccard similarity of the two texts' top keywords."""
    a = {k.word for k in extract_keywords(text_a, 20)}
    b = {k.word for k in extract_keywords(text_b, 20)}
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def analyze_content(markup: str, max_keywords: int = 20) -> ContentAnalysis:
    text = strip_html(markup)
    return ContentAnalysis(
        keywords=extract_keywords(text, max_keywords),
        entities=extract_entities(text),
        topics=extract_topics(text),
        sentiment=analyze_sentiment(text),
        readability=analyze_readability(text),
        structure=analyze_structure(markup or ""),
        density=analyze_keyword_density(text),
    )
