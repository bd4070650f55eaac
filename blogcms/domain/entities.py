from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, Field, PlainSerializer, computed_field

# --- Enums / Literals ---
PostStatus = Literal["draft", "published", "archived"]
ContentFormat = Literal["html", "markdown"]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_utc(value: datetime) -> str:
    """Fixed-width UTC form, so stored timestamps sort lexicographically."""
    return _as_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


UtcDatetime = Annotated[
    datetime,
    AfterValidator(_as_utc),
    PlainSerializer(format_utc, return_type=str, when_used="json"),
]


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return uuid4().hex


# --- Shared value objects ---


class ImageRef(BaseModel):
    url: str = ""
    alt: str = ""
    caption: str = ""
    width: int | None = None
    height: int | None = None


class TaxonomySeo(BaseModel):
    meta_title: str | None = None
    meta_description: str | None = None


# --- Posts ---


class PostSeo(BaseModel):
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = Field(default_factory=list)
    focus_keyphrase: str | None = None
    og_title: str | None = None
    og_description: str | None = None
    og_image: str | None = None
    og_type: str | None = None
    twitter_card: str | None = None
    twitter_title: str | None = None
    twitter_description: str | None = None
    twitter_image: str | None = None
    canonical_url: str | None = None
    robots: str | None = None


class FaqItem(BaseModel):
    question: str
    answer: str


class AiOptimization(BaseModel):
    keywords: list[str] = Field(default_factory=list)
    seo_score: int = 0
    faq_items: list[FaqItem] = Field(default_factory=list)
    summary: str | None = None
    is_optimized: bool = False
    # Written by the optimizer
    topics: list[str] = Field(default_factory=list)
    expertise_level: str | None = None
    content_score: int | None = None
    grade: str | None = None
    optimized_at: UtcDatetime | None = None


class ShareCounts(BaseModel):
    facebook: int = 0
    twitter: int = 0
    linkedin: int = 0

    @property
    def total(self) -> int:
        return self.facebook + self.twitter + self.linkedin


class PostAnalytics(BaseModel):
    views: int = 0
    likes: int = 0
    bookmarks: int = 0
    shares: ShareCounts = Field(default_factory=ShareCounts)


class BlogPost(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""
    content_format: ContentFormat = "html"
    featured_image: ImageRef | None = None

    author_id: str | None = None
    category_id: str | None = None
    tag_ids: list[str] = Field(default_factory=list)

    status: PostStatus = "draft"
    # Set once, on first publish. Unpublish keeps it.
    published_at: UtcDatetime | None = None

    is_featured: bool = False
    allow_comments: bool = True
    reading_time: int = 1

    seo: PostSeo = Field(default_factory=PostSeo)
    ai_optimization: AiOptimization = Field(default_factory=AiOptimization)
    analytics: PostAnalytics = Field(default_factory=PostAnalytics)

    created_at: UtcDatetime = Field(default_factory=utcnow)
    updated_at: UtcDatetime = Field(default_factory=utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_published(self) -> bool:
        return self.status == "published"


# --- Taxonomy ---


class BlogCategory(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    slug: str
    description: str = ""
    image: ImageRef | None = None
    color: str = "#8B5CF6"
    parent_id: str | None = None
    order: int = 0
    is_active: bool = True
    post_count: int = 0
    seo: TaxonomySeo = Field(default_factory=TaxonomySeo)
    created_at: UtcDatetime = Field(default_factory=utcnow)
    updated_at: UtcDatetime = Field(default_factory=utcnow)


class BlogTag(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    slug: str
    description: str = ""
    color: str = "#6B7280"
    is_active: bool = True
    usage_count: int = 0
    seo: TaxonomySeo = Field(default_factory=TaxonomySeo)
    created_at: UtcDatetime = Field(default_factory=utcnow)
    updated_at: UtcDatetime = Field(default_factory=utcnow)


# --- Authors (owned by the external identity provider) ---


class Author(BaseModel):
    id: str = Field(default_factory=new_id)
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: str = ""
    username: str | None = None
    public_profile: bool = True
    bio: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# --- Populated views ---


class PostView(BlogPost):
    """A post with its category, tags and author resolved."""

    category: BlogCategory | None = None
    tags: list[BlogTag] = Field(default_factory=list)
    author: Author | None = None

    @property
    def tag_names(self) -> list[str]:
        return [t.name for t in self.tags]

    @property
    def author_name(self) -> str | None:
        return self.author.full_name if self.author else None
