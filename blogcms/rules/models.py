from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ContactRules(BaseModel):
    telephone: str
    contact_type: str = "customer service"
    area_served: str | None = None
    available_languages: list[str] = Field(default_factory=list)


class SiteRules(BaseModel):
    name: str
    blog_name: str
    description: str
    base_url: str
    language: str = "en-US"
    locale: str = "en_US"
    logo_path: str = "/logo.png"
    favicon_path: str = "/favicon.ico"
    default_image_path: str = "/images/blog-default.jpg"
    twitter_handle: str | None = None
    same_as: list[str] = Field(default_factory=list)
    contact: ContactRules | None = None
    generator: str = "blogcms"
    api_prefix: str = "/api/blog"
    default_author: str = "Editorial Team"

    def url(self, path: str = "") -> str:
        return self.base_url.rstrip("/") + path

    @property
    def blog_url(self) -> str:
        return self.url("/blog")

    @property
    def logo_url(self) -> str:
        return self.url(self.logo_path)

    @property
    def language_code(self) -> str:
        """Primary language subtag ("es" for "es-ES")."""
        return self.language.split("-")[0]


class SeoRules(BaseModel):
    title_max_length: int = 60
    description_max_length: int = 160
    robots_default: str = "index, follow"
    home_title: str
    home_description: str
    home_og_description: str
    category_title_template: str = "{name} - {blog_name}"
    category_description_template: str = "Articles about {name}"
    tag_title_template: str = "#{name} - {blog_name}"
    tag_description_template: str = "Articles tagged with {name}"


class FeedRules(BaseModel):
    default_limit: int = 50
    max_limit: int = 100
    description_max_chars: int = 500


class SitemapRules(BaseModel):
    max_urls: int = 50000
    max_bytes: int = 50 * 1024 * 1024
    news_days: int = 2
    stale_after_days: int = 365
    stale_warning_threshold: int = 50


class RobotsRules(BaseModel):
    user_agent: str = "*"
    allow: list[str] = Field(default_factory=lambda: ["/"])
    disallow: list[str] = Field(default_factory=list)
    sitemaps: list[str] = Field(default_factory=lambda: ["/sitemap.xml"])
    crawl_delay: int | None = 1


class CacheDirectiveRules(BaseModel):
    scope: Literal["public", "private"] = "public"
    max_age: int
    stale_while_revalidate: int | None = None
    immutable: bool = False
    must_revalidate: bool = False
    vary: bool = True
    no_store_headers: bool = False


class PostRules(BaseModel):
    default_page_size: int = 10
    max_page_size: int = 100
    related_limit: int = 3
    popular_limit: int = 5
    popular_days: int = 30
    featured_limit: int = 5
    words_per_minute: int = 220
    slug_max_attempts: int = 10000


class Rules(BaseModel):
    site: SiteRules
    seo: SeoRules
    feeds: FeedRules = Field(default_factory=FeedRules)
    sitemaps: SitemapRules = Field(default_factory=SitemapRules)
    robots: RobotsRules = Field(default_factory=RobotsRules)
    posts: PostRules = Field(default_factory=PostRules)
    cache_policies: dict[str, CacheDirectiveRules] = Field(default_factory=dict, alias="cache")

    model_config = ConfigDict(populate_by_name=True)
