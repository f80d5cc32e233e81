"""Configuration shared by the crawler and the sitemap generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

DEFAULT_SITE_NAME = "UniversLivebox"
DEFAULT_DOMAIN = "https://universlivebox.com"
DEFAULT_LANGUAGE = "fr"
DEFAULT_USER_AGENT = "Mozilla/5.0 (UniversLivebox Sitemap Generator; contact@universlivebox.com)"

DEFAULT_ARTICLES_FILE = Path("data/articles.json")
DEFAULT_OUTPUT_DIR = Path("sitemaps")

DEFAULT_CATEGORY_PAGES: tuple[str, ...] = (
    "",  # home page
    "/orange",
    "/free",
    "/bouygues",
    "/sfr",
    "/fibre",
    "/xgs-pon",
    "/4g-5g",
    "/cybersecurite",
    "/tutos",
    "/detente",
    "/bons-plans",
)

CHANGE_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")


@dataclass(frozen=True, slots=True)
class StaticPage:
    path: str
    changefreq: str
    priority: str

    def __post_init__(self) -> None:
        if self.changefreq not in CHANGE_FREQUENCIES:
            raise ValueError(f"Unsupported change frequency '{self.changefreq}' for {self.path}")


DEFAULT_STATIC_PAGES: tuple[StaticPage, ...] = (
    StaticPage("/", "daily", "1.0"),
    StaticPage("/orange", "daily", "0.9"),
    StaticPage("/free", "daily", "0.9"),
    StaticPage("/bouygues", "daily", "0.9"),
    StaticPage("/sfr", "daily", "0.9"),
    StaticPage("/fibre", "daily", "0.9"),
    StaticPage("/xgs-pon", "weekly", "0.8"),
    StaticPage("/4g-5g", "weekly", "0.8"),
    StaticPage("/cybersecurite", "weekly", "0.8"),
    StaticPage("/tutos", "weekly", "0.8"),
    StaticPage("/detente", "weekly", "0.8"),
    StaticPage("/bons-plans", "weekly", "0.8"),
    StaticPage("/mentions-legales", "yearly", "0.3"),
    StaticPage("/protection-donnees", "yearly", "0.3"),
)


@dataclass(slots=True)
class SiteConfig:
    name: str = DEFAULT_SITE_NAME
    domain: str = DEFAULT_DOMAIN
    language: str = DEFAULT_LANGUAGE
    user_agent: str = DEFAULT_USER_AGENT

    def absolute_url(self, path: str) -> str:
        """Prefix a site-relative path with the configured domain."""

        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.domain}{path}"


@dataclass(slots=True)
class CrawlConfig:
    """Discovery and crawl controls."""

    category_pages: tuple[str, ...] = DEFAULT_CATEGORY_PAGES
    max_pages: int = 50
    request_delay: float = 0.3
    request_timeout: float = 10.0
    extract_tags: bool = True
    explore_tags: bool = True
    max_tags: int = 10
    articles_file: Path = DEFAULT_ARTICLES_FILE
    failure_log: Optional[Path] = None

    def validate(self) -> None:
        if self.max_pages < 0:
            raise ValueError("max_pages must not be negative")
        if self.max_tags < 0:
            raise ValueError("max_tags must not be negative")


@dataclass(slots=True)
class SitemapConfig:
    """Sitemap generation controls."""

    output_dir: Path = DEFAULT_OUTPUT_DIR
    public_path: str = "/sitemaps"
    urls_per_file: int = 50000
    news_urls_per_file: int = 1000
    max_news_articles: int = 1000
    news_include_time: bool = True
    tag_sitemaps: bool = True
    min_articles_per_tag: int = 3
    strict_news_window: bool = False
    force_news: bool = True
    static_pages: tuple[StaticPage, ...] = DEFAULT_STATIC_PAGES

    def validate(self) -> None:
        if self.urls_per_file <= 0:
            raise ValueError("urls_per_file must be positive")
        if self.news_urls_per_file <= 0:
            raise ValueError("news_urls_per_file must be positive")
        if self.max_news_articles < 0:
            raise ValueError("max_news_articles must not be negative")


@dataclass(slots=True)
class GeneratorConfig:
    site: SiteConfig = field(default_factory=SiteConfig)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    sitemap: SitemapConfig = field(default_factory=SitemapConfig)

    def sitemap_url(self, filename: str) -> str:
        """Return the public URL a generated sitemap file is served from."""

        public_path = self.sitemap.public_path.rstrip("/")
        return f"{self.site.domain}{public_path}/{filename}"


@dataclass(frozen=True, slots=True)
class RunContext:
    """Values fixed once per run and shared by every builder."""

    generated_at: datetime

    @classmethod
    def now(cls) -> "RunContext":
        return cls(generated_at=datetime.now(timezone.utc).replace(microsecond=0))

    @property
    def lastmod(self) -> str:
        return self.generated_at.isoformat()
