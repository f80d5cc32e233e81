"""Command-line entrypoint: crawl the site and generate sitemaps."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Sequence

from .config import CrawlConfig, GeneratorConfig, RunContext, SitemapConfig, SiteConfig
from .crawl import ArticleCrawler
from .discovery import CategoryDiscoverer, PageFetcher
from .http_client import HttpFetcher
from .paginate import write_paginated
from .parsers import Article
from .parsers.article import SiteArticleParser
from .persistence import ArticleStoreError, load_articles
from .sitemaps import (
    build_news_sitemap,
    build_robots_txt,
    build_sitemap_index,
    build_standard_sitemap,
    build_tag_sitemap,
)
from .tags import group_articles_by_tag
from .writer import SitemapWriter

LOGGER = logging.getLogger(__name__)

INDEX_FILENAME = "sitemap-index.xml"
ROBOTS_FILENAME = "robots.txt"


class NoArticlesError(RuntimeError):
    """Raised when there is nothing to put in the sitemaps."""


@dataclass(slots=True)
class GenerationResult:
    sitemap_files: list[str] = field(default_factory=list)
    index_file: str = INDEX_FILENAME
    robots_file: str = ROBOTS_FILENAME


def crawl_site(
    config: GeneratorConfig,
    *,
    fetcher: PageFetcher | None = None,
    sleep: Callable[[float], None] | None = None,
) -> list[Article]:
    """Discover article URLs, parse each article and persist the collection."""

    config.crawl.validate()
    owned_fetcher: HttpFetcher | None = None
    if fetcher is None:
        fetcher = owned_fetcher = HttpFetcher(config)
    try:
        discoverer = CategoryDiscoverer(config, fetcher, sleep=sleep)
        urls = discoverer.discover()[: config.crawl.max_pages]
        LOGGER.info("Crawling %d article URLs", len(urls))

        parser = SiteArticleParser(default_author=config.site.name)
        crawler = ArticleCrawler(config, fetcher, parser, sleep=sleep)
        return crawler.crawl_and_save(urls)
    finally:
        if owned_fetcher is not None:
            owned_fetcher.close()


def generate_sitemaps(
    articles: Sequence[Article],
    config: GeneratorConfig,
    context: RunContext,
    writer: SitemapWriter | None = None,
) -> GenerationResult:
    if not articles:
        raise NoArticlesError("No articles found; sitemap generation cancelled")

    settings = config.sitemap
    settings.validate()
    writer = writer or SitemapWriter(settings.output_dir)
    result = GenerationResult()

    LOGGER.info("Generating sitemaps for %d articles", len(articles))
    result.sitemap_files.extend(
        write_paginated(
            articles,
            settings.urls_per_file,
            partial(build_standard_sitemap, config=config, context=context),
            "sitemap",
            writer,
        )
    )
    result.sitemap_files.extend(
        write_paginated(
            articles,
            settings.news_urls_per_file,
            partial(build_news_sitemap, config=config, context=context),
            "sitemap-news",
            writer,
        )
    )

    if settings.tag_sitemaps:
        groups = group_articles_by_tag(articles)
        for group in groups.values():
            LOGGER.info("Tag %s: %d articles", group.name, len(group))
        for slug, group in groups.items():
            if len(group) < settings.min_articles_per_tag:
                continue
            LOGGER.info("Generating sitemap for tag %s (%d articles)", group.name, len(group))
            result.sitemap_files.extend(
                write_paginated(
                    group.articles,
                    settings.urls_per_file,
                    partial(build_tag_sitemap, config=config, context=context),
                    f"sitemap-tag-{slug}",
                    writer,
                    slug,
                )
            )

    writer.write_xml(
        build_sitemap_index(result.sitemap_files, config=config, context=context),
        result.index_file,
    )
    writer.write_text(build_robots_txt(config, result.index_file), result.robots_file)
    LOGGER.info("Sitemap generation finished: %d sitemap files", len(result.sitemap_files))
    return result


def run(
    config: GeneratorConfig,
    *,
    from_articles: Path | None = None,
    context: RunContext | None = None,
) -> GenerationResult:
    context = context or RunContext.now()
    if from_articles is not None:
        articles = load_articles(from_articles)
    else:
        articles = crawl_site(config)
    return generate_sitemaps(articles, config, context)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _parse_paths(raw_value: str | None) -> tuple[str, ...] | None:
    if raw_value is None:
        return None
    paths: list[str] = []
    for part in raw_value.split(","):
        path = part.strip()
        if path and not path.startswith("/"):
            path = f"/{path}"
        if path not in paths:
            paths.append(path)
    return tuple(paths)


def build_arg_parser() -> argparse.ArgumentParser:
    defaults = GeneratorConfig()
    parser = argparse.ArgumentParser(description="Crawl the site and generate sitemaps")
    parser.add_argument("--site-name", default=defaults.site.name, help="Publication name")
    parser.add_argument("--domain", default=defaults.site.domain, help="Site origin, e.g. https://example.com")
    parser.add_argument("--language", default=defaults.site.language, help="News sitemap language code")
    parser.add_argument("--output-dir", type=Path, default=defaults.sitemap.output_dir, help="Sitemap output directory")
    parser.add_argument(
        "--public-path",
        default=defaults.sitemap.public_path,
        help="URL path the generated sitemaps are served from (default: /sitemaps)",
    )
    parser.add_argument(
        "--categories",
        type=str,
        default=None,
        help="Comma-separated category page paths to crawl (an empty entry is the home page)",
    )
    parser.add_argument("--max-pages", type=int, default=defaults.crawl.max_pages, help="Maximum articles to crawl")
    parser.add_argument(
        "--request-delay",
        type=float,
        default=defaults.crawl.request_delay,
        help="Seconds to wait after every request (default: 0.3)",
    )
    parser.add_argument("--timeout", type=float, default=defaults.crawl.request_timeout, help="Per-request timeout in seconds")
    parser.add_argument("--no-extract-tags", action="store_true", help="Do not collect tag links from category pages")
    parser.add_argument("--no-explore-tags", action="store_true", help="Do not crawl discovered tag pages")
    parser.add_argument("--max-tags", type=int, default=defaults.crawl.max_tags, help="Maximum tag pages to explore")
    parser.add_argument(
        "--articles-file",
        type=Path,
        default=defaults.crawl.articles_file,
        help="Where the crawled article collection is saved",
    )
    parser.add_argument(
        "--from-articles",
        type=Path,
        default=None,
        help="Skip crawling and generate sitemaps from a saved article collection",
    )
    parser.add_argument("--failure-log", type=Path, default=None, help="Append NDJSON records for failed article fetches")
    parser.add_argument("--urls-per-file", type=int, default=defaults.sitemap.urls_per_file, help="URL cap per sitemap file")
    parser.add_argument(
        "--news-urls-per-file",
        type=int,
        default=defaults.sitemap.news_urls_per_file,
        help="Article cap per news sitemap file",
    )
    parser.add_argument("--max-news", type=int, default=defaults.sitemap.max_news_articles, help="Maximum news articles")
    parser.add_argument("--no-news-time", action="store_true", help="Keep news publication dates date-only")
    parser.add_argument("--no-tag-sitemaps", action="store_true", help="Skip per-tag sitemaps")
    parser.add_argument(
        "--min-articles-per-tag",
        type=int,
        default=defaults.sitemap.min_articles_per_tag,
        help="Minimum articles before a tag gets its own sitemap",
    )
    parser.add_argument(
        "--strict-news-window",
        action="store_true",
        help="Only include articles from the last 48 hours in the news sitemap",
    )
    parser.add_argument(
        "--no-force-news",
        action="store_true",
        help="Leave the news sitemap empty when no article qualifies",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level (default: INFO)")
    return parser


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    crawl = CrawlConfig(
        max_pages=args.max_pages,
        request_delay=max(0.0, args.request_delay),
        request_timeout=args.timeout,
        extract_tags=not args.no_extract_tags,
        explore_tags=not args.no_explore_tags,
        max_tags=args.max_tags,
        articles_file=args.articles_file,
        failure_log=args.failure_log,
    )
    categories = _parse_paths(args.categories)
    if categories is not None:
        crawl.category_pages = categories
    crawl.validate()

    sitemap = SitemapConfig(
        output_dir=args.output_dir,
        public_path=args.public_path,
        urls_per_file=args.urls_per_file,
        news_urls_per_file=args.news_urls_per_file,
        max_news_articles=args.max_news,
        news_include_time=not args.no_news_time,
        tag_sitemaps=not args.no_tag_sitemaps,
        min_articles_per_tag=args.min_articles_per_tag,
        strict_news_window=args.strict_news_window,
        force_news=not args.no_force_news,
    )
    sitemap.validate()

    site = SiteConfig(
        name=args.site_name,
        domain=args.domain.rstrip("/"),
        language=args.language,
    )
    return GeneratorConfig(site=site, crawl=crawl, sitemap=sitemap)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = build_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        result = run(config, from_articles=args.from_articles)
    except (NoArticlesError, ArticleStoreError) as exc:
        LOGGER.error("%s", exc)
        return 1

    LOGGER.info(
        "Generated %d sitemaps, %s and %s in %s",
        len(result.sitemap_files),
        result.index_file,
        result.robots_file,
        config.sitemap.output_dir,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
