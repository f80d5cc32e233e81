"""Build sitemap, news sitemap and sitemap index documents.

Builders are pure: they return an ``xml.etree.ElementTree.Element`` tree and
leave rendering and persistence to :mod:`sitemapper.writer`.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence
from xml.etree import ElementTree as ET

from .config import GeneratorConfig, RunContext
from .parsers import Article

LOGGER = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
NEWS_NS = "http://www.google.com/schemas/sitemap-news/0.9"

ARTICLE_CHANGEFREQ = "monthly"
ARTICLE_PRIORITY = "0.6"
TAG_PAGE_CHANGEFREQ = "weekly"
TAG_PAGE_PRIORITY = "0.7"
TAG_ARTICLE_PRIORITY = "0.5"

NEWS_WINDOW = timedelta(days=2)
NEWS_GENRES = "PressRelease, Blog"
NEWS_DEFAULT_TIME = "T12:00:00+00:00"


def _text_child(parent: ET.Element, tag: str, text: str) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = text
    return child


def _add_url(
    urlset: ET.Element,
    loc: str,
    *,
    lastmod: str | None = None,
    changefreq: str | None = None,
    priority: str | None = None,
) -> ET.Element:
    url = ET.SubElement(urlset, "url")
    _text_child(url, "loc", loc)
    if lastmod:
        _text_child(url, "lastmod", lastmod)
    if changefreq:
        _text_child(url, "changefreq", changefreq)
    if priority:
        _text_child(url, "priority", priority)
    return url


def build_standard_sitemap(
    articles: Sequence[Article],
    *,
    config: GeneratorConfig,
    context: RunContext,
) -> ET.Element:
    urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS})
    for page in config.sitemap.static_pages:
        _add_url(
            urlset,
            config.site.absolute_url(page.path),
            lastmod=context.lastmod,
            changefreq=page.changefreq,
            priority=page.priority,
        )
    for article in articles:
        _add_url(
            urlset,
            config.site.absolute_url(article.url),
            lastmod=article.publish_date.isoformat(),
            changefreq=ARTICLE_CHANGEFREQ,
            priority=ARTICLE_PRIORITY,
        )
    return urlset


def build_tag_sitemap(
    articles: Sequence[Article],
    tag: str,
    *,
    config: GeneratorConfig,
    context: RunContext,
) -> ET.Element:
    urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS})
    _add_url(
        urlset,
        config.site.absolute_url(f"/tag/{tag}"),
        lastmod=context.lastmod,
        changefreq=TAG_PAGE_CHANGEFREQ,
        priority=TAG_PAGE_PRIORITY,
    )
    for article in articles:
        _add_url(
            urlset,
            config.site.absolute_url(article.url),
            lastmod=article.publish_date.isoformat(),
            changefreq=ARTICLE_CHANGEFREQ,
            priority=TAG_ARTICLE_PRIORITY,
        )
    return urlset


def is_within_news_window(article: Article, now: datetime) -> bool:
    published = datetime.combine(article.publish_date, time.min, tzinfo=timezone.utc)
    return now - published < NEWS_WINDOW


def select_news_articles(
    articles: Sequence[Article],
    *,
    config: GeneratorConfig,
    now: datetime,
) -> list[Article]:
    """Pick the articles eligible for the news sitemap.

    Strict mode keeps only articles published within the last 48 hours;
    otherwise the newest articles come first. Both are capped at
    ``max_news_articles``. When nothing qualifies and ``force_news`` is set,
    the first articles of the collection are used regardless of age.
    """

    settings = config.sitemap
    if settings.strict_news_window:
        selected = [article for article in articles if is_within_news_window(article, now)]
    else:
        selected = sorted(articles, key=lambda article: article.publish_date, reverse=True)
    selected = selected[: settings.max_news_articles]

    LOGGER.info("Including %d articles in the news sitemap", len(selected))
    if not selected and settings.force_news:
        LOGGER.info("No recent articles; including older articles in the news sitemap")
        selected = list(articles[: settings.max_news_articles])
    return selected


def format_news_date(value: date, include_time: bool) -> str:
    if include_time:
        return f"{value.isoformat()}{NEWS_DEFAULT_TIME}"
    return value.isoformat()


def news_keywords(article: Article, default_author: str) -> tuple[list[str], bool]:
    """Return the keyword list and whether an author keyword was added."""

    keywords = list(article.tags)
    has_author = bool(article.author) and article.author != default_author
    if has_author:
        keywords.append(f"author:{article.author}")
    return keywords, has_author


def build_news_sitemap(
    articles: Sequence[Article],
    *,
    config: GeneratorConfig,
    context: RunContext,
) -> ET.Element:
    urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS, "xmlns:news": NEWS_NS})
    site = config.site

    for article in select_news_articles(articles, config=config, now=context.generated_at):
        url = _add_url(urlset, site.absolute_url(article.url))
        news = ET.SubElement(url, "news:news")
        publication = ET.SubElement(news, "news:publication")
        _text_child(publication, "news:name", site.name)
        _text_child(publication, "news:language", site.language)
        _text_child(
            news,
            "news:publication_date",
            format_news_date(article.publish_date, config.sitemap.news_include_time),
        )
        _text_child(news, "news:title", article.title)

        keywords, has_author = news_keywords(article, site.name)
        if keywords:
            _text_child(news, "news:keywords", ", ".join(keywords))
        if has_author:
            _text_child(news, "news:genres", NEWS_GENRES)
    return urlset


def build_sitemap_index(
    filenames: Sequence[str],
    *,
    config: GeneratorConfig,
    context: RunContext,
) -> ET.Element:
    index = ET.Element("sitemapindex", {"xmlns": SITEMAP_NS})
    for filename in filenames:
        sitemap = ET.SubElement(index, "sitemap")
        _text_child(sitemap, "loc", config.sitemap_url(filename))
        _text_child(sitemap, "lastmod", context.lastmod)
    return index


def build_robots_txt(config: GeneratorConfig, index_filename: str = "sitemap-index.xml") -> str:
    return (
        "User-agent: *\n"
        "Allow: /\n"
        "\n"
        "# Sitemaps\n"
        f"Sitemap: {config.sitemap_url(index_filename)}\n"
    )
