"""Discover article URLs by walking category and tag listing pages."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Protocol, Sequence

from .config import GeneratorConfig
from .http_client import HttpFetchError
from .parsers.links import extract_links

LOGGER = logging.getLogger(__name__)


class PageFetcher(Protocol):
    def fetch_html(self, url: str) -> str:
        ...


class OrderedUrlSet:
    """Insertion-ordered set of URLs."""

    def __init__(self, urls: Iterable[str] = ()) -> None:
        self._items: dict[str, None] = {}
        self.update(urls)

    def add(self, url: str) -> bool:
        """Add a URL, returning False when it was already present."""

        if url in self._items:
            return False
        self._items[url] = None
        return True

    def update(self, urls: Iterable[str]) -> int:
        return sum(1 for url in urls if self.add(url))

    def __contains__(self, url: object) -> bool:
        return url in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self, limit: int | None = None) -> list[str]:
        urls = list(self._items)
        if limit is not None:
            return urls[:limit]
        return urls


@dataclass(slots=True)
class DiscoveryStats:
    pages_fetched: int = 0
    pages_failed: int = 0
    tags_found: int = 0
    tags_explored: int = 0
    duplicate_links: int = 0


class CategoryDiscoverer:
    """Collect article URLs from the configured category pages and, optionally, tag pages."""

    def __init__(
        self,
        config: GeneratorConfig,
        fetcher: PageFetcher,
        *,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._sleep = sleep or time.sleep
        self.stats = DiscoveryStats()

    def discover(self) -> list[str]:
        """Return unique site-relative article URLs in first-discovery order."""

        self.stats = DiscoveryStats()
        crawl = self._config.crawl
        crawl.validate()
        article_urls = OrderedUrlSet()
        tag_urls = OrderedUrlSet()

        LOGGER.info("Extracting article URLs from %d category pages", len(crawl.category_pages))
        self._walk(crawl.category_pages, article_urls, tag_urls if crawl.extract_tags else None)
        self.stats.tags_found = len(tag_urls)

        if crawl.explore_tags and tag_urls:
            selected = tag_urls.to_list(crawl.max_tags)
            if len(selected) < len(tag_urls):
                LOGGER.info("Limiting tag exploration to %d of %d discovered tags", len(selected), len(tag_urls))
            else:
                LOGGER.info("Exploring %d discovered tag pages", len(selected))
            self.stats.tags_explored = len(selected)
            self._walk(selected, article_urls, None)

        LOGGER.info(
            "Discovery finished: urls=%d pages_fetched=%d pages_failed=%d tags_found=%d",
            len(article_urls),
            self.stats.pages_fetched,
            self.stats.pages_failed,
            self.stats.tags_found,
        )
        return article_urls.to_list()

    def _walk(
        self,
        paths: Sequence[str],
        article_urls: OrderedUrlSet,
        tag_urls: OrderedUrlSet | None,
    ) -> None:
        domain = self._config.site.domain
        for path in paths:
            url = self._config.site.absolute_url(path)
            LOGGER.info("Extracting URLs from %s", url)
            try:
                html = self._fetcher.fetch_html(url)
            except HttpFetchError as exc:
                self.stats.pages_failed += 1
                LOGGER.warning("Failed to extract links from %s: %s", url, exc)
            else:
                self.stats.pages_fetched += 1
                links = extract_links(html, domain, include_tags=tag_urls is not None)
                added = article_urls.update(links.article_urls)
                self.stats.duplicate_links += len(links.article_urls) - added
                if tag_urls is not None:
                    tag_urls.update(links.tag_urls)
                LOGGER.debug("%s: %d new article links", url, added)
            self._pause()

    def _pause(self) -> None:
        delay = self._config.crawl.request_delay
        if delay > 0:
            self._sleep(delay)
