"""Fetch and parse discovered article pages."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence

from .config import GeneratorConfig
from .discovery import PageFetcher
from .http_client import HttpFetchError
from .parsers import Article, ArticleParser
from .persistence import write_articles

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CrawlStats:
    processed: int = 0
    succeeded: int = 0
    failed: int = 0


class ArticleCrawler:
    """Sequentially fetch and parse article URLs, skipping the ones that fail."""

    def __init__(
        self,
        config: GeneratorConfig,
        fetcher: PageFetcher,
        parser: ArticleParser,
        *,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._parser = parser
        self._sleep = sleep or time.sleep
        self.stats = CrawlStats()

    def crawl(self, urls: Sequence[str]) -> list[Article]:
        self.stats = CrawlStats()
        articles: list[Article] = []
        for url in urls:
            self.stats.processed += 1
            article = self._crawl_one(url)
            if article is not None:
                articles.append(article)
                self.stats.succeeded += 1
            else:
                self.stats.failed += 1
            self._pause()

        LOGGER.info(
            "Crawled %d articles: %d succeeded, %d failed",
            self.stats.processed,
            self.stats.succeeded,
            self.stats.failed,
        )
        return articles

    def crawl_and_save(self, urls: Sequence[str], path: Path | None = None) -> list[Article]:
        articles = self.crawl(urls)
        write_articles(path or self._config.crawl.articles_file, articles)
        return articles

    def _crawl_one(self, url: str) -> Article | None:
        full_url = self._config.site.absolute_url(url)
        LOGGER.info("Extracting article %s", url)
        try:
            html = self._fetcher.fetch_html(full_url)
            return self._parser.parse(url, html)
        except HttpFetchError as exc:
            LOGGER.warning("Failed to fetch article %s: %s", url, exc)
            self._record_fetch_failure(url, exc)
            return None
        except Exception:
            LOGGER.exception("Unhandled error for %s", url)
            return None

    def _record_fetch_failure(self, url: str, exc: Exception) -> None:
        log_path = self._config.crawl.failure_log
        if log_path is None:
            return
        payload = {
            "url": url,
            "error": str(exc),
            "error_type": type(exc).__name__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
        except OSError as file_error:  # pragma: no cover - filesystem failure path
            LOGGER.warning("Failed to record fetch failure for %s: %s", url, file_error)

    def _pause(self) -> None:
        delay = self._config.crawl.request_delay
        if delay > 0:
            self._sleep(delay)
