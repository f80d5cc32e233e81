"""JSON persistence for crawled article collections."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from .parsers import Article

LOGGER = logging.getLogger(__name__)


class ArticleStoreError(RuntimeError):
    """Raised when a persisted article collection cannot be read."""


def write_articles(path: Path, articles: Iterable[Article]) -> int:
    payload = [article.to_payload() for article in articles]
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp_path.replace(path)
    LOGGER.info("Saved %d articles to %s", len(payload), path)
    return len(payload)


def load_articles(path: Path) -> list[Article]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ArticleStoreError(f"Cannot read articles from {path}: {exc}") from exc

    if not isinstance(payload, list):
        raise ArticleStoreError(f"Expected a list of articles in {path}")

    try:
        articles = [Article.from_payload(item) for item in payload]
    except ValueError as exc:
        raise ArticleStoreError(str(exc)) from exc
    LOGGER.info("Loaded %d articles from %s", len(articles), path)
    return articles
