"""Article record and parser interfaces."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

UNTITLED = "Untitled"
UNCATEGORIZED = "uncategorized"

_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^\w-]", re.ASCII)


def slugify(value: str) -> str:
    """Collapse whitespace to hyphens and drop everything but word characters and hyphens.

    Casing is left untouched; callers lowercase where they need to.
    """

    return _NON_SLUG_RE.sub("", _WHITESPACE_RE.sub("-", value))


@dataclass(frozen=True, slots=True)
class Article:
    title: str
    url: str
    publish_date: date
    category: str = UNCATEGORIZED
    tags: tuple[str, ...] = field(default_factory=tuple)
    author: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "publishDate": self.publish_date.isoformat(),
            "category": self.category,
            "tags": list(self.tags),
            "author": self.author,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Article":
        try:
            return cls(
                title=payload["title"],
                url=payload["url"],
                publish_date=date.fromisoformat(payload["publishDate"]),
                category=payload.get("category") or UNCATEGORIZED,
                tags=tuple(payload.get("tags") or ()),
                author=payload.get("author") or "",
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid article payload: {payload!r}") from exc


class ArticleParser:
    """Base interface for article parsers."""

    def parse(self, url: str, html: str) -> Article:  # pragma: no cover - interface only
        raise NotImplementedError
