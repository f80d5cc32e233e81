"""HTML parser turning article pages into Article records.

Every field is resolved through an ordered chain of extractors; the first one
returning a non-empty value wins and missing markup falls back to defaults
rather than failing.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Callable, Iterable, Optional

from bs4 import BeautifulSoup, Tag

from ..config import DEFAULT_SITE_NAME
from . import UNCATEGORIZED, UNTITLED, Article, ArticleParser, slugify

Extractor = Callable[[BeautifulSoup, str], Optional[str]]

_DAY_MONTH_YEAR_PATTERN = re.compile(r"(\d{1,2})\s+(\w+)\.?\s+(\d{4})")
_ISO_DATE_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

FRENCH_MONTHS = {
    "janvier": 1,
    "janv": 1,
    "jan": 1,
    "février": 2,
    "fevrier": 2,
    "févr": 2,
    "fevr": 2,
    "fév": 2,
    "fev": 2,
    "mars": 3,
    "mar": 3,
    "avril": 4,
    "avr": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "juil": 7,
    "août": 8,
    "aout": 8,
    "aoû": 8,
    "septembre": 9,
    "sept": 9,
    "sep": 9,
    "octobre": 10,
    "oct": 10,
    "novembre": 11,
    "nov": 11,
    "décembre": 12,
    "decembre": 12,
    "déc": 12,
    "dec": 12,
}

_AUTHOR_PREFIX_PATTERN = re.compile(
    r"^(?:by|par|de|écrit par|posté par|publié par)[\s:]+",
    re.IGNORECASE,
)
_BYLINE_PATTERN = re.compile(
    r"\b(?:Par|By|De)\s+([A-ZÀ-Ý][a-zÀ-ÿ]+(?:\s+[A-ZÀ-Ý][a-zÀ-ÿ]+){0,2})"
)

TAG_SELECTORS = (
    ".tags a",
    ".tag a",
    "a[rel='tag']",
    ".post-tags a",
    ".entry-tags a",
    ".article-tags a",
)


def _clean_text(element: Tag | None) -> str | None:
    if element is None:
        return None
    text = " ".join(element.get_text(" ").split())
    return text or None


def _select_text(selector: str) -> Extractor:
    def extract(soup: BeautifulSoup, _url: str) -> str | None:
        return _clean_text(soup.select_one(selector))

    return extract


def _first_present(extractors: Iterable[Extractor], soup: BeautifulSoup, url: str) -> str | None:
    for extractor in extractors:
        value = extractor(soup, url)
        if value:
            return value
    return None


def lookup_month(token: str) -> int | None:
    """Resolve a French month name or abbreviation to its month number."""

    key = token.lower().rstrip(".")
    for candidate in (key, key[:4], key[:3]):
        month = FRENCH_MONTHS.get(candidate)
        if month is not None:
            return month
    return None


def parse_publish_date(raw_value: str | None) -> date | None:
    """Parse "17 mai 2025" style or ISO "2025-05-17" dates.

    Returns None when neither form yields a valid calendar date.
    """

    if not raw_value:
        return None
    text = raw_value.replace("\xa0", " ").strip()

    match = _DAY_MONTH_YEAR_PATTERN.search(text)
    if match:
        month = lookup_month(match.group(2))
        if month is not None:
            try:
                return date(int(match.group(3)), month, int(match.group(1)))
            except ValueError:
                pass

    match = _ISO_DATE_PATTERN.search(text)
    if match:
        try:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError:
            return None
    return None


def strip_author_prefix(value: str) -> str:
    return _AUTHOR_PREFIX_PATTERN.sub("", value.strip()).strip()


def _time_element(soup: BeautifulSoup, _url: str) -> str | None:
    time_tag = soup.find("time")
    if time_tag is None:
        return None
    datetime_attr = time_tag.get("datetime")
    if datetime_attr and datetime_attr.strip():
        return datetime_attr.strip()
    return _clean_text(time_tag)


def _category_element(soup: BeautifulSoup, _url: str) -> str | None:
    text = _clean_text(soup.select_one(".category, a[rel='category'], .tag-link"))
    return text.lower() if text else None


def _category_from_url(_soup: BeautifulSoup, url: str) -> str | None:
    segments = [segment for segment in url.split("/") if segment]
    if url.startswith(("http://", "https://")):
        segments = segments[2:]
    return segments[0] if segments else None


def _author_selector(selector: str) -> Extractor:
    def extract(soup: BeautifulSoup, _url: str) -> str | None:
        element = soup.select_one(selector)
        if element is None:
            return None
        if element.name == "meta":
            raw_value = element.get("content") or ""
        else:
            raw_value = _clean_text(element) or ""
        return strip_author_prefix(raw_value) or None

    return extract


def _author_from_paragraphs(soup: BeautifulSoup, _url: str) -> str | None:
    paragraphs = soup.find_all("p", limit=3)
    text = " ".join(_clean_text(paragraph) or "" for paragraph in paragraphs)
    match = _BYLINE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return None


class SiteArticleParser(ArticleParser):
    """Parse article HTML into an Article, degrading to defaults on missing markup."""

    TITLE_EXTRACTORS: tuple[Extractor, ...] = (
        _select_text("h1"),
        _select_text(".post-title"),
        _select_text("article h2"),
    )
    DATE_EXTRACTORS: tuple[Extractor, ...] = (
        _time_element,
        _select_text(".date, .post-date, .published"),
    )
    CATEGORY_EXTRACTORS: tuple[Extractor, ...] = (
        _category_element,
        _category_from_url,
    )
    AUTHOR_EXTRACTORS: tuple[Extractor, ...] = (
        _author_selector(".author-name"),
        _author_selector(".author a"),
        _author_selector(".author"),
        _author_selector(".byline"),
        _author_selector(".post-author"),
        _author_selector("meta[name='author']"),
        _author_selector(".entry-author"),
        _author_selector("[rel='author']"),
        _author_from_paragraphs,
    )

    def __init__(
        self,
        default_author: str = DEFAULT_SITE_NAME,
        *,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._default_author = default_author
        self._today = today or date.today

    def parse(self, url: str, html: str) -> Article:
        soup = BeautifulSoup(html, "html.parser")

        title = _first_present(self.TITLE_EXTRACTORS, soup, url) or UNTITLED

        date_text = _first_present(self.DATE_EXTRACTORS, soup, url)
        publish_date = parse_publish_date(date_text) or self._today()

        raw_category = _first_present(self.CATEGORY_EXTRACTORS, soup, url) or ""
        category = slugify(raw_category) or UNCATEGORIZED

        author = _first_present(self.AUTHOR_EXTRACTORS, soup, url) or self._default_author

        return Article(
            title=title,
            url=url,
            publish_date=publish_date,
            category=category,
            tags=tuple(self._extract_tags(soup)),
            author=author,
        )

    def _extract_tags(self, soup: BeautifulSoup) -> list[str]:
        tags: list[str] = []
        seen: set[str] = set()
        for anchor in soup.select(", ".join(TAG_SELECTORS)):
            text = _clean_text(anchor)
            if not text:
                continue
            key = text.lower()
            if key in seen:
                continue
            seen.add(key)
            tags.append(key)
        return tags
