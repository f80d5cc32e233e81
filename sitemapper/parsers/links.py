"""Extract article and tag links from listing pages."""

from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup

ARTICLE_LINK_SELECTORS = (
    "article a",
    ".post-title a",
    "h2 a",
    ".article-link",
)
TAG_LINK_SELECTORS = (
    ".tags a",
    ".tag a",
    ".tag-link",
    "a[rel='tag']",
    ".category-link",
    "a.cat-link",
)
# Substring heuristic: any path containing one of these is treated as a tag listing.
TAG_PATH_MARKERS = ("tag", "category", "cat/")


@dataclass(slots=True)
class DiscoveredLinks:
    article_urls: list[str] = field(default_factory=list)
    tag_urls: list[str] = field(default_factory=list)


def _normalize_site_href(raw_href: str | None, domain: str) -> str | None:
    """Return the site-relative form of an on-site href, or None for foreign links."""

    if not raw_href:
        return None
    href = raw_href.strip()
    if href.startswith("//"):
        return None
    if href.startswith("/"):
        return href
    if not href.startswith(domain):
        return None
    # The domain must end at a path or query boundary, not mid-hostname.
    rest = href[len(domain) :]
    if not rest:
        return "/"
    if rest.startswith("/"):
        return rest
    if rest.startswith("?"):
        return f"/{rest}"
    return None


def _collect(soup: BeautifulSoup, selectors: tuple[str, ...]) -> list[str | None]:
    hrefs: list[str | None] = []
    for element in soup.select(", ".join(selectors)):
        hrefs.append(element.get("href"))
    return hrefs


def is_tag_path(path: str) -> bool:
    return any(marker in path for marker in TAG_PATH_MARKERS)


def extract_links(html: str, domain: str, *, include_tags: bool = True) -> DiscoveredLinks:
    """Collect candidate article and tag links, deduplicated in document order."""

    soup = BeautifulSoup(html, "html.parser")
    links = DiscoveredLinks()

    seen_articles: set[str] = set()
    for raw_href in _collect(soup, ARTICLE_LINK_SELECTORS):
        if raw_href and "#" in raw_href:
            continue
        normalized = _normalize_site_href(raw_href, domain)
        if not normalized or normalized in seen_articles:
            continue
        seen_articles.add(normalized)
        links.article_urls.append(normalized)

    if not include_tags:
        return links

    seen_tags: set[str] = set()
    for raw_href in _collect(soup, TAG_LINK_SELECTORS):
        normalized = _normalize_site_href(raw_href, domain)
        if not normalized or not is_tag_path(normalized) or normalized in seen_tags:
            continue
        seen_tags.add(normalized)
        links.tag_urls.append(normalized)

    return links
