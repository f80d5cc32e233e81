"""Group articles by tag."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .parsers import Article, slugify


@dataclass(slots=True)
class TagGroup:
    slug: str
    name: str
    articles: list[Article] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.articles)


def tag_slug(tag: str) -> str:
    return slugify(tag).lower()


def group_articles_by_tag(articles: Iterable[Article]) -> dict[str, TagGroup]:
    """Map each tag slug to the articles carrying it, in collection order.

    The group name keeps the first raw spelling seen for the slug. Tags that
    normalize to an empty slug are ignored.
    """

    groups: dict[str, TagGroup] = {}
    for article in articles:
        for tag in article.tags:
            slug = tag_slug(tag)
            if not slug:
                continue
            group = groups.get(slug)
            if group is None:
                group = groups[slug] = TagGroup(slug=slug, name=tag)
            # two tags of one article can share a slug ("wi fi", "wi-fi")
            if group.articles and group.articles[-1] is article:
                continue
            group.articles.append(article)
    return groups
