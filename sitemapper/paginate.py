"""Split article collections across numbered sitemap files."""

from __future__ import annotations

import math
from typing import Callable, Sequence
from xml.etree import ElementTree as ET

from .parsers import Article
from .writer import SitemapWriter

SitemapBuilder = Callable[..., ET.Element]


def chunk_articles(articles: Sequence[Article], per_file: int) -> list[Sequence[Article]]:
    if per_file <= 0:
        raise ValueError("per_file must be positive")
    count = math.ceil(len(articles) / per_file)
    return [articles[index * per_file : (index + 1) * per_file] for index in range(count)]


def write_paginated(
    articles: Sequence[Article],
    per_file: int,
    build: SitemapBuilder,
    prefix: str,
    writer: SitemapWriter,
    *builder_args: object,
) -> list[str]:
    """Build and write ``<prefix>.xml``, or ``<prefix>1.xml``... when over ``per_file``.

    Returns the generated file names in order.
    """

    if per_file <= 0:
        raise ValueError("per_file must be positive")
    if len(articles) <= per_file:
        chunks = [articles]
        names = [f"{prefix}.xml"]
    else:
        chunks = chunk_articles(articles, per_file)
        names = [f"{prefix}{index}.xml" for index in range(1, len(chunks) + 1)]

    for chunk, name in zip(chunks, names):
        writer.write_xml(build(chunk, *builder_args), name)
    return names
