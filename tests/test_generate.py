import json
import unittest
from datetime import date, datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from xml.etree import ElementTree as ET

from sitemapper.config import CrawlConfig, GeneratorConfig, RunContext, SitemapConfig
from sitemapper.generate import NoArticlesError, build_arg_parser, build_config, crawl_site, generate_sitemaps, main
from sitemapper.http_client import HttpFetchError
from sitemapper.parsers import Article
from sitemapper.persistence import write_articles

SM = "{http://www.sitemaps.org/schemas/sitemap/0.9}"
DOMAIN = "https://universlivebox.com"
CONTEXT = RunContext(generated_at=datetime(2025, 5, 18, 9, 0, tzinfo=timezone.utc))


def _locations(path: Path) -> list[str]:
    return [loc.text for loc in ET.parse(path).getroot().iter(f"{SM}loc")]


class GenerateSitemapsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.output_dir = Path(self.tmpdir.name) / "sitemaps"

    def _config(self, **overrides) -> GeneratorConfig:
        return GeneratorConfig(sitemap=SitemapConfig(output_dir=self.output_dir, **overrides))

    def test_tag_sitemaps_for_each_tag(self) -> None:
        article = Article(
            title="La 5G arrive",
            url="/5g-fibre",
            publish_date=date(2025, 5, 17),
            tags=("5G", "fibre"),
        )

        result = generate_sitemaps([article], self._config(min_articles_per_tag=1), CONTEXT)

        self.assertEqual(
            result.sitemap_files,
            ["sitemap.xml", "sitemap-news.xml", "sitemap-tag-5g.xml", "sitemap-tag-fibre.xml"],
        )
        self.assertEqual(
            _locations(self.output_dir / "sitemap-tag-5g.xml"),
            [f"{DOMAIN}/tag/5g", f"{DOMAIN}/5g-fibre"],
        )
        self.assertEqual(
            _locations(self.output_dir / "sitemap-tag-fibre.xml"),
            [f"{DOMAIN}/tag/fibre", f"{DOMAIN}/5g-fibre"],
        )

        index_locations = _locations(self.output_dir / "sitemap-index.xml")
        self.assertEqual(index_locations, [f"{DOMAIN}/sitemaps/{name}" for name in result.sitemap_files])

        robots = (self.output_dir / "robots.txt").read_text(encoding="utf-8")
        self.assertIn(f"Sitemap: {DOMAIN}/sitemaps/sitemap-index.xml", robots)

    def test_tags_below_threshold_are_skipped(self) -> None:
        articles = [
            Article(title="A", url="/a", publish_date=date(2025, 5, 1), tags=("fibre",)),
            Article(title="B", url="/b", publish_date=date(2025, 5, 2), tags=("fibre", "5g")),
        ]

        result = generate_sitemaps(articles, self._config(min_articles_per_tag=2), CONTEXT)

        self.assertIn("sitemap-tag-fibre.xml", result.sitemap_files)
        self.assertNotIn("sitemap-tag-5g.xml", result.sitemap_files)
        self.assertFalse((self.output_dir / "sitemap-tag-5g.xml").exists())

    def test_tag_sitemaps_can_be_disabled(self) -> None:
        article = Article(title="A", url="/a", publish_date=date(2025, 5, 1), tags=("fibre",))
        result = generate_sitemaps([article], self._config(tag_sitemaps=False, min_articles_per_tag=1), CONTEXT)
        self.assertEqual(result.sitemap_files, ["sitemap.xml", "sitemap-news.xml"])

    def test_large_collections_are_paginated(self) -> None:
        articles = [Article(title=str(i), url=f"/a{i}", publish_date=date(2025, 5, 1)) for i in range(5)]

        result = generate_sitemaps(
            articles,
            self._config(urls_per_file=2, news_urls_per_file=3, tag_sitemaps=False),
            CONTEXT,
        )

        self.assertEqual(
            result.sitemap_files,
            ["sitemap1.xml", "sitemap2.xml", "sitemap3.xml", "sitemap-news1.xml", "sitemap-news2.xml"],
        )

    def test_no_articles_writes_nothing(self) -> None:
        with self.assertRaises(NoArticlesError):
            generate_sitemaps([], self._config(), CONTEXT)
        self.assertFalse(self.output_dir.exists())

    def test_unwritable_output_directory_propagates(self) -> None:
        blocker = Path(self.tmpdir.name) / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        config = GeneratorConfig(sitemap=SitemapConfig(output_dir=blocker / "sitemaps"))
        article = Article(title="A", url="/a", publish_date=date(2025, 5, 1))

        with self.assertRaises(OSError):
            generate_sitemaps([article], config, CONTEXT)


class FakeFetcher:
    def __init__(self, pages: dict[str, str]) -> None:
        self._pages = pages

    def fetch_html(self, url: str) -> str:
        if url not in self._pages:
            raise HttpFetchError(f"Unexpected status 404 for {url}")
        return self._pages[url]


class CrawlSiteTestCase(unittest.TestCase):
    def test_discovery_is_bounded_by_max_pages(self) -> None:
        with TemporaryDirectory() as tmpdir:
            articles_file = Path(tmpdir) / "articles.json"
            config = GeneratorConfig(
                crawl=CrawlConfig(
                    category_pages=("",),
                    max_pages=2,
                    explore_tags=False,
                    articles_file=articles_file,
                )
            )
            fetcher = FakeFetcher(
                {
                    DOMAIN: "<article><a href='/un'>1</a><a href='/deux'>2</a><a href='/trois'>3</a></article>",
                    f"{DOMAIN}/un": "<h1>Un</h1><time datetime='2025-05-01'></time>",
                    f"{DOMAIN}/deux": "<h1>Deux</h1><time datetime='2025-05-02'></time>",
                    f"{DOMAIN}/trois": "<h1>Trois</h1>",
                }
            )

            articles = crawl_site(config, fetcher=fetcher, sleep=lambda _delay: None)

            self.assertEqual([article.url for article in articles], ["/un", "/deux"])
            saved = json.loads(articles_file.read_text(encoding="utf-8"))
            self.assertEqual([item["title"] for item in saved], ["Un", "Deux"])


class CommandLineTestCase(unittest.TestCase):
    def test_build_config_from_arguments(self) -> None:
        args = build_arg_parser().parse_args(
            [
                "--domain",
                "https://example.org/",
                "--categories",
                "orange, /free,orange",
                "--strict-news-window",
                "--no-force-news",
                "--no-explore-tags",
                "--min-articles-per-tag",
                "1",
            ]
        )
        config = build_config(args)

        self.assertEqual(config.site.domain, "https://example.org")
        self.assertEqual(config.crawl.category_pages, ("/orange", "/free"))
        self.assertTrue(config.sitemap.strict_news_window)
        self.assertFalse(config.sitemap.force_news)
        self.assertFalse(config.crawl.explore_tags)
        self.assertTrue(config.crawl.extract_tags)
        self.assertEqual(config.sitemap.min_articles_per_tag, 1)

    def test_invalid_caps_are_reported(self) -> None:
        for argv in (["--urls-per-file", "0"], ["--max-pages", "-1"], ["--max-tags", "-2"]):
            with self.subTest(argv=argv):
                args = build_arg_parser().parse_args(argv)
                with self.assertRaises(ValueError):
                    build_config(args)

    def test_negative_crawl_limit_is_rejected_before_fetching(self) -> None:
        fetcher = FakeFetcher({})
        config = GeneratorConfig(crawl=CrawlConfig(max_pages=-1))

        with self.assertRaises(ValueError):
            crawl_site(config, fetcher=fetcher, sleep=lambda _delay: None)

    def test_main_generates_from_saved_articles(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            articles_file = root / "articles.json"
            write_articles(
                articles_file,
                [Article(title="A", url="/a", publish_date=date(2025, 5, 1), tags=("fibre",))],
            )
            output_dir = root / "out"

            status = main(
                [
                    "--from-articles",
                    str(articles_file),
                    "--output-dir",
                    str(output_dir),
                    "--min-articles-per-tag",
                    "1",
                    "--log-level",
                    "WARNING",
                ]
            )

            self.assertEqual(status, 0)
            for name in ("sitemap.xml", "sitemap-news.xml", "sitemap-tag-fibre.xml", "sitemap-index.xml", "robots.txt"):
                self.assertTrue((output_dir / name).exists(), name)

    def test_main_fails_when_collection_is_empty(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            articles_file = root / "articles.json"
            write_articles(articles_file, [])

            status = main(["--from-articles", str(articles_file), "--output-dir", str(root / "out")])

            self.assertEqual(status, 1)
            self.assertFalse((root / "out").exists())


if __name__ == "__main__":
    unittest.main()
