import unittest
from datetime import date

from sitemapper.parsers import Article
from sitemapper.tags import group_articles_by_tag, tag_slug


def _article(url: str, *tags: str) -> Article:
    return Article(title=url, url=url, publish_date=date(2025, 5, 1), tags=tags)


class GroupArticlesByTagTestCase(unittest.TestCase):
    def test_articles_appear_in_each_of_their_tag_groups(self) -> None:
        first = _article("/a", "5G", "fibre")
        second = _article("/b", "fibre")
        untagged = _article("/c")

        groups = group_articles_by_tag([first, second, untagged])

        self.assertEqual(list(groups), ["5g", "fibre"])
        self.assertEqual(groups["5g"].articles, [first])
        self.assertEqual(groups["fibre"].articles, [first, second])
        for group in groups.values():
            self.assertNotIn(untagged, group.articles)

    def test_first_display_name_wins(self) -> None:
        groups = group_articles_by_tag([_article("/a", "Wi Fi"), _article("/b", "wi-fi")])

        self.assertEqual(groups["wi-fi"].name, "Wi Fi")
        self.assertEqual(len(groups["wi-fi"]), 2)

    def test_tags_sharing_a_slug_count_once_per_article(self) -> None:
        article = _article("/a", "wi fi", "wi-fi")
        groups = group_articles_by_tag([article])
        self.assertEqual(groups["wi-fi"].articles, [article])

    def test_empty_slugs_are_ignored(self) -> None:
        self.assertEqual(group_articles_by_tag([_article("/a", "&&")]), {})

    def test_tag_slug(self) -> None:
        self.assertEqual(tag_slug("Bons Plans!"), "bons-plans")


if __name__ == "__main__":
    unittest.main()
