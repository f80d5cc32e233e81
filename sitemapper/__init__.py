"""Site crawler and sitemap generator."""

from .generate import GenerationResult, NoArticlesError, crawl_site, generate_sitemaps, run

__all__ = ["GenerationResult", "NoArticlesError", "crawl_site", "generate_sitemaps", "run"]
