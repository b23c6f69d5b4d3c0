"""seo_scout.crawler: fetching, link discovery and the crawl orchestrator."""

from .crawler import SiteCrawler
from .fetcher import Fetcher

__all__ = ["SiteCrawler", "Fetcher"]
