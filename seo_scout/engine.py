# File: seo_scout/engine.py
"""seo_scout.engine: entry points that run one crawl and return its result."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union

from seo_scout.config import CrawlOptions
from seo_scout.crawler.crawler import SiteCrawler
from seo_scout.crawler.models import CrawlResult
from seo_scout.logger import logger

__all__ = ["Engine", "crawl", "build_options"]

OptionsLike = Union[CrawlOptions, Mapping[str, Any], None]


def build_options(options: OptionsLike) -> CrawlOptions:
    """Accept a CrawlOptions, a (camelCase or snake_case) mapping or None."""
    if options is None:
        return CrawlOptions()
    if isinstance(options, CrawlOptions):
        return options
    return CrawlOptions.model_validate(dict(options))


async def crawl(url: str, options: OptionsLike = None) -> CrawlResult:
    """
    Crawl *url* with a session scoped to this call.

    Parameters
    ----------
    url : str
        Absolute http(s) start URL.
    options : CrawlOptions | Mapping | None
        Crawl options; unknown keys raise pydantic's ValidationError.

    Returns
    -------
    CrawlResult
        Raises FetchError when the start page is unreachable.
    """
    opts = build_options(options)
    async with SiteCrawler(opts) as crawler:
        return await crawler.crawl(url)


class Engine:
    """Synchronous facade for the CLI and scripts."""

    def __init__(self, options: OptionsLike = None) -> None:
        self.options = build_options(options)

    def run(self, url: str, *, timeout: Optional[float] = None) -> CrawlResult:
        """Run one crawl to completion. *timeout* adds a hard outer limit in seconds."""
        logger.info("Starting crawl of %s", url)

        async def _runner() -> CrawlResult:
            if timeout is None:
                return await crawl(url, self.options)
            return await asyncio.wait_for(crawl(url, self.options), timeout=timeout)

        try:
            return asyncio.run(_runner())
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", timeout)
            raise
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
