from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Awaitable, List, Optional, Sequence, Tuple, TypeVar
from urllib.parse import urlsplit, urlunsplit

from aiohttp import ClientSession

from seo_scout.aggregator import aggregate_results
from seo_scout.classifier import PageType, classify
from seo_scout.config import CrawlOptions
from seo_scout.crawler.fetcher import DEFAULT_HEADERS, Fetcher
from seo_scout.crawler.link_extractor import extract_links, is_crawlable
from seo_scout.crawler.models import CrawlResult, ExtractedSignals, FetchResult, PageRecord
from seo_scout.crawler.robots import RobotsTxtRules
from seo_scout.errors import FetchError, PageNote
from seo_scout.parser.signals import extract
from seo_scout.parser.sitemap_parser import is_sitemap_index, parse_sitemap
from seo_scout.utils import is_http_url, normalize_url, remove_duplicates, same_site, url_key, utc_now_iso

__all__ = ("SiteCrawler",)

_T = TypeVar("_T")

#: child sitemaps followed when /sitemap.xml is an index
_MAX_CHILD_SITEMAPS = 3


class SiteCrawler:
    """Bounded multi-page crawler.

    Owns one ``aiohttp.ClientSession`` for the lifetime of the ``async with``
    block; nothing is shared between crawls::

        async with SiteCrawler(options) as crawler:
            result = await crawler.crawl("https://example.com/")
    """

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, options: Optional[CrawlOptions] = None) -> None:
        self.options = options or CrawlOptions()
        self.session: Optional[ClientSession] = None
        self.logger = logging.getLogger("SEOScout")

    async def __aenter__(self) -> SiteCrawler:
        self.session = ClientSession(
            headers={**DEFAULT_HEADERS, "User-Agent": self.options.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    async def crawl(self, start_url: str) -> CrawlResult:
        """Crawl up to ``options.max_pages`` pages starting at *start_url*.

        Raises FetchError only when the start page cannot be fetched. Linked
        pages that fail become ``error`` records; when the deadline expires
        the pages finished so far are returned with ``partial=True``.
        """
        if self.session is None:
            raise RuntimeError("SiteCrawler must be used as an async context manager")
        if not is_http_url(start_url):
            raise FetchError(str(start_url), "not an absolute http(s) URL")

        opts = self.options
        loop = asyncio.get_running_loop()
        deadline = loop.time() + opts.timeout
        started_iso = utc_now_iso()
        began = time.monotonic()
        fetcher = Fetcher(self.session, timeout=opts.fetch_timeout)

        self.logger.info("Crawl started: %s (max %d pages, concurrency %d)", start_url, opts.max_pages, opts.concurrency_limit)
        if opts.include_screenshots:
            self.logger.info("Screenshots were requested but are not captured by this crawler")

        try:
            start = await asyncio.wait_for(fetcher.fetch(start_url), timeout=opts.timeout)
        except asyncio.TimeoutError as exc:
            raise FetchError(start_url, f"crawl deadline of {opts.timeout:.1f}s expired") from exc
        home = self._build_record(start.final_url, start, is_start=True)

        targets, cut_short = await self._select_targets(fetcher, start.html, start.final_url, deadline)
        records, unfinished = await self._process_all(fetcher, targets, deadline)
        pages = self._merge(home, records)
        partial = cut_short or unfinished

        duration = time.monotonic() - began
        self.logger.info(
            "Crawl finished: %d pages in %.2f s%s", len(pages), duration, " (partial)" if partial else ""
        )
        return aggregate_results(
            normalize_url(start_url),
            pages,
            partial=partial,
            started_at_iso=started_iso,
            finished_at_iso=utc_now_iso(),
        )

    # ------------------------------------------------------------------ #
    # Target selection                                                   #
    # ------------------------------------------------------------------ #

    async def _within(self, aw: Awaitable[_T], deadline: float) -> Tuple[Optional[_T], bool]:
        """Await *aw* until *deadline*; returns (result, timed_out)."""
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            if asyncio.iscoroutine(aw):
                aw.close()
            return None, True
        try:
            return await asyncio.wait_for(aw, timeout=remaining), False
        except asyncio.TimeoutError:
            return None, True

    async def _select_targets(
        self, fetcher: Fetcher, html: str, page_url: str, deadline: float
    ) -> Tuple[List[str], bool]:
        limit = self.options.max_pages - 1
        if limit <= 0:
            return [], False

        links = extract_links(html, page_url)
        self.logger.debug("Found %d same-site links on %s", len(links), page_url)
        cut_short = False

        if self.options.use_sitemap and len(links) < limit:
            extra, timed_out = await self._within(self._sitemap_links(fetcher, page_url), deadline)
            cut_short |= timed_out
            if extra:
                links = remove_duplicates([*links, *extra])
                links = [u for u in links if url_key(u) != url_key(page_url)]

        if self.options.respect_robots and links:
            rules, timed_out = await self._within(self._load_robots(fetcher, page_url), deadline)
            cut_short |= timed_out
            if rules is not None:
                allowed = [u for u in links if rules.can_fetch(self.options.user_agent, urlsplit(u).path or "/")]
                if len(allowed) < len(links):
                    self.logger.info("Skipped %d links disallowed by robots.txt", len(links) - len(allowed))
                links = allowed

        return links[:limit], cut_short

    @staticmethod
    def _site_root(page_url: str) -> str:
        parts = urlsplit(page_url)
        return urlunsplit((parts.scheme, parts.netloc, "", "", ""))

    async def _load_robots(self, fetcher: Fetcher, page_url: str) -> Optional[RobotsTxtRules]:
        text = await fetcher.fetch_text(self._site_root(page_url) + "/robots.txt")
        return RobotsTxtRules(text) if text else None

    async def _sitemap_links(self, fetcher: Fetcher, page_url: str) -> List[str]:
        xml = await fetcher.fetch_text(self._site_root(page_url) + "/sitemap.xml")
        if not xml:
            return []
        locs = parse_sitemap(xml)
        if is_sitemap_index(xml):
            nested: List[str] = []
            for child in locs[:_MAX_CHILD_SITEMAPS]:
                if not same_site(child, page_url):
                    continue
                child_xml = await fetcher.fetch_text(child)
                if child_xml:
                    nested.extend(parse_sitemap(child_xml))
            locs = nested
        urls = [
            normalize_url(u)
            for u in locs
            if is_http_url(u) and same_site(u, page_url) and is_crawlable(u)
        ]
        self.logger.debug("sitemap.xml contributed %d URLs", len(urls))
        return urls

    # ------------------------------------------------------------------ #
    # Per-page pipeline                                                  #
    # ------------------------------------------------------------------ #

    async def _process_all(
        self, fetcher: Fetcher, targets: List[str], deadline: float
    ) -> Tuple[List[PageRecord], bool]:
        if not targets:
            return [], False
        semaphore = asyncio.Semaphore(self.options.concurrency_limit)
        tasks = [asyncio.create_task(self._process_one(fetcher, url, semaphore)) for url in targets]
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        try:
            done, pending = await asyncio.wait(tasks, timeout=remaining)
        finally:
            leftovers = [t for t in tasks if not t.done()]
            for task in leftovers:
                task.cancel()
            if leftovers:
                await asyncio.gather(*leftovers, return_exceptions=True)
        if pending:
            self.logger.warning(
                "Crawl deadline reached: %d of %d pages unfinished", len(pending), len(targets)
            )
        # selection order, not completion order
        return [t.result() for t in tasks if t in done], bool(pending)

    def _retryable(self, exc: FetchError) -> bool:
        return exc.status_code is None or exc.status_code in self._RETRY_STATUS

    async def _process_one(self, fetcher: Fetcher, url: str, semaphore: asyncio.Semaphore) -> PageRecord:
        async with semaphore:
            attempts = 0
            while True:
                try:
                    result = await fetcher.fetch(url)
                    break
                except FetchError as exc:
                    if attempts >= self.options.retry_times or not self._retryable(exc):
                        self.logger.warning("Failed %s: %s", url, exc.reason)
                        return self._error_record(url, exc)
                    attempts += 1
                    backoff = min(10.0, 0.5 * 2 ** (attempts - 1) + random.random() * 0.1)
                    self.logger.debug(
                        "Retry %d/%d for %s after %.2f s", attempts, self.options.retry_times, url, backoff
                    )
                    await asyncio.sleep(backoff)
        return self._build_record(url, result)

    def _build_record(self, url: str, result: FetchResult, *, is_start: bool = False) -> PageRecord:
        final_url = normalize_url(result.final_url or url)
        try:
            signals = extract(result.html, self.options.keyword_limit)
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("Extraction failed for %s", final_url)
            return self._error_record(final_url, FetchError(final_url, f"extraction failed: {exc}", result.status_code))

        page_type = classify(final_url, signals, is_start=is_start)
        notes: List[str] = []
        if signals.is_empty:
            notes.append(PageNote.EXTRACTION_DEGRADED.value)
        if page_type is PageType.GENERAL:
            notes.append(PageNote.CLASSIFICATION_FALLBACK.value)
        self.logger.debug("Recorded %s as %s", final_url, page_type.value)
        return PageRecord(
            url=final_url,
            page_type=page_type,
            fetched_at_iso=utc_now_iso(),
            raw_html_length=len(result.html),
            extracted_signals=signals,
            status_code=result.status_code,
            notes=tuple(notes),
        )

    @staticmethod
    def _error_record(url: str, exc: FetchError) -> PageRecord:
        return PageRecord(
            url=normalize_url(url),
            page_type=PageType.ERROR,
            fetched_at_iso=utc_now_iso(),
            raw_html_length=0,
            extracted_signals=ExtractedSignals(),
            status_code=exc.status_code,
            error=exc.reason,
        )

    def _merge(self, home: PageRecord, records: List[PageRecord]) -> List[PageRecord]:
        """Append records in order, dropping any whose URL (after redirects) is already present."""
        seen = {url_key(home.url)}
        merged = [home]
        for record in records:
            key = url_key(record.url)
            if key in seen:
                self.logger.debug("Dropped duplicate record for %s", record.url)
                continue
            seen.add(key)
            merged.append(record)
        return merged
