# seo_scout/crawler/fetcher.py
"""
Fetcher module: one GET per call, with a per-request timeout and redirects
followed. Retries are the crawler's business, not the fetcher's.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from seo_scout.crawler.models import FetchResult
from seo_scout.errors import FetchError
from seo_scout.logger import get_logger
from seo_scout.utils import is_http_url

__all__ = ["Fetcher", "DEFAULT_HEADERS"]

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}

_TEXT_TYPES = ("text/", "application/xhtml", "application/xml")

log = get_logger("fetcher")


class Fetcher:
    """Fetches a single URL through a session owned by the caller."""

    def __init__(self, session: ClientSession, timeout: float = 15.0, max_redirects: int = 10) -> None:
        self.session = session
        self.timeout = ClientTimeout(total=timeout)
        self.max_redirects = max_redirects

    async def fetch(self, url: str) -> FetchResult:
        """
        GET *url* and return its HTML, final URL and status code.

        Raises FetchError on a malformed URL, network failure, timeout,
        non-2xx status or a non-text content type.
        """
        if not is_http_url(url):
            raise FetchError(str(url), "not an absolute http(s) URL")
        try:
            async with self.session.get(
                url,
                timeout=self.timeout,
                allow_redirects=True,
                max_redirects=self.max_redirects,
                raise_for_status=False,
            ) as resp:
                final_url = str(resp.url)
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status} {resp.reason or ''}".strip(), resp.status)
                ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if ctype and not ctype.startswith(_TEXT_TYPES):
                    raise FetchError(url, f"unsupported content type {ctype}", resp.status)
                html = await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self.timeout.total:.1f}s") from exc
        except ClientError as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            # yarl rejects some URLs only at request time
            raise FetchError(url, f"invalid URL: {exc}") from exc

        if final_url != url:
            log.debug("Redirected %s -> %s", url, final_url)
        return FetchResult(html=html, final_url=final_url, status_code=resp.status)

    async def fetch_text(self, url: str) -> Optional[str]:
        """Best-effort GET for auxiliary files (robots.txt, sitemap.xml)."""
        try:
            return (await self.fetch(url)).html
        except FetchError as exc:
            log.debug("Auxiliary fetch failed: %s", exc)
            return None
