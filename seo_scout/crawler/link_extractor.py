# seo_scout/crawler/link_extractor.py
"""
Same-site link discovery for SEOScout.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from seo_scout.utils import is_http_url, normalize_url, same_site, url_key

__all__ = ["extract_links", "is_crawlable"]

_SKIPPED_SCHEMES = ("mailto:", "tel:", "javascript:", "data:", "#")

# Static assets and pages that carry no marketing content.
_SKIPPED_EXTENSIONS = (
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico", ".zip",
    ".css", ".js", ".json", ".xml", ".mp4", ".mp3", ".woff", ".woff2", ".doc", ".docx",
)
_SKIPPED_PATHS = (
    "/wp-admin", "/wp-login", "/login", "/logout", "/signin", "/signup",
    "/cart", "/checkout", "/account", "/search",
)


def is_crawlable(url: str) -> bool:
    """Reject assets and account/cart style paths."""
    path = urlsplit(url).path.lower()
    if path.endswith(_SKIPPED_EXTENSIONS):
        return False
    return not any(path == p or path.startswith(p + "/") for p in _SKIPPED_PATHS)


def extract_links(html: str, page_url: str) -> List[str]:
    """
    Return normalized same-site links of *html* in document order.

    ``<base href>`` is honoured; mailto:/tel:/javascript: links, assets and
    duplicates (by scheme-less normalized URL) are dropped. The page itself
    is not part of the result.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    base = page_url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base = urljoin(page_url, str(base_tag["href"]).strip())

    seen = {url_key(page_url)}
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.lower().startswith(_SKIPPED_SCHEMES):
            continue
        try:
            absolute = urljoin(base, raw)
        except ValueError:
            continue
        if not is_http_url(absolute) or not same_site(absolute, page_url):
            continue
        if not is_crawlable(absolute):
            continue
        key = url_key(absolute)
        if key in seen:
            continue
        seen.add(key)
        links.append(normalize_url(absolute))
    return links
