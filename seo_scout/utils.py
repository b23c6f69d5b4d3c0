# File: seo_scout/utils.py
"""seo_scout.utils: URL helpers shared by the fetcher, link discovery and the crawler."""

from __future__ import annotations

import posixpath
from datetime import datetime, timezone
from functools import lru_cache
from typing import Collection, List, Sequence
from urllib.parse import urlsplit, urlunsplit

import tldextract

from seo_scout.logger import logger

__all__: Sequence[str] = (
    "is_http_url",
    "normalize_url",
    "url_key",
    "registered_domain",
    "same_site",
    "remove_duplicates",
    "utc_now_iso",
)

_DEFAULT_PORTS = {"http": 80, "https": 443}

# Bundled public-suffix snapshot only: no network access, no disk cache.
_EXTRACT = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


def is_http_url(url: object) -> bool:
    """True for an absolute http(s) URL with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parts = urlsplit(url.strip())
        parts.port  # raises on a malformed port
        return parts.scheme.lower() in ("http", "https") and bool(parts.hostname)
    except ValueError:
        return False


def _clean_path(path: str) -> str:
    if not path:
        return "/"
    norm = posixpath.normpath(path)
    # normpath keeps a leading "//"
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    if norm in (".", ""):
        return "/"
    return norm


def normalize_url(url: str) -> str:
    """Lower-case scheme and host, drop default port, query, fragment and trailing slash."""
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    port = parts.port
    netloc = host if port is None or port == _DEFAULT_PORTS.get(scheme) else f"{host}:{port}"
    normalized = urlunsplit((scheme, netloc, _clean_path(parts.path), "", ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def url_key(url: str) -> str:
    """Deduplication key: the normalized URL without its scheme."""
    normalized = normalize_url(url)
    return normalized.split("://", 1)[-1]


@lru_cache(maxsize=1024)
def registered_domain(host: str) -> str:
    """``blog.example.co.uk`` -> ``example.co.uk``; hosts without a suffix are returned as-is."""
    host = host.lower().strip(".")
    ext = _EXTRACT(host)
    return ".".join(p for p in (ext.domain, ext.suffix) if p) or host


def same_site(url: str, other: str) -> bool:
    """Both URLs are http(s) and share a registered domain (scheme-insensitive)."""
    if not (is_http_url(url) and is_http_url(other)):
        return False
    a = urlsplit(url).hostname or ""
    b = urlsplit(other).hostname or ""
    return registered_domain(a) == registered_domain(b)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Drop URLs whose dedup key was already seen, keeping first occurrences in order."""
    seen: set[str] = set()
    unique: List[str] = []
    for url in urls:
        key = url_key(url)
        if key not in seen:
            seen.add(key)
            unique.append(url)
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
