# File: seo_scout/errors.py
"""seo_scout.errors: exception hierarchy and non-fatal page notes."""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = ["ScoutError", "FetchError", "ConfigError", "PageNote"]


class ScoutError(Exception):
    """Base class for every error raised by SEOScout."""


class FetchError(ScoutError):
    """A page could not be retrieved.

    Raised for malformed URLs, connection/DNS failures, timeouts, non-2xx
    responses and non-text payloads. ``status_code`` is set when the server
    did answer.
    """

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{url}: {reason}")


class ConfigError(ScoutError):
    """Configuration file exists but cannot be read or parsed."""


class PageNote(str, Enum):
    """Non-fatal conditions recorded on a page instead of being raised."""

    EXTRACTION_DEGRADED = "extraction_degraded"
    CLASSIFICATION_FALLBACK = "classification_fallback"
