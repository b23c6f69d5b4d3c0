# File: seo_scout/classifier.py
"""seo_scout.classifier: rule-based page type assignment.

Precedence, highest first:

0. the crawl's start page, or any URL with a root path, is ``home``;
1. a path segment matches a rule's keyword;
2. the title or an h1 heading contains a rule's keyword as a whole word,
   optionally plural ("Services", but not "Teamwork");
3. ``general``.

Inside levels 1 and 2 the rules are tried in :data:`RULES` order and the
first hit wins, so every input maps to exactly one type. ``error`` is never
returned here; the crawler assigns it to pages that could not be fetched.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Tuple
from urllib.parse import unquote, urlsplit

if TYPE_CHECKING:
    from seo_scout.crawler.models import ExtractedSignals

__all__ = ["PageType", "RULES", "classify", "classify_path", "classify_text"]


class PageType(str, Enum):
    HOME = "home"
    ABOUT = "about"
    CONTACT = "contact"
    SERVICES = "services"
    PRODUCTS = "products"
    PRICING = "pricing"
    BLOG = "blog"
    FEATURES = "features"
    SUPPORT = "support"
    TESTIMONIALS = "testimonials"
    PORTFOLIO = "portfolio"
    CAREERS = "careers"
    LEGAL = "legal"
    GENERAL = "general"
    ERROR = "error"


RULES: Tuple[Tuple[PageType, Tuple[str, ...]], ...] = (
    (PageType.ABOUT, ("about", "company", "team", "who-we-are", "our-story", "mission")),
    (PageType.CONTACT, ("contact", "get-in-touch", "locations", "reach-us")),
    (PageType.SERVICES, ("service", "solution", "what-we-do", "offering")),
    (PageType.PRODUCTS, ("product", "shop", "store", "catalog")),
    (PageType.PRICING, ("pricing", "price", "plans")),
    (PageType.BLOG, ("blog", "news", "article", "insights", "press")),
    (PageType.FEATURES, ("feature", "how-it-works", "platform")),
    (PageType.SUPPORT, ("faq", "help", "support", "docs")),
    (PageType.TESTIMONIALS, ("testimonial", "case-study", "case-studies", "review", "customers")),
    (PageType.PORTFOLIO, ("portfolio", "projects", "our-work", "gallery")),
    (PageType.CAREERS, ("career", "jobs", "hiring", "join-us")),
    (PageType.LEGAL, ("privacy", "terms", "legal", "imprint", "cookie-policy")),
)

_INDEX_FILES = ("index.html", "index.htm", "index.php", "default.aspx")


def _compile(keywords: Iterable[str], *, segment: bool) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(k) for k in keywords)
    if segment:
        # keyword starts a segment token: "/our-services", "/about-us", "/services/"
        return re.compile(rf"(?:^|[-_.])(?:{alternatives})")
    # keyword is a whole word in free text, optionally plural
    words = "|".join(re.escape(k).replace(r"\-", r"[-\s]") for k in keywords)
    return re.compile(rf"\b(?:{words})s?\b", re.IGNORECASE)


_PATH_RULES = tuple((ptype, _compile(kws, segment=True)) for ptype, kws in RULES)
_TEXT_RULES = tuple((ptype, _compile(kws, segment=False)) for ptype, kws in RULES)


def _segments(url: str) -> list[str]:
    path = unquote(urlsplit(url).path).lower()
    return [s for s in path.split("/") if s and s not in _INDEX_FILES]


def classify_path(url: str) -> PageType | None:
    """Level 1: first rule whose keyword starts any path segment."""
    segments = _segments(url)
    for ptype, pattern in _PATH_RULES:
        if any(pattern.search(seg) for seg in segments):
            return ptype
    return None


def classify_text(texts: Iterable[str]) -> PageType | None:
    """Level 2: first rule whose keyword, as a whole word or its plural, appears in any of *texts*."""
    texts = [t for t in texts if t]
    for ptype, pattern in _TEXT_RULES:
        if any(pattern.search(t) for t in texts):
            return ptype
    return None


def classify(url: str, signals: ExtractedSignals, *, is_start: bool = False) -> PageType:
    """Return exactly one :class:`PageType` for a fetched page."""
    if is_start or not _segments(url):
        return PageType.HOME
    by_path = classify_path(url)
    if by_path is not None:
        return by_path
    by_text = classify_text((signals.title, *signals.headings_at(1)))
    if by_text is not None:
        return by_text
    return PageType.GENERAL
