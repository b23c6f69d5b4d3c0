# File: seo_scout/aggregator.py
"""seo_scout.aggregator: folds page records into site-level summaries."""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Tuple

from seo_scout.classifier import PageType
from seo_scout.crawler.models import (
    ComprehensiveContent,
    CrawlResult,
    Heading,
    PageRecord,
    SiteMap,
    SiteSummary,
)
from seo_scout.parser.keywords import merge_keywords

__all__ = [
    "THEME_PATTERNS",
    "build_site_map",
    "build_comprehensive_content",
    "build_site_summary",
    "identify_content_themes",
    "aggregate_results",
]

#: How many top keywords of each page feed theme detection.
THEME_KEYWORDS_PER_PAGE = 5

THEME_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = tuple(
    (theme, re.compile(pattern, re.IGNORECASE))
    for theme, pattern in (
        ("Products & Services", r"\b(?:products?|services?|solutions?|offerings?)\b"),
        ("Company & Team", r"\b(?:about|company|team|mission|vision|values?)\b"),
        ("Pricing & Plans", r"\b(?:pricing|prices?|cost|plans?|subscriptions?|packages?)\b"),
        ("Support & Contact", r"\b(?:contact|support|help|faq|questions?)\b"),
        ("Content & Resources", r"\b(?:blog|news|articles?|insights?|resources?)\b"),
        ("Features & Benefits", r"\b(?:features?|capabilit(?:y|ies)|benefits?)\b"),
        ("Security & Trust", r"\b(?:security|privacy|compliance|trust)\b"),
        ("Integration & Technical", r"\b(?:integrations?|api|developers?|technical)\b"),
        ("Social Proof", r"\b(?:case[- ]?stud(?:y|ies)|testimonials?|reviews?|results)\b"),
        ("Portfolio & Work", r"\b(?:portfolio|projects?|gallery|our work)\b"),
        ("Careers", r"\b(?:careers?|jobs?|hiring|employment)\b"),
        ("Partnerships", r"\b(?:partners?|affiliates?|resellers?)\b"),
        ("Lead Generation", r"\b(?:demo|free trial|trial|get started)\b"),
        ("E-Commerce", r"\b(?:e-?commerce|shop|store|buy|cart)\b"),
    )
)


def _ok(pages: Iterable[PageRecord]) -> List[PageRecord]:
    return [p for p in pages if p.page_type is not PageType.ERROR]


def build_site_map(pages: Sequence[PageRecord]) -> SiteMap:
    """Count pages per type; ``total_pages`` always equals ``len(pages)``."""
    counts: Dict[str, int] = dict(Counter(p.page_type.value for p in pages))
    return SiteMap(
        total_pages=len(pages),
        page_types=counts,
        discovered_pages=tuple(p.url for p in pages),
    )


def identify_content_themes(pages: Sequence[PageRecord]) -> frozenset[str]:
    """Match theme patterns against h1/h2 headings and each page's top keywords."""
    chunks: List[str] = []
    for page in _ok(pages):
        signals = page.extracted_signals
        chunks.extend(h.text for h in signals.headings if h.level <= 2)
        chunks.extend(signals.keywords[:THEME_KEYWORDS_PER_PAGE])
    text = " ".join(chunks)
    return frozenset(theme for theme, pattern in THEME_PATTERNS if pattern.search(text))


def build_comprehensive_content(pages: Sequence[PageRecord]) -> ComprehensiveContent:
    ok = _ok(pages)
    all_keywords = merge_keywords(
        (*p.extracted_signals.meta_keywords, *p.extracted_signals.keywords) for p in ok
    )
    all_headings: Tuple[Heading, ...] = tuple(h for p in ok for h in p.extracted_signals.headings)
    return ComprehensiveContent(
        content_themes=identify_content_themes(pages),
        all_keywords=all_keywords,
        all_headings=all_headings,
    )


def build_site_summary(pages: Sequence[PageRecord]) -> SiteSummary:
    ok = _ok(pages)
    total_words = sum(p.extracted_signals.word_count for p in ok)
    return SiteSummary(
        analytics_ids=frozenset(i for p in ok for i in p.extracted_signals.analytics_ids),
        total_word_count=total_words,
        average_word_count=round(total_words / len(ok)) if ok else 0,
        pages_with_schema=sum(1 for p in ok if p.extracted_signals.schema_blocks),
        pages_with_canonical=sum(1 for p in ok if p.extracted_signals.canonical),
        pages_with_og=sum(1 for p in ok if p.extracted_signals.og_tags.get("og:title")),
        pages_with_twitter_card=sum(1 for p in ok if p.extracted_signals.twitter_tags.get("twitter:card")),
        failed_pages=len(pages) - len(ok),
    )


def aggregate_results(
    start_url: str,
    pages: Sequence[PageRecord],
    *,
    partial: bool = False,
    started_at_iso: str = "",
    finished_at_iso: str = "",
) -> CrawlResult:
    """Assemble the final CrawlResult from the merged page records."""
    records = tuple(pages)
    return CrawlResult(
        start_url=start_url,
        pages=records,
        site_map=build_site_map(records),
        comprehensive_content=build_comprehensive_content(records),
        site_summary=build_site_summary(records),
        partial=partial,
        started_at_iso=started_at_iso,
        finished_at_iso=finished_at_iso,
    )
