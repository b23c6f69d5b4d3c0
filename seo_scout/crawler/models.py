# seo_scout/crawler/models.py
"""
Data models for one crawl: fetched payloads, extracted signals, page records
and the aggregated result.

All models are frozen; ``to_dict()`` produces the camelCase JSON shape served
by the HTTP API and written by the JSON report.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from seo_scout.classifier import PageType

__all__ = (
    "FetchResult",
    "Heading",
    "Contacts",
    "ExtractedSignals",
    "PageRecord",
    "SiteMap",
    "ComprehensiveContent",
    "SiteSummary",
    "CrawlResult",
)


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Raw HTML plus where it actually came from."""

    html: str
    final_url: str
    status_code: int


@dataclass(slots=True, frozen=True)
class Heading:
    level: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "text": self.text}


@dataclass(slots=True, frozen=True)
class Contacts:
    emails: FrozenSet[str] = frozenset()
    phones: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {"emails": sorted(self.emails), "phones": sorted(self.phones)}


@dataclass(slots=True, frozen=True)
class ExtractedSignals:
    """Everything pulled out of one page's HTML. Empty by default."""

    title: str = ""
    canonical: str = ""
    language: str = ""
    meta_tags: Mapping[str, str] = field(default_factory=dict)
    og_tags: Mapping[str, str] = field(default_factory=dict)
    twitter_tags: Mapping[str, str] = field(default_factory=dict)
    analytics_ids: FrozenSet[str] = frozenset()
    trackers: FrozenSet[str] = frozenset()
    keywords: Tuple[str, ...] = ()
    headings: Tuple[Heading, ...] = ()
    schema_blocks: Tuple[str, ...] = ()
    schema_types: Tuple[str, ...] = ()
    contacts: Contacts = field(default_factory=Contacts)
    technologies: Tuple[str, ...] = ()
    social_links: Tuple[str, ...] = ()
    word_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.headings or self.word_count)

    @property
    def meta_keywords(self) -> Tuple[str, ...]:
        raw = self.meta_tags.get("keywords", "")
        return tuple(dict.fromkeys(k.strip().lower() for k in raw.split(",") if k.strip()))

    def headings_at(self, level: int) -> Tuple[str, ...]:
        return tuple(h.text for h in self.headings if h.level == level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "canonical": self.canonical,
            "language": self.language,
            "metaTags": dict(self.meta_tags),
            "ogTags": dict(self.og_tags),
            "twitterTags": dict(self.twitter_tags),
            "analyticsIds": sorted(self.analytics_ids),
            "trackers": sorted(self.trackers),
            "keywords": list(self.keywords),
            "headings": [h.to_dict() for h in self.headings],
            "schemaBlocks": list(self.schema_blocks),
            "schemaTypes": list(self.schema_types),
            "contacts": self.contacts.to_dict(),
            "technologies": list(self.technologies),
            "socialLinks": list(self.social_links),
            "wordCount": self.word_count,
        }


@dataclass(slots=True, frozen=True)
class PageRecord:
    """One visited page. ``error`` is set only for ``PageType.ERROR`` records."""

    url: str
    page_type: PageType
    fetched_at_iso: str
    raw_html_length: int
    extracted_signals: ExtractedSignals
    status_code: Optional[int] = None
    error: Optional[str] = None
    notes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "pageType": self.page_type.value,
            "fetchedAtIso": self.fetched_at_iso,
            "rawHtmlLength": self.raw_html_length,
            "statusCode": self.status_code,
            "error": self.error,
            "notes": list(self.notes),
            "extractedSignals": self.extracted_signals.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class SiteMap:
    total_pages: int
    page_types: Mapping[str, int]
    discovered_pages: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPages": self.total_pages,
            "pageTypes": dict(self.page_types),
            "discoveredPages": list(self.discovered_pages),
        }


@dataclass(slots=True, frozen=True)
class ComprehensiveContent:
    content_themes: FrozenSet[str] = frozenset()
    all_keywords: Tuple[str, ...] = ()
    all_headings: Tuple[Heading, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contentThemes": sorted(self.content_themes),
            "allKeywords": list(self.all_keywords),
            "allHeadings": [h.to_dict() for h in self.all_headings],
        }


@dataclass(slots=True, frozen=True)
class SiteSummary:
    analytics_ids: FrozenSet[str] = frozenset()
    total_word_count: int = 0
    average_word_count: int = 0
    pages_with_schema: int = 0
    pages_with_canonical: int = 0
    pages_with_og: int = 0
    pages_with_twitter_card: int = 0
    failed_pages: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyticsIds": sorted(self.analytics_ids),
            "totalWordCount": self.total_word_count,
            "averageWordCount": self.average_word_count,
            "pagesWithSchema": self.pages_with_schema,
            "pagesWithCanonical": self.pages_with_canonical,
            "pagesWithOG": self.pages_with_og,
            "pagesWithTwitterCard": self.pages_with_twitter_card,
            "failedPages": self.failed_pages,
        }


@dataclass(slots=True, frozen=True)
class CrawlResult:
    """Outcome of one crawl. ``partial`` is True when the deadline cut it short."""

    start_url: str
    pages: Tuple[PageRecord, ...]
    site_map: SiteMap
    comprehensive_content: ComprehensiveContent
    site_summary: SiteSummary
    partial: bool = False
    started_at_iso: str = ""
    finished_at_iso: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startUrl": self.start_url,
            "partial": self.partial,
            "startedAtIso": self.started_at_iso,
            "finishedAtIso": self.finished_at_iso,
            "pages": [p.to_dict() for p in self.pages],
            "siteMap": self.site_map.to_dict(),
            "comprehensiveContent": self.comprehensive_content.to_dict(),
            "siteSummary": self.site_summary.to_dict(),
        }
