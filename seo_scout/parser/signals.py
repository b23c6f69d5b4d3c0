"""SEO signal extraction for SEOScout.

:func:`extract` turns raw HTML into an immutable
:class:`~seo_scout.crawler.models.ExtractedSignals`. It never touches the
network and never raises on bad markup: anything that cannot be located is
simply left empty.

What is collected
-----------------
* ``<title>``, canonical link and ``<html lang>``.
* Meta tags by ``name`` / ``http-equiv``; ``og:*`` and ``twitter:*`` tags go
  to their own mappings. The first occurrence of a name wins.
* Analytics IDs found by pattern in scripts, script/iframe ``src`` and
  ``noscript`` blocks (GA4, UA, GTM, Google Ads, Facebook Pixel) plus named
  tracking tools (Hotjar, Clarity, ...).
* Headings h1-h6 in document order.
* Raw JSON-LD payloads and the ``@type`` values of those that parse.
* Top-N keywords of the visible text, see :mod:`seo_scout.parser.keywords`.
* Emails and phone numbers from text, ``mailto:`` and ``tel:`` links.
"""
from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any, Dict, Iterable, List, Tuple
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from seo_scout.crawler.models import Contacts, ExtractedSignals, Heading
from seo_scout.parser.keywords import DEFAULT_KEYWORD_LIMIT, top_keywords

__all__: Sequence[str] = ("extract", "extract_analytics_ids")

_ANALYTICS_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(r"\bG-[A-Z0-9]{7,12}\b"),
    re.compile(r"\bUA-\d{4,10}-\d{1,4}\b"),
    re.compile(r"\bGTM-[A-Z0-9]{4,10}\b"),
    re.compile(r"\bAW-\d{6,12}\b"),
)
_FB_PIXEL_RE = re.compile(r"""fbq\s*\(\s*['"]init['"]\s*,\s*['"](\d+)['"]""")

# (name, markers) checked against lower-cased script sources and bodies.
_TRACKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Google Analytics", ("google-analytics.com", "gtag(")),
    ("Google Tag Manager", ("googletagmanager.com/gtm.js", "googletagmanager.com/ns.html")),
    ("Facebook Pixel", ("connect.facebook.net", "fbq(")),
    ("Hotjar", ("hotjar", "_hjsettings")),
    ("Microsoft Clarity", ("clarity.ms",)),
    ("HubSpot", ("js.hs-scripts.com", "js.hs-analytics.net")),
    ("Intercom", ("widget.intercom.io", "intercomsettings")),
    ("Segment", ("cdn.segment.com",)),
    ("Mixpanel", ("mixpanel",)),
    ("Plausible", ("plausible.io",)),
    ("Matomo", ("matomo", "piwik")),
)

# (name, markers) checked against the lower-cased raw document.
_TECHNOLOGIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Next.js", ("_next/static", 'id="__next"')),
    ("Nuxt.js", ("__nuxt",)),
    ("Gatsby", ("___gatsby",)),
    ("React", ("data-reactroot", "react-dom")),
    ("Vue.js", ("data-v-app", "vue.min.js", "vue.global")),
    ("Angular", ("ng-version",)),
    ("Svelte", ("svelte-",)),
    ("WordPress", ("wp-content", "wp-includes")),
    ("Shopify", ("cdn.shopify.com",)),
    ("Squarespace", ("static1.squarespace.com",)),
    ("Wix", ("static.wixstatic.com",)),
    ("Webflow", ("webflow.js", "data-wf-page")),
    ("Bootstrap", ("bootstrap.min.css", "bootstrap.min.js")),
    ("jQuery", ("jquery",)),
    ("Stripe", ("js.stripe.com",)),
    ("Cloudflare", ("cdnjs.cloudflare.com", "cdn-cgi/")),
)

_SOCIAL_HOSTS: Tuple[str, ...] = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "linkedin.com",
    "instagram.com",
    "youtube.com",
    "tiktok.com",
    "pinterest.com",
    "github.com",
)

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(
    r"(?<![\w+])"
    r"(?:"
    r"(?:\+?1[-.\s])?\(?\d{3}\)?[-.\s]\d{3}[-.\s]\d{4}"  # North American
    r"|\+\d{1,3}(?:[-.\s]\d{1,4}){2,4}"  # international, "+" mandatory
    r")"
    r"(?!\d)"
)
_WS_RE = re.compile(r"\s+")
_INVISIBLE = ("script", "style", "noscript", "template", "title", "svg")


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value).strip()
    return str(value).strip()


def _squash(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _meta_tags(soup: BeautifulSoup) -> Tuple[Dict[str, str], Dict[str, str], Dict[str, str]]:
    meta: Dict[str, str] = {}
    og: Dict[str, str] = {}
    twitter: Dict[str, str] = {}
    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        charset = _attr(tag, "charset")
        if charset:
            meta.setdefault("charset", charset.lower())
        name = (_attr(tag, "property") or _attr(tag, "name") or _attr(tag, "http-equiv")).lower()
        if not name:
            continue
        content = _squash(_attr(tag, "content"))
        if name.startswith("og:"):
            og.setdefault(name, content)
        elif name.startswith("twitter:"):
            twitter.setdefault(name, content)
        else:
            meta.setdefault(name, content)
    return meta, og, twitter


def _canonical(soup: BeautifulSoup) -> str:
    for tag in soup.find_all("link"):
        if not isinstance(tag, Tag):
            continue
        rel = tag.get("rel") or []
        rels = rel if isinstance(rel, list) else str(rel).split()
        if "canonical" in (r.lower() for r in rels):
            return _attr(tag, "href")
    return ""


def _script_sources(soup: BeautifulSoup) -> List[str]:
    """Bodies and src attributes of scripts, iframes and noscript blocks."""
    chunks: List[str] = []
    for tag in soup.find_all(["script", "iframe", "noscript"]):
        if not isinstance(tag, Tag):
            continue
        src = _attr(tag, "src")
        if src:
            chunks.append(src)
        if tag.name != "iframe":
            body = tag.get_text()
            if body and body.strip():
                chunks.append(body)
    return chunks


def extract_analytics_ids(chunks: Iterable[str]) -> frozenset[str]:
    """Pattern-match analytics/tag IDs. Scripts are never executed."""
    found: set[str] = set()
    for chunk in chunks:
        for pattern in _ANALYTICS_PATTERNS:
            found.update(pattern.findall(chunk))
        found.update(f"FB-{pixel}" for pixel in _FB_PIXEL_RE.findall(chunk))
    return frozenset(found)


def _detect(markers_table: Tuple[Tuple[str, Tuple[str, ...]], ...], haystack: str) -> Tuple[str, ...]:
    return tuple(name for name, markers in markers_table if any(m in haystack for m in markers))


def _schema_types(payload: Any) -> List[str]:
    types: List[str] = []
    if isinstance(payload, list):
        for item in payload:
            types.extend(_schema_types(item))
    elif isinstance(payload, dict):
        kind = payload.get("@type")
        if isinstance(kind, str):
            types.append(kind)
        elif isinstance(kind, list):
            types.extend(k for k in kind if isinstance(k, str))
        graph = payload.get("@graph")
        if isinstance(graph, list):
            types.extend(_schema_types(graph))
    return types


def _json_ld(soup: BeautifulSoup) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    blocks: List[str] = []
    types: List[str] = []
    for tag in soup.find_all("script"):
        if not isinstance(tag, Tag) or _attr(tag, "type").lower() != "application/ld+json":
            continue
        raw = tag.get_text().strip()
        if not raw:
            continue
        blocks.append(raw)
        try:
            types.extend(_schema_types(json.loads(raw)))
        except (ValueError, RecursionError):
            continue
    return tuple(blocks), tuple(dict.fromkeys(types))


def _links(soup: BeautifulSoup) -> Tuple[List[str], List[str], List[str]]:
    """mailto addresses, tel numbers and social profile links."""
    emails: List[str] = []
    phones: List[str] = []
    social: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = _attr(tag, "href")
        lowered = href.lower()
        if lowered.startswith("mailto:"):
            address = unquote(href[7:].split("?", 1)[0]).strip().lower()
            if _EMAIL_RE.fullmatch(address):
                emails.append(address)
        elif lowered.startswith("tel:"):
            number = unquote(href[4:]).strip()
            if sum(ch.isdigit() for ch in number) >= 7:
                phones.append(number)
        elif lowered.startswith(("http://", "https://")):
            host = (urlsplit(href).hostname or "").lower()
            if any(host == s or host.endswith("." + s) for s in _SOCIAL_HOSTS):
                social.append(href)
    return emails, phones, social


def _headings(soup: BeautifulSoup) -> Tuple[Heading, ...]:
    headings: List[Heading] = []
    for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        if not isinstance(tag, Tag):
            continue
        text = _squash(tag.get_text(" "))
        if text:
            headings.append(Heading(level=int(tag.name[1]), text=text))
    return tuple(headings)


def extract(html: str, keyword_limit: int = DEFAULT_KEYWORD_LIMIT) -> ExtractedSignals:
    """Extract every supported signal from *html*.

    Parameters
    ----------
    html
        Raw markup, possibly malformed or empty.
    keyword_limit
        How many top keywords to keep.
    """
    if not html or not html.strip():
        return ExtractedSignals()
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup:
        return ExtractedSignals()

    title_tag = soup.find("title")
    title = _squash(title_tag.get_text()) if isinstance(title_tag, Tag) else ""
    html_tag = soup.find("html")
    language = _attr(html_tag, "lang") if isinstance(html_tag, Tag) else ""

    meta, og, twitter = _meta_tags(soup)
    canonical = _canonical(soup)

    sources = _script_sources(soup)
    analytics_ids = extract_analytics_ids(sources)
    trackers = frozenset(_detect(_TRACKERS, "\n".join(sources).lower()))
    technologies = _detect(_TECHNOLOGIES, html.lower())
    generator = meta.get("generator", "")
    if generator:
        technologies = tuple(dict.fromkeys(technologies + (generator.split()[0],)))

    schema_blocks, schema_types = _json_ld(soup)
    mail_links, tel_links, social_links = _links(soup)

    # Everything below works on visible content only.
    for element in soup(list(_INVISIBLE)):
        # nested matches go with their ancestor
        if not element.decomposed:
            element.decompose()

    headings = _headings(soup)
    text = _squash(soup.get_text(" "))

    emails = {e.lower() for e in _EMAIL_RE.findall(text)}
    emails.update(mail_links)
    phones = {_squash(p) for p in _PHONE_RE.findall(text)}
    phones.update(tel_links)

    return ExtractedSignals(
        title=title,
        canonical=canonical,
        language=language,
        meta_tags=meta,
        og_tags=og,
        twitter_tags=twitter,
        analytics_ids=analytics_ids,
        trackers=trackers,
        keywords=top_keywords(text, keyword_limit),
        headings=headings,
        schema_blocks=schema_blocks,
        schema_types=schema_types,
        contacts=Contacts(emails=frozenset(emails), phones=frozenset(phones)),
        technologies=technologies,
        social_links=tuple(dict.fromkeys(social_links)),
        word_count=len(text.split()),
    )
