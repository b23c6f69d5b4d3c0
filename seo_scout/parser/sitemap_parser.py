# File: seo_scout/parser/sitemap_parser.py
"""seo_scout.parser.sitemap_parser: <loc> extraction from sitemap.xml."""

from __future__ import annotations

from typing import List

from lxml import etree

__all__ = ["parse_sitemap", "is_sitemap_index"]


def _root(xml_content: str) -> etree._Element | None:
    if not xml_content or not xml_content.strip():
        return None
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(xml_content.strip().encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return None


def parse_sitemap(xml_content: str) -> List[str]:
    """Return the URLs in <loc> tags of a urlset or sitemap index, in document order.

    Args:
        xml_content: sitemap.xml body.

    Returns:
        A possibly empty list; unparseable input yields ``[]``.

    Example:
    ```python
    from seo_scout.parser.sitemap_parser import parse_sitemap

    urls = parse_sitemap(Path("sitemap.xml").read_text(encoding="utf-8"))
    ```
    """
    root = _root(xml_content)
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]


def is_sitemap_index(xml_content: str) -> bool:
    root = _root(xml_content)
    return root is not None and etree.QName(root).localname.lower() == "sitemapindex"
