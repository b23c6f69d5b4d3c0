# File: tests/test_crawler.py
# Async crawler tests against local aiohttp sites
from __future__ import annotations

import asyncio
import json
import time

import pytest
from aiohttp import web

from conftest import ABOUT_HTML, HOME_HTML, build_site, serve_app, slow_route
from seo_scout.classifier import PageType
from seo_scout.config import CrawlOptions
from seo_scout.crawler.crawler import SiteCrawler
from seo_scout.crawler.models import CrawlResult
from seo_scout.errors import FetchError, PageNote

#: seconds a "slow" handler sleeps in the deadline test
SLOW_SLEEP: float = 2.0


def links(*paths: str) -> str:
    anchors = "".join(f'<a href="{p}">{p}</a>' for p in paths)
    return f"<html><head><title>Start</title></head><body><h1>Start</h1>{anchors}</body></html>"


async def run_crawl(url: str, **options) -> CrawlResult:
    async with SiteCrawler(CrawlOptions(**options)) as crawler:
        return await asyncio.wait_for(crawler.crawl(url), timeout=30)


def paths_of(result) -> list[str]:
    return [p.url.split("127.0.0.1", 1)[1].split("/", 1)[1] for p in result.pages]


# --------------------------------------------------------------------------- #
#                                Basic crawl                                  #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_home_about_contact(acme_site: str):
    result = await run_crawl(acme_site + "/", max_pages=3)

    assert [p.page_type for p in result.pages] == [PageType.HOME, PageType.ABOUT, PageType.CONTACT]
    assert result.site_map.total_pages == len(result.pages) == 3
    assert dict(result.site_map.page_types) == {"home": 1, "about": 1, "contact": 1}
    assert result.partial is False
    assert result.start_url == acme_site + "/"

    home = result.pages[0]
    assert home.extracted_signals.title == "Acme Widgets"
    assert home.extracted_signals.analytics_ids == {"G-ABC1234567"}
    assert home.status_code == 200
    assert home.raw_html_length == len(HOME_HTML)
    assert result.site_summary.analytics_ids == {"G-ABC1234567"}


@pytest.mark.asyncio()
async def test_result_is_json_serialisable(acme_site: str):
    result = await run_crawl(acme_site, max_pages=3)
    data = json.loads(json.dumps(result.to_dict()))

    assert set(data) >= {"pages", "siteMap", "comprehensiveContent", "siteSummary"}
    assert data["siteMap"]["totalPages"] == len(data["pages"])
    assert data["pages"][0]["pageType"] == "home"
    assert "metaTags" in data["pages"][0]["extractedSignals"]


@pytest.mark.asyncio()
async def test_max_pages_limit(acme_site: str):
    only_home = await run_crawl(acme_site, max_pages=1)
    two = await run_crawl(acme_site, max_pages=2)

    assert [p.page_type for p in only_home.pages] == [PageType.HOME]
    assert len(two.pages) == 2
    assert two.pages[1].page_type is PageType.ABOUT


@pytest.mark.asyncio()
async def test_repeated_crawls_agree(acme_site: str):
    first = await run_crawl(acme_site, max_pages=3)
    second = await run_crawl(acme_site, max_pages=3)

    assert dict(first.site_map.page_types) == dict(second.site_map.page_types)
    assert [p.url for p in first.pages] == [p.url for p in second.pages]
    assert first.comprehensive_content.all_keywords == second.comprehensive_content.all_keywords


@pytest.mark.asyncio()
async def test_duplicate_links_recorded_once(unused_tcp_port: int):
    app = build_site({"/": links("/a", "/a?x=1", "/a#top", "/a/", "/a?x=2#y"), "/a": ABOUT_HTML})
    async for base in serve_app(app, unused_tcp_port):
        result = await run_crawl(base, max_pages=10)

    assert paths_of(result) == ["", "a"]
    assert len({p.url for p in result.pages}) == len(result.pages)


# --------------------------------------------------------------------------- #
#                                  Failures                                   #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_unreachable_start_raises(unused_tcp_port: int):
    with pytest.raises(FetchError):
        await run_crawl(f"http://127.0.0.1:{unused_tcp_port}/")


@pytest.mark.asyncio()
async def test_start_page_404_raises(unused_tcp_port: int):
    app = build_site({"/other": ABOUT_HTML})
    async for base in serve_app(app, unused_tcp_port):
        with pytest.raises(FetchError) as info:
            await run_crawl(base + "/")
    assert info.value.status_code == 404


@pytest.mark.asyncio()
async def test_invalid_start_url_raises():
    with pytest.raises(FetchError):
        await run_crawl("ftp://example.com/")


@pytest.mark.asyncio()
async def test_crawl_requires_context_manager():
    with pytest.raises(RuntimeError):
        await SiteCrawler().crawl("http://example.com/")


@pytest.mark.asyncio()
async def test_failed_linked_page_becomes_error_record(unused_tcp_port: int):
    async def broken(_):
        return web.Response(status=500, text="boom")

    app = build_site({"/": links("/about", "/broken"), "/about": ABOUT_HTML, "/broken": broken})
    async for base in serve_app(app, unused_tcp_port):
        result = await run_crawl(base, max_pages=5)

    by_type = {p.page_type: p for p in result.pages}
    assert set(by_type) == {PageType.HOME, PageType.ABOUT, PageType.ERROR}
    error = by_type[PageType.ERROR]
    assert error.url.endswith("/broken")
    assert error.status_code == 500
    assert error.error and "500" in error.error
    assert error.extracted_signals.is_empty
    assert by_type[PageType.ABOUT].extracted_signals.title == "About Acme"
    assert result.site_summary.failed_pages == 1
    assert result.site_map.page_types["error"] == 1


@pytest.mark.asyncio()
async def test_missing_linked_page_recorded_as_error(unused_tcp_port: int):
    app = build_site({"/": links("/missing")})
    async for base in serve_app(app, unused_tcp_port):
        result = await run_crawl(base)

    assert [p.page_type for p in result.pages] == [PageType.HOME, PageType.ERROR]
    assert result.pages[1].status_code == 404


@pytest.mark.asyncio()
async def test_retry_on_server_error(unused_tcp_port: int):
    call_count = {"n": 0}

    async def flaky(_):
        call_count["n"] += 1
        if call_count["n"] <= 1:
            return web.Response(status=503)
        return web.Response(text="<h1>Recovered</h1>", content_type="text/html")

    app = build_site({"/": links("/flaky"), "/flaky": flaky})
    async for base in serve_app(app, unused_tcp_port):
        result = await run_crawl(base, retry_times=1)

    assert call_count["n"] == 2
    assert result.pages[1].page_type is not PageType.ERROR
    assert result.pages[1].extracted_signals.headings_at(1) == ("Recovered",)


@pytest.mark.asyncio()
async def test_no_retry_by_default(unused_tcp_port: int):
    call_count = {"n": 0}

    async def flaky(_):
        call_count["n"] += 1
        return web.Response(status=503)

    app = build_site({"/": links("/flaky"), "/flaky": flaky})
    async for base in serve_app(app, unused_tcp_port):
        result = await run_crawl(base)

    assert call_count["n"] == 1
    assert result.pages[1].page_type is PageType.ERROR


# --------------------------------------------------------------------------- #
#                          Deadline and concurrency                           #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_deadline_returns_partial_result(unused_tcp_port: int):
    app = build_site(
        {
            "/": links("/fast", "/slow"),
            "/fast": ABOUT_HTML,
            "/slow": slow_route("<h1>Slow</h1>", SLOW_SLEEP),
        }
    )
    async for base in serve_app(app, unused_tcp_port):
        start = time.perf_counter()
        result = await run_crawl(base, timeout_ms=800)
        elapsed = time.perf_counter() - start

    assert elapsed < SLOW_SLEEP
    assert result.partial is True
    assert paths_of(result) == ["", "fast"]
    assert result.site_map.total_pages == 2


@pytest.mark.asyncio()
async def test_slow_start_page_raises(unused_tcp_port: int):
    app = build_site({"/": slow_route(links("/about"), SLOW_SLEEP)})
    async for base in serve_app(app, unused_tcp_port):
        with pytest.raises(FetchError):
            await run_crawl(base, timeout_ms=300)


@pytest.mark.asyncio()
async def test_concurrency_is_bounded(unused_tcp_port: int):
    state = {"current": 0, "peak": 0}

    async def tracked(_):
        state["current"] += 1
        state["peak"] = max(state["peak"], state["current"])
        await asyncio.sleep(0.2)
        state["current"] -= 1
        return web.Response(text="<h1>Item</h1>", content_type="text/html")

    pages = [f"/item{i}" for i in range(6)]
    routes = {"/": links(*pages), **{p: tracked for p in pages}}
    async for base in serve_app(build_site(routes), unused_tcp_port):
        result = await run_crawl(base, max_pages=7, concurrency_limit=2)

    assert len(result.pages) == 7
    assert state["peak"] == 2
    # selection order, not completion order
    assert paths_of(result)[1:] == [p.lstrip("/") for p in pages]


# --------------------------------------------------------------------------- #
#                      Redirects, robots.txt and sitemaps                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_redirect_to_known_page_is_dropped(unused_tcp_port: int):
    async def old(_):
        raise web.HTTPFound("/about")

    app = build_site({"/": links("/about", "/old"), "/about": ABOUT_HTML, "/old": old})
    async for base in serve_app(app, unused_tcp_port):
        result = await run_crawl(base)

    assert paths_of(result) == ["", "about"]


@pytest.mark.asyncio()
async def test_respect_robots(unused_tcp_port: int):
    async def robots(_):
        return web.Response(text="User-agent: *\nDisallow: /private", content_type="text/plain")

    routes = {
        "/": links("/private", "/about"),
        "/private": "<h1>Secret</h1>",
        "/about": ABOUT_HTML,
        "/robots.txt": robots,
    }
    async for base in serve_app(build_site(routes), unused_tcp_port):
        honoured = await run_crawl(base)
        ignored = await run_crawl(base, respect_robots=False)

    assert paths_of(honoured) == ["", "about"]
    assert paths_of(ignored) == ["", "private", "about"]
    private = ignored.pages[1]
    assert private.page_type is PageType.GENERAL
    assert PageNote.CLASSIFICATION_FALLBACK.value in private.notes


@pytest.mark.asyncio()
async def test_sitemap_fills_up_targets(unused_tcp_port: int):
    async def sitemap(request: web.Request):
        origin = str(request.url.origin())
        body = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            f"<url><loc>{origin}/pricing</loc></url>"
            f"<url><loc>{origin}/</loc></url>"
            "<url><loc>https://elsewhere.example/pricing</loc></url>"
            "</urlset>"
        )
        return web.Response(text=body, content_type="application/xml")

    routes = {
        "/": "<html><body><h1>No links here</h1></body></html>",
        "/pricing": "<html><head><title>Plans</title></head><body><h1>Plans</h1></body></html>",
        "/sitemap.xml": sitemap,
    }
    async for base in serve_app(build_site(routes), unused_tcp_port):
        without = await run_crawl(base)
        with_sitemap = await run_crawl(base, use_sitemap=True)

    assert paths_of(without) == [""]
    assert paths_of(with_sitemap) == ["", "pricing"]
    assert with_sitemap.pages[1].page_type is PageType.PRICING
