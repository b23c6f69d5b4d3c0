# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Dict, Union

import pytest
import pytest_asyncio
from aiohttp import web

from seo_scout.aggregator import aggregate_results
from seo_scout.classifier import PageType
from seo_scout.crawler.models import CrawlResult, PageRecord
from seo_scout.parser.signals import extract

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Route = Union[str, Handler]

HOME_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Acme Widgets</title>
  <meta name="description" content="Widgets for every workshop">
  <meta property="og:title" content="Acme Widgets">
  <meta name="twitter:card" content="summary">
  <link rel="canonical" href="/">
  <script async src="https://www.googletagmanager.com/gtag/js?id=G-ABC1234567"></script>
  <script>window.dataLayer = []; gtag('config', 'G-ABC1234567');</script>
</head>
<body>
  <h1>Welcome to Acme</h1>
  <p>Acme builds widgets. Our widgets power workshops everywhere.</p>
  <a href="/about">About</a>
  <a href="/contact">Contact</a>
  <a href="/about#team">Team</a>
  <a href="https://other.example/">Partner</a>
  <a href="mailto:hello@acme.test">Mail us</a>
</body>
</html>"""

ABOUT_HTML = """<html><head><title>About Acme</title></head>
<body><h1>About Us</h1><h2>Our team</h2><p>Founded to make widgets simple.</p></body></html>"""

CONTACT_HTML = """<html><head><title>Contact</title></head>
<body><h1>Get in touch</h1><p>Email sales@acme.test or call (555) 123-4567.</p></body></html>"""


def html_route(text: str, status: int = 200) -> Handler:
    async def handler(_: web.Request) -> web.Response:
        return web.Response(text=text, status=status, content_type="text/html")

    return handler


def slow_route(text: str, delay: float) -> Handler:
    async def handler(_: web.Request) -> web.Response:
        await asyncio.sleep(delay)
        return web.Response(text=text, content_type="text/html")

    return handler


def build_site(routes: Dict[str, Route]) -> web.Application:
    """aiohttp app serving *routes*; string values are returned as HTML."""
    app = web.Application()
    for path, route in routes.items():
        app.router.add_get(path, html_route(route) if isinstance(route, str) else route)
    return app


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield its base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def acme_site(unused_tcp_port: int) -> AsyncIterator[str]:
    """Home page linking to /about and /contact."""
    app = build_site({"/": HOME_HTML, "/about": ABOUT_HTML, "/contact": CONTACT_HTML})
    async for url in serve_app(app, unused_tcp_port):
        yield url


def make_record(url: str, page_type: PageType, html: str = "") -> PageRecord:
    signals = extract(html)
    return PageRecord(
        url=url,
        page_type=page_type,
        fetched_at_iso="2026-01-01T00:00:00+00:00",
        raw_html_length=len(html),
        extracted_signals=signals,
        status_code=500 if page_type is PageType.ERROR else 200,
        error="HTTP 500" if page_type is PageType.ERROR else None,
    )


@pytest.fixture()
def sample_result() -> CrawlResult:
    """A small finished crawl built without the network."""
    pages = [
        make_record("https://acme.test/", PageType.HOME, HOME_HTML),
        make_record("https://acme.test/about", PageType.ABOUT, ABOUT_HTML),
        make_record("https://acme.test/broken", PageType.ERROR),
    ]
    return aggregate_results("https://acme.test/", pages, started_at_iso="t0", finished_at_iso="t1")
