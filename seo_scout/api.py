# File: seo_scout/api.py
"""seo_scout.api: aiohttp.web application exposing the crawl over HTTP.

``POST /api/scrape-multi-page``::

    {"url": "https://example.com", "options": {"maxPages": 5}}

answers ``{"success": true, "data": {...}}`` with 200, ``400`` for a
missing/invalid URL or invalid options and ``500`` when the start page
cannot be fetched.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from aiohttp import web
from pydantic import ValidationError

from seo_scout import __version__
from seo_scout.config import CrawlOptions, ServiceConfig
from seo_scout.engine import crawl
from seo_scout.errors import FetchError
from seo_scout.logger import get_logger
from seo_scout.utils import is_http_url

__all__ = ["CRAWL_ROUTE", "OPTIONS_KEY", "create_app", "run_server"]

CRAWL_ROUTE = "/api/scrape-multi-page"
OPTIONS_KEY = web.AppKey("crawl_options", CrawlOptions)

log = get_logger("api")


def _failure(status: int, error: str, details: Any = None) -> web.Response:
    body: Dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


def _validation_details(exc: ValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}" for err in exc.errors()]


async def handle_scrape(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _failure(400, "Request body must be a JSON object")
    if not isinstance(body, dict):
        return _failure(400, "Request body must be a JSON object")

    url = body.get("url")
    if not url:
        return _failure(400, "URL is required")
    if not is_http_url(url):
        return _failure(400, f'Invalid URL: "{url}". Must start with http:// or https://')

    raw_options = body.get("options")
    if raw_options is None:
        raw_options = {}
    if not isinstance(raw_options, dict):
        return _failure(400, "options must be an object")
    try:
        requested = CrawlOptions.model_validate(raw_options)
    except ValidationError as exc:
        return _failure(400, "Invalid options", _validation_details(exc))
    base: CrawlOptions = request.app[OPTIONS_KEY]
    options = base.with_overrides(**{name: getattr(requested, name) for name in requested.model_fields_set})

    log.info("Multi-page crawl requested: %s (max %d pages)", url, options.max_pages)
    try:
        result = await crawl(url, options)
    except FetchError as exc:
        log.error("Multi-page crawl failed: %s", exc)
        return _failure(500, f"Multi-page scraping failed: {exc.reason}", str(exc))

    return web.json_response({"success": True, "data": result.to_dict()})


async def handle_health(_: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


def create_app(options: Optional[CrawlOptions] = None) -> web.Application:
    """Build the application; *options* are the defaults requests override."""
    app = web.Application()
    app[OPTIONS_KEY] = options or CrawlOptions()
    app.router.add_post(CRAWL_ROUTE, handle_scrape)
    app.router.add_get("/health", handle_health)
    return app


def run_server(config: ServiceConfig) -> None:
    """Serve until interrupted."""
    log.info("Listening on http://%s:%d%s", config.host, config.port, CRAWL_ROUTE)
    web.run_app(create_app(config.crawl), host=config.host, port=config.port, print=None)
