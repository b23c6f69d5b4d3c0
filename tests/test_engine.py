# File: tests/test_engine.py
import asyncio

import pytest
from pydantic import ValidationError

import seo_scout.engine as engine_module
from seo_scout.config import CrawlOptions
from seo_scout.engine import Engine, build_options
from seo_scout.errors import FetchError


def test_build_options_variants():
    opts = CrawlOptions(max_pages=2)
    assert build_options(opts) is opts
    assert build_options(None) == CrawlOptions()
    assert build_options({"maxPages": 4}).max_pages == 4
    assert build_options({"max_pages": 4}).max_pages == 4
    with pytest.raises(ValidationError):
        build_options({"unknown": 1})


def test_engine_run(monkeypatch, sample_result):
    seen = []

    async def fake_crawl(url, options):
        seen.append((url, options))
        return sample_result

    monkeypatch.setattr(engine_module, "crawl", fake_crawl)
    result = Engine({"maxPages": 3}).run("https://acme.test/")

    assert result is sample_result
    assert seen[0][0] == "https://acme.test/"
    assert seen[0][1].max_pages == 3


def test_engine_run_propagates_fetch_error(monkeypatch):
    async def failing(url, options):
        raise FetchError(url, "connection refused")

    monkeypatch.setattr(engine_module, "crawl", failing)
    with pytest.raises(FetchError):
        Engine().run("https://acme.test/")


def test_engine_run_outer_timeout(monkeypatch, sample_result):
    async def slow(url, options):
        await asyncio.sleep(5)
        return sample_result

    monkeypatch.setattr(engine_module, "crawl", slow)
    with pytest.raises(asyncio.TimeoutError):
        Engine().run("https://acme.test/", timeout=0.1)
