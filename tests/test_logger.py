# File: tests/test_logger.py
import logging

import pytest

from seo_scout.logger import DEFAULT_FORMAT, configure, get_logger, init_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    init_logging()


def test_get_logger_children():
    assert get_logger().name == "SEOScout"
    assert get_logger("api").name == "SEOScout.api"
    assert get_logger("api").parent is get_logger()


def test_configure_writes_log_file(tmp_path):
    log_file = tmp_path / "scout.log"
    lg = configure(level="debug", log_file=log_file)

    assert lg.level == logging.DEBUG
    assert lg.propagate is False
    get_logger("crawler").debug("fetched %s", "https://acme.test/")
    for handler in lg.handlers:
        handler.flush()

    line = log_file.read_text(encoding="utf-8").strip()
    assert line.endswith("| DEBUG    | SEOScout.crawler | fetched https://acme.test/")


def test_configure_can_keep_existing_handlers():
    before = len(init_logging().handlers)
    lg = configure(replace_handlers=False)
    assert len(lg.handlers) == before + 1
    assert all(h.formatter._fmt == DEFAULT_FORMAT for h in lg.handlers)
