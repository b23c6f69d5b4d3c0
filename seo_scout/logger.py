# === FILE: seo_scout/logger.py ===
"""Logging setup for SEOScout.

Every module logs through the ``SEOScout`` logger or one of its children
from :func:`get_logger`. Records go to stderr so ``crawl`` output on stdout
stays machine readable; :func:`configure` adds a rotating log file when asked.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "SEOScout"

_LevelT = Union[int, str]


def _console_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the project logger or one of its children (``SEOScout.<name>``)."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set level and handlers of the ``SEOScout`` logger and return it.

    *level* may be a name in any case or a number. A stderr handler is always
    attached, plus a rotating file handler when *log_file* is given. With
    *replace_handlers* off, earlier handlers are kept alongside the new ones.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level.upper() if isinstance(level, str) else level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    lg.addHandler(_console_handler(log_format))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the CLI and the HTTP service entry point."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = init_logging()

__all__ = ["DEFAULT_FORMAT", "logger", "configure", "init_logging", "get_logger"]
