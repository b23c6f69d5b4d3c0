# seo_scout/__init__.py
"""
SEOScout package initializer.
Defines package version and exposes the crawl entry points and the CLI.
"""
__version__ = "0.2.0"

from seo_scout.engine import Engine, crawl  # noqa: E402

# Expose CLI entry point
from .cli import cli  # noqa: E402

__all__ = ["__version__", "Engine", "crawl", "cli"]
