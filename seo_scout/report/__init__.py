# File: seo_scout/report/__init__.py
"""seo_scout.report: JSON and HTML report writers used by the CLI."""

from __future__ import annotations

from .html_report import DEFAULT_TEMPLATE_DIR, render_html
from .json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
