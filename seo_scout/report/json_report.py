# seo_scout/report/json_report.py

"""
JSON report generation for SEOScout.

Serializes a CrawlResult to a file.
"""
import json
from pathlib import Path

from seo_scout.crawler.models import CrawlResult


def render_json(result: CrawlResult, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *result* as JSON at the given path.

    :param result: finished crawl
    :param output_path: path of the JSON file; parent directories are created
    :param pretty: indent with two spaces
    :return: Path of the saved file

    Example:
    ```python
    from seo_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/example.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
