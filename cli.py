# cli.py

"""
Thin launcher so the CLI also runs from a source checkout:

    python cli.py crawl https://example.com --max-pages 5 --json reports/example.json
"""
from seo_scout.cli import cli

if __name__ == '__main__':
    cli()
