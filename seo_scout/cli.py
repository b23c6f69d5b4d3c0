#!/usr/bin/env python3
"""
Command-line entry point for SEOScout.

Commands:
  crawl URL   Crawl a site and print or save the report
  serve       Run the HTTP API (POST /api/scrape-multi-page)
  config      Show the effective configuration

Global options:
  --config PATH       YAML/JSON config file (defaults are used when omitted)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --max-pages N       Pages to record, start page included
  --concurrency N     Pages fetched at the same time
  --timeout-ms MS     Deadline for the whole crawl
  --json PATH         Save the JSON report
  --html PATH         Save the HTML report
  --template DIR      Directory with Jinja2 templates
  --pretty            Indent JSON printed to stdout

Example:
  python cli.py crawl https://example.com --max-pages 5 --json report.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from seo_scout import __version__
from seo_scout.api import run_server
from seo_scout.config import load_config
from seo_scout.engine import crawl
from seo_scout.errors import ConfigError, FetchError
from seo_scout.logger import DEFAULT_FORMAT, init_logging
from seo_scout.report.html_report import render_html
from seo_scout.report.json_report import render_json
from seo_scout.utils import is_http_url

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SEOScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default=None,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Logging level (overrides the config file)'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Log file (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SEOScout command group."""
    try:
        cfg = load_config(config_path)
    except (ConfigError, ValidationError, OSError) as e:
        print_error(f'Failed to load configuration: {e}')
    init_logging(
        level=(log_level or cfg.log_level).upper(),
        log_file=str(log_file) if log_file else cfg.log_file,
        log_format=log_format,
    )
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--max-pages', '-n', 'max_pages', type=int, default=None, help='Pages to record, start page included')
@click.option('--concurrency', 'concurrency_limit', type=int, default=None, help='Pages fetched at the same time')
@click.option('--timeout-ms', 'timeout_ms', type=int, default=None, help='Deadline for the whole crawl (ms)')
@click.option('--sitemap/--no-sitemap', 'use_sitemap', default=None, help='Fill up targets from /sitemap.xml')
@click.option('--ignore-robots', is_flag=True, help='Do not consult robots.txt')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Save the JSON report to a file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Save the HTML report to a file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with Jinja2 templates (package template when omitted)'
)
@click.option('--pretty', is_flag=True, help='Indent JSON printed to stdout')
@click.pass_context
def crawl_command(ctx, url, max_pages, concurrency_limit, timeout_ms, use_sitemap, ignore_robots,
                  json_output, html_output, template_dir, pretty):
    """Crawl URL and print or save the report."""
    cfg = ctx.obj['config']
    if not is_http_url(url):
        print_error(f'Invalid URL: "{url}". Must start with http:// or https://')
    try:
        options = cfg.crawl.with_overrides(
            max_pages=max_pages,
            concurrency_limit=concurrency_limit,
            timeout_ms=timeout_ms,
            use_sitemap=use_sitemap,
            respect_robots=False if ignore_robots else None,
        )
    except ValidationError as e:
        print_error(f'Invalid crawl options: {e}')

    click.echo(f'Crawling {url} (max {options.max_pages} pages)', err=True)
    try:
        result = asyncio.run(crawl(url, options))
    except FetchError as e:
        print_error(f'Crawl failed: {e}')

    if not json_output and not html_output:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if pretty else None))
        return

    if json_output:
        try:
            saved_json = render_json(result, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(result, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Failed to save HTML report: {e}')


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Interface to bind (config default 127.0.0.1)')
@click.option('--port', '-p', type=int, default=None, help='Port to listen on (config default 8080)')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP API."""
    cfg = ctx.obj['config']
    overrides = {k: v for k, v in (('host', host), ('port', port)) if v is not None}
    try:
        cfg = cfg.model_validate({**cfg.model_dump(), **overrides})
    except ValidationError as e:
        print_error(f'Invalid server options: {e}')
    run_server(cfg)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
