# === FILE: seo_scout/config.py ===
"""
Loading and validation of SEOScout configuration.

Crawl options and service settings are pydantic models; files may be YAML or
JSON. Unknown fields are rejected instead of being silently ignored.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from seo_scout.errors import ConfigError

__all__ = ["CrawlOptions", "ServiceConfig", "load_config", "DEFAULT_USER_AGENT"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; SEOScoutBot/1.0; +https://github.com/seo-scout/seo-scout)"
)


class CrawlOptions(BaseModel):
    """Options for one crawl invocation."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    max_pages: int = Field(10, ge=1, le=50, description="Upper bound on recorded pages, start page included.")
    timeout_ms: int = Field(60_000, gt=0, description="Deadline for the whole crawl.")
    fetch_timeout_ms: int = Field(15_000, gt=0, description="Timeout for a single request.")
    concurrency_limit: int = Field(3, ge=1, le=10, description="Pages fetched at the same time.")
    keyword_limit: int = Field(20, ge=1, le=200, description="Top-N keywords kept per page.")
    retry_times: int = Field(0, ge=0, le=5, description="Retries for 5xx/429/network errors on linked pages.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1)
    respect_robots: bool = Field(True, description="Skip links disallowed by robots.txt.")
    use_sitemap: bool = Field(False, description="Fill up targets from /sitemap.xml.")
    include_screenshots: bool = Field(False, description="Accepted for API compatibility; not captured.")

    @field_validator("user_agent")
    def _strip_user_agent(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_agent must not be blank")
        return v

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000

    @property
    def fetch_timeout(self) -> float:
        return self.fetch_timeout_ms / 1000

    def with_overrides(self, **overrides: Any) -> CrawlOptions:
        """Return a validated copy; ``None`` values are ignored."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return CrawlOptions.model_validate(data)


class ServiceConfig(BaseModel):
    """Settings for the CLI and the HTTP service."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = "127.0.0.1"
    port: int = Field(8080, ge=1, le=65535)
    log_level: str = "INFO"
    log_file: Union[str, None] = None
    crawl: CrawlOptions = Field(default_factory=CrawlOptions)

    @field_validator("log_level")
    def _upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ServiceConfig:
    """
    Read YAML or JSON and return a validated ServiceConfig.

    ``None`` returns the defaults. A missing file raises FileNotFoundError,
    a malformed one ConfigError, invalid values pydantic's ValidationError.
    """
    if path is None:
        return ServiceConfig()

    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data: Dict[str, Any] = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigError(f"Unsupported config format: {suffix}")

    return ServiceConfig(**data)
