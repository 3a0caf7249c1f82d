# crawler/config.py
import logging
import os
from typing import Dict

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import SourceId

load_dotenv()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_SITEMAPS = {
    SourceId.LABIRINT: "https://www.labirint.ru/sitemap.xml",
    SourceId.IGRASLOV: "https://igraslov.store/product-sitemap.xml",
    SourceId.EKSMO: "https://eksmo.ru/sitemap.xml",
}

SITEMAP_ENV = {
    SourceId.LABIRINT: "LABIRINT_SITEMAP_URL",
    SourceId.IGRASLOV: "IGRASLOV_SITEMAP_URL",
    SourceId.EKSMO: "EKSMO_SITEMAP_URL",
}


class CrawlerConfig(BaseModel):
    """
    Run-wide settings, built once at startup and never mutated.

    Use CrawlerConfig.from_env() to read the process environment (and a
    .env file, if present); keyword overrides win over the environment,
    which is how the CLI positionals are applied.
    """

    model_config = ConfigDict(frozen=True)

    concurrency: int = Field(10, ge=1)
    count_per_source: int = Field(50, ge=1)
    max_retries: int = Field(1, ge=0)
    backoff_cap: float = Field(8.0, gt=0)
    timeout: float = Field(15.0, gt=0)
    connect_timeout: float = Field(5.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    output_path: str = "books.csv"
    log_dir: str = "logs"
    log_level: str = "INFO"
    sitemaps: Dict[SourceId, str] = Field(default_factory=lambda: dict(DEFAULT_SITEMAPS))

    @field_validator("log_level", mode="before")
    @classmethod
    def check_log_level(cls, value):
        level = str(value).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls, **overrides) -> "CrawlerConfig":
        env = {
            "concurrency": os.getenv("CRAWL_CONCURRENCY"),
            "count_per_source": os.getenv("CRAWL_COUNT_PER_SOURCE"),
            "max_retries": os.getenv("CRAWL_RETRIES"),
            "backoff_cap": os.getenv("CRAWL_BACKOFF_CAP"),
            "timeout": os.getenv("CRAWL_TIMEOUT"),
            "connect_timeout": os.getenv("CRAWL_CONNECT_TIMEOUT"),
            "user_agent": os.getenv("CRAWL_USER_AGENT"),
            "output_path": os.getenv("OUTPUT_PATH"),
            "log_dir": os.getenv("LOG_DIR"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        values = {k: v for k, v in env.items() if v}
        values["sitemaps"] = {
            site: os.getenv(var) or DEFAULT_SITEMAPS[site]
            for site, var in SITEMAP_ENV.items()
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def build_client(config: CrawlerConfig) -> httpx.AsyncClient:
    """
    Create the one HTTP client shared by every source for a run.

    The caller owns it and must close it (Crawler.close does).
    """
    return httpx.AsyncClient(
        headers={"User-Agent": config.user_agent},
        timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
        limits=httpx.Limits(max_keepalive_connections=4, keepalive_expiry=30.0),
        follow_redirects=True,
        max_redirects=5,
    )
