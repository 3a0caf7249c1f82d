# crawler/crawler.py
import asyncio
import logging
from typing import List, Optional

import httpx

from scheduler.scheduler import RunResult, Scheduler

from .config import CrawlerConfig, build_client
from .fetch import RetryPolicy
from .sitemap import collect_source_urls, interleave
from .sources.registry import build_sources

logger = logging.getLogger("crawler")


class Crawler:
    """
    Owns everything a run shares: config, HTTP client and source instances.

    Use as ``async with Crawler(config) as c: result = await c.run()``.
    A client passed in (tests inject one on an httpx.MockTransport) is
    still closed by close().
    """

    def __init__(self, config: CrawlerConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client or build_client(config)
        self.retry_policy = RetryPolicy(
            max_retries=config.max_retries, backoff_cap=config.backoff_cap
        )
        self.sources = build_sources(self.client, self.retry_policy)

    async def close(self):
        """Close the HTTP client and release its connections."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def collect_urls(self) -> List[str]:
        """
        Gather up to count_per_source book URLs per source from the
        configured sitemaps and interleave them round-robin.

        Sitemaps are fetched concurrently; a source whose sitemap fails
        contributes nothing.
        """
        limit = self.config.count_per_source
        per_source = await asyncio.gather(
            *(
                collect_source_urls(s, self.config.sitemaps[s.site], limit)
                for s in self.sources
                if s.site in self.config.sitemaps
            )
        )
        urls = interleave(per_source)
        logger.info(f"Found {len(urls)} book links across {len(per_source)} sources")
        return urls

    async def run(self, urls: Optional[List[str]] = None) -> RunResult:
        """
        Crawl ``urls`` (or the sitemap URLs when omitted) and aggregate results.

        Returns:
            RunResult: Books plus per-URL failures
        """
        if urls is None:
            urls = await self.collect_urls()
        scheduler = Scheduler(self.sources, self.config.concurrency)
        return await scheduler.run(urls)
