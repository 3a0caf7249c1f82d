# crawler/cli.py
"""
Command line entry point.

Usage::

    python -m crawler.cli [concurrency] [count_per_source]
    book-crawler 8 100
"""
import argparse
import asyncio
import logging
import sys
import time
from typing import List, Optional, Tuple

from pydantic import ValidationError

from scheduler.reporter import print_summary, write_books_csv

from .config import CrawlerConfig
from .crawler import Crawler
from .errors import ArgumentError
from .log import setup_logging

logger = logging.getLogger("crawler.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="book-crawler",
        description="Collect book metadata from bookstore sitemaps into a CSV file",
    )
    parser.add_argument(
        "concurrency", nargs="?", help="Pages fetched at the same time (>= 1)"
    )
    parser.add_argument(
        "count_per_source", nargs="?", help="Book URLs taken from each sitemap (>= 1)"
    )
    return parser


def positive_int(name: str, value: Optional[str]) -> Optional[int]:
    """
    Convert an optional positional argument.

    Raises:
        ArgumentError: If the value is not an integer or is below 1
    """
    if value is None:
        return None
    try:
        number = int(value)
    except ValueError:
        raise ArgumentError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise ArgumentError(f"{name} must be >= 1, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> Tuple[Optional[int], Optional[int]]:
    args = build_parser().parse_args(argv)
    return (
        positive_int("concurrency", args.concurrency),
        positive_int("count_per_source", args.count_per_source),
    )


async def run(config: CrawlerConfig):
    async with Crawler(config) as crawler:
        return await crawler.run()


def main(argv: Optional[List[str]] = None) -> None:
    """Validate arguments, crawl, export and print the summary."""
    try:
        concurrency, count = parse_args(argv)
        config = CrawlerConfig.from_env(concurrency=concurrency, count_per_source=count)
    except (ArgumentError, ValidationError) as exc:
        setup_logging(log_dir=None)
        logger.error(f"Invalid arguments: {exc}")
        sys.exit(2)

    setup_logging(config.log_level, config.log_dir)
    logger.info(
        f"Starting crawl (concurrency={config.concurrency}, "
        f"count_per_source={config.count_per_source})"
    )
    start = time.monotonic()

    result = asyncio.run(run(config))
    logger.info(f"Done in {time.monotonic() - start:.1f}s")

    try:
        write_books_csv(result.books, config.output_path)
    except OSError as exc:
        logger.error(f"Export failed: {exc}")
        sys.exit(1)

    print_summary(result)


if __name__ == "__main__":
    main()
