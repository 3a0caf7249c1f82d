# scheduler/scheduler.py
import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Type

from crawler.errors import CrawlerError, FetchError, FieldError, UnknownSource
from crawler.models import Book
from crawler.sources.base import BookSource, parse_record

logger = logging.getLogger("scheduler")


@dataclass
class Failure:
    url: str
    error: Exception

    @property
    def stage(self) -> str:
        if isinstance(self.error, UnknownSource):
            return "dispatch"
        if isinstance(self.error, FetchError):
            return "fetch"
        if isinstance(self.error, FieldError):
            return f"field:{self.error.field}"
        return "unexpected"


@dataclass
class RunResult:
    """
    Outcome of one scheduler run.

    ``books`` and ``failures`` are in completion order, which carries no
    meaning; treat both as unordered collections.
    """

    books: List[Book] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)
    dispatched: int = 0

    @property
    def success_count(self) -> int:
        return len(self.books)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def failures_of(self, kind: Type[Exception]) -> List[Failure]:
        return [f for f in self.failures if isinstance(f.error, kind)]


class Scheduler:
    """
    Run parse_record over a stream of URLs with at most ``concurrency``
    in flight.

    Every URL is processed independently, duplicates included. A URL's
    failure never affects the others; it is recorded in the RunResult.
    """

    def __init__(self, sources: Sequence[BookSource], concurrency: int):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.sources = tuple(sources)
        self.concurrency = concurrency
        self.semaphore = asyncio.Semaphore(concurrency)
        self.completed = 0

    def resolve(self, url: str) -> BookSource:
        """
        Pick the source whose host fragment occurs in ``url``.

        Raises:
            UnknownSource: If no source matches
        """
        for source in self.sources:
            if source.matches(url):
                return source
        raise UnknownSource(url)

    async def process_url(self, url: str, total: int, result: RunResult):
        """
        Dispatch, fetch and parse one URL, recording the outcome in ``result``.

        Unknown hosts fail before taking a concurrency slot. Errors other
        than CrawlerError are logged with a traceback and recorded as
        failures of this URL only.
        """
        try:
            source = self.resolve(url)
            result.dispatched += 1
            async with self.semaphore:
                book = await parse_record(source, url)
            result.books.append(book)
        except UnknownSource as e:
            logger.warning(f"{e}", extra={"event": "dispatch.failed", "url": url})
            result.failures.append(Failure(url, e))
        except CrawlerError as e:
            result.failures.append(Failure(url, e))
        except Exception as e:
            logger.exception(f"Unexpected error processing {url}: {e}")
            result.failures.append(Failure(url, e))
        finally:
            self.completed = next(self._progress)
            logger.debug(f"Progress {self.completed}/{total}")

    async def run(self, urls: Sequence[str]) -> RunResult:
        """
        Process every URL and return the aggregated outcome.

        Args:
            urls (Sequence[str]): URLs in dispatch order, already
                interleaved across sources

        Returns:
            RunResult: Complete success/failure tally, even if every URL failed

        Logs:
            - Info "run.summary" event with success and failure counts
        """
        result = RunResult()
        total = len(urls)
        # progress restarts with every run
        self._progress = itertools.count(1)
        self.completed = 0
        logger.info(f"Scheduling {total} URLs with concurrency {self.concurrency}")

        await asyncio.gather(*(self.process_url(u, total, result) for u in urls))

        logger.info(
            f"Run finished: {result.success_count} succeeded, {result.failure_count} failed",
            extra={
                "event": "run.summary",
                "successes": result.success_count,
                "failures": result.failure_count,
            },
        )
        return result
