# crawler/sources/labirint.py
import logging

from ..errors import FetchError
from ..models import PageContext, SourceId
from .base import BookSource, SelectorSet

logger = logging.getLogger("crawler.sources")


class LabirintSource(BookSource):
    """labirint.ru product pages. Retries per the configured policy."""

    site = SourceId.LABIRINT
    host_fragment = "labirint.ru"
    book_path_markers = ("/books/",)
    selectors = SelectorSet.compile(
        authors="._left_u86in_12 > div:nth-child(1) > div:nth-child(2)",
        title="._h1_5o36c_18",
        isbn="._right_u86in_12 > div:nth-child(2) > div:nth-child(2)",
    )

    async def fetch(self, url: str) -> PageContext:
        # Everything outside the books catalogue is a listing or promo page.
        if "books" not in url:
            reason = "non-book URL rejected"
            logger.warning(
                f"Rejected non-book URL {url}",
                extra={"event": "fetch.failed", "url": url, "cause": reason},
            )
            raise FetchError(url, reason)
        return await super().fetch(url)
