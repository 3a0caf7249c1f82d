# crawler/sources/base.py
import logging
from abc import ABC
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple

import httpx
import soupsieve
from bs4 import BeautifulSoup

from ..errors import FieldError, FieldInvalid, FieldMissing, InvalidValue
from ..fetch import SINGLE_ATTEMPT, RetryPolicy, fetch_text
from ..models import (
    Author,
    Book,
    Description,
    Isbn,
    PageContext,
    Price,
    SourceId,
    Title,
)

logger = logging.getLogger("crawler.sources")


@dataclass(frozen=True)
class SelectorSet:
    """Compiled CSS selectors for one bookstore. Optional fields may be None."""

    authors: soupsieve.SoupSieve
    title: soupsieve.SoupSieve
    isbn: soupsieve.SoupSieve
    description: Optional[soupsieve.SoupSieve] = None
    price: Optional[soupsieve.SoupSieve] = None

    @classmethod
    def compile(cls, authors, title, isbn, description=None, price=None):
        return cls(
            authors=soupsieve.compile(authors),
            title=soupsieve.compile(title),
            isbn=soupsieve.compile(isbn),
            description=soupsieve.compile(description) if description else None,
            price=soupsieve.compile(price) if price else None,
        )


def node_text(node) -> str:
    return node.get_text().replace("\xa0", " ")


class BookSource(ABC):
    """
    One bookstore: how to fetch its pages and pull fields out of them.

    Subclasses set the class attributes and usually nothing else; the
    field parsers below are driven entirely by ``selectors``. Instances
    share one HTTP client and hold no per-request state, so a single
    instance serves every concurrent task of a run.
    """

    site: ClassVar[SourceId]
    host_fragment: ClassVar[str]
    book_path_markers: ClassVar[Tuple[str, ...]]
    selectors: ClassVar[SelectorSet]

    def __init__(self, client: httpx.AsyncClient, retry_policy: Optional[RetryPolicy] = None):
        self.client = client
        self.retry_policy = retry_policy or SINGLE_ATTEMPT

    def __repr__(self):
        return f"{type(self).__name__}(site={self.site.value!r})"

    def matches(self, url: str) -> bool:
        return self.host_fragment in url

    def is_book_url(self, url: str) -> bool:
        """Sitemap filter: does this location look like a book page?"""
        return self.matches(url) and any(m in url for m in self.book_path_markers)

    async def fetch(self, url: str) -> PageContext:
        html = await fetch_text(self.client, url, self.retry_policy)
        return BeautifulSoup(html, "lxml")

    def _select(self, pattern, ctx, field, url) -> list:
        nodes = pattern.select(ctx)
        if not nodes:
            raise FieldMissing(field, url)
        return nodes

    def parse_authors(self, ctx: PageContext, url: str) -> List[Author]:
        nodes = self._select(self.selectors.authors, ctx, "authors", url)
        return [Author.normalize(node_text(n)) for n in nodes]

    def parse_title(self, ctx: PageContext, url: str) -> Title:
        nodes = self._select(self.selectors.title, ctx, "title", url)
        return Title.normalize("".join(node_text(n) for n in nodes))

    def parse_isbn(self, ctx: PageContext, url: str) -> Isbn:
        nodes = self._select(self.selectors.isbn, ctx, "isbn", url)
        raw = nodes[-1].get_text().replace("\xa0", "")
        try:
            return Isbn.extract(raw)
        except InvalidValue as e:
            raise FieldInvalid("isbn", url, e.reason) from e

    def parse_description(self, ctx: PageContext, url: str) -> Optional[Description]:
        if self.selectors.description is None:
            return None
        node = self.selectors.description.select_one(ctx)
        if node is None:
            return None
        return Description.normalize(node_text(node))

    def parse_price(self, ctx: PageContext, url: str) -> Optional[Price]:
        if self.selectors.price is None:
            return None
        node = self.selectors.price.select_one(ctx)
        if node is None:
            return None
        raw = node.get("content") or node.get_text()
        try:
            return Price.parse(raw)
        except InvalidValue as e:
            raise FieldInvalid("price", url, e.reason) from e


async def parse_record(source: BookSource, url: str) -> Book:
    """
    Fetch one URL with ``source`` and build its Book.

    Fields are parsed in a fixed order: authors, title, isbn, then the
    optional description and price. The first field failure aborts the
    URL; nothing partial is returned.

    Args:
        source (BookSource): Source whose host matches ``url``
        url (str): Book detail page

    Returns:
        Book: Fully validated record

    Raises:
        FetchError: Page could not be fetched
        FieldError: A field was missing or invalid (logged with field and URL)
    """
    ctx = await source.fetch(url)
    try:
        authors = source.parse_authors(ctx, url)
        title = source.parse_title(ctx, url)
        isbn = source.parse_isbn(ctx, url)
        description = source.parse_description(ctx, url)
        price = source.parse_price(ctx, url)
    except FieldError as e:
        logger.warning(
            f"Field {e.field} failed for {url}: {e.reason}",
            extra={"event": "field.failed", "field": e.field, "url": url},
        )
        raise
    return Book(
        site=source.site,
        source=url,
        authors=tuple(authors),
        isbn=isbn,
        title=title,
        description=description,
        price=price,
    )
