# crawler/errors.py
from typing import Optional


class CrawlerError(Exception):
    """Base class for every failure the crawl pipeline reports."""


class FetchError(CrawlerError):
    """
    A page could not be fetched.

    Raised directly for URLs a source refuses before any network I/O;
    the subclasses below describe what went wrong on the wire.
    """

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class NetworkError(FetchError):
    """Connection level failure (DNS, refused, reset, protocol)."""


class FetchTimeout(FetchError):
    """Connect or read timeout."""


class HttpStatusError(FetchError):
    """The server answered with a non-success status."""

    def __init__(self, url: str, status: int, retry_after: Optional[float] = None):
        self.status = status
        self.retry_after = retry_after
        super().__init__(url, f"HTTP {status}")

    @property
    def retryable(self) -> bool:
        return self.status == 429 or self.status >= 500


class FieldError(CrawlerError):
    """A required field could not be extracted from a fetched page."""

    def __init__(self, field: str, url: str, reason: str):
        self.field = field
        self.url = url
        self.reason = reason
        super().__init__(f"{field} for {url}: {reason}")


class FieldMissing(FieldError):
    def __init__(self, field: str, url: str):
        super().__init__(field, url, "selector matched nothing")


class FieldInvalid(FieldError):
    pass


class UnknownSource(CrawlerError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No source matches {url}")


class ArgumentError(CrawlerError):
    """Bad command line input. Fatal, raised before any network activity."""


class InvalidValue(ValueError):
    """A raw string failed value-type validation."""

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"{reason}: {raw!r}")


class InvalidIsbn(InvalidValue):
    pass


class NoIsbnCandidate(InvalidValue):
    pass


class InvalidPrice(InvalidValue):
    pass
