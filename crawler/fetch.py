# crawler/fetch.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from .errors import FetchError, FetchTimeout, HttpStatusError, NetworkError
from .utils import exponential_backoff, parse_retry_after, retry_async

logger = logging.getLogger("crawler.fetch")


@dataclass(frozen=True)
class RetryPolicy:
    """
    How hard one logical fetch tries.

    max_retries counts attempts after the first one, so 0 means a single
    attempt. Waits grow as min(2 ** n, backoff_cap) seconds unless the
    server sent Retry-After.
    """

    max_retries: int = 1
    backoff_cap: float = 8.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def wait_for(self, retry_index: int, exc: BaseException) -> float:
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            return retry_after
        return exponential_backoff(retry_index, self.backoff_cap)


SINGLE_ATTEMPT = RetryPolicy(max_retries=0)


def is_retryable(exc: BaseException) -> bool:
    """429, 5xx, timeouts and connection failures are worth another try."""
    if isinstance(exc, HttpStatusError):
        return exc.retryable
    return isinstance(exc, (NetworkError, FetchTimeout))


async def get_once(client: httpx.AsyncClient, url: str) -> str:
    """
    Issue exactly one GET and classify the outcome.

    Returns:
        str: Response body for any 2xx status

    Raises:
        FetchError: Malformed or non-http URL, redirect loop (not retried)
        FetchTimeout: Connect/read/write/pool timeout
        NetworkError: Any other transport failure
        HttpStatusError: Non-2xx response, with Retry-After parsed if sent
    """
    try:
        resp = await client.get(url)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        raise FetchError(url, f"invalid URL: {e}") from e
    except httpx.TooManyRedirects as e:
        raise FetchError(url, f"too many redirects: {e}") from e
    except httpx.TimeoutException as e:
        raise FetchTimeout(url, str(e) or type(e).__name__) from e
    except httpx.RequestError as e:
        raise NetworkError(url, str(e) or type(e).__name__) from e

    if resp.is_success:
        return resp.text
    raise HttpStatusError(
        url,
        resp.status_code,
        retry_after=parse_retry_after(resp.headers.get("Retry-After")),
    )


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    policy: Optional[RetryPolicy] = None,
) -> str:
    """
    Fetch one page, retrying transient failures according to ``policy``.

    The attempt counter starts from zero on every call. When retries run
    out, the last HTTP status error wins over a later network error, so
    a "503 then timeout" sequence is reported as the 503.

    Args:
        client (httpx.AsyncClient): Shared client
        url (str): Page to fetch
        policy (RetryPolicy, optional): Defaults to SINGLE_ATTEMPT

    Returns:
        str: Response body

    Raises:
        FetchError: Terminal failure for this URL
    """
    policy = policy or SINGLE_ATTEMPT
    last_status_error = None

    async def attempt():
        nonlocal last_status_error
        try:
            return await get_once(client, url)
        except HttpStatusError as exc:
            last_status_error = exc
            raise

    def on_retry(attempt_number, wait, exc):
        logger.warning(
            f"Retry {attempt_number}/{policy.max_retries} for {url} in {wait:.1f}s: {exc.reason}",
            extra={
                "event": "fetch.retry",
                "url": url,
                "attempt": attempt_number,
                "wait": wait,
                "cause": exc.reason,
            },
        )

    try:
        return await retry_async(
            attempt,
            max_attempts=policy.max_attempts,
            backoff=policy.wait_for,
            is_retryable=is_retryable,
            sleep=policy.sleep,
            on_retry=on_retry,
        )
    except FetchError as exc:
        final = exc
        if not isinstance(exc, HttpStatusError) and last_status_error is not None:
            final = last_status_error
        logger.error(
            f"Fetch failed {url}: {final.reason}",
            extra={"event": "fetch.failed", "url": url, "cause": final.reason},
        )
        if final is exc:
            raise
        raise final from exc
