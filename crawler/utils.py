# crawler/utils.py
import asyncio
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
)

T = TypeVar("T")


def exponential_backoff(retry_index, cap):
    """
    Wait before retry number ``retry_index`` (0 for the first retry).

    Returns:
        float: min(2 ** retry_index, cap) seconds
    """
    return float(min(2**retry_index, cap))


def parse_retry_after(value):
    """
    Parse a Retry-After header into seconds.

    Accepts both delta-seconds ("3") and an HTTP-date. Dates in the past
    give 0. Anything unparseable gives None so the caller falls back to
    its own backoff schedule.
    """
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    backoff: Callable[[int, BaseException], float],
    is_retryable: Callable[[BaseException], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Optional[Callable[[int, float, BaseException], None]] = None,
) -> T:
    """
    Run an async operation, retrying failures the predicate accepts.

    Thin wrapper over tenacity's AsyncRetrying so callers only deal with
    plain callables instead of tenacity retry states.

    Args:
        operation: Zero-argument coroutine function to call per attempt
        max_attempts (int): Total attempts, first one included
        backoff: (retry_index, exception) -> seconds to wait; retry_index
            is 0 before the first retry
        is_retryable: exception -> whether another attempt is allowed
        sleep: Awaitable sleep used between attempts (tests inject a fake)
        on_retry: Called as (attempt_number, wait, exception) before each
            sleep; attempt_number is the 1-based attempt that just failed

    Returns:
        Whatever the first successful attempt returned

    Raises:
        The exception of the last attempt, unchanged, once attempts run
        out or a non-retryable exception occurs.
    """

    def wait(retry_state):
        return backoff(retry_state.attempt_number - 1, retry_state.outcome.exception())

    def before_sleep(retry_state):
        if on_retry is not None:
            on_retry(
                retry_state.attempt_number,
                retry_state.next_action.sleep,
                retry_state.outcome.exception(),
            )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait,
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep,
        sleep=sleep,
        reraise=True,
    )
    return await retrying(operation)
