# crawler/sources/registry.py
from typing import Tuple

import httpx

from ..fetch import SINGLE_ATTEMPT, RetryPolicy
from .base import BookSource
from .eksmo import EksmoSource
from .igraslov import IgraSlovSource
from .labirint import LabirintSource


def build_sources(client: httpx.AsyncClient, retry_policy: RetryPolicy) -> Tuple[BookSource, ...]:
    """
    Instantiate every supported source around one shared client.

    IgraSlov always gets a single attempt; the others use ``retry_policy``.
    """
    return (
        LabirintSource(client, retry_policy),
        IgraSlovSource(client, SINGLE_ATTEMPT),
        EksmoSource(client, retry_policy),
    )
