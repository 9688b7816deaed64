"""Retry guard for GitHub's abuse-detection (secondary rate limit) rejections."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .config import ABUSE_DETECTION_MARKERS, ABUSE_MAX_ATTEMPTS, BACKOFF_BASE_SEC
from .errors import GraphQLRequestError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_abuse_rate_limit(exc: BaseException) -> bool:
    """True only for a 403 whose body names GitHub's abuse detection.

    Bad credentials and an exhausted primary rate limit are also 403s; those
    are not matched.
    """
    if not isinstance(exc, GraphQLRequestError) or exc.status_code != 403:
        return False
    body = (exc.body or "").lower()
    return any(marker.lower() in body for marker in ABUSE_DETECTION_MARKERS)


def backoff_seconds(attempt: int) -> int:
    """Wait before retrying after the given 1-indexed failed attempt."""
    return BACKOFF_BASE_SEC ** attempt


async def sleep_for_backoff(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def with_abuse_retry(call: Callable[[], Awaitable[T]],
                           *,
                           max_attempts: int = ABUSE_MAX_ATTEMPTS) -> T:
    """Await `call()`, retrying abuse-detection rejections with exponential backoff.

    At most `max_attempts` calls are made. When the last one is still rejected
    the original exception is re-raised; any other exception propagates on
    first occurrence.
    """
    attempt = 1
    while True:
        try:
            return await call()
        except GraphQLRequestError as exc:
            if not is_abuse_rate_limit(exc) or attempt >= max_attempts:
                raise
            wait_sec = backoff_seconds(attempt)
            logger.warning(
                "GitHub abuse rate limit hit, waiting %s seconds before trying again",
                wait_sec,
                extra={"wait_seconds": wait_sec, "attempt": attempt},
            )
            await sleep_for_backoff(wait_sec)
            attempt += 1


__all__ = [
    "is_abuse_rate_limit",
    "backoff_seconds",
    "sleep_for_backoff",
    "with_abuse_retry",
]
