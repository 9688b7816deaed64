"""Cursor pagination walkers for single- and two-level GitHub connections."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .config import PER_PAGE
from .errors import PaginationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Cursor:
    end_cursor: Optional[str]
    has_next_page: bool


@dataclass(frozen=True)
class PageResult(Generic[T]):
    items: List[T]
    cursor: Cursor = field(default_factory=lambda: Cursor(None, False))


@dataclass(frozen=True)
class NestedPage(Generic[T]):
    """An outer item (keyed by name) carrying the first page of its inner connection.

    `handle` addresses the item when fetching later inner pages; it defaults
    to `key`.
    """

    key: str
    first_page: PageResult[T]
    handle: Optional[str] = None


PageFetcher = Callable[[Optional[str], int], Awaitable[PageResult[T]]]
InnerPageFetcher = Callable[[str, Optional[str], int], Awaitable[PageResult[T]]]


def _next_cursor(cursor: Cursor, previous: Optional[str]) -> Optional[str]:
    """Return the cursor for the next fetch, or None when the walk is complete."""
    if not cursor.has_next_page:
        return None
    if not cursor.end_cursor or cursor.end_cursor == previous:
        raise PaginationError(
            f"upstream reported another page but did not advance the cursor (at {previous!r})"
        )
    return cursor.end_cursor


async def walk_pages(fetch_page: PageFetcher[T],
                     page_size: int = PER_PAGE,
                     start_cursor: Optional[str] = None) -> List[T]:
    """Fetch every page in order, starting after `start_cursor`, and concatenate the items."""
    items: List[T] = []
    after = start_cursor
    while True:
        page = await fetch_page(after, page_size)
        items.extend(page.items)
        after = _next_cursor(page.cursor, after)
        if after is None:
            return items


async def _exhaust_inner(nested: NestedPage[T],
                         fetch_inner: InnerPageFetcher[T],
                         page_size: int) -> Tuple[str, List[T]]:
    items = list(nested.first_page.items)
    after = _next_cursor(nested.first_page.cursor, None)
    while after is not None:
        logger.debug("Reading additional inner page for %s", nested.key)
        page = await fetch_inner(nested.handle or nested.key, after, page_size)
        items.extend(page.items)
        after = _next_cursor(page.cursor, after)
    return nested.key, items


async def walk_nested_pages(fetch_outer: PageFetcher[NestedPage[T]],
                            fetch_inner: InnerPageFetcher[T],
                            page_size: int = PER_PAGE) -> Dict[str, List[T]]:
    """Walk an outer connection whose items each own an inner connection.

    The inner connections of one outer page are exhausted concurrently, and all
    of them finish before the outer cursor advances. Keys enumerate in outer
    order. A repeated key replaces the earlier entry.

    If any inner walk fails, the walks still running are cancelled and awaited
    before the error propagates, so no fetch is issued after the failure.
    """
    results: Dict[str, List[T]] = {}
    after: Optional[str] = None
    while True:
        page = await fetch_outer(after, page_size)
        tasks = [
            asyncio.ensure_future(_exhaust_inner(nested, fetch_inner, page_size))
            for nested in page.items
        ]
        try:
            exhausted = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        for key, items in exhausted:
            results[key] = items
        after = _next_cursor(page.cursor, after)
        if after is None:
            return results


__all__ = [
    "Cursor",
    "PageResult",
    "NestedPage",
    "walk_pages",
    "walk_nested_pages",
]
