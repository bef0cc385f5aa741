"""Aggregation of paginated provider list operations."""

from typing import Awaitable, Callable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

PAGE_SIZE = 100
"""Number of items requested per page from the provider."""

T = TypeVar("T")


async def fetch_all_pages(fetch_page: Callable[[int], Awaitable[list[T]]], page_size: int = PAGE_SIZE) -> list[T]:
    """Fetch every page of a list operation and return the concatenated items.

    Pages are requested sequentially starting at page 1 until a page holds
    fewer than ``page_size`` items (an empty page included). Provider order is
    preserved and nothing is deduplicated. Any exception raised by a page
    fetch, cancellation included, propagates and the pages accumulated so far
    are dropped.

    Args:
        fetch_page: Coroutine function taking a 1-based page number.
        page_size: Page size the provider was asked for.

    Returns:
        All items across all pages.
    """
    all_items: list[T] = []
    page: int = 1
    while True:
        logger.debug("Fetching page", page=page, page_size=page_size)
        items = await fetch_page(page)
        all_items.extend(items)
        if len(items) < page_size:
            break
        page += 1
    logger.debug("Fetched all pages", pages=page, total_items=len(all_items))
    return all_items
