"""Paged iteration over remote listings.

Remote listings are consumed page by page with a fixed page size. An empty
page is the only termination signal: providers are not required to report a
total count or a "has more" flag.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

logger: logging.Logger = logging.getLogger(__name__)

PAGE_SIZE: Final[int] = 100

T = TypeVar("T")


def iter_pages(fetch_page: Callable[[int], Sequence[T]], start_page: int = 1) -> Iterator[T]:
    """Yield items from consecutive pages until a page comes back empty.

    Args:
        fetch_page: Returns the items of the given 1-based page number
        start_page: First page to request

    Errors raised by fetch_page propagate to the consumer and end the iteration.
    """
    page = start_page
    while True:
        items = fetch_page(page)
        if not items:
            logger.debug(f"Page {page} is empty, listing complete")
            return
        yield from items
        page += 1


def build_lookup(items: Iterable[T], key: Callable[[T], str]) -> dict[str, T]:
    """Build a lookup table keyed by identity field. The last item seen for a key wins."""
    table: dict[str, T] = {}
    for item in items:
        table[key(item)] = item
    return table
