"""
Lazy, forward-only iteration over paged API results.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, NamedTuple

from ..schemas.resource import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)


class Page(NamedTuple):
    """One server page and the cursor to the next one (None when exhausted)."""

    items: list[Any]
    cursor: str | None


PageFetcher = Callable[[Mapping[str, Any], str | None], Page]


class PageIterator(Iterator[Any]):
    """
    Iterator yielding resources across pages.

    Holds the last cursor, the remaining budget derived from the query's
    `limit` (None = unbounded) and the current page buffer. A page is only
    fetched when the buffer runs dry, one at a time, with the same query and
    the stored cursor. The iterator is single-pass: once exhausted it stays
    exhausted.

    Args:
        fetch_page: Called as fetch_page(query, cursor) -> Page
        query: Filters for every page; its `limit` is the total budget
    """

    def __init__(self, fetch_page: PageFetcher, query: Mapping[str, Any] | None = None):
        query = dict(query or {})
        limit = query.pop("limit", None)
        if limit is not None:
            limit = int(limit)
            if limit < 0:
                raise ValueError(f"limit must be >= 0, got {limit}")

        self._fetch_page = fetch_page
        self._query = query
        self._remaining: int | None = limit
        self._cursor: str | None = None
        self._buffer: list[Any] = []
        self._position = 0
        self._done = limit == 0
        self.pages_fetched = 0

    def __iter__(self) -> "PageIterator":
        return self

    def __next__(self) -> Any:
        while self._position >= len(self._buffer):
            if self._done:
                raise StopIteration
            self._fetch_next_page()

        item = self._buffer[self._position]
        self._position += 1
        if self._remaining is not None:
            self._remaining -= 1
            if self._remaining <= 0:
                self._done = True
                self._buffer = self._buffer[: self._position]
        return item

    def _fetch_next_page(self) -> None:
        page_size = MAX_PAGE_SIZE
        if self._remaining is not None:
            page_size = min(self._remaining, MAX_PAGE_SIZE)

        query = {**self._query, "limit": page_size}
        page = self._fetch_page(query, self._cursor)
        self.pages_fetched += 1

        logger.debug(
            f"Fetched page {self.pages_fetched} with {len(page.items)} item(s), "
            f"next cursor={'yes' if page.cursor else 'none'}"
        )

        self._buffer = list(page.items)
        self._position = 0
        self._cursor = page.cursor
        if not page.cursor:
            self._done = True
