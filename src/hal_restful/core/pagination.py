from __future__ import annotations

import math
from typing import Any, Iterator, Protocol, Sequence, runtime_checkable


@runtime_checkable
class PaginatedSource(Protocol):
    """Minimal interface a paginated collection source must satisfy."""

    def set_page_size(self, size: int) -> Any: ...

    def set_current_page(self, page: int) -> Any: ...

    def count(self) -> int:
        """Total number of pages."""
        ...

    def __iter__(self) -> Iterator[Any]: ...


class ListPaginator:
    """PaginatedSource over an in-memory sequence; iterates the current page."""

    def __init__(self, items: Sequence[Any], page_size: int = 10):
        self._items = list(items)
        self._page_size = max(1, int(page_size))
        self._page = 1

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> int:
        return self._page

    def set_page_size(self, size: int) -> "ListPaginator":
        self._page_size = max(1, int(size))
        return self

    def set_current_page(self, page: int) -> "ListPaginator":
        self._page = int(page)
        return self

    def count(self) -> int:
        return math.ceil(len(self._items) / self._page_size)

    def __iter__(self) -> Iterator[Any]:
        if self._page < 1:
            return iter(())
        start = (self._page - 1) * self._page_size
        return iter(self._items[start : start + self._page_size])


__all__ = ["PaginatedSource", "ListPaginator"]
