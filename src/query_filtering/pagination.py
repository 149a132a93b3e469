"""PaginationCalculator: bounded page/page_size/skip from query params."""

from __future__ import annotations

from typing import Any, NamedTuple

from .config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class Pagination(NamedTuple):
    page: int
    page_size: int
    skip: int

    @property
    def limit(self) -> int:
        return self.page_size

    def total_pages(self, total: int) -> int:
        """Number of pages needed for *total* results."""
        return max(0, -(-total // self.page_size))

    def has_next(self, total: int) -> bool:
        return self.page < self.total_pages(total)


class PaginationCalculator:
    """
    Normalise page and page size; never rejects.

    ``page`` floors to 1, ``page_size`` clamps to ``[1, max_page_size]``,
    unparsable values fall back to the defaults.
    """

    def __init__(
        self,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    def calculate(self, page: Any = None, page_size: Any = None) -> Pagination:
        page_num = max(1, self._int_param(page, DEFAULT_PAGE))
        size = self._int_param(page_size, self._default_page_size)
        size = min(self._max_page_size, max(1, size))
        return Pagination(page=page_num, page_size=size, skip=(page_num - 1) * size)

    @staticmethod
    def _int_param(v: Any, default: int) -> int:
        if v is None or v == "":
            return default
        try:
            return int(v)
        except (TypeError, ValueError):
            return default
