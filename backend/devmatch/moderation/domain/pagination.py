"""Offset pagination window for the report list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

MAX_PAGE_SIZE = 100


class InvalidPageError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Pagination:
    """The list window produced by one query; recomputed on every fetch."""

    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def empty(cls, page: int = 1) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=0,
            total_items=0,
            has_next_page=False,
            has_prev_page=page > 1,
        )

    def first_item(self, page_size: int) -> int:
        """1-based index of the first item shown, for "showing X to Y of N"."""

        if self.total_items == 0:
            return 0
        return (self.current_page - 1) * page_size + 1

    def last_item(self, page_size: int) -> int:
        return min(self.current_page * page_size, self.total_items)

    def next_page(self) -> int:
        if not self.has_next_page:
            return self.current_page
        return min(max(self.total_pages, 1), self.current_page + 1)

    def prev_page(self) -> int:
        if not self.has_prev_page:
            return self.current_page
        return max(1, self.current_page - 1)


def validate_page(page: int) -> int:
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidPageError("invalid_page")
    return page


def sanitized_limit(limit: int) -> int:
    if limit <= 0:
        return 1
    return min(limit, MAX_PAGE_SIZE)


def build_page_params(page: int, limit: int, params: dict[str, Any]) -> dict[str, Any]:
    """Add the page window to a query parameter mapping and return it."""

    params["page"] = validate_page(page)
    params["limit"] = sanitized_limit(limit)
    return params
