"""Read-only projection of a store snapshot: local sort and pagination.

Everything here is a pure function of its arguments.  Page-number state
belongs to the caller, which is expected to clamp with :func:`clamp_page`
before asking for a page.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from tokenview._constants import PAGE_SIZE
from tokenview.models.token import TokenRecord


class SortKey(StrEnum):
    PRICE = "price_sol"
    PRICE_CHANGE = "price_change_percent"
    VOLUME = "volume_sol"
    LIQUIDITY = "liquidity_sol"
    NAME = "name"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class Page:
    """One display page of the working sequence."""

    items: tuple[TokenRecord, ...]
    page: int
    page_size: int
    total_pages: int
    total_count: int

    @property
    def in_range(self) -> bool:
        """Whether ``page`` lies within ``[1, max(1, total_pages)]``."""
        return 1 <= self.page <= max(1, self.total_pages)

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return math.ceil(count / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp *page* to ``[1, max(1, pages)]``."""
    return max(1, min(page, max(1, pages)))


def sort_records(
    records: Sequence[TokenRecord],
    sort_by: SortKey | str,
    order: SortOrder | str = SortOrder.DESC,
) -> tuple[TokenRecord, ...]:
    """Stable local re-sort of *records*; ties keep insertion order."""
    key = SortKey(sort_by)
    descending = SortOrder(order) == SortOrder.DESC
    if key == SortKey.NAME:
        return tuple(sorted(records, key=lambda r: r.name.casefold(), reverse=descending))
    return tuple(sorted(records, key=lambda r: getattr(r, key.value), reverse=descending))


def query(
    records: Sequence[TokenRecord],
    *,
    page: int = 1,
    page_size: int = PAGE_SIZE,
    sort_by: SortKey | str | None = None,
    order: SortOrder | str = SortOrder.DESC,
) -> Page:
    """Project *records* onto one page.

    Without ``sort_by`` the working sequence keeps the snapshot order, which
    already reflects any server-side sort.  A page beyond the last yields an
    empty ``items`` tuple and ``in_range`` is ``False``.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    pages = total_pages(len(records), page_size)

    working: Sequence[TokenRecord] = records if sort_by is None else sort_records(records, sort_by, order)

    start = (page - 1) * page_size
    end = start + page_size
    return Page(
        items=tuple(working[start:end]),
        page=page,
        page_size=page_size,
        total_pages=pages,
        total_count=len(records),
    )
