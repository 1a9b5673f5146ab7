"""
Decision Log - Paginator.

============================================================
RESPONSIBILITY
============================================================
Slices the ordered view into fixed-size pages.

- total_pages = max(1, ceil(view_length / page_size))
- page index is 1-based and always within [1, total_pages]
- a shrinking view clamps the page down, never past the end
- next/previous are no-ops at the boundaries

All functions are pure; the current page lives in the
viewer state.

============================================================
"""

from typing import Sequence, Tuple, TypeVar


T = TypeVar("T")


def total_pages(view_length: int, page_size: int) -> int:
    """Number of pages for a view; an empty view still has one page."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, -(-view_length // page_size))


def clamp_page(page: int, pages: int) -> int:
    """Bring a page index into [1, pages]."""
    return min(max(1, page), max(1, pages))


def page_bounds(view_length: int, page: int, page_size: int) -> Tuple[int, int]:
    """
    Slice offsets for a page.

    Returns:
        (start, end) such that view[start:end] is the page
    """
    start = (page - 1) * page_size
    end = min(page * page_size, view_length)
    return min(start, view_length), end


def page_slice(view: Sequence[T], page: int, page_size: int) -> Tuple[T, ...]:
    """Records of one page of the view."""
    start, end = page_bounds(len(view), page, page_size)
    return tuple(view[start:end])


def next_page(page: int, pages: int) -> int:
    return clamp_page(page + 1, pages)


def previous_page(page: int, pages: int) -> int:
    return clamp_page(page - 1, pages)
