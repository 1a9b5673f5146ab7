"""
Decision Log - View Builder.

============================================================
RESPONSIBILITY
============================================================
Derives the ordered view from a snapshot and the active
filters:

1. Apply the filter predicate to every record
2. Sort descending by parsed timestamp (newest first)

Equal timestamps keep their snapshot order; the sort is
stable. Output is a tuple, so a view can be shared between
readers without copying.

Deterministic and side-effect free: the same snapshot and
filters always produce the same view, which makes it safe
to rebuild on every keystroke or refresh tick.

============================================================
"""

from typing import Iterable, Tuple, Union

from .filters import matches_search, matches_status, normalize_search_term
from .models import DecisionRecord, StatusFilter


def sort_newest_first(records: Iterable[DecisionRecord]) -> Tuple[DecisionRecord, ...]:
    # reverse=True keeps equal keys in their original relative order
    return tuple(sorted(records, key=lambda r: r.occurred_at, reverse=True))


def build_view(
    records: Iterable[DecisionRecord],
    search_term: str = "",
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
) -> Tuple[DecisionRecord, ...]:
    """
    Filter and order a snapshot for display.

    Args:
        records: Current snapshot contents
        search_term: Raw search input
        status_filter: Success/failure selector

    Returns:
        Matching records, newest first
    """
    status_filter = StatusFilter.parse(status_filter)
    term = normalize_search_term(search_term)

    return sort_newest_first(
        record
        for record in records
        if matches_status(record, status_filter) and matches_search(record, term)
    )
