"""
Decision Log - Filter Predicate.

============================================================
RESPONSIBILITY
============================================================
Decides whether one decision record matches the active
search term and status filter.

Status filter:
- ALL      matches everything
- SUCCESS  requires record.success
- FAILED   requires not record.success

Search term (trimmed, case-insensitive substring) against:
- cycle number (decimal string)
- raw timestamp string
- any action symbol
- reasoning trace
- input prompt

An empty term matches unconditionally. Both conditions
are combined with AND.

============================================================
"""

from typing import Union

from .models import DecisionRecord, StatusFilter


def normalize_search_term(search_term: str) -> str:
    """Trim and lower-case a raw search term."""
    return (search_term or "").strip().lower()


def matches_status(record: DecisionRecord, status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.SUCCESS:
        return record.success
    if status_filter is StatusFilter.FAILED:
        return not record.success
    return True


def matches_search(record: DecisionRecord, normalized_term: str) -> bool:
    """
    Substring search over the record's searchable fields.

    Args:
        record: Record to test
        normalized_term: Output of normalize_search_term()
    """
    if not normalized_term:
        return True
    return any(normalized_term in value for value in record.search_fields)


def matches(
    record: DecisionRecord,
    search_term: str = "",
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
) -> bool:
    """Pure predicate combining the status filter and the search term."""
    status_filter = StatusFilter.parse(status_filter)
    return matches_status(record, status_filter) and matches_search(
        record, normalize_search_term(search_term)
    )
