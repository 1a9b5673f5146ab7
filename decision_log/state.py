"""
Decision Log - Viewer State & Transitions.

============================================================
RESPONSIBILITY
============================================================
One immutable value holds everything the presentation layer
reads:

    subject, search term, status filter, current page,
    snapshot, derived view, load status, last error

Every mutator is a pure function State -> State. The derived
view and the page clamp are recomputed inside the transition,
so readers never see a view that disagrees with its filters
or a page index past the end.

============================================================
TRANSITIONS
============================================================
- initial_state        new subject, PENDING, nothing loaded
- set_search_term      re-derive view, page -> 1
- set_status_filter    re-derive view, page -> 1
- go_to_page           clamp into [1, total_pages]
- next_page            no-op on the last page
- previous_page        no-op on the first page
- apply_records        replace snapshot, READY, clamp page
- apply_failure        FAILED, keep snapshot and view

============================================================
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Optional, Tuple, Union

from . import paginator
from .exceptions import DecisionLogError
from .models import DecisionRecord, EmptyReason, LoadStatus, StatusFilter
from .view import build_view


# =============================================================
# STATE VALUE
# =============================================================

@dataclass(frozen=True)
class ViewerState:
    """Complete, immutable state of one decision log viewer."""
    subject_id: Optional[str] = None
    page_size: int = 20

    # User inputs
    search_term: str = ""
    status_filter: StatusFilter = StatusFilter.ALL
    current_page: int = 1

    # Record Store mirror
    snapshot: Tuple[DecisionRecord, ...] = ()
    has_data: bool = False
    status: LoadStatus = LoadStatus.PENDING
    error: Optional[DecisionLogError] = None
    fetched_at: Optional[datetime] = None

    # Derived
    view: Tuple[DecisionRecord, ...] = ()

    @property
    def total_pages(self) -> int:
        return paginator.total_pages(len(self.view), self.page_size)

    @property
    def page_records(self) -> Tuple[DecisionRecord, ...]:
        return paginator.page_slice(self.view, self.current_page, self.page_size)

    @property
    def has_active_filters(self) -> bool:
        return bool(self.search_term.strip()) or self.status_filter is not StatusFilter.ALL


# =============================================================
# TRANSITIONS
# =============================================================

def _rederive(state: ViewerState, reset_page: bool = False, **changes) -> ViewerState:
    """Apply changes, rebuild the view and re-clamp the page."""
    state = replace(state, **changes)
    view = build_view(state.snapshot, state.search_term, state.status_filter)
    page = 1 if reset_page else state.current_page
    pages = paginator.total_pages(len(view), state.page_size)
    return replace(state, view=view, current_page=paginator.clamp_page(page, pages))


def initial_state(subject_id: Optional[str], page_size: int = 20) -> ViewerState:
    """Fresh state for a newly selected subject: nothing cached, PENDING."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return ViewerState(subject_id=subject_id, page_size=page_size)


def set_search_term(state: ViewerState, search_term: str) -> ViewerState:
    return _rederive(state, reset_page=True, search_term=search_term or "")


def set_status_filter(
    state: ViewerState,
    status_filter: Union[StatusFilter, str],
) -> ViewerState:
    return _rederive(
        state,
        reset_page=True,
        status_filter=StatusFilter.parse(status_filter),
    )


def go_to_page(state: ViewerState, page: int) -> ViewerState:
    return replace(state, current_page=paginator.clamp_page(int(page), state.total_pages))


def next_page(state: ViewerState) -> ViewerState:
    page = paginator.next_page(state.current_page, state.total_pages)
    if page == state.current_page:
        return state
    return replace(state, current_page=page)


def previous_page(state: ViewerState) -> ViewerState:
    page = paginator.previous_page(state.current_page, state.total_pages)
    if page == state.current_page:
        return state
    return replace(state, current_page=page)


def apply_records(
    state: ViewerState,
    records: Iterable[DecisionRecord],
    fetched_at: Optional[datetime] = None,
) -> ViewerState:
    """
    Replace the snapshot wholesale after a successful refresh.

    Filters are kept; the page is clamped if the view shrank.
    """
    return _rederive(
        state,
        snapshot=tuple(records),
        has_data=True,
        status=LoadStatus.READY,
        error=None,
        fetched_at=fetched_at,
    )


def apply_failure(state: ViewerState, error: DecisionLogError) -> ViewerState:
    """Record a failed refresh; previously loaded data stays visible."""
    return replace(state, status=LoadStatus.FAILED, error=error)


# =============================================================
# PRESENTATION SNAPSHOT
# =============================================================

@dataclass(frozen=True)
class DecisionLogPage:
    """
    Read-only page model handed to the presentation layer.

    showing_start/showing_end are 1-based inclusive bounds of
    the current page within the filtered view (0/0 if empty).
    """
    subject_id: Optional[str]
    status: LoadStatus
    error: Optional[DecisionLogError]
    total_count: int
    filtered_count: int
    records: Tuple[DecisionRecord, ...]
    current_page: int
    total_pages: int
    page_size: int
    search_term: str
    status_filter: StatusFilter
    has_active_filters: bool
    showing_start: int
    showing_end: int
    fetched_at: Optional[datetime] = None
    has_data: bool = False  # loaded at least once for this subject

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def is_loading(self) -> bool:
        """Waiting for the first load of this subject."""
        return self.status is LoadStatus.PENDING

    @property
    def is_failed(self) -> bool:
        return self.status is LoadStatus.FAILED

    @property
    def is_empty(self) -> bool:
        """
        Loaded at least once, but nothing to show.

        May coincide with is_failed when a refresh failed after an
        earlier load; a failure before any load is never empty.
        """
        return self.has_data and self.filtered_count == 0

    @property
    def empty_reason(self) -> Optional[EmptyReason]:
        if not self.is_empty:
            return None
        if self.has_active_filters:
            return EmptyReason.NO_MATCHES
        return EmptyReason.NO_DECISIONS


def to_page(state: ViewerState) -> DecisionLogPage:
    """Build the presentation snapshot for the current state."""
    filtered = len(state.view)
    start, end = paginator.page_bounds(filtered, state.current_page, state.page_size)

    return DecisionLogPage(
        subject_id=state.subject_id,
        status=state.status,
        error=state.error,
        total_count=len(state.snapshot),
        filtered_count=filtered,
        records=state.page_records,
        current_page=state.current_page,
        total_pages=state.total_pages,
        page_size=state.page_size,
        search_term=state.search_term,
        status_filter=state.status_filter,
        has_active_filters=state.has_active_filters,
        showing_start=start + 1 if end > start else 0,
        showing_end=end if end > start else 0,
        fetched_at=state.fetched_at,
        has_data=state.has_data,
    )
