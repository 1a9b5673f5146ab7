"""
Tests for viewer state transitions and the page snapshot.
"""

import pytest
from datetime import datetime, timezone

from decision_log import (
    EmptyReason,
    FetchError,
    LoadStatus,
    StatusFilter,
    initial_state,
    to_page,
)
from decision_log import state as transitions
from tests.decision_log.factories import make_records


FETCHED_AT = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def loaded():
    """45 records, cycles 3, 17 and 40 failed."""
    state = initial_state("trader-1", page_size=20)
    return transitions.apply_records(
        state, make_records(45, failed_cycles={3, 17, 40}), fetched_at=FETCHED_AT
    )


class TestInitialState:
    """Tests for initial_state()."""

    def test_pending_and_empty(self):
        state = initial_state("trader-1")
        page = to_page(state)

        assert page.status == LoadStatus.PENDING
        assert page.is_loading is True
        assert page.is_empty is False
        assert page.records == ()
        assert page.current_page == 1
        assert page.total_pages == 1

    def test_rejects_bad_page_size(self):
        with pytest.raises(ValueError):
            initial_state("trader-1", page_size=0)


class TestApplyRecords:
    """Tests for apply_records()."""

    def test_forty_five_records_three_pages(self, loaded):
        page = to_page(loaded)
        assert page.status == LoadStatus.READY
        assert page.total_count == 45
        assert page.total_pages == 3
        assert [r.cycle_number for r in page.records][:3] == [45, 44, 43]
        assert page.fetched_at == FETCHED_AT

    def test_last_page_has_five_records(self, loaded):
        page = to_page(transitions.go_to_page(loaded, 3))
        assert len(page.records) == 5
        assert page.showing_start == 41
        assert page.showing_end == 45
        assert page.has_next is False
        assert page.has_previous is True

    def test_shrinking_snapshot_clamps_page(self, loaded):
        state = transitions.go_to_page(loaded, 3)
        state = transitions.apply_records(state, make_records(25))
        assert state.current_page == 2

    def test_growing_snapshot_keeps_page(self, loaded):
        state = transitions.go_to_page(loaded, 2)
        state = transitions.apply_records(state, make_records(60))
        assert state.current_page == 2

    def test_filters_survive_refresh(self, loaded):
        state = transitions.set_status_filter(loaded, "failed")
        state = transitions.apply_records(state, make_records(50, failed_cycles={1}))
        assert [r.cycle_number for r in state.view] == [1]

    def test_clears_previous_failure(self, loaded):
        state = transitions.apply_failure(loaded, FetchError("timeout"))
        state = transitions.apply_records(state, make_records(2))
        assert state.status == LoadStatus.READY
        assert state.error is None


class TestFilterTransitions:
    """Tests for search and status filter transitions."""

    def test_status_filter_resets_and_clamps_page(self, loaded):
        state = transitions.go_to_page(loaded, 2)
        state = transitions.set_status_filter(state, StatusFilter.FAILED)

        page = to_page(state)
        assert page.current_page == 1
        assert page.total_pages == 1
        assert [r.cycle_number for r in page.records] == [40, 17, 3]

    def test_search_resets_page(self, loaded):
        state = transitions.go_to_page(loaded, 3)
        state = transitions.set_search_term(state, "1")
        assert state.current_page == 1

    def test_search_with_no_matches(self, loaded):
        page = to_page(transitions.set_search_term(loaded, "dogecoin"))
        assert page.is_empty is True
        assert page.empty_reason == EmptyReason.NO_MATCHES
        assert page.showing_start == 0
        assert page.showing_end == 0
        assert page.total_pages == 1

    def test_invalid_status_filter_rejected(self, loaded):
        with pytest.raises(ValueError):
            transitions.set_status_filter(loaded, "broken")


class TestPageTransitions:
    """Tests for page navigation transitions."""

    def test_next_and_previous(self, loaded):
        state = transitions.next_page(loaded)
        assert state.current_page == 2
        state = transitions.previous_page(state)
        assert state.current_page == 1

    def test_next_on_last_page_returns_same_state(self, loaded):
        state = transitions.go_to_page(loaded, 3)
        assert transitions.next_page(state) is state

    def test_previous_on_first_page_returns_same_state(self, loaded):
        assert transitions.previous_page(loaded) is loaded

    def test_go_to_page_clamps(self, loaded):
        assert transitions.go_to_page(loaded, 99).current_page == 3
        assert transitions.go_to_page(loaded, -1).current_page == 1


class TestFailureState:
    """Tests for apply_failure()."""

    def test_failure_keeps_records(self, loaded):
        error = FetchError("connection refused", subject_id="trader-1")
        page = to_page(transitions.apply_failure(loaded, error))

        assert page.is_failed is True
        assert page.error is error
        assert page.total_count == 45
        assert len(page.records) == 20

    def test_failure_before_first_load_is_not_empty(self):
        state = transitions.apply_failure(initial_state("trader-1"), FetchError("boom"))
        page = to_page(state)
        assert page.is_failed is True
        assert page.is_empty is False
        assert page.empty_reason is None

    def test_empty_record_set_is_no_decisions(self):
        state = transitions.apply_records(initial_state("trader-1"), [])
        page = to_page(state)
        assert page.is_empty is True
        assert page.empty_reason == EmptyReason.NO_DECISIONS

    def test_failed_refresh_with_no_matches_reports_empty(self):
        state = transitions.apply_records(initial_state("trader-1"), make_records(5))
        state = transitions.apply_failure(state, FetchError("connection refused"))
        page = to_page(transitions.set_search_term(state, "no-such-symbol"))

        assert page.is_failed is True
        assert page.total_count == 5
        assert page.filtered_count == 0
        assert page.is_empty is True
        assert page.empty_reason == EmptyReason.NO_MATCHES
