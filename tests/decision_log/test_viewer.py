"""
Tests for the DecisionLogViewer engine facade.

Covers the subject lifecycle, the stale-response guard and
the page/filter mutators end to end.
"""

import asyncio

import pytest
import pytest_asyncio

from core.clock import MockClock
from decision_log import (
    DecisionLogConfig,
    DecisionLogViewer,
    EmptyReason,
    FetchError,
    LoadStatus,
    RefreshScheduler,
    StatusFilter,
)
from tests.decision_log.factories import FakeSource, make_records


@pytest.fixture
def clock():
    return MockClock()


@pytest.fixture
def config():
    return DecisionLogConfig(
        page_size=20,
        refresh_interval_seconds=60,
        dedup_window_seconds=20,
    )


@pytest.fixture
def source():
    return FakeSource({
        "trader-a": make_records(45, failed_cycles={3, 17, 40}),
        "trader-b": make_records(2),
    })


@pytest_asyncio.fixture
async def viewer(source, config, clock):
    viewer = DecisionLogViewer(source, config=config, clock=clock)
    yield viewer
    await viewer.close()


async def wait_until(predicate, timeout: float = 2.0) -> None:
    async def _wait():
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_wait(), timeout)


class TestSubjectLifecycle:
    """Tests for set_subject() and close()."""

    @pytest.mark.asyncio
    async def test_initial_page_before_subject(self, viewer):
        page = viewer.page()
        assert page.subject_id is None
        assert page.status == LoadStatus.PENDING

    @pytest.mark.asyncio
    async def test_set_subject_loads_first_page(self, viewer):
        page = await viewer.set_subject("trader-a")

        assert page.status == LoadStatus.READY
        assert page.total_count == 45
        assert page.total_pages == 3
        assert page.current_page == 1
        assert page.records[0].cycle_number == 45
        assert viewer.scheduler.is_running is True

    @pytest.mark.asyncio
    async def test_set_subject_without_initial_refresh_is_pending(self, viewer, source):
        page = await viewer.set_subject("trader-a", initial_refresh=False)

        assert page.is_loading is True
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_switch_resets_filters_and_page(self, viewer):
        await viewer.set_subject("trader-a")
        viewer.set_search_term("btc")
        viewer.go_to_page(2)

        page = await viewer.set_subject("trader-b")

        assert page.search_term == ""
        assert page.status_filter == StatusFilter.ALL
        assert page.current_page == 1
        assert page.total_count == 2

    @pytest.mark.asyncio
    async def test_switch_tears_down_previous_scheduler(self, viewer):
        await viewer.set_subject("trader-a")
        old_scheduler = viewer.scheduler
        old_store = viewer.store

        await viewer.set_subject("trader-b")

        assert old_scheduler.is_running is False
        assert old_store.closed is True
        assert viewer.store.subject_id == "trader-b"

    @pytest.mark.asyncio
    async def test_same_subject_is_noop(self, viewer, source):
        await viewer.set_subject("trader-a")
        store = viewer.store

        await viewer.set_subject("trader-a")

        assert viewer.store is store
        assert source.calls == ["trader-a"]

    @pytest.mark.asyncio
    async def test_clear_subject(self, viewer):
        await viewer.set_subject("trader-a")
        page = await viewer.set_subject(None)

        assert page.subject_id is None
        assert viewer.store is None
        assert viewer.scheduler is None

    @pytest.mark.asyncio
    async def test_close_stops_refreshing(self, viewer):
        await viewer.set_subject("trader-a")
        scheduler = viewer.scheduler

        await viewer.close()

        assert scheduler.is_running is False
        assert viewer.store is None

    @pytest.mark.asyncio
    async def test_async_context_manager(self, source, config, clock):
        async with DecisionLogViewer(source, config=config, clock=clock) as viewer:
            await viewer.set_subject("trader-a")
            scheduler = viewer.scheduler
        assert scheduler.is_running is False


class TestStaleResponseGuard:
    """Tests for discarding responses of a previous subject."""

    @pytest.mark.asyncio
    async def test_subject_change_during_fetch(self, viewer, source):
        gate = asyncio.Event()
        source.gates["trader-a"] = gate

        switch_a = asyncio.create_task(viewer.set_subject("trader-a"))
        await wait_until(lambda: "trader-a" in source.calls)

        page = await viewer.set_subject("trader-b")
        assert page.total_count == 2

        gate.set()
        await switch_a

        page = viewer.page()
        assert page.subject_id == "trader-b"
        assert page.total_count == 2
        assert [r.cycle_number for r in page.records] == [2, 1]
        assert viewer.discarded_responses == 1

    @pytest.mark.asyncio
    async def test_switch_away_and_back_discards_old_fetch(self, viewer, source):
        gate = asyncio.Event()
        source.gates["trader-a"] = gate

        first = asyncio.create_task(viewer.set_subject("trader-a"))
        await wait_until(lambda: "trader-a" in source.calls)

        await viewer.set_subject("trader-b")
        second = asyncio.create_task(viewer.set_subject("trader-a"))
        await asyncio.sleep(0)

        gate.set()
        await asyncio.gather(first, second)

        assert viewer.subject_id == "trader-a"
        assert viewer.page().status == LoadStatus.READY
        assert viewer.discarded_responses >= 1

    @pytest.mark.asyncio
    async def test_overlapping_switches_keep_latest_subject(self, viewer, source, monkeypatch):
        source.records["trader-c"] = make_records(3)
        schedulers = []

        class RecordingScheduler(RefreshScheduler):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                schedulers.append(self)

        monkeypatch.setattr("decision_log.viewer.RefreshScheduler", RecordingScheduler)
        await viewer.set_subject("trader-a")

        switch_b = asyncio.create_task(viewer.set_subject("trader-b"))
        await asyncio.sleep(0)
        switch_c = asyncio.create_task(viewer.set_subject("trader-c"))
        await asyncio.sleep(0)
        await asyncio.gather(switch_b, switch_c)

        assert viewer.subject_id == "trader-c"
        assert viewer.page().total_count == 3
        assert [s for s in schedulers if s.is_running] == [viewer.scheduler]

        await viewer.close()

        assert not any(s.is_running for s in schedulers)

    @pytest.mark.asyncio
    async def test_close_during_switch_leaves_nothing_running(self, viewer, monkeypatch):
        schedulers = []

        class RecordingScheduler(RefreshScheduler):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                schedulers.append(self)

        monkeypatch.setattr("decision_log.viewer.RefreshScheduler", RecordingScheduler)
        await viewer.set_subject("trader-a")

        switch = asyncio.create_task(viewer.set_subject("trader-b"))
        await asyncio.sleep(0)
        await viewer.close()
        await switch

        assert viewer.store is None
        assert viewer.scheduler is None
        assert not any(s.is_running for s in schedulers)


class TestRefresh:
    """Tests for refresh behaviour through the viewer."""

    @pytest.mark.asyncio
    async def test_refresh_within_window_is_deduplicated(self, viewer, source, clock):
        await viewer.set_subject("trader-a")
        clock.advance(5)
        await viewer.refresh()

        assert source.calls == ["trader-a"]

    @pytest.mark.asyncio
    async def test_forced_refresh_fetches(self, viewer, source):
        await viewer.set_subject("trader-a")
        await viewer.refresh(force=True)

        assert source.calls == ["trader-a", "trader-a"]

    @pytest.mark.asyncio
    async def test_refresh_keeps_filters_and_clamps_page(self, viewer, source, clock):
        await viewer.set_subject("trader-a")
        viewer.go_to_page(3)

        source.records["trader-a"] = make_records(30)
        clock.advance(21)
        page = await viewer.refresh()

        assert page.total_pages == 2
        assert page.current_page == 2

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_view(self, viewer, source):
        await viewer.set_subject("trader-a")
        source.fail("trader-a", "backend unavailable")

        page = await viewer.refresh(force=True)

        assert page.is_failed is True
        assert isinstance(page.error, FetchError)
        assert page.total_count == 45
        assert len(page.records) == 20

    @pytest.mark.asyncio
    async def test_first_load_failure(self, viewer, source):
        source.fail("trader-a")
        page = await viewer.set_subject("trader-a")

        assert page.is_failed is True
        assert page.is_empty is False
        assert page.records == ()

    @pytest.mark.asyncio
    async def test_refresh_without_subject(self, viewer, source):
        page = await viewer.refresh()
        assert page.subject_id is None
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_scheduler_drives_refresh(self, source, clock):
        config = DecisionLogConfig(refresh_interval_seconds=0.01, dedup_window_seconds=0)
        async with DecisionLogViewer(source, config=config, clock=clock) as viewer:
            await viewer.set_subject("trader-b")
            await wait_until(lambda: len(source.calls) >= 3)
        assert set(source.calls) == {"trader-b"}


class TestMutators:
    """Tests for filter and page mutators."""

    @pytest.mark.asyncio
    async def test_last_page_has_five_records(self, viewer):
        await viewer.set_subject("trader-a")
        page = viewer.go_to_page(3)

        assert len(page.records) == 5
        assert [r.cycle_number for r in page.records] == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_failed_filter_clamps_page(self, viewer):
        await viewer.set_subject("trader-a")
        viewer.go_to_page(2)

        page = viewer.set_status_filter("failed")

        assert page.current_page == 1
        assert page.total_pages == 1
        assert [r.cycle_number for r in page.records] == [40, 17, 3]

    @pytest.mark.asyncio
    async def test_next_and_previous_at_bounds(self, viewer):
        await viewer.set_subject("trader-a")

        assert viewer.previous_page().current_page == 1
        viewer.go_to_page(3)
        assert viewer.next_page().current_page == 3
        assert viewer.previous_page().current_page == 2

    @pytest.mark.asyncio
    async def test_search_without_matches(self, viewer):
        await viewer.set_subject("trader-a")
        page = viewer.set_search_term("no such symbol")

        assert page.is_empty is True
        assert page.empty_reason == EmptyReason.NO_MATCHES

    @pytest.mark.asyncio
    async def test_subject_without_records(self, viewer, source):
        page = await viewer.set_subject("trader-unknown")

        assert page.is_empty is True
        assert page.empty_reason == EmptyReason.NO_DECISIONS


class TestChangeNotification:
    """Tests for subscribe()."""

    @pytest.mark.asyncio
    async def test_listener_receives_pages(self, viewer):
        pages = []
        viewer.subscribe(pages.append)

        await viewer.set_subject("trader-a")
        viewer.next_page()

        assert pages[-1].current_page == 2
        assert any(p.status == LoadStatus.READY for p in pages)

    @pytest.mark.asyncio
    async def test_unsubscribe(self, viewer):
        pages = []
        unsubscribe = viewer.subscribe(pages.append)
        unsubscribe()

        await viewer.set_subject("trader-a")
        assert pages == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_viewer(self, viewer):
        def broken(page):
            raise RuntimeError("render failed")

        viewer.subscribe(broken)
        page = await viewer.set_subject("trader-a")

        assert page.status == LoadStatus.READY

    @pytest.mark.asyncio
    async def test_noop_transition_does_not_notify(self, viewer):
        await viewer.set_subject("trader-a")
        pages = []
        viewer.subscribe(pages.append)

        viewer.previous_page()

        assert pages == []
