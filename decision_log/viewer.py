"""
Decision Log - Viewer.

============================================================
MAIN ENTRY POINT
============================================================

The DecisionLogViewer wires the engine together:

    Refresh Scheduler -> Record Store -> View Builder
                      -> Paginator -> presentation layer

- Owns the active subject, its store and its scheduler
- Holds one immutable ViewerState; every event replaces it
- Guards against stale responses: every refresh is tagged
  with (subject_id, generation) at issue time and dropped
  on completion if the tag no longer matches

============================================================
PUBLIC INTERFACE
============================================================

```python
viewer = DecisionLogViewer(HttpDecisionSource())

await viewer.set_subject("trader-1")

viewer.set_search_term("btc")
viewer.set_status_filter("failed")
viewer.next_page()

page = viewer.page()
page.records, page.current_page, page.total_pages, page.status

await viewer.close()
```

============================================================
CONCURRENCY
============================================================
Cooperative and single-threaded: every transition runs to
completion on the event loop before the next event. Only
refreshes suspend, and while one is in flight the previous
view stays current. Subject switches and close() are
serialized; the latest switch request wins.

============================================================
"""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple, Union

from core.clock import ClockFactory, ClockProtocol

from . import state as transitions
from .config import DecisionLogConfig, get_config
from .dedup import RequestDeduplicator
from .models import StatusFilter
from .scheduler import RefreshScheduler
from .sources import DecisionSource
from .state import DecisionLogPage, ViewerState, to_page
from .store import RecordStore, StoreState


logger = logging.getLogger(__name__)


PageListener = Callable[[DecisionLogPage], None]


class DecisionLogViewer:
    """
    Client-side decision log engine for one viewer session.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    - Subject lifecycle (store + scheduler per subject)
    - Stale-response guard
    - Filter / page mutators as pure state transitions
    - Read-only page snapshots and change notifications
    ============================================================
    """

    def __init__(
        self,
        source: DecisionSource,
        config: Optional[DecisionLogConfig] = None,
        clock: Optional[ClockProtocol] = None,
        deduplicator: Optional[RequestDeduplicator] = None,
    ) -> None:
        """
        Initialize the viewer.

        Args:
            source: Records source
            config: Engine configuration (defaults to global config)
            clock: Clock for the de-duplication window
            deduplicator: Shared in-flight request map; one is
                created from the config when omitted
        """
        self._source = source
        self._config = config or get_config()
        self._clock = clock or ClockFactory.get_clock()
        self._dedup = deduplicator or RequestDeduplicator(
            window_seconds=self._config.dedup_window_seconds,
            clock=self._clock,
        )

        self._state = transitions.initial_state(None, self._config.page_size)
        self._store: Optional[RecordStore] = None
        self._scheduler: Optional[RefreshScheduler] = None
        self._generation = 0
        self._switch_requests = 0
        self._switch_lock: Optional[asyncio.Lock] = None
        self._listeners: List[PageListener] = []

        self._discarded_responses = 0

    # =========================================================
    # READ ACCESS
    # =========================================================

    @property
    def state(self) -> ViewerState:
        return self._state

    @property
    def subject_id(self) -> Optional[str]:
        return self._state.subject_id

    @property
    def store(self) -> Optional[RecordStore]:
        return self._store

    @property
    def scheduler(self) -> Optional[RefreshScheduler]:
        return self._scheduler

    @property
    def discarded_responses(self) -> int:
        """Refresh results dropped by the stale-response guard."""
        return self._discarded_responses

    def page(self) -> DecisionLogPage:
        """Presentation snapshot of the current state."""
        return to_page(self._state)

    # =========================================================
    # SUBJECT LIFECYCLE
    # =========================================================

    async def set_subject(
        self,
        subject_id: Optional[str],
        initial_refresh: bool = True,
    ) -> DecisionLogPage:
        """
        Switch the active subject.

        The previous store and scheduler are torn down, filters and
        page are reset, and a fresh PENDING store is created. The
        initial fetch is awaited unless initial_refresh is False.

        Overlapping switches are serialized and the most recent
        request wins: a switch superseded while waiting for an
        earlier one returns without touching the active subject.

        Args:
            subject_id: New trader/strategy identifier, or None to clear
            initial_refresh: Issue the first fetch immediately

        Returns:
            Page snapshot after the switch
        """
        self._switch_requests += 1
        request = self._switch_requests

        async with self._get_switch_lock():
            if request != self._switch_requests:
                logger.debug(f"Subject switch to {subject_id} superseded")
                return self.page()

            if subject_id is not None and subject_id == self._state.subject_id and self._store:
                return self.page()

            await self._teardown()

            self._generation += 1
            self._set_state(transitions.initial_state(subject_id, self._config.page_size))

            if subject_id is None:
                logger.info("Decision log subject cleared")
                return self.page()

            logger.info(f"Decision log subject set to {subject_id}")

            self._store = RecordStore(
                subject_id=subject_id,
                source=self._source,
                deduplicator=self._dedup,
                clock=self._clock,
            )
            self._scheduler = RefreshScheduler(
                refresh=self.refresh,
                interval_seconds=self._config.refresh_interval_seconds,
                name=subject_id,
            )
            await self._scheduler.start()

        if initial_refresh and request == self._switch_requests:
            await self.refresh()
        return self.page()

    def _get_switch_lock(self) -> asyncio.Lock:
        # Created on first use so it binds to the running loop
        if self._switch_lock is None:
            self._switch_lock = asyncio.Lock()
        return self._switch_lock

    async def _teardown(self) -> None:
        scheduler, self._scheduler = self._scheduler, None
        store, self._store = self._store, None

        if store is not None:
            store.close()
        if scheduler is not None:
            await scheduler.stop()

    async def close(self) -> None:
        """Tear down the active subject and stop refreshing."""
        self._switch_requests += 1
        async with self._get_switch_lock():
            await self._teardown()
            self._generation += 1
        logger.info("Decision log viewer closed")

    async def __aenter__(self) -> "DecisionLogViewer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================
    # REFRESH
    # =========================================================

    def _tag(self) -> Tuple[Optional[str], int]:
        return self._state.subject_id, self._generation

    async def refresh(self, force: bool = False) -> DecisionLogPage:
        """
        Refresh the active store and apply the result.

        Args:
            force: Bypass the de-duplication window

        Returns:
            Page snapshot after the refresh (unchanged if discarded)
        """
        store = self._store
        if store is None:
            return self.page()

        tag = self._tag()
        store_state = await store.refresh(force=force)

        if tag != self._tag():
            self._discarded_responses += 1
            logger.debug(
                f"Discarding stale refresh for {tag[0]} "
                f"(active subject: {self._state.subject_id})"
            )
            return self.page()

        self._apply_store_state(store_state)
        return self.page()

    def _apply_store_state(self, store_state: StoreState) -> None:
        if store_state.is_ready:
            self._set_state(
                transitions.apply_records(
                    self._state,
                    store_state.records,
                    fetched_at=store_state.fetched_at,
                )
            )
        elif store_state.is_failed and store_state.error is not None:
            self._set_state(transitions.apply_failure(self._state, store_state.error))

    # =========================================================
    # MUTATORS
    # =========================================================

    def set_search_term(self, search_term: str) -> DecisionLogPage:
        self._set_state(transitions.set_search_term(self._state, search_term))
        return self.page()

    def set_status_filter(self, status_filter: Union[StatusFilter, str]) -> DecisionLogPage:
        self._set_state(transitions.set_status_filter(self._state, status_filter))
        return self.page()

    def go_to_page(self, page: int) -> DecisionLogPage:
        self._set_state(transitions.go_to_page(self._state, page))
        return self.page()

    def next_page(self) -> DecisionLogPage:
        self._set_state(transitions.next_page(self._state))
        return self.page()

    def previous_page(self) -> DecisionLogPage:
        self._set_state(transitions.previous_page(self._state))
        return self.page()

    # =========================================================
    # CHANGE NOTIFICATION
    # =========================================================

    def subscribe(self, listener: PageListener) -> Callable[[], None]:
        """
        Register a listener called with the new page after every change.

        Returns:
            Callable removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, new_state: ViewerState) -> None:
        if new_state is self._state:
            return
        self._state = new_state

        if not self._listeners:
            return
        page = to_page(new_state)
        for listener in list(self._listeners):
            try:
                listener(page)
            except Exception:
                logger.exception("Decision log listener failed")

    def get_stats(self) -> dict:
        return {
            "subject_id": self._state.subject_id,
            "generation": self._generation,
            "status": self._state.status.value,
            "discarded_responses": self._discarded_responses,
            "store": self._store.get_stats() if self._store else None,
            "scheduler": self._scheduler.get_stats() if self._scheduler else None,
            "dedup": self._dedup.get_stats(),
        }
