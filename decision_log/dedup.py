"""
Decision Log - Request De-duplication.

============================================================
RESPONSIBILITY
============================================================
Coalesces record fetches per subject:

- At most one fetch per subject is in flight; concurrent
  requests await the same task
- Within the de-duplication window after a successful
  fetch, requests reuse that result without a network call
- force=True skips the window but still joins an in-flight
  fetch

Failed fetches do not open a window, so the next scheduled
tick retries.

============================================================
STATE
============================================================
One entry per subject:

    in_flight     asyncio.Task or None
    completed_at  clock timestamp of the last successful fetch
    result        records returned by that fetch

A deduplicator may be shared between viewers so that several
consumers of the same subject coalesce their requests.

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, Optional, Tuple

from core.clock import ClockFactory, ClockProtocol

from .models import DecisionRecord


logger = logging.getLogger(__name__)


Fetcher = Callable[[], Awaitable[Iterable[DecisionRecord]]]


@dataclass
class _DedupEntry:
    in_flight: Optional["asyncio.Task"] = None
    completed_at: Optional[float] = None
    result: Tuple[DecisionRecord, ...] = ()


@dataclass(frozen=True)
class DedupResult:
    """Outcome of a de-duplicated fetch."""
    records: Tuple[DecisionRecord, ...]
    completed_at: float
    shared: bool  # True when no new network call was issued for this request


class RequestDeduplicator:
    """
    In-flight request map keyed by subject identifier.

    Single-threaded: all calls must come from the same event loop.
    """

    def __init__(
        self,
        window_seconds: float = 20.0,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        """
        Initialize the deduplicator.

        Args:
            window_seconds: Reuse window after a successful fetch
            clock: Clock used to measure the window
        """
        if window_seconds < 0:
            raise ValueError(f"window_seconds must be >= 0, got {window_seconds}")
        self._window = window_seconds
        self._clock = clock or ClockFactory.get_clock()
        self._entries: Dict[str, _DedupEntry] = {}

        self._network_calls = 0
        self._shared_calls = 0

    @property
    def window_seconds(self) -> float:
        return self._window

    def is_in_flight(self, key: str) -> bool:
        entry = self._entries.get(key)
        return bool(entry and entry.in_flight and not entry.in_flight.done())

    def is_fresh(self, key: str) -> bool:
        """True while a successful result is inside the window."""
        entry = self._entries.get(key)
        if entry is None or entry.completed_at is None:
            return False
        return self._clock.seconds_since(entry.completed_at) < self._window

    async def fetch(self, key: str, fetcher: Fetcher, force: bool = False) -> DedupResult:
        """
        Run fetcher for key unless an equivalent request can be reused.

        Args:
            key: Subject identifier
            fetcher: Zero-argument coroutine factory issuing the network call
            force: Ignore the reuse window

        Returns:
            DedupResult with the records and their completion time

        Raises:
            Whatever fetcher raises, delivered to every joined caller
        """
        entry = self._entries.setdefault(key, _DedupEntry())

        if entry.in_flight is not None and not entry.in_flight.done():
            self._shared_calls += 1
            logger.debug(f"Joining in-flight fetch for {key}")
            records, completed_at = await asyncio.shield(entry.in_flight)
            return DedupResult(records=records, completed_at=completed_at, shared=True)

        if not force and self.is_fresh(key):
            self._shared_calls += 1
            logger.debug(f"Reusing fetch for {key} within {self._window}s window")
            return DedupResult(records=entry.result, completed_at=entry.completed_at, shared=True)

        task = asyncio.ensure_future(self._run(key, entry, fetcher))
        # Joined callers may all be cancelled; keep the exception retrieved
        task.add_done_callback(lambda t: t.cancelled() or t.exception())
        entry.in_flight = task

        records, completed_at = await asyncio.shield(task)
        return DedupResult(records=records, completed_at=completed_at, shared=False)

    async def _run(
        self,
        key: str,
        entry: _DedupEntry,
        fetcher: Fetcher,
    ) -> Tuple[Tuple[DecisionRecord, ...], float]:
        self._network_calls += 1
        try:
            records = tuple(await fetcher())
            completed_at = self._clock.timestamp()
            entry.result = records
            entry.completed_at = completed_at
            return records, completed_at
        finally:
            entry.in_flight = None

    def invalidate(self, key: Optional[str] = None) -> None:
        """Forget the cached result for one subject, or for all subjects."""
        if key is None:
            for entry in self._entries.values():
                entry.completed_at = None
                entry.result = ()
            return
        entry = self._entries.get(key)
        if entry is not None:
            entry.completed_at = None
            entry.result = ()

    def get_stats(self) -> Dict[str, int]:
        return {
            "subjects": len(self._entries),
            "network_calls": self._network_calls,
            "shared_calls": self._shared_calls,
        }
