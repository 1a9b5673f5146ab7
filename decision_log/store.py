"""
Decision Log - Record Store.

============================================================
RESPONSIBILITY
============================================================
Holds the most recently fetched full record set of ONE
subject (trader/strategy identifier).

- Starts PENDING with no cached data
- A successful refresh replaces the snapshot wholesale and
  moves to READY
- A failed refresh moves to FAILED with the error and keeps
  the previous snapshot for continued display
- Refreshes go through the RequestDeduplicator, so requests
  inside the de-duplication window share one network call

============================================================
FAILURE SAFETY
============================================================
The store never raises fetch or parse failures past its
boundary. Once closed (subject torn down) it ignores every
late result.

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Tuple

from core.clock import ClockFactory, ClockProtocol

from .dedup import RequestDeduplicator
from .exceptions import DecisionLogError, FetchError
from .models import DecisionRecord, LoadStatus
from .sources import DecisionSource


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreState:
    """
    Immutable view of a store: RecordSet, Pending or Failed.

    Readers always see either the previous complete snapshot
    or the new complete snapshot.
    """
    subject_id: str
    status: LoadStatus = LoadStatus.PENDING
    records: Tuple[DecisionRecord, ...] = ()
    has_data: bool = False
    error: Optional[DecisionLogError] = None
    fetched_at: Optional[datetime] = None

    @property
    def is_ready(self) -> bool:
        return self.status is LoadStatus.READY

    @property
    def is_failed(self) -> bool:
        return self.status is LoadStatus.FAILED


class RecordStore:
    """
    Per-subject cache of decision records.

    ============================================================
    LIFECYCLE
    ============================================================
    1. Created when a subject becomes active (PENDING)
    2. refresh() issues (or joins) a fetch and swaps the snapshot
    3. close() when the subject is torn down; late results
       are discarded
    ============================================================
    """

    def __init__(
        self,
        subject_id: str,
        source: DecisionSource,
        deduplicator: Optional[RequestDeduplicator] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            subject_id: Trader/strategy identifier
            source: Records source
            deduplicator: Shared in-flight request map
            clock: Clock for the de-duplication window
        """
        if not subject_id:
            raise ValueError("subject_id must not be empty")

        self._subject_id = subject_id
        self._source = source
        self._clock = clock or ClockFactory.get_clock()
        self._dedup = deduplicator or RequestDeduplicator(clock=self._clock)
        self._state = StoreState(subject_id=subject_id)
        self._closed = False

        self._refresh_count = 0
        self._failure_count = 0

    @property
    def subject_id(self) -> str:
        return self._subject_id

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self) -> StoreState:
        """Current state: RecordSet (READY), PENDING or FAILED."""
        return self._state

    async def refresh(self, force: bool = False) -> StoreState:
        """
        Refresh the snapshot from the records source.

        Args:
            force: Bypass the de-duplication window

        Returns:
            The resulting store state (never raises fetch/parse errors)
        """
        if self._closed:
            logger.debug(f"Ignoring refresh of closed store {self._subject_id}")
            return self._state

        self._refresh_count += 1
        error: Optional[DecisionLogError] = None

        try:
            result = await self._dedup.fetch(
                self._subject_id,
                lambda: self._source.fetch_decisions(self._subject_id),
                force=force,
            )
        except asyncio.CancelledError:
            raise
        except DecisionLogError as e:
            error = e
        except Exception as e:
            logger.exception(f"Unexpected error fetching decisions for {self._subject_id}")
            error = FetchError(
                message=f"Unexpected error: {e}",
                subject_id=self._subject_id,
                recoverable=False,
            )

        if self._closed:
            logger.debug(f"Discarding late result for closed store {self._subject_id}")
            return self._state

        if error is not None:
            self._failure_count += 1
            logger.warning(f"Refresh failed for {self._subject_id}: {error}")
            self._state = replace(self._state, status=LoadStatus.FAILED, error=error)
            return self._state

        self._state = StoreState(
            subject_id=self._subject_id,
            status=LoadStatus.READY,
            records=result.records,
            has_data=True,
            error=None,
            fetched_at=datetime.fromtimestamp(result.completed_at, tz=timezone.utc),
        )
        logger.debug(
            f"Store {self._subject_id} now holds {len(result.records)} records "
            f"(shared={result.shared})"
        )
        return self._state

    def close(self) -> None:
        """Tear the store down; later results are ignored."""
        self._closed = True

    def get_stats(self) -> dict:
        return {
            "subject_id": self._subject_id,
            "status": self._state.status.value,
            "record_count": len(self._state.records),
            "refresh_count": self._refresh_count,
            "failure_count": self._failure_count,
            "closed": self._closed,
        }
