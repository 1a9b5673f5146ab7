"""
Decision Log - Refresh Scheduler.

============================================================
RESPONSIBILITY
============================================================
Fires a refresh on a fixed cadence while a subject is active.

- Waits refresh_interval_seconds between ticks
- A failed tick is logged and never stops later ticks
- stop() cancels the loop; no tick fires after stop()
- Not triggered by focus changes or any other UI event

============================================================
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional


logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Background loop calling an async refresh callback at a fixed interval."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[Any]],
        interval_seconds: float = 30.0,
        name: str = "decisions",
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            refresh: Coroutine function run on every tick
            interval_seconds: Delay between ticks
            name: Label used in log messages
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")

        self._refresh = refresh
        self._interval = interval_seconds
        self._name = name
        self._task: Optional[asyncio.Task] = None
        self._running = False

        self._tick_count = 0
        self._failed_ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        return self._tick_count

    async def start(self) -> None:
        """Start the refresh loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Started refresh scheduler for {self._name} (every {self._interval}s)")

    async def stop(self) -> None:
        """Stop the refresh loop and wait for it to exit."""
        self._running = False
        task, self._task = self._task, None
        if task is asyncio.current_task():
            # Stopped from inside a tick; the loop exits on its own
            return
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info(f"Stopped refresh scheduler for {self._name}")

    async def _loop(self) -> None:
        """Background refresh loop."""
        while self._running:
            await asyncio.sleep(self._interval)
            if not self._running:
                break

            self._tick_count += 1
            try:
                await self._refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._failed_ticks += 1
                logger.error(f"Refresh tick failed for {self._name}: {e}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "running": self._running,
            "interval_seconds": self._interval,
            "tick_count": self._tick_count,
            "failed_ticks": self._failed_ticks,
        }
