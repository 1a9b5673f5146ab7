"""
Core Module Package.

Shared infrastructure used by the decision log engine and
the news feed.

Components:
- clock: Unified time abstraction
"""

from .clock import (
    ClockFactory,
    ClockProtocol,
    MockClock,
    SystemClock,
    from_iso8601,
    to_iso8601,
)


__all__ = [
    "ClockFactory",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "from_iso8601",
    "to_iso8601",
]
