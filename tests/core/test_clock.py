"""
Tests for the clock abstraction and ISO 8601 helpers.
"""

import pytest
from datetime import datetime, timedelta, timezone

from core.clock import (
    ClockFactory,
    MockClock,
    SystemClock,
    from_iso8601,
    to_iso8601,
)


@pytest.fixture(autouse=True)
def reset_clock():
    yield
    ClockFactory.reset()


class TestMockClock:
    """Tests for MockClock."""

    def test_naive_initial_time_is_utc(self):
        clock = MockClock(datetime(2026, 1, 1, 12, 0))
        assert clock.now().tzinfo == timezone.utc

    def test_advance_moves_time_forward(self):
        clock = MockClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        start = clock.timestamp()

        clock.advance(5)
        clock.advance(minutes=1)

        assert clock.seconds_since(start) == pytest.approx(65)
        assert clock.now() == datetime(2026, 1, 1, 0, 1, 5, tzinfo=timezone.utc)

    def test_set_time(self):
        clock = MockClock()
        clock.set_time(datetime(2030, 6, 1))
        assert clock.now() == datetime(2030, 6, 1, tzinfo=timezone.utc)


class TestClockFactory:
    """Tests for ClockFactory."""

    def test_default_is_system_clock(self):
        assert isinstance(ClockFactory.get_clock(), SystemClock)

    def test_use_mock_installs_mock_clock_temporarily(self):
        original = ClockFactory.get_clock()
        with ClockFactory.use_mock(datetime(2026, 1, 1, tzinfo=timezone.utc)) as clock:
            assert ClockFactory.get_clock() is clock
        assert ClockFactory.get_clock() is original

    def test_reset_restores_system_clock(self):
        ClockFactory.set_clock(MockClock())
        ClockFactory.reset()
        assert isinstance(ClockFactory.get_clock(), SystemClock)


class TestIso8601:
    """Tests for ISO 8601 parsing and formatting."""

    def test_parses_trailing_z(self):
        assert from_iso8601("2026-01-01T10:00:00Z") == datetime(
            2026, 1, 1, 10, 0, tzinfo=timezone.utc
        )

    def test_parses_offset(self):
        parsed = from_iso8601("2026-01-01T10:00:00+02:00")
        assert parsed == datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_naive_treated_as_utc(self):
        assert from_iso8601("2026-01-01T10:00:00").tzinfo == timezone.utc

    def test_nanosecond_fraction_is_truncated(self):
        parsed = from_iso8601("2026-01-01T10:00:00.123456789Z")
        assert parsed.microsecond == 123456

    def test_short_fraction_is_padded(self):
        parsed = from_iso8601("2026-01-01T10:00:00.5Z")
        assert parsed.microsecond == 500000

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            from_iso8601("yesterday")

    def test_format_round_trip(self):
        value = datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc) + timedelta(seconds=1)
        assert from_iso8601(to_iso8601(value)) == value
