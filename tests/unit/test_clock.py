"""Unit tests for clocks."""

from datetime import UTC

import pytest

from rebase_vault.utils.clock import ManualClock, SystemClock, utc_now


class TestManualClock:
    """Tests for the manual clock."""

    def test_starts_at_given_time(self):
        assert ManualClock(start=100).now() == 100

    def test_advance(self):
        clock = ManualClock(start=100)
        assert clock.advance(50) == 150
        assert clock.now() == 150

    def test_advance_zero(self):
        clock = ManualClock(start=100)
        assert clock.advance(0) == 100

    def test_cannot_go_backwards(self):
        clock = ManualClock(start=100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(99)
        assert clock.now() == 100

    def test_set_forward(self):
        clock = ManualClock(start=100)
        assert clock.set(1000) == 1000

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError):
            ManualClock(start=-5)


class TestSystemClock:
    """Tests for the wall clock."""

    def test_now_is_int_seconds(self):
        now = SystemClock().now()
        assert isinstance(now, int)
        assert abs(now - int(utc_now().timestamp())) <= 2

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is UTC
