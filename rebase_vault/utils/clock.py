"""
Clocks.

The ledger reads time only through a clock object so accrual can be
driven deterministically in tests and simulations.
"""

from datetime import UTC, datetime
from typing import Protocol

from loguru import logger


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


class Clock(Protocol):
    """Source of the current time in whole seconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall clock in UTC epoch seconds."""

    def now(self) -> int:
        return int(utc_now().timestamp())


class ManualClock:
    """
    Clock that only moves when told to.

    Time never goes backwards: accrual assumes elapsed >= 0.
    """

    def __init__(self, start: int = 1_700_000_000) -> None:
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """
        Move the clock forward.

        Args:
            seconds: Non-negative number of seconds

        Returns:
            New current time
        """
        if seconds < 0:
            raise ValueError(f"cannot move clock backwards by {seconds}s")
        self._now += seconds
        logger.debug(f"Clock advanced by {seconds}s to {self._now}")
        return self._now

    def set(self, timestamp: int) -> int:
        """Jump to an absolute timestamp not earlier than now."""
        if timestamp < self._now:
            raise ValueError(
                f"cannot move clock backwards: {timestamp} < {self._now}"
            )
        self._now = timestamp
        return self._now
