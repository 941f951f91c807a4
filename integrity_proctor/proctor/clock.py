"""
Clocks - Sources of session timestamps
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional


class SystemClock:
    """
    Monotonic UTC clock.

    Anchors wall-clock time once and advances it with time.monotonic(),
    so timestamps never go backwards when the system clock is adjusted.
    """

    def __init__(self):
        self._anchor_wall = datetime.now(timezone.utc)
        self._anchor_mono = time.monotonic()

    def now(self) -> datetime:
        elapsed = time.monotonic() - self._anchor_mono
        return self._anchor_wall + timedelta(seconds=elapsed)


class ManualClock:
    """Clock that only moves when told to. Used for replay and tests."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        """Move the clock forward and return the new instant"""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now = self._now + timedelta(seconds=seconds)
        return self._now
