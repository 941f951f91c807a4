"""
Focus Tracker - Detects sustained gaze-away intervals using hysteresis
"""

import logging
from datetime import datetime
from typing import Optional

from ..models import EventDraft, EventType, IntervalFlush, Severity

logger = logging.getLogger(__name__)


class FocusTracker:
    """
    Tracks the open "looking away" interval of a session.

    An interval opens on the first tick the candidate looks away and is
    flushed on the first tick they look back. Only intervals longer than
    the threshold become FocusLost events; shorter ones (blinks, glances)
    still count towards cumulative focus-lost time.
    """

    # Severity bands (seconds)
    MEDIUM_AFTER = 10.0
    HIGH_AFTER = 15.0

    def __init__(self, threshold: float = 5.0):
        """
        Initialize focus tracker.

        Args:
            threshold: Minimum interval length in seconds that produces an event
        """
        self.threshold = threshold
        self._started_at: Optional[datetime] = None

    @property
    def started_at(self) -> Optional[datetime]:
        """Start of the open interval, or None"""
        return self._started_at

    @property
    def is_open(self) -> bool:
        return self._started_at is not None

    def observe(self, is_looking_away: bool, now: datetime) -> Optional[IntervalFlush]:
        """
        Feed one tick of gaze data.

        Args:
            is_looking_away: Gaze-away flag for this tick
            now: Tick instant

        Returns:
            The flushed interval if focus was regained this tick, else None
        """
        if is_looking_away:
            if self._started_at is None:
                self._started_at = now
                logger.debug(f"Focus lost at {now.isoformat()}")
            return None

        return self.flush(now)

    def flush(self, now: datetime) -> Optional[IntervalFlush]:
        """
        Close the open interval (focus regained or session ending).

        Returns:
            IntervalFlush with an event draft when above threshold,
            or None when no interval was open
        """
        if self._started_at is None:
            return None

        started_at = self._started_at
        duration = max(0.0, (now - started_at).total_seconds())
        self._started_at = None

        event = None
        if duration > self.threshold:
            event = EventDraft(
                type=EventType.FOCUS_LOST,
                severity=self.classify_severity(duration),
                description=f"Focus lost for {duration:.1f} seconds",
                duration=duration,
            )
        else:
            logger.debug(f"Focus interval of {duration:.2f}s absorbed (threshold {self.threshold}s)")

        return IntervalFlush(started_at=started_at, ended_at=now, duration=duration, event=event)

    @classmethod
    def classify_severity(cls, duration: float) -> Severity:
        """Severity of a focus-lost interval of the given length"""
        if duration > cls.HIGH_AFTER:
            return Severity.HIGH
        elif duration > cls.MEDIUM_AFTER:
            return Severity.MEDIUM
        else:
            return Severity.LOW
