"""
Presence Tracker - Detects sustained face absence and multiple-face violations
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..models import EventDraft, EventType, IntervalFlush, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresenceObservation:
    """What one tick of face data resolved to"""
    face_count: int
    # Closed no-face interval, when the face reappeared this tick
    recovery: Optional[IntervalFlush] = None
    # MultipleFaces violation for this tick
    multiple_faces: Optional[EventDraft] = None

    @property
    def face_present(self) -> bool:
        return self.face_count > 0


class PresenceTracker:
    """
    Tracks the open "no face" interval of a session.

    Face absence goes through the same hysteresis as gaze: only absences
    longer than the threshold are logged. More than one face is logged on
    every tick it is observed, with no duration gate.
    """

    # Absences longer than this are high severity (seconds)
    HIGH_AFTER = 30.0

    def __init__(self, threshold: float = 10.0):
        """
        Initialize presence tracker.

        Args:
            threshold: Minimum absence in seconds that produces a NoFace event
        """
        self.threshold = threshold
        self._started_at: Optional[datetime] = None

    @property
    def started_at(self) -> Optional[datetime]:
        """Start of the open no-face interval, or None"""
        return self._started_at

    @property
    def is_open(self) -> bool:
        return self._started_at is not None

    def observe(self, face_count: int, now: datetime) -> PresenceObservation:
        """
        Feed one tick of face data.

        Args:
            face_count: Number of faces detected this tick
            now: Tick instant

        Returns:
            PresenceObservation describing recovery and violations
        """
        if face_count == 0:
            if self._started_at is None:
                self._started_at = now
                logger.debug(f"Face lost at {now.isoformat()}")
            return PresenceObservation(face_count=0)

        recovery = self.flush(now)

        multiple_faces = None
        if face_count > 1:
            multiple_faces = EventDraft(
                type=EventType.MULTIPLE_FACES,
                severity=Severity.HIGH,
                description=f"Multiple faces detected ({face_count} faces)",
            )

        return PresenceObservation(
            face_count=face_count,
            recovery=recovery,
            multiple_faces=multiple_faces,
        )

    def flush(self, now: datetime) -> Optional[IntervalFlush]:
        """
        Close the open no-face interval (face returned or session ending).

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
                type=EventType.NO_FACE,
                severity=self.classify_severity(duration),
                description=f"No face detected for {duration:.1f} seconds",
                duration=duration,
            )
        else:
            logger.debug(f"Absence of {duration:.2f}s absorbed (threshold {self.threshold}s)")

        return IntervalFlush(started_at=started_at, ended_at=now, duration=duration, event=event)

    @classmethod
    def classify_severity(cls, duration: float) -> Severity:
        """Severity of a no-face interval of the given length"""
        return Severity.HIGH if duration > cls.HIGH_AFTER else Severity.MEDIUM
