"""
Proctoring Models - Event, sample and session data types
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .event_log import EventLog


class EventType(str, Enum):
    """Integrity event categories"""
    FOCUS_LOST = "focus_lost"
    NO_FACE = "no_face"
    MULTIPLE_FACES = "multiple_faces"
    PHONE_DETECTED = "phone_detected"
    BOOK_DETECTED = "book_detected"
    DEVICE_DETECTED = "device_detected"
    OTHER = "other"


class Severity(str, Enum):
    """Event severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FocusState(str, Enum):
    """Externally observable focus state of the candidate"""
    FOCUSED = "focused"
    LOOKING_AWAY = "looking_away"
    NO_FACE = "no_face"

    @property
    def label(self) -> str:
        """Human-readable status text"""
        return _FOCUS_LABELS[self]


_FOCUS_LABELS = {
    FocusState.FOCUSED: "Focused",
    FocusState.LOOKING_AWAY: "Looking Away",
    FocusState.NO_FACE: "No Face Detected",
}


# Events counted as suspicious in reports
SUSPICIOUS_EVENT_TYPES = frozenset({
    EventType.PHONE_DETECTED,
    EventType.BOOK_DETECTED,
    EventType.DEVICE_DETECTED,
    EventType.MULTIPLE_FACES,
})


def to_iso(value: datetime) -> str:
    """Format a UTC instant as ISO-8601 with milliseconds and a Z suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


@dataclass(frozen=True)
class DetectionSample:
    """
    One tick of perception output.

    Delivered by the external perception subsystem at its own cadence.
    """
    face_count: int
    is_looking_away: bool = False
    object_labels: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.face_count < 0:
            raise ValueError(f"face_count must be non-negative, got {self.face_count}")

        # A bare string is one label, not a sequence of characters
        if isinstance(self.object_labels, (str, bytes)):
            raise ValueError(
                f"object_labels must be a sequence of labels, got {self.object_labels!r}"
            )
        labels = tuple(self.object_labels)
        for label in labels:
            if not isinstance(label, str):
                raise ValueError(f"Object label must be a string, got {label!r}")
        object.__setattr__(self, "object_labels", labels)


@dataclass(frozen=True)
class EventDraft:
    """An event a tracker wants recorded; the session assigns id and timestamp."""
    type: EventType
    severity: Severity
    description: str
    duration: Optional[float] = None


@dataclass(frozen=True)
class ProctoringEvent:
    """A recorded integrity event. Immutable once created."""
    id: str
    type: EventType
    severity: Severity
    timestamp: datetime
    description: str
    duration: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the report's JSON representation."""
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "timestamp": to_iso(self.timestamp),
            "severity": self.severity.value,
            "description": self.description,
        }
        if self.duration is not None:
            data["duration"] = self.duration
        return data


@dataclass(frozen=True)
class IntervalFlush:
    """Result of closing an open timed interval."""
    started_at: datetime
    ended_at: datetime
    duration: float
    event: Optional[EventDraft] = None


@dataclass(frozen=True)
class DetectionConfig:
    """
    Hysteresis thresholds and object policy for a session.

    Args:
        focus_threshold: Seconds of sustained gaze-away before a FocusLost event
        face_absence_threshold: Seconds of sustained absence before a NoFace event
        object_fallback: Event type for objects that are neither phones nor books
    """
    focus_threshold: float = 5.0
    face_absence_threshold: float = 10.0
    object_fallback: EventType = EventType.DEVICE_DETECTED

    def __post_init__(self):
        if self.focus_threshold < 0 or self.face_absence_threshold < 0:
            raise ValueError("Detection thresholds must be non-negative")

        # Settings carry the fallback as a plain string
        fallback = EventType(self.object_fallback)
        if fallback not in (EventType.DEVICE_DETECTED, EventType.OTHER):
            raise ValueError(
                f"object_fallback must be device_detected or other, got {fallback.value}"
            )
        object.__setattr__(self, "object_fallback", fallback)

    @classmethod
    def from_settings(cls, settings) -> "DetectionConfig":
        """Build config from application settings"""
        return cls(
            focus_threshold=settings.FOCUS_THRESHOLD_SECONDS,
            face_absence_threshold=settings.FACE_ABSENCE_THRESHOLD_SECONDS,
            object_fallback=EventType(settings.OBJECT_FALLBACK_EVENT),
        )


@dataclass
class VideoStats:
    """Live per-session detection statistics."""
    faces_detected: int = 0
    last_face_detection: Optional[datetime] = None
    cumulative_focus_lost_seconds: float = 0.0
    current_focus_state: FocusState = FocusState.FOCUSED


@dataclass
class IntegritySession:
    """
    Session record owned by a single ProctorSession.

    `events` only grows and `integrity_score` only decreases.
    """
    candidate_name: str
    session_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    events: EventLog = field(default_factory=EventLog)
    integrity_score: int = 100
