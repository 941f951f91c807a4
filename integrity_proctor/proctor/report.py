"""
Report Builder - Derives a read-only session summary
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .models import (
    EventType,
    IntegritySession,
    ProctoringEvent,
    SUSPICIOUS_EVENT_TYPES,
    VideoStats,
    to_iso,
)


@dataclass(frozen=True)
class Report:
    """Point-in-time summary of a proctoring session"""
    candidate_name: str
    session_id: str
    duration_minutes: float
    start_time: datetime
    end_time: Optional[datetime]
    integrity_score: int
    total_events: int
    focus_lost_count: int
    suspicious_event_count: int
    events: Tuple[ProctoringEvent, ...]
    total_focus_lost_seconds: float
    average_focus_lost_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the exported JSON layout.

        Durations are rendered with one decimal; timestamps as ISO-8601 UTC
        with milliseconds. `endTime` is omitted while the session is open.
        """
        data: Dict[str, Any] = {
            "candidateName": self.candidate_name,
            "sessionId": self.session_id,
            "duration": f"{self.duration_minutes:.1f}",
            "startTime": to_iso(self.start_time),
        }
        if self.end_time is not None:
            data["endTime"] = to_iso(self.end_time)

        data.update({
            "integrityScore": self.integrity_score,
            "totalEvents": self.total_events,
            "focusLostCount": self.focus_lost_count,
            "suspiciousEventCount": self.suspicious_event_count,
            "events": [event.to_dict() for event in self.events],
            "summary": {
                "totalFocusLostTime": f"{self.total_focus_lost_seconds:.1f}",
                "averageFocusLostDuration": (
                    f"{self.average_focus_lost_seconds:.1f}" if self.focus_lost_count else "0"
                ),
            },
        })
        return data


def build_report(record: IntegritySession, stats: VideoStats, now: datetime) -> Report:
    """
    Build a report from a session record.

    Pure: neither argument is modified. An open session is measured up to
    `now` without setting its end time.

    Args:
        record: Session record (events, score, timing)
        stats: Live statistics holding cumulative focus-lost time
        now: Current instant, used when the session has no end time

    Returns:
        Report snapshot
    """
    events = record.events.snapshot()
    end = record.end_time or now
    duration_minutes = max(0.0, (end - record.start_time).total_seconds()) / 60

    focus_lost = record.events.of_type(EventType.FOCUS_LOST)
    suspicious = record.events.of_type(*SUSPICIOUS_EVENT_TYPES)

    if focus_lost:
        average = sum(e.duration or 0.0 for e in focus_lost) / len(focus_lost)
    else:
        average = 0.0

    return Report(
        candidate_name=record.candidate_name,
        session_id=record.session_id,
        duration_minutes=duration_minutes,
        start_time=record.start_time,
        end_time=record.end_time,
        integrity_score=record.integrity_score,
        total_events=len(events),
        focus_lost_count=len(focus_lost),
        suspicious_event_count=len(suspicious),
        events=events,
        total_focus_lost_seconds=stats.cumulative_focus_lost_seconds,
        average_focus_lost_seconds=average,
    )
