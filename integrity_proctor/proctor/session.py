"""
Proctor Session - Manages a single proctoring session
"""

import dataclasses
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .clock import SystemClock
from .exceptions import SessionNotActiveError, SessionNotStartedError, SessionStateError
from .models import (
    DetectionConfig,
    DetectionSample,
    EventDraft,
    FocusState,
    IntegritySession,
    IntervalFlush,
    ProctoringEvent,
    VideoStats,
)
from .report import Report, build_report
from .scoring import IntegrityScorer
from .trackers import FocusTracker, ObjectEventClassifier, PresenceTracker
from .utils.logging import log_event_recorded, log_session_end, log_session_start

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states. ENDED is terminal."""
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    ENDED = "ended"


class ProctorSession:
    """
    Manages a single proctoring session.

    Owns the session record, live statistics and all interval timers.
    Perception samples are fed one at a time through `ingest()`; each call
    runs to completion before returning, so callers never observe a
    partially processed tick. Other code gets snapshots only.
    """

    def __init__(
        self,
        candidate_name: str,
        config: Optional[DetectionConfig] = None,
        clock=None
    ):
        """
        Initialize a proctoring session (not yet started).

        Args:
            candidate_name: Name of the candidate being proctored
            config: Detection thresholds and object policy (defaults if not provided)
            clock: Object with a `now()` method returning UTC datetimes
        """
        self.candidate_name = candidate_name
        self.config = config or DetectionConfig()
        self.state = SessionState.NOT_STARTED

        self._clock = clock or SystemClock()
        self._record: Optional[IntegritySession] = None
        self._stats = VideoStats()
        self._scorer = IntegrityScorer()
        self._event_seq = 0

        self._focus = FocusTracker(threshold=self.config.focus_threshold)
        self._presence = PresenceTracker(threshold=self.config.face_absence_threshold)
        self._objects = ObjectEventClassifier(fallback=self.config.object_fallback)

    # ============== Lifecycle ==============

    def start(self) -> str:
        """
        Start the session.

        Returns:
            The new session ID

        Raises:
            SessionStateError: If the session was already started
        """
        if self.state != SessionState.NOT_STARTED:
            raise SessionStateError(
                f"Session {self.id} cannot be started from state '{self.state.value}'"
            )

        now = self._clock.now()
        session_id = f"session_{_epoch_ms(now)}_{uuid.uuid4().hex[:4]}"

        self._record = IntegritySession(
            candidate_name=self.candidate_name,
            session_id=session_id,
            start_time=now,
        )
        self.state = SessionState.ACTIVE

        log_session_start(session_id, self.candidate_name)
        return session_id

    def ingest(self, sample: Optional[DetectionSample]) -> List[ProctoringEvent]:
        """
        Process one perception tick.

        A missing sample (None) means the perception subsystem produced
        nothing this tick and is treated as "no change".

        Args:
            sample: Detection sample for this tick

        Returns:
            Events recorded while processing this tick, in order

        Raises:
            SessionNotActiveError: If the session is not active
        """
        self._require_active("ingest samples")

        if sample is None:
            logger.debug(f"Session {self.id}: no sample this tick")
            return []

        now = self._clock.now()
        recorded: List[ProctoringEvent] = []

        # Presence first, so a returning face resets focus tracking before
        # this tick's gaze flag is applied
        presence = self._presence.observe(sample.face_count, now)
        if presence.face_present:
            self._stats.faces_detected = presence.face_count
            self._stats.last_face_detection = now

            if presence.recovery is not None:
                recorded.extend(self._record_flush(presence.recovery))
                recorded.extend(self._flush_focus(now))

            if presence.multiple_faces is not None:
                recorded.append(self._record_event(presence.multiple_faces, now))
        else:
            self._stats.faces_detected = 0

        focus_flush = self._focus.observe(sample.is_looking_away, now)
        if focus_flush is not None:
            recorded.extend(self._apply_focus_flush(focus_flush))

        for label in sample.object_labels:
            draft = self._objects.draft(label)
            if draft is not None:
                recorded.append(self._record_event(draft, now))

        self._resolve_focus_state()
        return recorded

    def end(self) -> Report:
        """
        End the session.

        Flushes any open focus-lost and no-face intervals at the current
        instant before recording the end time. Ending an already ended
        session changes nothing.

        Returns:
            Final report

        Raises:
            SessionNotActiveError: If the session was never started
        """
        if self.state == SessionState.ENDED:
            logger.warning(f"Session {self.id} already ended; ignoring end request")
            return self.build_report()

        self._require_active("end")

        now = self._clock.now()
        self._flush_focus(now)

        recovery = self._presence.flush(now)
        if recovery is not None:
            self._record_flush(recovery)

        self._record.end_time = now
        self.state = SessionState.ENDED
        self._resolve_focus_state()

        log_session_end(
            self.id,
            self._record.integrity_score,
            len(self._record.events),
            (now - self._record.start_time).total_seconds()
        )

        return self.build_report()

    def build_report(self) -> Report:
        """
        Build a report snapshot. Safe to call mid-session.

        Raises:
            SessionNotStartedError: If the session was never started
        """
        if self._record is None:
            raise SessionNotStartedError("Cannot build a report before the session starts")
        return build_report(self._record, self._stats, self._clock.now())

    # ============== Read-only views ==============

    @property
    def id(self) -> Optional[str]:
        """Session ID, assigned on start"""
        return self._record.session_id if self._record else None

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def start_time(self) -> Optional[datetime]:
        return self._record.start_time if self._record else None

    @property
    def end_time(self) -> Optional[datetime]:
        return self._record.end_time if self._record else None

    @property
    def events(self) -> Tuple[ProctoringEvent, ...]:
        """Recorded events in creation order"""
        return self._record.events.snapshot() if self._record else ()

    @property
    def integrity_score(self) -> int:
        return self._scorer.score

    @property
    def current_focus_state(self) -> FocusState:
        return self._stats.current_focus_state

    @property
    def video_stats(self) -> VideoStats:
        """Copy of the live statistics"""
        return dataclasses.replace(self._stats)

    @property
    def focus_lost_start(self) -> Optional[datetime]:
        return self._focus.started_at

    @property
    def no_face_start(self) -> Optional[datetime]:
        return self._presence.started_at

    def elapsed_seconds(self) -> float:
        """Seconds since start, up to end time or now"""
        if self._record is None:
            return 0.0
        end = self._record.end_time or self._clock.now()
        return (end - self._record.start_time).total_seconds()

    # ============== Internals ==============

    def _require_active(self, action: str):
        if self.state != SessionState.ACTIVE:
            raise SessionNotActiveError(
                f"Cannot {action}: session is '{self.state.value}'"
            )

    def _flush_focus(self, now: datetime) -> List[ProctoringEvent]:
        """Close the open focus interval through the regain path"""
        flush = self._focus.flush(now)
        if flush is None:
            return []
        return self._apply_focus_flush(flush)

    def _apply_focus_flush(self, flush: IntervalFlush) -> List[ProctoringEvent]:
        self._stats.cumulative_focus_lost_seconds += flush.duration
        return self._record_flush(flush)

    def _record_flush(self, flush: IntervalFlush) -> List[ProctoringEvent]:
        if flush.event is None:
            return []
        return [self._record_event(flush.event, flush.ended_at)]

    def _record_event(self, draft: EventDraft, timestamp: datetime) -> ProctoringEvent:
        """Append an event to the log and deduct its score"""
        self._event_seq += 1
        event = ProctoringEvent(
            id=f"event_{_epoch_ms(timestamp)}_{self._event_seq}",
            type=draft.type,
            severity=draft.severity,
            timestamp=timestamp,
            description=draft.description,
            duration=draft.duration,
        )

        self._record.events.append(event)
        self._record.integrity_score = self._scorer.apply(event)

        log_event_recorded(self.id, event, self._record.integrity_score)
        return event

    def _resolve_focus_state(self):
        """NoFace takes precedence over LookingAway, which beats Focused"""
        if self._presence.is_open:
            state = FocusState.NO_FACE
        elif self._focus.is_open:
            state = FocusState.LOOKING_AWAY
        else:
            state = FocusState.FOCUSED
        self._stats.current_focus_state = state


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)
