"""
Tests for ProctorSession - lifecycle, tick processing and flush behaviour

Samples are delivered every 0.5s of simulated time; the clock advances
before each delivery.
"""

import random
from datetime import timedelta

import pytest

from integrity_proctor.proctor.exceptions import (
    SessionNotActiveError,
    SessionNotStartedError,
    SessionStateError,
)
from integrity_proctor.proctor.models import (
    DetectionConfig,
    DetectionSample,
    EventType,
    FocusState,
    Severity,
)
from integrity_proctor.proctor.session import ProctorSession, SessionState


class TestSessionLifecycle:
    """Tests for start/ingest/end transitions"""

    def test_new_session_not_started(self, clock):
        """Constructed sessions wait for start()"""
        s = ProctorSession("Jane Doe", clock=clock)

        assert s.state == SessionState.NOT_STARTED
        assert s.id is None
        assert s.events == ()

    def test_start(self, clock):
        """Start assigns an id, start time and a full score"""
        s = ProctorSession("Jane Doe", clock=clock)
        session_id = s.start()

        assert session_id.startswith("session_1704067200000_")
        assert s.id == session_id
        assert s.state == SessionState.ACTIVE
        assert s.start_time == clock.now()
        assert s.end_time is None
        assert s.integrity_score == 100

    def test_start_twice_rejected(self, session):
        """A session can only be started once"""
        with pytest.raises(SessionStateError):
            session.start()

    def test_ingest_before_start_rejected(self, clock):
        """Samples need an active session"""
        s = ProctorSession("Jane Doe", clock=clock)
        with pytest.raises(SessionNotActiveError):
            s.ingest(DetectionSample(face_count=1))

    def test_ingest_after_end_rejected(self, session):
        """No signal is accepted once ended"""
        session.end()
        with pytest.raises(SessionNotActiveError):
            session.ingest(DetectionSample(face_count=1))

    def test_end_twice_is_noop(self, session, clock, feed):
        """Second end changes nothing"""
        feed(session, face_count=1, away=True, times=12)
        session.end()
        end_time = session.end_time
        events = session.events

        clock.advance(30)
        session.end()

        assert session.end_time == end_time
        assert session.events == events
        assert session.state == SessionState.ENDED

    def test_end_before_start_rejected(self, clock):
        """Ending a session that never started is an error"""
        s = ProctorSession("Jane Doe", clock=clock)
        with pytest.raises(SessionNotActiveError):
            s.end()

    def test_report_before_start_rejected(self, clock):
        """Reports need a started session"""
        s = ProctorSession("Jane Doe", clock=clock)
        with pytest.raises(SessionNotStartedError):
            s.build_report()

    def test_missing_sample_is_noop(self, session, clock):
        """A tick without a sample changes nothing"""
        clock.advance(0.5)
        assert session.ingest(None) == []
        assert session.events == ()
        assert session.current_focus_state == FocusState.FOCUSED
        assert session.focus_lost_start is None
        assert session.no_face_start is None

    def test_missing_samples_do_not_break_intervals(self, session, clock, feed):
        """Gaps in perception neither close nor reopen an interval"""
        feed(session, face_count=1, away=True, times=4)
        opened = session.focus_lost_start

        for _ in range(4):
            clock.advance(0.5)
            session.ingest(None)

        feed(session, face_count=1, away=True, times=4)
        events = feed(session, face_count=1, away=False)

        assert session.focus_lost_start is None
        assert len(events) == 1
        assert events[0].duration == 6.0
        assert opened == events[0].timestamp - timedelta(seconds=6)


class TestScenarios:
    """End-to-end sample sequences"""

    def test_focus_lost_six_seconds(self, session, feed):
        """3 focused, 12 away, 1 focused -> one low FocusLost of 6s"""
        feed(session, face_count=1, away=False, times=3)
        feed(session, face_count=1, away=True, times=12)
        feed(session, face_count=1, away=False, times=1)

        events = session.events
        assert len(events) == 1
        assert events[0].type == EventType.FOCUS_LOST
        assert events[0].duration == pytest.approx(6.0)
        assert events[0].severity == Severity.LOW
        assert session.integrity_score == 98

    def test_short_absence_no_event(self, session, feed):
        """11 ticks without a face (5.5s) stay below the 10s threshold"""
        feed(session, face_count=0, times=11)

        assert session.events == ()
        assert session.integrity_score == 100
        assert session.current_focus_state == FocusState.NO_FACE

        session.end()
        assert session.events == ()
        assert session.integrity_score == 100

    def test_phone_detected(self, session, feed):
        """One tick with a phone -> one high PhoneDetected"""
        events = feed(session, face_count=1, objects=["cell phone"])

        assert len(events) == 1
        assert events[0].type == EventType.PHONE_DETECTED
        assert events[0].severity == Severity.HIGH
        assert session.integrity_score == 90

    def test_multiple_faces_each_tick(self, session, feed):
        """Exactly one MultipleFaces event per tick the condition holds"""
        feed(session, face_count=2, times=3)
        feed(session, face_count=1, times=2)

        multiple = [e for e in session.events if e.type == EventType.MULTIPLE_FACES]
        assert len(multiple) == 3
        assert session.integrity_score == 70

    def test_long_absence_logged_on_return(self, session, feed):
        """Absence above threshold is logged when the face returns"""
        feed(session, face_count=0, times=25)
        events = feed(session, face_count=1)

        assert len(events) == 1
        assert events[0].type == EventType.NO_FACE
        assert events[0].duration == pytest.approx(12.5)
        assert events[0].severity == Severity.MEDIUM
        assert session.integrity_score == 95
        assert session.current_focus_state == FocusState.FOCUSED

    def test_sub_threshold_glances_accumulate(self, session, feed):
        """Short glances never become events but add to cumulative time"""
        for _ in range(3):
            feed(session, face_count=1, away=True, times=4)
            feed(session, face_count=1, away=False)

        assert session.events == ()
        assert session.video_stats.cumulative_focus_lost_seconds == pytest.approx(6.0)

    def test_several_objects_in_one_tick(self, session, feed):
        """Each label is classified in order within the tick"""
        events = feed(session, face_count=1, objects=["cell phone", "book", "laptop"])

        assert [e.type for e in events] == [
            EventType.PHONE_DETECTED,
            EventType.BOOK_DETECTED,
            EventType.DEVICE_DETECTED,
        ]
        assert session.integrity_score == 70

    def test_other_fallback_config(self, clock, feed):
        """Unmatched objects can be categorised as Other"""
        s = ProctorSession(
            "Jane Doe",
            config=DetectionConfig(object_fallback=EventType.OTHER),
            clock=clock
        )
        s.start()
        events = feed(s, face_count=1, objects=["laptop"])

        assert events[0].type == EventType.OTHER


class TestFocusStateAndReconciliation:
    """Tests for focus-state precedence and cross-tracker flushing"""

    def test_looking_away_state(self, session, feed):
        """Gaze away with a face present"""
        feed(session, face_count=1, away=True)
        assert session.current_focus_state == FocusState.LOOKING_AWAY

    def test_no_face_takes_precedence(self, session, feed):
        """NoFace wins over LookingAway but both timers run"""
        feed(session, face_count=0, away=True)

        assert session.current_focus_state == FocusState.NO_FACE
        assert session.focus_lost_start is not None
        assert session.no_face_start is not None

    def test_face_return_flushes_focus_interval(self, session, clock, feed):
        """A returning face closes an open focus-lost interval first"""
        feed(session, face_count=1, away=True)
        focus_opened = clock.now()
        feed(session, face_count=0, away=True, times=12)

        events = feed(session, face_count=1, away=True)

        assert [e.type for e in events] == [EventType.FOCUS_LOST]
        assert events[0].duration == pytest.approx(6.5)
        assert events[0].timestamp - focus_opened == timedelta(seconds=6.5)
        # Focus tracking resumes from the current tick
        assert session.focus_lost_start == clock.now()
        assert session.no_face_start is None
        assert session.current_focus_state == FocusState.LOOKING_AWAY
        assert session.video_stats.cumulative_focus_lost_seconds == pytest.approx(6.5)

    def test_faces_detected_stats(self, session, clock, feed):
        """Video stats follow the face count"""
        feed(session, face_count=2)
        stats = session.video_stats
        assert stats.faces_detected == 2
        assert stats.last_face_detection == clock.now()

        feed(session, face_count=0)
        assert session.video_stats.faces_detected == 0
        assert session.video_stats.last_face_detection == stats.last_face_detection

    def test_video_stats_is_a_copy(self, session):
        """Callers cannot mutate session statistics"""
        stats = session.video_stats
        stats.cumulative_focus_lost_seconds = 999.0

        assert session.video_stats.cumulative_focus_lost_seconds == 0.0


class TestEndFlush:
    """Tests for flushing open intervals at session end"""

    def test_end_flushes_focus_interval(self, session, feed):
        """Open focus-lost interval above threshold is logged at end"""
        feed(session, face_count=1, away=True, times=12)
        session.end()

        events = session.events
        assert len(events) == 1
        assert events[0].type == EventType.FOCUS_LOST
        assert events[0].duration == pytest.approx(5.5)
        assert session.focus_lost_start is None
        assert session.video_stats.cumulative_focus_lost_seconds == pytest.approx(5.5)

    def test_end_flushes_no_face_interval(self, session, feed):
        """Open no-face interval above threshold is logged at end"""
        feed(session, face_count=0, times=30)
        session.end()

        events = session.events
        assert len(events) == 1
        assert events[0].type == EventType.NO_FACE
        assert events[0].duration == pytest.approx(14.5)
        assert session.no_face_start is None

    def test_end_flushes_both(self, session, feed):
        """Both open intervals are evaluated once each, focus first"""
        feed(session, face_count=0, away=True, times=25)
        session.end()

        assert [e.type for e in session.events] == [EventType.FOCUS_LOST, EventType.NO_FACE]
        assert all(e.severity == Severity.MEDIUM for e in session.events)
        assert session.integrity_score == 90
        assert session.focus_lost_start is None
        assert session.no_face_start is None
        assert session.current_focus_state == FocusState.FOCUSED

    def test_end_below_threshold_clears_timers(self, session, feed):
        """Short open intervals are cleared without events"""
        feed(session, face_count=0, away=True, times=2)
        session.end()

        assert session.events == ()
        assert session.focus_lost_start is None
        assert session.no_face_start is None

    def test_end_records_end_time(self, session, clock, feed):
        """End time is the instant end() ran"""
        feed(session, times=4)
        clock.advance(1)
        session.end()

        assert session.end_time == clock.now()
        assert session.state == SessionState.ENDED


class TestInvariants:
    """Properties that hold for any sample sequence"""

    @pytest.mark.parametrize("seed", range(10))
    def test_random_sequences(self, clock, seed):
        """Score never rises and stays in range; events stay time-ordered"""
        rng = random.Random(seed)
        s = ProctorSession("Jane Doe", config=DetectionConfig(focus_threshold=1.0, face_absence_threshold=2.0), clock=clock)
        s.start()

        labels = ["cell phone", "book", "laptop", "paper"]
        last_score = s.integrity_score

        for _ in range(300):
            clock.advance(rng.choice([0.0, 0.25, 0.5, 1.0]))
            if rng.random() < 0.1:
                s.ingest(None)
            else:
                s.ingest(DetectionSample(
                    face_count=rng.choice([0, 1, 1, 1, 2]),
                    is_looking_away=rng.random() < 0.4,
                    object_labels=rng.sample(labels, k=rng.choice([0, 0, 0, 1]))
                ))

            assert 0 <= s.integrity_score <= last_score <= 100
            last_score = s.integrity_score

        s.end()

        timestamps = [e.timestamp for e in s.events]
        assert timestamps == sorted(timestamps)
        assert len({e.id for e in s.events}) == len(s.events)
        assert 0 <= s.integrity_score <= last_score
        assert s.focus_lost_start is None
        assert s.no_face_start is None
