"""
Pytest Configuration for Integrity Proctor Tests
"""
import os
import sys
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from integrity_proctor.proctor.clock import ManualClock
from integrity_proctor.proctor.models import DetectionConfig, DetectionSample
from integrity_proctor.proctor.session import ProctorSession

TICK = 0.5


@pytest.fixture(scope='function')
def clock():
    """Manual clock starting at 2024-01-01T00:00:00Z"""
    return ManualClock()


@pytest.fixture(scope='function')
def session(clock):
    """Started session with default thresholds (5s focus, 10s face absence)"""
    s = ProctorSession("Jane Doe", config=DetectionConfig(), clock=clock)
    s.start()
    return s


@pytest.fixture(scope='function')
def feed(clock):
    """
    Deliver the same sample `times` times, advancing the clock one tick
    before each delivery. Returns all events recorded.
    """
    def _feed(session, face_count=1, away=False, objects=(), times=1, interval=TICK):
        recorded = []
        for _ in range(times):
            clock.advance(interval)
            sample = DetectionSample(
                face_count=face_count,
                is_looking_away=away,
                object_labels=objects
            )
            recorded.extend(session.ingest(sample))
        return recorded
    return _feed


@pytest.fixture(scope='function')
def client():
    """FastAPI test client with an empty session store"""
    from integrity_proctor.main import app
    from integrity_proctor.proctor import api

    api._sessions.clear()
    yield TestClient(app)
    api._sessions.clear()
