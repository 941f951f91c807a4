"""
Proctoring API - FastAPI endpoints for interview proctoring

Endpoints:
- POST /api/proctor/start - Start a proctoring session
- POST /api/proctor/sample - Ingest one perception sample
- POST /api/proctor/stop - End session and get the final report
- GET /api/proctor/status/{session_id} - Get live session status
- GET /api/proctor/events/{session_id} - Get the event timeline
- GET /api/proctor/report/{session_id} - Get a report (mid-session allowed)
- DELETE /api/proctor/session/{session_id} - Discard a session
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import settings
from .exceptions import SessionNotActiveError
from .models import DetectionConfig, DetectionSample, ProctoringEvent
from .scoring import IntegrityScorer
from .session import ProctorSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/proctor", tags=["Proctoring"])

# In-memory session storage. Handlers never await while a session is being
# mutated, so samples are processed one at a time on the event loop.
_sessions: Dict[str, ProctorSession] = {}


# ============== Request/Response Models ==============

class StartSessionRequest(BaseModel):
    """Request to start a proctoring session"""
    candidate_name: str = Field(..., min_length=1, description="Name of the candidate")


class StartSessionResponse(BaseModel):
    """Response after starting a session"""
    session_id: str
    status: str
    message: str


class SampleRequest(BaseModel):
    """One tick of perception output"""
    session_id: str = Field(..., description="Session ID from /start")
    face_count: int = Field(..., ge=0, description="Number of faces detected")
    is_looking_away: bool = Field(False, description="Gaze-away flag")
    object_labels: List[str] = Field(default_factory=list, description="Detected object labels")


class EventOut(BaseModel):
    """A recorded integrity event"""
    id: str
    type: str
    severity: str
    timestamp: str
    description: str
    duration: Optional[float] = None


class SampleResponse(BaseModel):
    """Session state after processing a sample"""
    current_score: int
    focus_state: str
    focus_status: str
    new_events: List[EventOut]
    total_events: int


class StopSessionRequest(BaseModel):
    """Request to end a proctoring session"""
    session_id: str


class SessionStatusResponse(BaseModel):
    """Current session status"""
    session_id: str
    candidate_name: str
    state: str
    is_active: bool
    integrity_score: int
    score_status: str
    focus_state: str
    focus_status: str
    total_events: int
    faces_detected: int
    cumulative_focus_lost_seconds: float
    duration_seconds: float


def _event_out(event: ProctoringEvent) -> EventOut:
    return EventOut(**event.to_dict())


def _get_session(session_id: str) -> ProctorSession:
    session = _sessions.get(session_id)

    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    return session


# ============== API Endpoints ==============

@router.post("/start", response_model=StartSessionResponse)
async def start_session(request: StartSessionRequest):
    """
    Start a new proctoring session.

    The session accepts samples from the perception subsystem
    until it is stopped.
    """
    session = ProctorSession(
        candidate_name=request.candidate_name,
        config=DetectionConfig.from_settings(settings)
    )
    session_id = session.start()
    _sessions[session_id] = session

    logger.info(f"Started proctoring session: {session_id}")

    return StartSessionResponse(
        session_id=session_id,
        status=session.state.value,
        message="Proctoring session started successfully"
    )


@router.post("/sample", response_model=SampleResponse)
async def ingest_sample(request: SampleRequest):
    """
    Process one perception sample.

    Returns the events this sample produced and the current
    integrity score and focus state.
    """
    session = _get_session(request.session_id)

    try:
        sample = DetectionSample(
            face_count=request.face_count,
            is_looking_away=request.is_looking_away,
            object_labels=request.object_labels
        )
        new_events = session.ingest(sample)
    except SessionNotActiveError:
        raise HTTPException(status_code=400, detail="Session is not active")

    state = session.current_focus_state

    return SampleResponse(
        current_score=session.integrity_score,
        focus_state=state.value,
        focus_status=state.label,
        new_events=[_event_out(e) for e in new_events],
        total_events=len(session.events)
    )


@router.post("/stop")
async def stop_session(request: StopSessionRequest) -> Dict[str, Any]:
    """
    End a proctoring session and get the final report.

    Open focus-lost and no-face intervals are flushed before the
    report is built. Stopping an ended session returns the same report.
    """
    session = _get_session(request.session_id)

    report = session.end()

    logger.info(
        f"Session {session.id} stopped: score={report.integrity_score}, "
        f"events={report.total_events}"
    )

    return report.to_dict()


@router.get("/status/{session_id}", response_model=SessionStatusResponse)
async def get_session_status(session_id: str):
    """
    Get current status of a proctoring session.
    """
    session = _get_session(session_id)
    stats = session.video_stats
    score = session.integrity_score

    return SessionStatusResponse(
        session_id=session.id,
        candidate_name=session.candidate_name,
        state=session.state.value,
        is_active=session.is_active,
        integrity_score=score,
        score_status=IntegrityScorer.get_status(score),
        focus_state=stats.current_focus_state.value,
        focus_status=stats.current_focus_state.label,
        total_events=len(session.events),
        faces_detected=stats.faces_detected,
        cumulative_focus_lost_seconds=round(stats.cumulative_focus_lost_seconds, 1),
        duration_seconds=session.elapsed_seconds()
    )


@router.get("/events/{session_id}", response_model=List[EventOut])
async def get_session_events(session_id: str):
    """
    Get the event timeline of a session in recorded order.
    """
    session = _get_session(session_id)
    return [_event_out(e) for e in session.events]


@router.get("/report/{session_id}")
async def get_report(session_id: str) -> Dict[str, Any]:
    """
    Get a report for a session.

    On an active session the current time is used as the end of the
    measured period; the session itself is not changed.
    """
    session = _get_session(session_id)
    return session.build_report().to_dict()


@router.delete("/session/{session_id}")
async def delete_session(session_id: str):
    """
    Discard a session. Active sessions are ended first.
    """
    session = _get_session(session_id)

    if session.is_active:
        session.end()

    del _sessions[session_id]
    logger.info(f"Discarded session: {session_id}")

    return {"deleted": True, "session_id": session_id}


# ============== Health Check ==============

@router.get("/health")
async def health_check():
    """Health check for proctoring module"""
    return {
        "status": "healthy",
        "active_sessions": sum(1 for s in _sessions.values() if s.is_active),
        "module": "proctoring"
    }
