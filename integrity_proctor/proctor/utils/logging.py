"""
Proctoring Logger - Logs session lifecycle and recorded integrity events
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def log_proctor_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a proctoring event.

    Args:
        session_id: Proctoring session ID
        event_type: Type of event (session_start, event_recorded, session_end, etc.)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[PROCTOR] session={session_id} event={event_type}"

    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"

    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, candidate_name: str):
    """Log session start event"""
    log_proctor_event(
        session_id=session_id,
        event_type="session_start",
        details={"candidate": candidate_name}
    )


def log_session_end(session_id: str, integrity_score: int, total_events: int, duration_seconds: float):
    """Log session end event"""
    log_proctor_event(
        session_id=session_id,
        event_type="session_end",
        details={
            "integrity_score": integrity_score,
            "total_events": total_events,
            "duration_seconds": round(duration_seconds, 1)
        }
    )


def log_event_recorded(session_id: str, event, score: int):
    """Log an integrity event; high severity events are logged as warnings"""
    details = {
        "type": event.type.value,
        "severity": event.severity.value,
        "score": score
    }
    if event.duration is not None:
        details["duration"] = round(event.duration, 1)

    log_proctor_event(
        session_id=session_id,
        event_type="event_recorded",
        details=details,
        level="warning" if event.severity.value == "high" else "info"
    )
