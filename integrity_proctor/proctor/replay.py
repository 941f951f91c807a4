"""
Sample Replay - Drives a session from recorded perception samples

Lets a recorded stream of samples be run through the engine at a fixed
simulated cadence, without cameras or models.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, Optional, TextIO

from .clock import ManualClock
from .models import DetectionConfig, DetectionSample
from .report import Report
from .session import ProctorSession

logger = logging.getLogger(__name__)

# Accepted spellings for each sample field
_FACE_COUNT_KEYS = ("face_count", "faceCount", "facesDetected")
_LOOKING_AWAY_KEYS = ("is_looking_away", "isLookingAway")
_OBJECT_KEYS = ("object_labels", "objectLabels", "objects")


def _first(data: Dict[str, Any], keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


def sample_from_dict(data: Optional[Dict[str, Any]]) -> Optional[DetectionSample]:
    """
    Build a sample from a decoded JSON object.

    Args:
        data: Mapping with face count, gaze flag and object labels, or None

    Returns:
        DetectionSample, or None for a missing tick
    """
    if data is None:
        return None

    face_count = _first(data, _FACE_COUNT_KEYS)
    if face_count is None:
        raise ValueError(f"Sample has no face count: {data}")

    return DetectionSample(
        face_count=int(face_count),
        is_looking_away=bool(_first(data, _LOOKING_AWAY_KEYS, False)),
        object_labels=_first(data, _OBJECT_KEYS, ()) or (),
    )


def read_samples(stream: TextIO) -> Iterator[Optional[DetectionSample]]:
    """
    Read JSON-lines samples. A `null` line is a missing tick; blank lines are skipped.
    """
    for line_no, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON on line {line_no}: {e}") from e
        yield sample_from_dict(data)


def replay_samples(
    samples: Iterable[Optional[DetectionSample]],
    candidate_name: str,
    interval: float = 0.5,
    config: Optional[DetectionConfig] = None,
    start: Optional[datetime] = None
) -> Report:
    """
    Run samples through a fresh session and end it.

    The session clock advances `interval` seconds before each tick, and
    the session ends at the instant of the last tick.

    Args:
        samples: Samples in delivery order (None for a missing tick)
        candidate_name: Candidate name for the report
        interval: Seconds between ticks
        config: Detection config (defaults if not provided)
        start: Simulated session start instant

    Returns:
        Final report
    """
    clock = ManualClock(start)
    session = ProctorSession(candidate_name, config=config, clock=clock)
    session.start()

    ticks = 0
    for sample in samples:
        clock.advance(interval)
        session.ingest(sample)
        ticks += 1

    logger.info(f"Replayed {ticks} ticks into session {session.id}")
    return session.end()
