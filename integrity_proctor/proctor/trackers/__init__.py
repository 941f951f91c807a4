"""Signal trackers for proctoring"""

from .focus_tracker import FocusTracker
from .presence_tracker import PresenceTracker, PresenceObservation
from .object_classifier import ObjectEventClassifier

__all__ = [
    "FocusTracker",
    "PresenceTracker",
    "PresenceObservation",
    "ObjectEventClassifier"
]
