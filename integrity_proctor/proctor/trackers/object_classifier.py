"""
Object Event Classifier - Maps detected object labels to integrity events
"""

import logging
from typing import Optional, Tuple

from ..models import EventDraft, EventType, Severity

logger = logging.getLogger(__name__)


class ObjectEventClassifier:
    """
    Classifies raw object-detector labels.

    Matching is a case-sensitive substring test on the raw label and the
    first rule that matches wins. Labels that match no rule fall back to a
    configurable category. Every classified object is a violation the
    moment it is seen, so there is no hysteresis here.
    """

    # (substrings, event type) in priority order
    RULES: Tuple[Tuple[Tuple[str, ...], EventType], ...] = (
        (("phone",), EventType.PHONE_DETECTED),
        (("book", "paper"), EventType.BOOK_DETECTED),
    )

    def __init__(self, fallback: EventType = EventType.DEVICE_DETECTED):
        """
        Initialize classifier.

        Args:
            fallback: Event type for labels no rule matches
        """
        self.fallback = fallback

    def classify(self, label: str) -> EventType:
        """Event category for a raw label"""
        for substrings, event_type in self.RULES:
            if any(s in label for s in substrings):
                return event_type
        return self.fallback

    def draft(self, label: str) -> Optional[EventDraft]:
        """
        Build the event for one detected object.

        Returns:
            EventDraft, or None for a blank label
        """
        if not label or not label.strip():
            logger.debug("Skipping blank object label")
            return None

        return EventDraft(
            type=self.classify(label),
            severity=Severity.HIGH,
            description=f"Suspicious object detected: {label}",
        )
