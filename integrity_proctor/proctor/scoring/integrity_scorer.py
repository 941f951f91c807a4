"""
Integrity Scorer - Maintains the bounded integrity score of a session
"""

import logging
from typing import Dict

from ..models import ProctoringEvent, Severity

logger = logging.getLogger(__name__)


class IntegrityScorer:
    """
    Deducts points from a session's integrity score for each recorded event.

    Formula:
        score = max(0, score - deduction(event.severity))

    The score starts at 100 and never increases: a violation stays on the
    record even if the candidate's behaviour improves later.
    """

    # Deduction per severity
    DEDUCTIONS: Dict[Severity, int] = {
        Severity.HIGH: 10,
        Severity.MEDIUM: 5,
        Severity.LOW: 2,
    }

    MAX_SCORE = 100
    MIN_SCORE = 0

    # Status bands (lower bound -> label), checked from the top
    STATUS_BANDS = (
        (90, "Excellent"),
        (70, "Good"),
        (50, "Fair"),
    )

    def __init__(self, initial_score: int = MAX_SCORE):
        """
        Initialize scorer.

        Args:
            initial_score: Starting score, clamped to 0-100
        """
        self._score = max(self.MIN_SCORE, min(self.MAX_SCORE, int(initial_score)))

    @property
    def score(self) -> int:
        """Current integrity score (0-100, higher is better)"""
        return self._score

    @classmethod
    def deduction(cls, severity: Severity) -> int:
        """Points removed for one event of the given severity"""
        return cls.DEDUCTIONS[severity]

    def apply(self, event: ProctoringEvent) -> int:
        """
        Deduct for a newly recorded event.

        Args:
            event: The event just appended to the log

        Returns:
            The new score
        """
        penalty = self.deduction(event.severity)
        self._score = max(self.MIN_SCORE, self._score - penalty)

        logger.debug(
            f"Event {event.id}: severity={event.severity.value}, "
            f"penalty={penalty}, score={self._score}"
        )
        return self._score

    @classmethod
    def get_status(cls, score: int) -> str:
        """
        Convert score to a status label.

        Returns:
            'Excellent', 'Good', 'Fair' or 'Poor'
        """
        for lower_bound, label in cls.STATUS_BANDS:
            if score >= lower_bound:
                return label
        return "Poor"
