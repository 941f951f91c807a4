"""Proctoring exceptions"""


class ProctoringError(Exception):
    """Base class for proctoring engine errors"""


class SessionStateError(ProctoringError):
    """Operation is not valid in the session's current lifecycle state"""


class SessionNotActiveError(SessionStateError):
    """Samples or an end request arrived for a session that is not active"""


class SessionNotStartedError(SessionStateError):
    """A report was requested for a session that was never started"""
