"""
Event Log - Append-only, time-ordered store of integrity events for one session
"""

import logging
from typing import TYPE_CHECKING, Iterator, List, Set, Tuple

if TYPE_CHECKING:
    from .models import EventType, ProctoringEvent

logger = logging.getLogger(__name__)


class EventLog:
    """
    Ordered sequence of ProctoringEvent values.

    Events can only be appended. An append must not precede the last
    event's timestamp and must carry an id not seen before in this log.
    """

    def __init__(self):
        self._events: List["ProctoringEvent"] = []
        self._ids: Set[str] = set()

    def append(self, event: "ProctoringEvent") -> None:
        """
        Append an event to the end of the log.

        Raises:
            ValueError: If the id is a duplicate or the timestamp goes backwards
        """
        if event.id in self._ids:
            raise ValueError(f"Duplicate event id: {event.id}")

        if self._events and event.timestamp < self._events[-1].timestamp:
            raise ValueError(
                f"Event {event.id} at {event.timestamp} precedes last event "
                f"at {self._events[-1].timestamp}"
            )

        logger.debug(f"Appending event {event.id} ({event.type})")
        self._events.append(event)
        self._ids.add(event.id)

    def snapshot(self) -> Tuple["ProctoringEvent", ...]:
        """Immutable view of the events in creation order"""
        return tuple(self._events)

    def of_type(self, *event_types: "EventType") -> List["ProctoringEvent"]:
        """Events matching any of the given types, in order"""
        wanted = set(event_types)
        return [event for event in self._events if event.type in wanted]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator["ProctoringEvent"]:
        return iter(tuple(self._events))

    def __bool__(self) -> bool:
        return bool(self._events)
