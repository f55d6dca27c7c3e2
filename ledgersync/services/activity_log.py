"""
Bounded record of recent sync events, for the UI status indicator.
"""

from collections import deque
from typing import Deque, List, Union

from ledgersync.schemas.events import SyncErrorEvent, SyncSuccessEvent
from ledgersync.services.event_bus import EventBus, Events

SyncEvent = Union[SyncSuccessEvent, SyncErrorEvent]


class SyncActivityLog:
    def __init__(self, max_size: int = 100) -> None:
        self._events: Deque[SyncEvent] = deque(maxlen=max(max_size, 1))

    def record(self, event: SyncEvent) -> None:
        self._events.append(event)

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(Events.SYNC_SUCCESS, self.record)
        bus.subscribe(Events.SYNC_ERROR, self.record)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(Events.SYNC_SUCCESS, self.record)
        bus.unsubscribe(Events.SYNC_ERROR, self.record)

    def recent(self, limit: int = 20) -> List[SyncEvent]:
        """Newest first."""
        events = list(self._events)
        events.reverse()
        return events[:max(limit, 0)]

    def error_count(self) -> int:
        return sum(1 for event in self._events if isinstance(event, SyncErrorEvent))
