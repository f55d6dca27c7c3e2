"""
Synchronous in-process event bus.

Producers of sync outcomes publish on named channels; the UI bridge and
other services subscribe. Dispatch is synchronous and in registration
order. A listener that raises is logged and skipped: it never blocks the
other listeners and never reaches the publisher.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Events:
    """Channel names."""

    SYNC_SUCCESS = "sync_success"
    SYNC_ERROR = "sync_error"
    ENTITY_DELETED = "entity_deleted"
    DATA_SYNC_COMPLETED = "data_sync_completed"
    DATA_RESET = "data_reset"
    FINANCIAL_DATA_UPDATED = "financial_data_updated"
    FORCE_REFRESH_ALL = "force_refresh_all"


class EventBus:
    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, channel: str, listener: Listener) -> None:
        self._listeners.setdefault(channel, []).append(listener)

    def unsubscribe(self, channel: str, listener: Listener) -> None:
        """Remove the first registration of `listener`; unknown listeners are ignored."""
        listeners = self._listeners.get(channel)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[channel]

    def publish(self, channel: str, *args: Any) -> None:
        # Iterate over a snapshot so listeners may (un)subscribe while dispatching
        for listener in list(self._listeners.get(channel, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception(f"Listener {listener!r} failed on channel '{channel}'")

    def clear(self, channel: Optional[str] = None) -> None:
        if channel is None:
            self._listeners.clear()
        else:
            self._listeners.pop(channel, None)

    def listener_count(self, channel: str) -> int:
        return len(self._listeners.get(channel, ()))
