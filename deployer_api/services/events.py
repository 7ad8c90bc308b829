"""Event broadcaster for real-time deploy updates."""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..models.events import DeployEvent, EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[DeployEvent], None]


class EventBroadcaster:
    """Synchronous, best-effort publish/subscribe hub.

    Each published event is handed to every subscribed handler in
    subscription order. A handler that raises is logged and skipped; the
    remaining handlers still receive the event. There is no backlog: a
    handler only sees events published while it is subscribed.
    """

    def __init__(self):
        self._handlers: List[EventHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: EventHandler) -> None:
        """Register ``handler`` for every subsequent event."""
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove ``handler``; unknown handlers are ignored."""
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def publish(self, event: DeployEvent) -> None:
        """Deliver ``event`` to all current subscribers."""
        with self._lock:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error delivering {event.type.value} event: {e}")

    def emit(
        self, event_type: EventType, payload: Optional[Dict[str, Any]] = None
    ) -> DeployEvent:
        """Build and publish an event in one call."""
        event = DeployEvent(type=event_type, payload=payload or {})
        self.publish(event)
        return event

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)
