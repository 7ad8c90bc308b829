"""WebSocket handlers for the live deploy event stream."""

from .handlers import events_websocket
from .manager import ConnectionManager, get_connection_manager

__all__ = ["ConnectionManager", "events_websocket", "get_connection_manager"]
