"""WebSocket support: per-session connection manager."""

from quickorder.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
