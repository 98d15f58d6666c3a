"""WebSocket connection manager.

Holds active connections per storefront session and pushes a session's view
to every socket attached to it. Use via app.state.ws_manager (set in lifespan).
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket


class ConnectionManager:
    """Manages WebSocket connections grouped by session id.

    - A session may have several sockets (e.g. a reconnect racing the old one).
    - Sends to one session never reach another session's sockets.
    - connection_count is lock-protected for concurrent access.
    """

    def __init__(self) -> None:
        """Initialize with empty per-session connection sets."""
        self._connections_by_session: dict[str, set[WebSocket]] = {}
        self._websocket_to_session: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection for the given session.

        Args:
            websocket: The WebSocket instance to accept and track.
            session_id: Storefront session the socket follows.
        """
        await websocket.accept()
        async with self._lock:
            if session_id not in self._connections_by_session:
                self._connections_by_session[session_id] = set()
            self._connections_by_session[session_id].add(websocket)
            self._websocket_to_session[websocket] = session_id

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection (call on disconnect)."""
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        session_id = self._websocket_to_session.pop(websocket, None)
        if session_id and session_id in self._connections_by_session:
            conns = self._connections_by_session[session_id]
            conns.discard(websocket)
            if not conns:
                del self._connections_by_session[session_id]

    async def send_to_session(self, session_id: str, message: str | dict[str, Any]) -> None:
        """Send a message to all connections following the given session.

        Args:
            session_id: Target session (only its sockets receive the message).
            message: String or JSON-serializable dict to send.
        """
        async with self._lock:
            snapshot = list(self._connections_by_session.get(session_id, set()))
        await self._send_to_list(snapshot, message)

    async def close_session(self, session_id: str, reason: str = "Session closed") -> None:
        """Close and forget every socket of a session (e.g. after DELETE /sessions/{id})."""
        async with self._lock:
            conns = list(self._connections_by_session.pop(session_id, set()))
            for ws in conns:
                self._websocket_to_session.pop(ws, None)
        for ws in conns:
            try:
                await ws.close(code=1000, reason=reason)
            except Exception:
                continue

    async def _send_to_list(
        self,
        connections: list[WebSocket],
        message: str | dict[str, Any],
    ) -> None:
        """Send message to a list of connections; remove dead ones under lock."""
        dead: list[WebSocket] = []
        for ws in connections:
            try:
                if isinstance(message, dict):
                    await ws.send_json(message)
                else:
                    await ws.send_text(message)
            except Exception:
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return sum(len(c) for c in self._connections_by_session.values())
