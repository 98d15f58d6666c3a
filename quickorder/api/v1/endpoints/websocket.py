"""WebSocket endpoint: /ws/sessions/{session_id} follows one storefront session.

Uses only the injected ConnectionManager (set in lifespan). The session id is
the capability; unknown ids are rejected with a close frame.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from quickorder.api.websocket import ConnectionManager
from quickorder.application.session import SessionController
from quickorder.domain.exceptions import SessionNotFoundException
from quickorder.schemas.session import SessionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def session_message(session: SessionController) -> dict:
    view = SessionResponse.model_validate(session.snapshot())
    return {"type": "session", "data": view.model_dump(mode="json")}


def attach_push(session: SessionController, manager: ConnectionManager) -> None:
    """Push the session view to its sockets after every change."""
    session_id = session.ctx.session_id

    async def _push() -> None:
        await manager.send_to_session(session_id, session_message(session))

    session.add_listener(_push)


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("/ws/sessions/{session_id}")
async def session_websocket(websocket: WebSocket, session_id: str):
    """Register with the manager, send the current view, then keep the socket open.

    Incoming text frames are treated as keep-alives and refresh the session's
    idle timer.
    """
    manager: ConnectionManager = websocket.app.state.ws_manager
    registry = websocket.app.state.session_registry
    try:
        session = registry.get(session_id)
    except SessionNotFoundException:
        await _reject_websocket(websocket, "Unknown session")
        return
    await manager.connect(websocket, session_id)
    try:
        await websocket.send_json(session_message(session))
        while True:
            await websocket.receive_text()
            session.ctx.touch()
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
