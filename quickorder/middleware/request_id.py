"""Request ID and access-log middleware.

Each HTTP request gets an id (forwarded from the client when it looks safe,
otherwise generated), exposed as ``request.state.request_id``, echoed on the
response and written on one access-log line. Raw ASGI, so WebSocket scopes
pass straight through.
"""

import logging
import re
import time
from typing import Callable

from quickorder.shared.utils.generators import generate_cuid

logger = logging.getLogger("quickorder.access")

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def sanitize_request_id(raw: str | None) -> str:
    """raw stripped when it is 1-64 characters of [A-Za-z0-9_-]; a fresh id otherwise."""
    candidate = (raw or "").strip()
    if _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return generate_cuid()


def _header(scope: dict, name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    header_key = header_name.lower().encode()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_request_id(_header(scope, header_key))
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.perf_counter()
        status = 500

        async def send_with_id(message: dict) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
                message["headers"] = [
                    *message.get("headers", []),
                    (header_name.encode(), request_id.encode()),
                ]
            await send(message)

        try:
            await app(scope, receive, send_with_id)
        finally:
            logger.info(
                "%s %s -> %d (%.1f ms) [%s]",
                scope["method"],
                scope["path"],
                status,
                (time.perf_counter() - started) * 1000,
                request_id,
            )

    return asgi_app
