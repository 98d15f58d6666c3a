"""ASGI middleware."""

from quickorder.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
