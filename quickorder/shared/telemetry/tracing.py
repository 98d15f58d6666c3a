"""Span helpers for storefront operations."""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

P = ParamSpec("P")
R = TypeVar("R")

_tracer = trace.get_tracer("quickorder")

# Identifiers only; customer names, phones and addresses never reach a span.
_RECORDED_ARGS = frozenset({
    "store_id", "order_id", "firestore_id", "product_id", "action", "preference",
})


def traced(
    span_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Run a coroutine function inside a span named span_name.

    Keyword arguments whose names identify a store, order or product are
    recorded as ``arg.<name>``. Exceptions mark the span as failed and
    propagate unchanged.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with _tracer.start_as_current_span(span_name) as span:
                for key, value in kwargs.items():
                    if key in _RECORDED_ARGS and value is not None:
                        span.set_attribute(f"arg.{key}", str(value))
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: Any) -> None:
    """Attach attributes to the active span, if one is recording."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, value if isinstance(value, (str, int, float, bool)) else str(value))
