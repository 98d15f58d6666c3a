"""Polling subscriptions for the Firestore REST adapter.

The REST API has no streaming listener, so a subscription re-runs its
equality query on an interval and diffs the result. A wake() call (after a
local write, or a change announced by another worker) skips the wait.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from quickorder.application.interfaces.document_store import (
    BatchListener,
    DocumentSnapshot,
    ErrorListener,
    QuerySnapshot,
)
from quickorder.infrastructure.snapshots import diff_results

logger = logging.getLogger(__name__)

QueryRunner = Callable[[], Awaitable[list[DocumentSnapshot]]]


class PollingSubscription:
    def __init__(
        self,
        collection: str,
        field_name: str,
        value: Any,
        run_query: QueryRunner,
        on_batch: BatchListener,
        on_error: ErrorListener | None,
        interval: float,
        on_close: Callable[[PollingSubscription], None] | None = None,
    ) -> None:
        self.collection = collection
        self.field_name = field_name
        self.value = value
        self._run_query = run_query
        self._on_batch = on_batch
        self._on_error = on_error
        self._interval = interval
        self._on_close = on_close
        self._last: dict[str, dict[str, Any]] = {}
        self._wake = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Deliver the initial result set, then poll in the background."""
        await self._poll(initial=True)
        self._task = asyncio.create_task(
            self._loop(), name=f"watch:{self.collection}:{self.field_name}={self.value}"
        )

    def wake(self) -> None:
        self._wake.set()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close(self)
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.debug("Closed watch on %s where %s == %r", self.collection, self.field_name, self.value)

    async def _loop(self) -> None:
        while not self._closed:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._wake.wait(), timeout=self._interval)
            self._wake.clear()
            if self._closed:
                return
            await self._poll()

    async def _poll(self, initial: bool = False) -> None:
        try:
            current = await self._run_query()
        except Exception as exc:
            logger.warning(
                "Watch query failed on %s where %s == %r: %s",
                self.collection,
                self.field_name,
                self.value,
                exc,
            )
            # Next successful poll re-delivers everything as added
            self._last = {}
            if self._on_error is not None:
                await self._on_error(exc)
            return

        self._last, changes = diff_results(self._last, current)
        if not changes and not initial:
            return
        try:
            await self._on_batch(QuerySnapshot(documents=tuple(current), changes=changes))
        except Exception:
            logger.exception("Watch listener failed on %s", self.collection)
