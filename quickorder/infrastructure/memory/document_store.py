"""In-memory document store for development and tests.

Writes notify matching subscriptions before the write call returns, so a
test can assert on the pushed state right after awaiting a write.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from quickorder.application.interfaces.document_store import (
    SERVER_TIMESTAMP,
    BatchListener,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentSnapshot,
    ErrorListener,
    QuerySnapshot,
)
from quickorder.infrastructure.snapshots import diff_results
from quickorder.shared.utils.datetime import utc_now
from quickorder.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class MemorySubscription:
    """Live equality query over one collection of a MemoryDocumentStore."""

    def __init__(
        self,
        store: MemoryDocumentStore,
        collection: str,
        field_name: str,
        value: Any,
        on_batch: BatchListener,
        on_error: ErrorListener | None,
    ) -> None:
        self._store = store
        self.collection = collection
        self.field_name = field_name
        self.value = value
        self._on_batch = on_batch
        self._on_error = on_error
        self._last: dict[str, dict[str, Any]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._unregister(self)

    async def refresh(self, initial: bool = False) -> None:
        """Re-run the query and deliver the batch if anything changed."""
        if self._closed:
            return
        current = self._store._matching(self.collection, self.field_name, self.value)
        self._last, changes = diff_results(self._last, current)
        if not changes and not initial:
            return
        try:
            await self._on_batch(QuerySnapshot(documents=tuple(current), changes=changes))
        except Exception as exc:
            logger.exception(
                "Listener failed on %s where %s == %r", self.collection, self.field_name, self.value
            )
            if self._on_error is not None:
                await self._on_error(exc)

    async def fail(self, exc: Exception) -> None:
        """Deliver an error to the subscriber (used to simulate backend failures)."""
        if self._closed or self._on_error is None:
            return
        await self._on_error(exc)


class MemoryDocumentStore:
    """IDocumentStore backed by dicts.

    resolve_server_timestamps=False leaves SERVER_TIMESTAMP fields as None until
    resolve_pending_timestamps() is awaited, which mimics the window in which a
    real backend has accepted a write but not yet reported its timestamp.
    """

    def __init__(self, resolve_server_timestamps: bool = True) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subscriptions: list[MemorySubscription] = []
        self._pending_timestamps: list[tuple[str, str, str]] = []
        self.resolve_server_timestamps = resolve_server_timestamps

    def _docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def _snapshot(self, doc_id: str, data: dict[str, Any]) -> DocumentSnapshot:
        return DocumentSnapshot(id=doc_id, data=copy.deepcopy(data))

    def _matching(self, collection: str, field_name: str, value: Any) -> list[DocumentSnapshot]:
        return [
            self._snapshot(doc_id, data)
            for doc_id, data in self._docs(collection).items()
            if data.get(field_name) == value
        ]

    def _unregister(self, subscription: MemorySubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _resolve_sentinels(
        self, collection: str, doc_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                if self.resolve_server_timestamps:
                    value = utc_now()
                else:
                    self._pending_timestamps.append((collection, doc_id, key))
                    value = None
            resolved[key] = copy.deepcopy(value)
        return resolved

    async def _notify(self, collection: str) -> None:
        for subscription in list(self._subscriptions):
            if subscription.collection == collection:
                await subscription.refresh()

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot | None:
        data = self._docs(collection).get(doc_id)
        if data is None:
            return None
        return self._snapshot(doc_id, data)

    async def query(self, collection: str, field_name: str, value: Any) -> list[DocumentSnapshot]:
        return self._matching(collection, field_name, value)

    async def list_all(self, collection: str) -> list[DocumentSnapshot]:
        return [self._snapshot(doc_id, data) for doc_id, data in self._docs(collection).items()]

    async def subscribe(
        self,
        collection: str,
        field_name: str,
        value: Any,
        on_batch: BatchListener,
        on_error: ErrorListener | None = None,
    ) -> MemorySubscription:
        subscription = MemorySubscription(self, collection, field_name, value, on_batch, on_error)
        self._subscriptions.append(subscription)
        await subscription.refresh(initial=True)
        return subscription

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = generate_cuid()
        await self.create(collection, doc_id, data)
        return doc_id

    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        docs = self._docs(collection)
        if doc_id in docs:
            raise DocumentExistsError(f"{collection}/{doc_id}")
        docs[doc_id] = self._resolve_sentinels(collection, doc_id, data)
        await self._notify(collection)

    async def create_all(self, documents: list[tuple[str, str, dict[str, Any]]]) -> None:
        for collection, doc_id, _ in documents:
            if doc_id in self._docs(collection):
                raise DocumentExistsError(f"{collection}/{doc_id}")
        for collection, doc_id, data in documents:
            self._docs(collection)[doc_id] = self._resolve_sentinels(collection, doc_id, data)
        for collection in dict.fromkeys(c for c, _, _ in documents):
            await self._notify(collection)

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        docs = self._docs(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(f"{collection}/{doc_id}")
        docs[doc_id] = {**docs[doc_id], **self._resolve_sentinels(collection, doc_id, fields)}
        await self._notify(collection)

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        docs = self._docs(collection)
        resolved = self._resolve_sentinels(collection, doc_id, data)
        if merge and doc_id in docs:
            docs[doc_id] = {**docs[doc_id], **resolved}
        else:
            docs[doc_id] = resolved
        await self._notify(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        if self._docs(collection).pop(doc_id, None) is None:
            return
        await self._notify(collection)

    async def resolve_pending_timestamps(self) -> None:
        """Fill every server timestamp left pending and notify subscribers."""
        pending, self._pending_timestamps = self._pending_timestamps, []
        touched: set[str] = set()
        now = utc_now()
        for collection, doc_id, key in pending:
            data = self._docs(collection).get(doc_id)
            if data is not None and data.get(key) is None:
                data[key] = now
                touched.add(collection)
        for collection in sorted(touched):
            await self._notify(collection)

    async def fail_subscriptions(self, collection: str, exc: Exception) -> None:
        """Push an error to every open subscription on a collection."""
        for subscription in list(self._subscriptions):
            if subscription.collection == collection:
                await subscription.fail(exc)

    async def aclose(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.close()
