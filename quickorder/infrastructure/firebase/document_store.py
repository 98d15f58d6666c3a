"""IDocumentStore implementation over the Firestore REST client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from quickorder.application.interfaces.document_store import (
    BatchListener,
    DocumentSnapshot,
    ErrorListener,
)
from quickorder.domain.exceptions import BackendUnavailableException
from quickorder.infrastructure.firebase.watch import PollingSubscription
from quickorder.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from quickorder.application.interfaces.services import IChangeNotifier
    from quickorder.infrastructure.firebase._rest_client import FirestoreRESTClient

logger = logging.getLogger(__name__)


class FirestoreDocumentStore:
    """Document store backed by Firestore.

    Transport failures surface as BackendUnavailableException; precondition
    failures surface as DocumentExistsError / DocumentNotFoundError.
    """

    def __init__(
        self,
        client: FirestoreRESTClient,
        poll_interval: float = 2.0,
        notifier: IChangeNotifier | None = None,
    ) -> None:
        self._client = client
        self._poll_interval = poll_interval
        self._notifier = notifier
        self._watches: dict[str, set[PollingSubscription]] = {}

    def set_notifier(self, notifier: IChangeNotifier | None) -> None:
        self._notifier = notifier

    def wake(self, collection: str) -> None:
        """Make every watch on the collection poll now."""
        for watch in list(self._watches.get(collection, ())):
            watch.wake()

    async def _changed(self, collection: str) -> None:
        self.wake(collection)
        if self._notifier is not None:
            try:
                await self._notifier.publish(collection)
            except Exception:
                logger.warning("Change notification for %s failed", collection, exc_info=True)

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot | None:
        try:
            raw = await self._client.get_document(collection, doc_id)
        except httpx.HTTPError as e:
            raise BackendUnavailableException("get", str(e)) from e
        if raw is None:
            return None
        return DocumentSnapshot(id=raw[0], data=raw[1])

    async def query(self, collection: str, field_name: str, value: Any) -> list[DocumentSnapshot]:
        try:
            rows = await self._client.run_query(collection, field_name, value)
        except httpx.HTTPError as e:
            raise BackendUnavailableException("query", str(e)) from e
        return [DocumentSnapshot(id=doc_id, data=data) for doc_id, data in rows]

    async def list_all(self, collection: str) -> list[DocumentSnapshot]:
        try:
            rows = await self._client.list_documents(collection)
        except httpx.HTTPError as e:
            raise BackendUnavailableException("list", str(e)) from e
        return [DocumentSnapshot(id=doc_id, data=data) for doc_id, data in rows]

    async def subscribe(
        self,
        collection: str,
        field_name: str,
        value: Any,
        on_batch: BatchListener,
        on_error: ErrorListener | None = None,
    ) -> PollingSubscription:
        watch = PollingSubscription(
            collection=collection,
            field_name=field_name,
            value=value,
            run_query=lambda: self.query(collection, field_name, value),
            on_batch=on_batch,
            on_error=on_error,
            interval=self._poll_interval,
            on_close=self._forget,
        )
        self._watches.setdefault(collection, set()).add(watch)
        await watch.start()
        logger.debug("Watching %s where %s == %r", collection, field_name, value)
        return watch

    def _forget(self, watch: PollingSubscription) -> None:
        self._watches.get(watch.collection, set()).discard(watch)

    async def _commit(self, operation: str, writes: list[dict[str, Any]]) -> None:
        try:
            await self._client.commit(writes)
        except httpx.HTTPError as e:
            logger.error("Firestore %s failed: %s", operation, e)
            raise BackendUnavailableException(operation, str(e)) from e

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = generate_cuid()
        await self.create(collection, doc_id, data)
        return doc_id

    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self._commit("create", [self._client.write(collection, doc_id, data, exists=False)])
        await self._changed(collection)

    async def create_all(self, documents: list[tuple[str, str, dict[str, Any]]]) -> None:
        writes = [
            self._client.write(collection, doc_id, data, exists=False)
            for collection, doc_id, data in documents
        ]
        await self._commit("create", writes)
        for collection in dict.fromkeys(c for c, _, _ in documents):
            await self._changed(collection)

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        await self._commit(
            "update", [self._client.write(collection, doc_id, fields, mask=True, exists=True)]
        )
        await self._changed(collection)

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        await self._commit("set", [self._client.write(collection, doc_id, data, mask=merge)])
        await self._changed(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._commit("delete", [self._client.delete_write(collection, doc_id)])
        await self._changed(collection)

    async def aclose(self) -> None:
        for watches in list(self._watches.values()):
            for watch in list(watches):
                await watch.close()
        self._watches.clear()
