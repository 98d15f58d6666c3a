"""Document store port.

The storefront consumes its database as a document store keyed by
collection/id with point reads, equality queries on a tenant key, and
push-based subscriptions. Infrastructure provides a Firestore (REST) and an
in-memory implementation; both raise the errors defined here.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class DocumentExistsError(Exception):
    """Raised by create() when the document id is already taken."""


class DocumentNotFoundError(Exception):
    """Raised by update() when the target document does not exist."""


class _ServerTimestamp:
    """Sentinel replaced by the store's own clock when the write is applied."""

    _instance: _ServerTimestamp | None = None

    def __new__(cls) -> _ServerTimestamp:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class ChangeType(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)


@dataclass(frozen=True)
class DocumentChange:
    type: ChangeType
    document: DocumentSnapshot


@dataclass(frozen=True)
class QuerySnapshot:
    """One batch delivered to a subscriber: the full result set plus what changed."""

    documents: tuple[DocumentSnapshot, ...]
    changes: tuple[DocumentChange, ...]

    @property
    def empty(self) -> bool:
        return not self.documents


BatchListener = Callable[[QuerySnapshot], Awaitable[None]]
ErrorListener = Callable[[Exception], Awaitable[None]]


class Subscription(Protocol):
    """Handle for a live query. close() unregisters the listener; it is idempotent."""

    @property
    def closed(self) -> bool:
        """True once close() has run."""

    async def close(self) -> None:
        """Stop delivering batches."""


class IDocumentStore(Protocol):
    """Protocol for the document store collaborator (DIP)."""

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot | None:
        """Point read; None when the document does not exist."""

    async def query(self, collection: str, field_name: str, value: Any) -> list[DocumentSnapshot]:
        """Documents whose field equals value."""

    async def list_all(self, collection: str) -> list[DocumentSnapshot]:
        """Every document in the collection."""

    async def subscribe(
        self,
        collection: str,
        field_name: str,
        value: Any,
        on_batch: BatchListener,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        """Start a live equality query. The initial result set is delivered before returning."""

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a store-assigned id and return that id."""

    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given id; DocumentExistsError if it exists."""

    async def create_all(self, documents: list[tuple[str, str, dict[str, Any]]]) -> None:
        """Create several (collection, id, data) documents in one atomic write.

        DocumentExistsError if any of them exists; nothing is written then.
        """

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Partial field update, applied atomically; DocumentNotFoundError if missing."""

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        """Overwrite the document, or merge top-level fields when merge is True."""

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete the document. Idempotent when it is already missing."""

    async def aclose(self) -> None:
        """Close subscriptions and connections."""
