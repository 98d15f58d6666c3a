"""In-memory adapters."""

from quickorder.infrastructure.memory.document_store import (
    MemoryDocumentStore,
    MemorySubscription,
)

__all__ = ["MemoryDocumentStore", "MemorySubscription"]
