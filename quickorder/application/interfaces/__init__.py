"""Ports implemented by infrastructure."""

from quickorder.application.interfaces.document_store import (
    SERVER_TIMESTAMP,
    ChangeType,
    DocumentChange,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentSnapshot,
    IDocumentStore,
    QuerySnapshot,
    Subscription,
)
from quickorder.application.interfaces.repositories import (
    IOrderRepository,
    IProductRepository,
    IStoreRepository,
)
from quickorder.application.interfaces.services import IChangeNotifier, IIdentityVerifier

__all__ = [
    "SERVER_TIMESTAMP",
    "ChangeType",
    "DocumentChange",
    "DocumentExistsError",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "IChangeNotifier",
    "IDocumentStore",
    "IIdentityVerifier",
    "IOrderRepository",
    "IProductRepository",
    "IStoreRepository",
    "QuerySnapshot",
    "Subscription",
]
