"""Repositories over the document store (Firestore document schema)."""

from quickorder.infrastructure.firebase.repositories.order_repo_firestore import (
    FirestoreOrderRepository,
)
from quickorder.infrastructure.firebase.repositories.product_repo_firestore import (
    FirestoreProductRepository,
)
from quickorder.infrastructure.firebase.repositories.store_repo_firestore import (
    FirestoreStoreRepository,
)

__all__ = [
    "FirestoreOrderRepository",
    "FirestoreProductRepository",
    "FirestoreStoreRepository",
]
