"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from quickorder.application.dtos.product import ProductDraft
    from quickorder.application.interfaces.document_store import (
        ErrorListener,
        Subscription,
    )
    from quickorder.domain.entities import Order, Product, Store

ProductsListener = Callable[[list["Product"]], Awaitable[None]]
OrdersListener = Callable[[list["Order"]], Awaitable[None]]


class IStoreRepository(Protocol):
    """Protocol for store repository (DIP)."""

    async def get_by_id(self, store_id: str) -> Store | None:
        """Return store by slug, or None."""

    async def list_stores(self) -> list[Store]:
        """Return every store."""

    async def find_by_owner(self, email: str | None, phone: str | None) -> list[Store]:
        """Return stores whose ownerEmail or ownerPhone matches."""

    async def create_store(self, store: Store) -> Store:
        """Persist a new store; StoreAlreadyExistsException if the slug is taken."""

    async def update_settings(self, store_id: str, fields: dict[str, Any]) -> None:
        """Merge the given attribute values into the store record."""

    async def delete_store(self, store_id: str) -> None:
        """Delete the store record."""


class IProductRepository(Protocol):
    """Protocol for product repository (DIP)."""

    async def get_by_id(self, product_id: str) -> Product | None:
        """Return product by storage id, or None."""

    async def list_by_store(self, store_id: str) -> list[Product]:
        """Return all products of a store (unsorted)."""

    async def add_product(self, store_id: str, draft: ProductDraft) -> Product:
        """Create a product; the store assigns its id."""

    async def update_product(self, product_id: str, fields: dict[str, Any]) -> None:
        """Partial update addressed by storage id."""

    async def delete_product(self, product_id: str) -> None:
        """Delete by storage id."""

    async def delete_by_store(self, store_id: str) -> int:
        """Delete every product of a store; return how many were removed."""

    async def subscribe_store(
        self,
        store_id: str,
        on_products: ProductsListener,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        """Live product list for a store."""


class IOrderRepository(Protocol):
    """Protocol for order repository (DIP)."""

    async def get_by_firestore_id(self, firestore_id: str) -> Order | None:
        """Return order by storage id, or None."""

    async def list_by_store(self, store_id: str) -> list[Order]:
        """Return all orders of a store (unsorted)."""

    async def add_order(self, order: Order) -> Order:
        """Persist a new order with a server timestamp; return it with firestore_id set."""

    async def update_fields(self, firestore_id: str, fields: dict[str, Any]) -> None:
        """Atomic partial update (status plus side-effect fields)."""

    async def delete_order(self, firestore_id: str) -> None:
        """Delete by storage id."""

    async def delete_by_store(self, store_id: str) -> int:
        """Delete every order of a store; return how many were removed."""

    async def subscribe_store(
        self,
        store_id: str,
        on_orders: OrdersListener,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        """Live order list for a store."""
