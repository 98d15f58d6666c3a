"""Document-store-backed order repository (implements IOrderRepository)."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from quickorder.application.interfaces.document_store import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
)
from quickorder.domain.entities import CustomerDetails, Order, OrderLine, ProductSnapshot
from quickorder.domain.enums import OrderStatus
from quickorder.domain.exceptions import ResourceNotFoundException
from quickorder.infrastructure.firebase.collections import (
    COLLECTION_ORDERS,
    FIELD_CREATED_AT,
    FIELD_STORE_ID,
)
from quickorder.shared.utils.datetime import ensure_utc

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quickorder.application.interfaces.document_store import (
        DocumentSnapshot,
        ErrorListener,
        IDocumentStore,
        QuerySnapshot,
        Subscription,
    )
    from quickorder.application.interfaces.repositories import OrdersListener

logger = logging.getLogger(__name__)

_FIELD_NAMES = {
    "status": "status",
    "payment_id": "paymentId",
    "tracking_number": "trackingNumber",
}


def _line_to_document(line: OrderLine) -> dict[str, Any]:
    p = line.product
    return {
        "product": {
            "id": p.id,
            "name": p.name,
            "price": p.price,
            "description": p.description,
            "unit": p.unit,
            "imageUrl": p.image_url,
        },
        "quantity": line.quantity,
    }


def _line_from_document(raw: dict[str, Any]) -> OrderLine:
    p = raw["product"]
    return OrderLine(
        product=ProductSnapshot(
            id=str(p.get("id", "")),
            name=p.get("name", ""),
            price=float(p.get("price", 0)),
            description=p.get("description") or "",
            unit=p.get("unit") or "",
            image_url=p.get("imageUrl") or "",
        ),
        quantity=int(raw["quantity"]),
    )


def order_to_document(order: Order) -> dict[str, Any]:
    return {
        "orderId": order.order_id,
        FIELD_STORE_ID: order.store_id,
        "userId": order.user_id,
        "customer": {
            "name": order.customer.name,
            "address": order.customer.address,
            "contact": order.customer.contact,
        },
        "products": [_line_to_document(line) for line in order.lines],
        "totalAmount": order.total_amount,
        "status": order.status.value,
        FIELD_CREATED_AT: SERVER_TIMESTAMP,
    }


def order_from_document(doc: DocumentSnapshot) -> Order | None:
    """Map an order document; None (with a warning) when it is malformed."""
    d = doc.to_dict()
    try:
        customer = d.get("customer") or {}
        return Order(
            order_id=d["orderId"],
            store_id=d[FIELD_STORE_ID],
            customer=CustomerDetails(
                name=customer.get("name", ""),
                address=customer.get("address", ""),
                contact=customer.get("contact", ""),
            ),
            lines=tuple(_line_from_document(raw) for raw in d.get("products") or []),
            total_amount=float(d.get("totalAmount", 0)),
            status=OrderStatus(d.get("status", OrderStatus.PENDING.value)),
            firestore_id=doc.id,
            user_id=d.get("userId") or None,
            tracking_number=d.get("trackingNumber") or None,
            payment_id=d.get("paymentId") or None,
            created_at=ensure_utc(d.get(FIELD_CREATED_AT)),
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        logger.warning("Skipping malformed order document %s: %s", doc.id, e)
        return None


def orders_from_documents(docs: Iterable[DocumentSnapshot]) -> list[Order]:
    return [o for o in (order_from_document(d) for d in docs) if o is not None]


class FirestoreOrderRepository:
    def __init__(self, db: IDocumentStore) -> None:
        self._db = db

    async def get_by_firestore_id(self, firestore_id: str) -> Order | None:
        doc = await self._db.get(COLLECTION_ORDERS, firestore_id)
        return order_from_document(doc) if doc is not None else None

    async def list_by_store(self, store_id: str) -> list[Order]:
        docs = await self._db.query(COLLECTION_ORDERS, FIELD_STORE_ID, store_id)
        return orders_from_documents(docs)

    async def add_order(self, order: Order) -> Order:
        """Write the order; createdAt is left to the server clock."""
        firestore_id = await self._db.add(COLLECTION_ORDERS, order_to_document(order))
        return replace(order, firestore_id=firestore_id, created_at=None)

    async def update_fields(self, firestore_id: str, fields: dict[str, Any]) -> None:
        doc = {
            _FIELD_NAMES[k]: (v.value if isinstance(v, OrderStatus) else v)
            for k, v in fields.items()
        }
        try:
            await self._db.update(COLLECTION_ORDERS, firestore_id, doc)
        except DocumentNotFoundError:
            raise ResourceNotFoundException("order", firestore_id) from None

    async def delete_order(self, firestore_id: str) -> None:
        await self._db.delete(COLLECTION_ORDERS, firestore_id)

    async def delete_by_store(self, store_id: str) -> int:
        docs = await self._db.query(COLLECTION_ORDERS, FIELD_STORE_ID, store_id)
        for doc in docs:
            await self._db.delete(COLLECTION_ORDERS, doc.id)
        return len(docs)

    async def subscribe_store(
        self,
        store_id: str,
        on_orders: OrdersListener,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        async def _on_batch(snapshot: QuerySnapshot) -> None:
            await on_orders(orders_from_documents(snapshot.documents))

        return await self._db.subscribe(
            COLLECTION_ORDERS, FIELD_STORE_ID, store_id, _on_batch, on_error
        )
