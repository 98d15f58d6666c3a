"""Document-store-backed product repository (implements IProductRepository)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from quickorder.application.interfaces.document_store import (
    SERVER_TIMESTAMP,
    DocumentNotFoundError,
)
from quickorder.domain.entities import Product
from quickorder.domain.exceptions import ResourceNotFoundException, ValidationException
from quickorder.infrastructure.firebase.collections import (
    COLLECTION_PRODUCTS,
    FIELD_CREATED_AT,
    FIELD_STORE_ID,
)
from quickorder.shared.utils.datetime import ensure_utc
from quickorder.shared.utils.generators import epoch_millis

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quickorder.application.dtos.product import ProductDraft
    from quickorder.application.interfaces.document_store import (
        DocumentSnapshot,
        ErrorListener,
        IDocumentStore,
        QuerySnapshot,
        Subscription,
    )
    from quickorder.application.interfaces.repositories import ProductsListener

logger = logging.getLogger(__name__)

_FIELD_NAMES = {
    "name": "name",
    "price": "price",
    "description": "description",
    "unit": "unit",
    "image_url": "imageUrl",
}


def _sort_key(d: dict[str, Any]) -> int:
    """sortKey, else a legacy numeric 'id' field, else 0."""
    for key in ("sortKey", "id"):
        value = d.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return int(value)
    return 0


def product_from_document(doc: DocumentSnapshot) -> Product | None:
    """Map a product document; the storage id always wins over any 'id' field."""
    d = doc.to_dict()
    try:
        return Product(
            id=doc.id,
            store_id=d.get(FIELD_STORE_ID, ""),
            name=d.get("name", ""),
            price=d.get("price", 0),
            description=d.get("description") or "",
            unit=d.get("unit") or "",
            image_url=d.get("imageUrl") or "",
            sort_key=_sort_key(d),
            created_at=ensure_utc(d.get(FIELD_CREATED_AT)),
        )
    except (ValidationException, TypeError) as e:
        logger.warning("Skipping malformed product document %s: %s", doc.id, e)
        return None


def products_from_documents(docs: Iterable[DocumentSnapshot]) -> list[Product]:
    return [p for p in (product_from_document(d) for d in docs) if p is not None]


class FirestoreProductRepository:
    def __init__(self, db: IDocumentStore) -> None:
        self._db = db

    async def get_by_id(self, product_id: str) -> Product | None:
        doc = await self._db.get(COLLECTION_PRODUCTS, product_id)
        return product_from_document(doc) if doc is not None else None

    async def list_by_store(self, store_id: str) -> list[Product]:
        docs = await self._db.query(COLLECTION_PRODUCTS, FIELD_STORE_ID, store_id)
        return products_from_documents(docs)

    async def add_product(self, store_id: str, draft: ProductDraft) -> Product:
        sort_key = epoch_millis()
        product_id = await self._db.add(
            COLLECTION_PRODUCTS,
            {
                FIELD_STORE_ID: store_id,
                "name": draft.name.strip(),
                "description": draft.description,
                "price": draft.price,
                "unit": draft.unit,
                "imageUrl": draft.image_url,
                "sortKey": sort_key,
                FIELD_CREATED_AT: SERVER_TIMESTAMP,
            },
        )
        return Product(
            id=product_id,
            store_id=store_id,
            name=draft.name.strip(),
            price=draft.price,
            description=draft.description,
            unit=draft.unit,
            image_url=draft.image_url,
            sort_key=sort_key,
        )

    async def update_product(self, product_id: str, fields: dict[str, Any]) -> None:
        doc = {_FIELD_NAMES[k]: v for k, v in fields.items()}
        try:
            await self._db.update(COLLECTION_PRODUCTS, product_id, doc)
        except DocumentNotFoundError:
            raise ResourceNotFoundException("product", product_id) from None

    async def delete_product(self, product_id: str) -> None:
        await self._db.delete(COLLECTION_PRODUCTS, product_id)

    async def delete_by_store(self, store_id: str) -> int:
        docs = await self._db.query(COLLECTION_PRODUCTS, FIELD_STORE_ID, store_id)
        for doc in docs:
            await self._db.delete(COLLECTION_PRODUCTS, doc.id)
        return len(docs)

    async def subscribe_store(
        self,
        store_id: str,
        on_products: ProductsListener,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        async def _on_batch(snapshot: QuerySnapshot) -> None:
            await on_products(products_from_documents(snapshot.documents))

        return await self._db.subscribe(
            COLLECTION_PRODUCTS, FIELD_STORE_ID, store_id, _on_batch, on_error
        )
