"""Document-store-backed store repository (implements IStoreRepository)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from quickorder.application.interfaces.document_store import DocumentExistsError
from quickorder.domain.entities import Store, national_number, normalize_phone_digits
from quickorder.domain.exceptions import StoreAlreadyExistsException, ValidationException
from quickorder.infrastructure.firebase.collections import (
    COLLECTION_STORE_SLUGS,
    COLLECTION_STORES,
    FIELD_OWNER_EMAIL,
    FIELD_OWNER_PHONE,
)
from quickorder.shared.utils.datetime import ensure_utc

if TYPE_CHECKING:
    from quickorder.application.interfaces.document_store import (
        DocumentSnapshot,
        IDocumentStore,
    )

logger = logging.getLogger(__name__)

# Store attribute -> document field
_FIELD_NAMES = {
    "vpa": "vpa",
    "merchant_name": "merchantName",
    "is_active": "isActive",
    "owner_email": FIELD_OWNER_EMAIL,
    "owner_phone": FIELD_OWNER_PHONE,
    "name": "name",
}


def store_from_document(doc: DocumentSnapshot) -> Store | None:
    """Map a store document; None (with a warning) when it is malformed."""
    d = doc.to_dict()
    try:
        return Store(
            store_id=d.get("storeId") or doc.id,
            name=d.get("name") or d.get("storeId") or doc.id,
            vpa=d.get("vpa", ""),
            merchant_name=d.get("merchantName", ""),
            owner_email=d.get(FIELD_OWNER_EMAIL) or None,
            owner_phone=d.get(FIELD_OWNER_PHONE) or None,
            created_at=ensure_utc(d.get("createdAt")),
            # A store without the flag predates pausing and is open
            is_active=d.get("isActive") is not False,
        )
    except (ValidationException, TypeError, AttributeError) as e:
        logger.warning("Skipping malformed store document %s: %s", doc.id, e)
        return None


def store_to_document(store: Store) -> dict[str, Any]:
    return {
        "storeId": store.store_id,
        "name": store.name,
        FIELD_OWNER_EMAIL: store.owner_email,
        FIELD_OWNER_PHONE: store.owner_phone,
        "vpa": store.vpa,
        "merchantName": store.merchant_name,
        "createdAt": store.created_at,
        "isActive": store.is_active,
    }


def _phone_candidates(phone: str | None) -> list[str]:
    """Spellings an owner phone may be stored under (raw, digits, national, +91)."""
    candidates: list[str] = []
    national = national_number(phone)
    for value in (
        (phone or "").strip(),
        normalize_phone_digits(phone),
        national,
        f"+91{national}" if national else None,
    ):
        if value and value not in candidates:
            candidates.append(value)
    return candidates


class FirestoreStoreRepository:
    """Stores keyed by their slug; the document id is the storeId."""

    def __init__(self, db: IDocumentStore) -> None:
        self._db = db

    async def get_by_id(self, store_id: str) -> Store | None:
        doc = await self._db.get(COLLECTION_STORES, store_id)
        if doc is None:
            return None
        return store_from_document(doc)

    async def list_stores(self) -> list[Store]:
        docs = await self._db.list_all(COLLECTION_STORES)
        return [s for s in (store_from_document(d) for d in docs) if s is not None]

    async def find_by_owner(self, email: str | None, phone: str | None) -> list[Store]:
        """Stores owned by this email (any case) or phone (any common spelling)."""
        found: dict[str, Store] = {}
        queries: list[tuple[str, str]] = []
        if email and email.strip():
            for value in dict.fromkeys((email.strip(), email.strip().lower())):
                queries.append((FIELD_OWNER_EMAIL, value))
        for value in _phone_candidates(phone):
            queries.append((FIELD_OWNER_PHONE, value))

        for field_name, value in queries:
            for doc in await self._db.query(COLLECTION_STORES, field_name, value):
                store = store_from_document(doc)
                if store is not None:
                    found[store.store_id] = store
        return [found[k] for k in sorted(found)]

    async def create_store(self, store: Store) -> Store:
        """Create the store and its lowercase slug reservation in one write.

        Either document already existing fails the whole write, so "Acme" and
        "acme" can never both be created, even concurrently.
        """
        try:
            await self._db.create_all(
                [
                    (COLLECTION_STORES, store.store_id, store_to_document(store)),
                    (COLLECTION_STORE_SLUGS, store.slug_key, {"storeId": store.store_id}),
                ]
            )
        except DocumentExistsError:
            raise StoreAlreadyExistsException(store.store_id) from None
        return store

    async def update_settings(self, store_id: str, fields: dict[str, Any]) -> None:
        doc = {_FIELD_NAMES[k]: v for k, v in fields.items()}
        await self._db.set(COLLECTION_STORES, store_id, doc, merge=True)

    async def delete_store(self, store_id: str) -> None:
        await self._db.delete(COLLECTION_STORES, store_id)
        await self._db.delete(COLLECTION_STORE_SLUGS, store_id.lower())
