"""Shared test data builders (seed documents straight into a document store)."""

from quickorder.application.dtos import ProductDraft
from quickorder.domain.entities import Product, Store
from quickorder.infrastructure.firebase.repositories import (
    FirestoreProductRepository,
    FirestoreStoreRepository,
)
from quickorder.shared.utils.datetime import utc_now

ROOT_CLAIMS = {"uid": "root-1", "name": "Root", "email": "root@quickorder.test"}
SELLER_CLAIMS = {"uid": "seller-1", "name": "Asha", "email": "asha@acme.test"}
CUSTOMER_CLAIMS = {"uid": "cust-1", "name": "Ravi", "phone_number": "+919812345678"}

CUSTOMER_DETAILS = {"name": "Ravi Kumar", "address": "12 MG Road, Pune", "contact": "9812345678"}


async def seed_store(
    db,
    store_id: str,
    owner_email: str | None = None,
    owner_phone: str | None = None,
    is_active: bool = True,
) -> Store:
    """Write a store document directly (bypassing root authorization)."""
    store = Store(
        store_id=store_id,
        name=store_id,
        vpa=f"{store_id.lower()}@okaxis",
        merchant_name=f"{store_id} Traders",
        owner_email=owner_email,
        owner_phone=owner_phone,
        created_at=utc_now(),
        is_active=is_active,
    )
    return await FirestoreStoreRepository(db).create_store(store)


async def seed_product(db, store_id: str, name: str, price: float) -> Product:
    return await FirestoreProductRepository(db).add_product(
        store_id, ProductDraft(name=name, price=price, unit="kg")
    )
