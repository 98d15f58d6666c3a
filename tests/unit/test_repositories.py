"""Tests for the document-schema repositories (mapping, malformed documents, owner lookup)."""

import pytest

from quickorder.application.dtos import ProductDraft
from quickorder.application.interfaces.document_store import DocumentSnapshot
from quickorder.domain.entities import CustomerDetails, Order, OrderLine, ProductSnapshot
from quickorder.domain.enums import OrderStatus
from quickorder.domain.exceptions import ResourceNotFoundException, StoreAlreadyExistsException
from quickorder.infrastructure.firebase.repositories import (
    FirestoreOrderRepository,
    FirestoreProductRepository,
    FirestoreStoreRepository,
)
from quickorder.infrastructure.firebase.repositories.order_repo_firestore import (
    order_from_document,
)
from quickorder.infrastructure.firebase.repositories.product_repo_firestore import (
    product_from_document,
)
from quickorder.infrastructure.firebase.repositories.store_repo_firestore import (
    store_from_document,
)
from tests.helpers import seed_store


class TestProductMapping:
    def test_storage_id_wins_over_legacy_id_field(self) -> None:
        doc = DocumentSnapshot(
            id="abc", data={"storeId": "Acme", "name": "Rice", "price": 40, "id": 1700000000000}
        )
        product = product_from_document(doc)
        assert product.id == "abc"
        assert product.sort_key == 1700000000000

    @pytest.mark.parametrize(
        ("data", "sort_key"),
        [
            ({"sortKey": 5, "id": 9}, 5),
            ({"id": "not-a-number"}, 0),
            ({"sortKey": True}, 0),
            ({}, 0),
        ],
    )
    def test_sort_key_fallbacks(self, data: dict, sort_key: int) -> None:
        doc = DocumentSnapshot(id="p", data={"storeId": "Acme", "name": "Rice", "price": 1, **data})
        assert product_from_document(doc).sort_key == sort_key

    @pytest.mark.parametrize(
        "data",
        [
            {"storeId": "Acme", "price": 10},
            {"storeId": "Acme", "name": "Rice", "price": "ten"},
            {"name": "Rice", "price": 10},
        ],
    )
    def test_malformed_documents_are_skipped(self, data: dict) -> None:
        assert product_from_document(DocumentSnapshot(id="bad", data=data)) is None


class TestOrderMapping:
    def _doc(self, **overrides) -> DocumentSnapshot:
        data = {
            "orderId": "ORD-1",
            "storeId": "Acme",
            "customer": {"name": "Ravi", "address": "Pune", "contact": "9812345678"},
            "products": [
                {"product": {"id": "p1", "name": "Rice", "price": 40, "imageUrl": "x.png"}, "quantity": 2}
            ],
            "totalAmount": 80,
            "status": "shipped",
            "trackingNumber": "IN12345",
            **overrides,
        }
        return DocumentSnapshot(id="doc-1", data=data)

    def test_maps_fields(self) -> None:
        order = order_from_document(self._doc())
        assert order.firestore_id == "doc-1"
        assert order.status is OrderStatus.SHIPPED
        assert order.tracking_number == "IN12345"
        assert order.lines[0].product.image_url == "x.png"
        assert order.lines[0].product.price == 40.0
        assert order.total_amount == 80.0
        assert order.timestamp_pending
        assert order.user_id is None

    def test_missing_order_id_is_skipped(self) -> None:
        doc = self._doc()
        data = {k: v for k, v in doc.data.items() if k != "orderId"}
        assert order_from_document(DocumentSnapshot(id="doc-1", data=data)) is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"status": "lost"},
            {"products": [{"quantity": 1}]},
            {"customer": "Ravi"},
        ],
    )
    def test_malformed_documents_are_skipped(self, overrides: dict) -> None:
        assert order_from_document(self._doc(**overrides)) is None


def test_store_without_active_flag_is_open() -> None:
    store = store_from_document(DocumentSnapshot(id="Acme", data={"vpa": "a@ybl", "merchantName": "A"}))
    assert store.store_id == "Acme"
    assert store.name == "Acme"
    assert store.accepting_orders


async def test_store_create_is_atomic_on_document_id(db) -> None:
    repo = FirestoreStoreRepository(db)
    await seed_store(db, "Acme")
    with pytest.raises(StoreAlreadyExistsException):
        await seed_store(db, "Acme")
    assert [s.store_id for s in await repo.list_stores()] == ["Acme"]


@pytest.mark.parametrize(
    "stored_phone", ["9812345678", "+919812345678", "919812345678", "+91 98123 45678"]
)
async def test_find_by_owner_matches_common_phone_spellings(db, stored_phone: str) -> None:
    await seed_store(db, "Acme", owner_phone=stored_phone)
    repo = FirestoreStoreRepository(db)
    found = await repo.find_by_owner(None, "+91 98123 45678")
    assert [s.store_id for s in found] == ["Acme"]


async def test_find_by_owner_email_any_case(db) -> None:
    await seed_store(db, "Acme", owner_email="asha@acme.test")
    await seed_store(db, "Bolt", owner_email="Asha@Acme.test")
    repo = FirestoreStoreRepository(db)
    assert [s.store_id for s in await repo.find_by_owner("Asha@Acme.test", None)] == ["Acme", "Bolt"]
    assert await repo.find_by_owner(None, None) == []


async def test_product_repository_update_and_missing(db) -> None:
    repo = FirestoreProductRepository(db)
    product = await repo.add_product("Acme", ProductDraft(name=" Rice ", price=40.0, image_url="r.png"))
    assert product.name == "Rice"
    await repo.update_product(product.id, {"price": 45.0, "image_url": "new.png"})
    stored = await repo.get_by_id(product.id)
    assert stored.price == 45.0
    assert stored.image_url == "new.png"
    assert stored.created_at is not None
    with pytest.raises(ResourceNotFoundException):
        await repo.update_product("missing", {"price": 1.0})


async def test_order_repository_round_trip(db) -> None:
    repo = FirestoreOrderRepository(db)
    line = OrderLine(product=ProductSnapshot(id="p1", name="Rice", price=40.0, unit="kg"), quantity=2)
    order = Order(
        order_id="ORD-1",
        store_id="Acme",
        customer=CustomerDetails("Ravi", "Pune", "9812345678"),
        lines=(line,),
        total_amount=80.0,
        user_id="cust-1",
    )
    stored = await repo.add_order(order)
    assert stored.firestore_id
    assert stored.created_at is None

    await repo.update_fields(stored.firestore_id, {"status": OrderStatus.PAID, "payment_id": "UPI-1"})
    fetched = await repo.get_by_firestore_id(stored.firestore_id)
    assert fetched.status is OrderStatus.PAID
    assert fetched.payment_id == "UPI-1"
    assert fetched.lines == (line,)
    assert fetched.created_at is not None
    assert (await db.get("orders", stored.firestore_id)).to_dict()["status"] == "paid"

    with pytest.raises(ResourceNotFoundException):
        await repo.update_fields("missing", {"status": OrderStatus.PAID})
