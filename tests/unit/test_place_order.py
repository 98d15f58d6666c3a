"""Tests for PlaceOrderUseCase (cart validation, snapshots, totals, payment link)."""

from unittest.mock import AsyncMock

import pytest

from quickorder.application.dtos import CartItem
from quickorder.application.use_cases.orders import PlaceOrderUseCase
from quickorder.application.use_cases.orders.place_order import build_lines
from quickorder.domain.entities import CustomerDetails, Product, Store
from quickorder.domain.enums import OrderStatus
from quickorder.domain.exceptions import (
    EmptyCartException,
    StoreClosedException,
    ValidationException,
)
from quickorder.infrastructure.firebase.repositories import FirestoreOrderRepository

CUSTOMER = CustomerDetails("Ravi Kumar", "12 MG Road, Pune", "9812345678")


def _store(is_active: bool = True) -> Store:
    return Store(
        store_id="Acme",
        name="Acme",
        vpa="acme@okaxis",
        merchant_name="Acme Traders",
        is_active=is_active,
    )


CATALOG = [
    Product(id="rice", store_id="Acme", name="Rice", price=40.0, unit="kg"),
    Product(id="dal", store_id="Acme", name="Dal", price=120.5),
]


async def test_order_is_stored_pending_with_snapshots(db) -> None:
    repo = FirestoreOrderRepository(db)
    echo = await PlaceOrderUseCase(repo).execute(
        store=_store(),
        catalog=CATALOG,
        items=[CartItem("rice", 2), CartItem("dal", 0), CartItem("dal", 1)],
        customer=CUSTOMER,
        user_id="cust-1",
    )
    order = echo.order
    assert order.order_id.startswith("ORD-")
    assert order.status is OrderStatus.PENDING
    assert order.total_amount == 200.5
    assert [(line.product.id, line.quantity) for line in order.lines] == [("rice", 2), ("dal", 1)]
    assert order.lines[0].product.unit == "kg"
    assert order.firestore_id

    stored = await repo.get_by_firestore_id(order.firestore_id)
    assert stored.total_amount == 200.5
    assert stored.user_id == "cust-1"
    assert stored.created_at is not None


async def test_echo_carries_generic_payment_link(db) -> None:
    echo = await PlaceOrderUseCase(FirestoreOrderRepository(db)).execute(
        store=_store(),
        catalog=CATALOG,
        items=[CartItem("rice", 1)],
        customer=CUSTOMER,
        user_id=None,
    )
    assert echo.payment_url.startswith("upi://pay?pa=acme%40okaxis&pn=Acme+Traders&mc=0000")
    assert f"tr={echo.order_id}" in echo.payment_url
    assert "am=40.00&cu=INR" in echo.payment_url


def test_snapshot_is_independent_of_later_catalog_edits() -> None:
    catalog = [Product(id="rice", store_id="Acme", name="Rice", price=40.0)]
    lines = build_lines([CartItem("rice", 1)], catalog)
    catalog[0].price = 99.0
    catalog[0].name = "Premium Rice"
    assert lines[0].product.price == 40.0
    assert lines[0].product.name == "Rice"


async def test_empty_cart_is_rejected() -> None:
    repo = AsyncMock()
    with pytest.raises(EmptyCartException):
        await PlaceOrderUseCase(repo).execute(
            store=_store(), catalog=CATALOG, items=[CartItem("rice", 0)], customer=CUSTOMER, user_id=None
        )
    repo.add_order.assert_not_awaited()


async def test_closed_store_is_rejected() -> None:
    repo = AsyncMock()
    with pytest.raises(StoreClosedException):
        await PlaceOrderUseCase(repo).execute(
            store=_store(is_active=False),
            catalog=CATALOG,
            items=[CartItem("rice", 1)],
            customer=CUSTOMER,
            user_id=None,
        )
    repo.add_order.assert_not_awaited()


async def test_invalid_customer_details_are_rejected() -> None:
    repo = AsyncMock()
    with pytest.raises(ValidationException) as exc_info:
        await PlaceOrderUseCase(repo).execute(
            store=_store(),
            catalog=CATALOG,
            items=[CartItem("rice", 1)],
            customer=CustomerDetails("Ravi", "Pune", "12345"),
            user_id=None,
        )
    assert exc_info.value.details == {"field": "contact"}
    repo.add_order.assert_not_awaited()


async def test_product_outside_catalog_is_rejected() -> None:
    repo = AsyncMock()
    with pytest.raises(ValidationException) as exc_info:
        await PlaceOrderUseCase(repo).execute(
            store=_store(),
            catalog=CATALOG,
            items=[CartItem("other-store-product", 1)],
            customer=CUSTOMER,
            user_id=None,
        )
    assert exc_info.value.details == {"field": "items"}
