"""Tests for StoreDataSynchronizer (store-scoped subscriptions and order reconciliation)."""

from datetime import timedelta
from unittest.mock import AsyncMock

from quickorder.application.session.synchronizer import StoreDataSynchronizer, reconcile_tracked
from quickorder.domain.entities import CustomerDetails, LocalOrderEcho, Order
from quickorder.domain.enums import OrderStatus
from quickorder.infrastructure.firebase.repositories import (
    FirestoreOrderRepository,
    FirestoreProductRepository,
)
from quickorder.infrastructure.memory import MemoryDocumentStore
from quickorder.shared.utils.datetime import utc_now
from tests.helpers import CUSTOMER_DETAILS


def _sync(db) -> StoreDataSynchronizer:
    return StoreDataSynchronizer(FirestoreProductRepository(db), FirestoreOrderRepository(db))


async def _product_doc(db, doc_id: str, store_id: str, name: str, sort_key=None) -> None:
    data = {"storeId": store_id, "name": name, "price": 10.0}
    if sort_key is not None:
        data["sortKey"] = sort_key
    await db.create("products", doc_id, data)


def _order(order_id: str, store_id: str = "Acme", user_id: str | None = "cust-1", **kwargs) -> Order:
    return Order(
        order_id=order_id,
        store_id=store_id,
        customer=CustomerDetails(**CUSTOMER_DETAILS),
        lines=(),
        total_amount=0.0,
        user_id=user_id,
        **kwargs,
    )


async def test_products_are_scoped_to_store_and_sorted_newest_first(db) -> None:
    await _product_doc(db, "p1", "Acme", "Old", sort_key=100)
    await _product_doc(db, "p2", "Acme", "New", sort_key=300)
    await _product_doc(db, "p3", "Acme", "Legacy")
    await _product_doc(db, "p4", "Bolt", "Elsewhere", sort_key=999)
    sync = _sync(db)
    await sync.switch_store("Acme")
    assert [p.name for p in sync.products] == ["New", "Old", "Legacy"]
    await sync.aclose()


async def test_live_batches_update_products_and_notify_listeners(db) -> None:
    sync = _sync(db)
    listener = AsyncMock()
    sync.add_listener(listener)
    await sync.switch_store("Acme")
    listener.reset_mock()
    await _product_doc(db, "p1", "Acme", "Rice", sort_key=1)
    assert [p.name for p in sync.products] == ["Rice"]
    listener.assert_awaited()
    await _product_doc(db, "p2", "Bolt", "Not mine", sort_key=2)
    assert [p.name for p in sync.products] == ["Rice"]
    await sync.aclose()


async def test_switching_store_replaces_data_and_closes_old_subscriptions(db) -> None:
    await _product_doc(db, "p1", "Acme", "Rice", sort_key=1)
    await _product_doc(db, "p2", "Bolt", "Bolts", sort_key=1)
    sync = _sync(db)
    await sync.switch_store("Acme")
    await sync.switch_store("Bolt")
    assert [p.name for p in sync.products] == ["Bolts"]
    await _product_doc(db, "p3", "Acme", "Late Acme", sort_key=5)
    assert all(p.store_id == "Bolt" for p in sync.products)
    assert len(db._subscriptions) == 2
    await sync.switch_store(None)
    assert sync.products == [] and sync.orders == []
    assert db._subscriptions == []


async def test_batches_from_a_closed_scope_are_dropped() -> None:
    product_repo = AsyncMock()
    order_repo = AsyncMock()
    product_repo.subscribe_store.return_value = AsyncMock()
    order_repo.subscribe_store.return_value = AsyncMock()
    sync = StoreDataSynchronizer(product_repo, order_repo)
    await sync.switch_store("Acme")
    stale_on_products = product_repo.subscribe_store.await_args.args[1]
    stale_on_orders = order_repo.subscribe_store.await_args.args[1]
    await sync.switch_store("Bolt")
    await stale_on_products(["leaked"])
    await stale_on_orders([_order("ORD-1")])
    assert sync.products == []
    assert sync.orders == []


async def test_resubscribing_yields_the_same_sorted_result(db) -> None:
    await _product_doc(db, "p1", "Acme", "A", sort_key=1)
    await _product_doc(db, "p2", "Acme", "B", sort_key=2)
    sync = _sync(db)
    await sync.switch_store("Acme")
    first = [p.id for p in sync.products]
    await sync.switch_store(None)
    await sync.switch_store("Acme")
    assert [p.id for p in sync.products] == first == ["p2", "p1"]
    await sync.aclose()


async def test_subscription_error_resets_only_the_affected_list(db) -> None:
    await _product_doc(db, "p1", "Acme", "Rice", sort_key=1)
    orders = FirestoreOrderRepository(db)
    await orders.add_order(_order("ORD-1"))
    sync = _sync(db)
    await sync.switch_store("Acme")
    assert sync.products and sync.orders
    await db.fail_subscriptions("products", RuntimeError("permission denied"))
    assert sync.products == []
    assert len(sync.orders) == 1
    await sync.aclose()


async def test_orders_with_pending_timestamp_sort_first() -> None:
    db = MemoryDocumentStore(resolve_server_timestamps=False)
    repo = FirestoreOrderRepository(db)
    older = utc_now() - timedelta(days=1)
    await db.create(
        "orders",
        "o-old",
        {
            "orderId": "ORD-1",
            "storeId": "Acme",
            "customer": CUSTOMER_DETAILS,
            "products": [],
            "totalAmount": 0,
            "status": "paid",
            "createdAt": older,
        },
    )
    sync = _sync(db)
    await sync.switch_store("Acme")
    await repo.add_order(_order("ORD-2"))
    assert [o.order_id for o in sync.orders] == ["ORD-2", "ORD-1"]
    assert sync.orders[0].timestamp_pending
    await db.resolve_pending_timestamps()
    assert [o.order_id for o in sync.orders] == ["ORD-2", "ORD-1"]
    assert not sync.orders[0].timestamp_pending
    await sync.aclose()


def test_reconcile_tracked_swaps_in_server_copy_or_keeps_stale() -> None:
    echo = LocalOrderEcho(order=_order("ORD-1"), submitted_at=utc_now())
    server = _order("ORD-1", status=OrderStatus.PAID, firestore_id="doc-1")
    assert reconcile_tracked(echo, [server]) is server
    assert reconcile_tracked(echo, [_order("ORD-2")]) is echo
    assert reconcile_tracked(None, [server]) is None


def test_reconcile_tracked_matches_storage_id_before_order_id() -> None:
    mine = _order("ORD-1", firestore_id="doc-mine")
    echo = LocalOrderEcho(order=mine, submitted_at=utc_now())
    someone_else = _order("ORD-1", user_id="cust-2", firestore_id="doc-other")
    assert reconcile_tracked(echo, [someone_else]) is echo
    fresh = _order("ORD-1", status=OrderStatus.PAID, firestore_id="doc-mine")
    assert reconcile_tracked(echo, [someone_else, fresh]) is fresh
    assert reconcile_tracked(fresh, [someone_else]) is fresh


async def test_tracked_echo_is_replaced_when_server_copy_arrives(db) -> None:
    sync = _sync(db)
    await sync.switch_store("Acme")
    echo = LocalOrderEcho(
        order=_order("ORD-1"), submitted_at=utc_now(), payment_url="upi://pay?x"
    )
    await sync.track(echo)
    assert sync.tracked is echo
    assert sync.tracked_order is echo.order
    stored = await FirestoreOrderRepository(db).add_order(_order("ORD-1"))
    assert isinstance(sync.tracked, Order)
    assert sync.tracked.firestore_id == stored.firestore_id
    assert sync.payment_url == "upi://pay?x"
    await FirestoreOrderRepository(db).update_fields(
        stored.firestore_id, {"status": OrderStatus.SHIPPED, "tracking_number": "IN12345"}
    )
    assert sync.tracked_order.status is OrderStatus.SHIPPED
    assert sync.tracked_order.tracking_number == "IN12345"
    await sync.aclose()


async def test_switching_store_clears_tracked_order(db) -> None:
    sync = _sync(db)
    await sync.switch_store("Acme")
    await sync.track(LocalOrderEcho(order=_order("ORD-1"), submitted_at=utc_now()))
    await sync.switch_store("Bolt")
    assert sync.tracked is None
    assert sync.payment_url == ""
    await sync.aclose()


async def test_customer_history_is_users_orders_newest_id_first(db) -> None:
    repo = FirestoreOrderRepository(db)
    await repo.add_order(_order("ORD-100"))
    await repo.add_order(_order("ORD-300"))
    await repo.add_order(_order("ORD-200", user_id="someone-else"))
    sync = _sync(db)
    await sync.switch_store("Acme")
    assert [o.order_id for o in sync.customer_history("cust-1")] == ["ORD-300", "ORD-100"]
    assert sync.customer_history(None) == []
    await sync.aclose()

