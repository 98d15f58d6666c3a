"""Tests for the order transition table and OrderLifecycleService."""

from unittest.mock import AsyncMock

import pytest

from quickorder.application.services.order_lifecycle import (
    OrderLifecycleService,
    allowed_actions,
    plan,
    split_by_activity,
)
from quickorder.domain.entities import CustomerDetails, Order
from quickorder.domain.enums import OrderAction, OrderActor, OrderStatus
from quickorder.domain.exceptions import (
    InvalidOrderTransitionException,
    ValidationException,
)


def _order(status: OrderStatus = OrderStatus.PENDING, **kwargs) -> Order:
    return Order(
        order_id="ORD-1",
        store_id="Acme",
        customer=CustomerDetails("Ravi", "1 Main St", "9812345678"),
        lines=(),
        total_amount=0.0,
        status=status,
        firestore_id=kwargs.pop("firestore_id", "doc-1"),
        **kwargs,
    )


def test_merchant_actions_per_status() -> None:
    m = OrderActor.MERCHANT
    assert allowed_actions(OrderStatus.PENDING, m) == [OrderAction.MARK_PAID, OrderAction.CANCEL]
    assert allowed_actions(OrderStatus.PAID, m) == [OrderAction.CONFIRM, OrderAction.CANCEL]
    assert allowed_actions(OrderStatus.CONFIRMED, m) == [OrderAction.SHIP]
    assert allowed_actions(OrderStatus.SHIPPED, m) == [OrderAction.DELIVER]
    assert allowed_actions(OrderStatus.DELIVERED, m) == []
    assert allowed_actions(OrderStatus.CANCELLED, m) == [OrderAction.REOPEN]


def test_customer_may_only_assert_payment() -> None:
    c = OrderActor.CUSTOMER
    assert allowed_actions(OrderStatus.PENDING, c) == [OrderAction.MARK_PAID]
    for status in OrderStatus:
        if status is not OrderStatus.PENDING:
            assert allowed_actions(status, c) == []


def test_mark_paid_records_payment_reference() -> None:
    fields = plan(_order(), OrderAction.MARK_PAID, OrderActor.CUSTOMER)
    assert fields["status"] is OrderStatus.PAID
    assert fields["payment_id"].startswith("UPI-")


def test_ship_requires_tracking_number() -> None:
    with pytest.raises(ValidationException) as exc_info:
        plan(_order(OrderStatus.CONFIRMED), OrderAction.SHIP, OrderActor.MERCHANT, "   ")
    assert exc_info.value.details == {"field": "tracking_number"}


def test_ship_stores_trimmed_tracking_number() -> None:
    fields = plan(_order(OrderStatus.CONFIRMED), OrderAction.SHIP, OrderActor.MERCHANT, " IN12345 ")
    assert fields == {"status": OrderStatus.SHIPPED, "tracking_number": "IN12345"}


def test_ship_from_wrong_status_is_a_transition_error_not_a_tracking_error() -> None:
    with pytest.raises(InvalidOrderTransitionException):
        plan(_order(OrderStatus.PENDING), OrderAction.SHIP, OrderActor.MERCHANT)


def test_delivered_is_terminal() -> None:
    for action in OrderAction:
        if action is OrderAction.DELIVER:
            continue
        with pytest.raises(InvalidOrderTransitionException):
            plan(_order(OrderStatus.DELIVERED), action, OrderActor.MERCHANT, "T1")
    # Re-delivering is a no-op rewrite of the stored status
    assert plan(_order(OrderStatus.DELIVERED), OrderAction.DELIVER, OrderActor.MERCHANT) == {
        "status": OrderStatus.DELIVERED
    }


def test_customer_cannot_cancel() -> None:
    with pytest.raises(InvalidOrderTransitionException) as exc_info:
        plan(_order(), OrderAction.CANCEL, OrderActor.CUSTOMER)
    assert exc_info.value.error_code == "INVALID_TRANSITION"
    assert exc_info.value.details["actor"] == "customer"


def test_reopen_returns_cancelled_order_to_pending() -> None:
    fields = plan(_order(OrderStatus.CANCELLED), OrderAction.REOPEN, OrderActor.MERCHANT)
    assert fields == {"status": OrderStatus.PENDING}


def test_repeating_an_applied_transition_rewrites_same_fields() -> None:
    paid = _order(OrderStatus.PAID, payment_id="UPI-1")
    assert plan(paid, OrderAction.MARK_PAID, OrderActor.CUSTOMER) == {
        "status": OrderStatus.PAID,
        "payment_id": "UPI-1",
    }
    shipped = _order(OrderStatus.SHIPPED, tracking_number="IN1")
    assert plan(shipped, OrderAction.SHIP, OrderActor.MERCHANT, "IN1") == {
        "status": OrderStatus.SHIPPED,
        "tracking_number": "IN1",
    }
    with pytest.raises(InvalidOrderTransitionException):
        plan(shipped, OrderAction.SHIP, OrderActor.MERCHANT, "OTHER")


def test_split_by_activity() -> None:
    orders = [_order(s) for s in OrderStatus]
    active, completed = split_by_activity(orders)
    assert [o.status for o in completed] == [OrderStatus.DELIVERED, OrderStatus.CANCELLED]
    assert len(active) == 4


async def test_apply_writes_fields_and_returns_updated_order() -> None:
    repo = AsyncMock()
    service = OrderLifecycleService(repo)
    updated = await service.apply(
        _order(OrderStatus.CONFIRMED), OrderAction.SHIP, OrderActor.MERCHANT, "IN12345"
    )
    repo.update_fields.assert_awaited_once_with(
        "doc-1", {"status": OrderStatus.SHIPPED, "tracking_number": "IN12345"}
    )
    assert updated.status is OrderStatus.SHIPPED
    assert updated.tracking_number == "IN12345"


async def test_apply_skips_order_without_storage_id() -> None:
    repo = AsyncMock()
    service = OrderLifecycleService(repo)
    result = await service.apply(
        _order(firestore_id=None), OrderAction.MARK_PAID, OrderActor.CUSTOMER
    )
    assert result is None
    repo.update_fields.assert_not_awaited()


async def test_invalid_transition_writes_nothing() -> None:
    repo = AsyncMock()
    service = OrderLifecycleService(repo)
    with pytest.raises(InvalidOrderTransitionException):
        await service.apply(_order(OrderStatus.SHIPPED), OrderAction.CONFIRM, OrderActor.MERCHANT)
    repo.update_fields.assert_not_awaited()
