"""Checkout: cart to stored order, then the payment link for it."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from quickorder.application.services.upi_service import order_payment_url
from quickorder.domain.entities import (
    LocalOrderEcho,
    Order,
    OrderLine,
    ProductSnapshot,
    compute_total,
)
from quickorder.domain.enums import OrderStatus
from quickorder.domain.exceptions import (
    EmptyCartException,
    StoreClosedException,
    ValidationException,
)
from quickorder.shared.telemetry.tracing import add_span_attributes, traced
from quickorder.shared.utils.datetime import utc_now
from quickorder.shared.utils.generators import generate_order_id

if TYPE_CHECKING:
    from quickorder.application.dtos.order import CartItem
    from quickorder.application.interfaces.repositories import IOrderRepository
    from quickorder.domain.entities import CustomerDetails, Product, Store

logger = logging.getLogger(__name__)


def build_lines(
    items: Sequence[CartItem], catalog: Sequence[Product]
) -> tuple[OrderLine, ...]:
    """Snapshot every cart line with quantity > 0 against the store's catalog."""
    by_id = {p.id: p for p in catalog}
    lines: list[OrderLine] = []
    for item in items:
        if item.quantity <= 0:
            continue
        product = by_id.get(item.product_id)
        if product is None:
            raise ValidationException(
                f"Product {item.product_id} is not available in this store",
                field="items",
            )
        lines.append(OrderLine(product=ProductSnapshot.of(product), quantity=item.quantity))
    return tuple(lines)


def ensure_cart_not_empty(items: Sequence[CartItem]) -> None:
    if not any(item.quantity > 0 for item in items):
        raise EmptyCartException()


class PlaceOrderUseCase:
    """Creates a pending order with a server timestamp and returns its local echo."""

    def __init__(self, order_repo: IOrderRepository) -> None:
        self.order_repo = order_repo

    @traced("orders.place_order")
    async def execute(
        self,
        store: Store,
        catalog: Sequence[Product],
        items: Sequence[CartItem],
        customer: CustomerDetails,
        user_id: str | None,
    ) -> LocalOrderEcho:
        """Validate, snapshot, persist.

        The returned echo carries the stored order (firestore_id set,
        created_at still pending) and the generic UPI link for it.
        """
        ensure_cart_not_empty(items)
        if not store.accepting_orders:
            raise StoreClosedException(store.store_id)
        customer.validate()

        lines = build_lines(items, catalog)
        order = Order(
            order_id=generate_order_id(),
            store_id=store.store_id,
            customer=customer,
            lines=lines,
            total_amount=compute_total(lines),
            status=OrderStatus.PENDING,
            user_id=user_id,
        )
        stored = await self.order_repo.add_order(order)
        add_span_attributes(order_id=stored.order_id, store_id=store.store_id)
        logger.info(
            "Order %s placed in store %s (%d lines, total %.2f)",
            stored.order_id,
            store.store_id,
            len(lines),
            stored.total_amount,
        )
        payment_url = order_payment_url(
            store.vpa, store.merchant_name, stored.total_amount, stored.order_id
        )
        return LocalOrderEcho(order=stored, submitted_at=utc_now(), payment_url=payment_url)
