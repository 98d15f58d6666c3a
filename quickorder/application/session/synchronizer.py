"""Store-scoped live data for one session.

Only the active store has subscriptions. Switching store closes the previous
scope before opening the next, and every batch carries the scope it was
opened for so a late batch from a closed scope is dropped.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Awaitable, Callable
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING

from quickorder.domain.entities import LocalOrderEcho, Order, Product, TrackedOrder, unwrap
from quickorder.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from quickorder.application.interfaces.repositories import (
        IOrderRepository,
        IProductRepository,
    )

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], Awaitable[None]]

_scope_ids = itertools.count(1)


def sort_products(products: list[Product]) -> list[Product]:
    """Newest first by sort_key (missing keys map to 0)."""
    return sorted(products, key=lambda p: p.sort_key or 0, reverse=True)


def sort_orders(orders: list[Order]) -> list[Order]:
    """Newest first by created_at; an unresolved server timestamp counts as now."""
    now = utc_now()
    return sorted(orders, key=lambda o: o.sort_timestamp(now), reverse=True)


def reconcile_tracked(tracked: TrackedOrder | None, orders: list[Order]) -> TrackedOrder | None:
    """Swap in the fresh copy of the tracked order; keep the stale one when absent.

    Matches on the storage id once the tracked value has one. orderId is only
    a human-readable reference and two checkouts can share it.
    """
    if tracked is None:
        return None
    firestore_id = unwrap(tracked).firestore_id
    for order in orders:
        if firestore_id:
            if order.firestore_id == firestore_id:
                return order
        elif order.order_id == tracked.order_id:
            return order
    return tracked


class StoreDataSynchronizer:
    def __init__(
        self,
        product_repo: IProductRepository,
        order_repo: IOrderRepository,
    ) -> None:
        self._product_repo = product_repo
        self._order_repo = order_repo
        self._stack: AsyncExitStack | None = None
        self._scope = 0
        self.store_id: str | None = None
        self.products: list[Product] = []
        self.orders: list[Order] = []
        self.tracked: TrackedOrder | None = None
        self._payment_url = ""
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                await listener()
            except Exception:
                logger.exception("Session change listener failed")

    @property
    def tracked_order(self) -> Order | None:
        if isinstance(self.tracked, LocalOrderEcho):
            return self.tracked.order
        return self.tracked

    @property
    def payment_url(self) -> str:
        """Generic UPI link for the tracked order, kept after the server copy replaces the echo."""
        return self._payment_url

    async def switch_store(self, store_id: str | None) -> None:
        """Close the current scope and, for a store id, open products/orders subscriptions."""
        if store_id == self.store_id and (store_id is None or self._stack is not None):
            return
        await self._close_scope()
        if store_id != self.store_id:
            self.tracked = None
            self._payment_url = ""
        self.store_id = store_id
        self.products = []
        self.orders = []
        if store_id is None:
            await self._notify()
            return

        scope = next(_scope_ids)
        self._scope = scope
        stack = AsyncExitStack()
        self._stack = stack
        try:
            products_sub = await self._product_repo.subscribe_store(
                store_id,
                lambda batch: self._on_products(scope, batch),
                lambda exc: self._on_products_error(scope, exc),
            )
            stack.push_async_callback(products_sub.close)
            orders_sub = await self._order_repo.subscribe_store(
                store_id,
                lambda batch: self._on_orders(scope, batch),
                lambda exc: self._on_orders_error(scope, exc),
            )
            stack.push_async_callback(orders_sub.close)
        except Exception:
            logger.exception("Could not subscribe to store %s", store_id)
            await self._close_scope()
            self.products = []
            self.orders = []
            await self._notify()
            raise
        logger.info("Subscribed to products and orders of store %s", store_id)
        await self._notify()

    async def _close_scope(self) -> None:
        stack, self._stack = self._stack, None
        # Invalidate before closing so batches racing the close are dropped
        self._scope = 0
        if stack is not None:
            await stack.aclose()
            logger.info("Closed subscriptions of store %s", self.store_id)

    async def _on_products(self, scope: int, products: list[Product]) -> None:
        if scope != self._scope:
            return
        self.products = sort_products(products)
        await self._notify()

    async def _on_orders(self, scope: int, orders: list[Order]) -> None:
        if scope != self._scope:
            return
        self.orders = sort_orders(orders)
        self.tracked = reconcile_tracked(self.tracked, self.orders)
        await self._notify()

    async def _on_products_error(self, scope: int, exc: Exception) -> None:
        if scope != self._scope:
            return
        logger.error("Products subscription for store %s failed: %s", self.store_id, exc)
        self.products = []
        await self._notify()

    async def _on_orders_error(self, scope: int, exc: Exception) -> None:
        if scope != self._scope:
            return
        logger.error("Orders subscription for store %s failed: %s", self.store_id, exc)
        self.orders = []
        await self._notify()

    async def track(self, echo: LocalOrderEcho) -> None:
        """Track a just-submitted order; an already delivered copy wins immediately."""
        self._payment_url = echo.payment_url
        self.tracked = reconcile_tracked(echo, self.orders)
        await self._notify()

    async def clear_tracked(self) -> None:
        self.tracked = None
        self._payment_url = ""
        await self._notify()

    def customer_history(self, user_id: str | None) -> list[Order]:
        """The user's orders in the active store, newest order id first."""
        if not user_id:
            return []
        mine = [o for o in self.orders if o.user_id == user_id]
        return sorted(mine, key=lambda o: o.order_id, reverse=True)

    async def aclose(self) -> None:
        await self._close_scope()
        self.store_id = None
        self.products = []
        self.orders = []
        self.tracked = None
        self._payment_url = ""
        self._listeners.clear()
