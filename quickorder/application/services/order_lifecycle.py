"""Order lifecycle engine: transition table, planning and applying status changes.

The table is the single source of truth for which buttons a dashboard shows
and which writes the service accepts. A planned transition is a partial field
update (attribute names) that the order repository writes atomically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from quickorder.domain.enums import OrderAction, OrderActor, OrderStatus
from quickorder.domain.exceptions import (
    InvalidOrderTransitionException,
    ValidationException,
)
from quickorder.shared.telemetry.tracing import traced
from quickorder.shared.utils.generators import generate_payment_id

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quickorder.application.interfaces.repositories import IOrderRepository
    from quickorder.domain.entities import Order

logger = logging.getLogger(__name__)

_MERCHANT = frozenset({OrderActor.MERCHANT})
_ANYONE = frozenset({OrderActor.MERCHANT, OrderActor.CUSTOMER})


@dataclass(frozen=True)
class Transition:
    source: OrderStatus
    action: OrderAction
    target: OrderStatus
    actors: frozenset[OrderActor]


TRANSITIONS: tuple[Transition, ...] = (
    Transition(OrderStatus.PENDING, OrderAction.MARK_PAID, OrderStatus.PAID, _ANYONE),
    Transition(OrderStatus.PENDING, OrderAction.CANCEL, OrderStatus.CANCELLED, _MERCHANT),
    Transition(OrderStatus.PAID, OrderAction.CONFIRM, OrderStatus.CONFIRMED, _MERCHANT),
    Transition(OrderStatus.PAID, OrderAction.CANCEL, OrderStatus.CANCELLED, _MERCHANT),
    Transition(OrderStatus.CONFIRMED, OrderAction.SHIP, OrderStatus.SHIPPED, _MERCHANT),
    Transition(OrderStatus.SHIPPED, OrderAction.DELIVER, OrderStatus.DELIVERED, _MERCHANT),
    Transition(OrderStatus.CANCELLED, OrderAction.REOPEN, OrderStatus.PENDING, _MERCHANT),
)

_BY_SOURCE: dict[tuple[OrderStatus, OrderAction], Transition] = {
    (t.source, t.action): t for t in TRANSITIONS
}


def allowed_actions(status: OrderStatus, actor: OrderActor) -> list[OrderAction]:
    """Actions the actor may take on an order in this status, in table order."""
    return [t.action for t in TRANSITIONS if t.source is status and actor in t.actors]


def _already_applied(
    order: Order, action: OrderAction, actor: OrderActor, tracking: str | None
) -> Transition | None:
    """Transition whose target the order is already in, with matching side effects."""
    for t in TRANSITIONS:
        if t.action is not action or t.target is not order.status or actor not in t.actors:
            continue
        if action is OrderAction.SHIP and tracking != order.tracking_number:
            continue
        if action is OrderAction.MARK_PAID and not order.payment_id:
            continue
        return t
    return None


def plan(
    order: Order,
    action: OrderAction,
    actor: OrderActor,
    tracking_number: str | None = None,
) -> dict[str, Any]:
    """Partial update for the transition, or raise if it is not allowed.

    Raises:
        InvalidOrderTransitionException: action not allowed from the current status for actor.
        ValidationException: ship without a non-blank tracking number.
    """
    tracking = tracking_number.strip() if tracking_number else None
    transition = _BY_SOURCE.get((order.status, action))
    if transition is None or actor not in transition.actors:
        repeat = _already_applied(order, action, actor, tracking)
        if repeat is None:
            raise InvalidOrderTransitionException(
                order_id=order.order_id,
                status=order.status.value,
                action=action.value,
                actor=actor.value,
            )
        # Same fields again: a harmless rewrite of what is already stored
        fields: dict[str, Any] = {"status": repeat.target}
        if action is OrderAction.MARK_PAID:
            fields["payment_id"] = order.payment_id
        elif action is OrderAction.SHIP:
            fields["tracking_number"] = order.tracking_number
        return fields

    if action is OrderAction.SHIP and not tracking:
        raise ValidationException(
            "A tracking number is required to ship an order.", field="tracking_number"
        )
    fields = {"status": transition.target}
    if action is OrderAction.MARK_PAID:
        fields["payment_id"] = generate_payment_id()
    elif action is OrderAction.SHIP:
        fields["tracking_number"] = tracking
    return fields


def split_by_activity(orders: Iterable[Order]) -> tuple[list[Order], list[Order]]:
    """(active, completed) preserving input order."""
    active: list[Order] = []
    completed: list[Order] = []
    for order in orders:
        (active if order.status.is_active else completed).append(order)
    return active, completed


class OrderLifecycleService:
    """Applies planned transitions to stored orders."""

    def __init__(self, order_repo: IOrderRepository) -> None:
        self._order_repo = order_repo

    @traced("order_lifecycle.apply")
    async def apply(
        self,
        order: Order,
        action: OrderAction,
        actor: OrderActor,
        tracking_number: str | None = None,
    ) -> Order | None:
        """Validate and write the transition; returns the updated order.

        An order that has no storage id yet (still echoing locally) is left
        untouched and None is returned.
        """
        if not order.firestore_id:
            logger.info(
                "Skipping %s on order %s: not stored yet", action.value, order.order_id
            )
            return None

        fields = plan(order, action, actor, tracking_number)
        await self._order_repo.update_fields(order.firestore_id, fields)
        logger.info(
            "Order %s (%s): %s -> %s by %s",
            order.order_id,
            order.firestore_id,
            order.status.value,
            fields["status"].value,
            actor.value,
        )
        return order.with_fields(fields)

    async def purge(self, order: Order) -> None:
        """Delete the order record (explicit merchant action)."""
        if not order.firestore_id:
            return
        await self._order_repo.delete_order(order.firestore_id)
        logger.info("Order %s (%s) deleted", order.order_id, order.firestore_id)
