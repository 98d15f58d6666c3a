"""Order domain entities.

An order freezes a snapshot of each purchased product and the computed
total at creation time. Later catalog edits never reach past orders.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from quickorder.domain.entities.product import Product
from quickorder.domain.enums import OrderStatus
from quickorder.domain.exceptions import ValidationException

CONTACT_PATTERN = re.compile(r"^\d{10}$")


@dataclass(frozen=True)
class CustomerDetails:
    """Shipping and contact details captured at checkout."""

    name: str
    address: str
    contact: str

    def validate(self) -> None:
        """Raise ValidationException on the first invalid field."""
        if not self.name or not self.name.strip():
            raise ValidationException("Please enter your full name.", field="name")
        if not self.address or not self.address.strip():
            raise ValidationException("Please enter your shipping address.", field="address")
        if not CONTACT_PATTERN.match(self.contact or ""):
            raise ValidationException(
                "Please enter a valid 10-digit contact number.", field="contact"
            )


@dataclass(frozen=True)
class ProductSnapshot:
    """Copy of a product's display and price fields at the time of ordering."""

    id: str
    name: str
    price: float
    description: str = ""
    unit: str = ""
    image_url: str = ""

    @classmethod
    def of(cls, product: Product) -> ProductSnapshot:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            description=product.description,
            unit=product.unit,
            image_url=product.image_url,
        )


@dataclass(frozen=True)
class OrderLine:
    product: ProductSnapshot
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


def compute_total(lines: tuple[OrderLine, ...] | list[OrderLine]) -> float:
    """Sum of snapshot price x quantity over all lines."""
    return sum((line.subtotal for line in lines), 0.0)


@dataclass(frozen=True)
class Order:
    """Server-side order record.

    firestore_id is the storage-assigned document id (None until the write is
    acknowledged). created_at is None while the server timestamp has not
    resolved yet.
    """

    order_id: str
    store_id: str
    customer: CustomerDetails
    lines: tuple[OrderLine, ...]
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    firestore_id: str | None = None
    user_id: str | None = None
    tracking_number: str | None = None
    payment_id: str | None = None
    created_at: datetime | None = None

    @property
    def is_durable(self) -> bool:
        return bool(self.firestore_id)

    @property
    def timestamp_pending(self) -> bool:
        return self.created_at is None

    def sort_timestamp(self, now: datetime) -> datetime:
        """created_at, or now while the server timestamp is unresolved."""
        return self.created_at if self.created_at is not None else now

    def with_fields(self, fields: dict[str, Any]) -> Order:
        """Return a copy with a partial update applied (keys are attribute names)."""
        return replace(self, **fields)


@dataclass(frozen=True)
class LocalOrderEcho:
    """An order this session just submitted, before the authoritative copy arrives.

    Held as the tracked order until the orders stream delivers the same
    order_id, at which point the synchronizer swaps in the server copy.
    """

    order: Order
    submitted_at: datetime
    payment_url: str = field(default="", compare=False)

    @property
    def order_id(self) -> str:
        return self.order.order_id

    @property
    def status(self) -> OrderStatus:
        return self.order.status


TrackedOrder = Order | LocalOrderEcho


def unwrap(tracked: TrackedOrder | None) -> Order | None:
    """Return the plain Order behind a tracked value."""
    if isinstance(tracked, LocalOrderEcho):
        return tracked.order
    return tracked
