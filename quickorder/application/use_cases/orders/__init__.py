"""Order use cases."""

from quickorder.application.use_cases.orders.place_order import (
    PlaceOrderUseCase,
    build_lines,
    ensure_cart_not_empty,
)

__all__ = ["PlaceOrderUseCase", "build_lines", "ensure_cart_not_empty"]
