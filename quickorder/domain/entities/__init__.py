"""Domain entities: stores, products, orders, session users."""

from quickorder.domain.entities.order import (
    CustomerDetails,
    LocalOrderEcho,
    Order,
    OrderLine,
    ProductSnapshot,
    TrackedOrder,
    compute_total,
    unwrap,
)
from quickorder.domain.entities.product import Product, validate_product_fields
from quickorder.domain.entities.store import Store, validate_store_slug
from quickorder.domain.entities.user import (
    IdentityClaims,
    SessionUser,
    national_number,
    normalize_phone_digits,
)

__all__ = [
    "CustomerDetails",
    "IdentityClaims",
    "LocalOrderEcho",
    "Order",
    "OrderLine",
    "Product",
    "ProductSnapshot",
    "SessionUser",
    "Store",
    "TrackedOrder",
    "compute_total",
    "national_number",
    "normalize_phone_digits",
    "unwrap",
    "validate_product_fields",
    "validate_store_slug",
]
