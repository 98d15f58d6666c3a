"""Application DTOs (no dependency on storage documents)."""

from quickorder.application.dtos.order import CartItem, PaymentIntent
from quickorder.application.dtos.product import ProductDraft, ProductUpdate
from quickorder.application.dtos.store import StoreCreate, StoreSettingsUpdate

__all__ = [
    "CartItem",
    "PaymentIntent",
    "ProductDraft",
    "ProductUpdate",
    "StoreCreate",
    "StoreSettingsUpdate",
]
