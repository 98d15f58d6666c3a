"""Pydantic request/response schemas for the API."""

from quickorder.schemas.health import HealthResponse, ReadinessResponse
from quickorder.schemas.order import (
    CheckoutRequest,
    OrderResponse,
    OrderTransitionRequest,
    PaymentIntentResponse,
    PaymentRequestBody,
    PlacedOrderResponse,
)
from quickorder.schemas.product import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
)
from quickorder.schemas.session import (
    LoginPromptRequest,
    NavigateRequest,
    SessionCreateRequest,
    SessionResponse,
    SignInRequest,
    UrlRequest,
)
from quickorder.schemas.store import (
    PublicStoreResponse,
    StoreCreateRequest,
    StoreResponse,
    StoreSettingsRequest,
)

__all__ = [
    "CheckoutRequest",
    "HealthResponse",
    "LoginPromptRequest",
    "NavigateRequest",
    "OrderResponse",
    "OrderTransitionRequest",
    "PaymentIntentResponse",
    "PaymentRequestBody",
    "PlacedOrderResponse",
    "ProductCreateRequest",
    "ProductResponse",
    "ProductUpdateRequest",
    "PublicStoreResponse",
    "ReadinessResponse",
    "SessionCreateRequest",
    "SessionResponse",
    "SignInRequest",
    "StoreCreateRequest",
    "StoreResponse",
    "StoreSettingsRequest",
    "UrlRequest",
]
