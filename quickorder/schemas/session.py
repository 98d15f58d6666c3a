"""Storefront session API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quickorder.domain.enums import (
    LoginTarget,
    OrderAction,
    PaymentRequestStatus,
    Role,
    Screen,
    View,
)
from quickorder.schemas.order import OrderResponse, PaymentIntentResponse
from quickorder.schemas.product import ProductResponse
from quickorder.schemas.store import StoreResponse


class SessionCreateRequest(BaseModel):
    """Request body for POST /sessions: the URL the tab was opened at."""

    url: str = Field(default="/", max_length=2048)


class UrlRequest(BaseModel):
    url: str = Field(..., max_length=2048)


class NavigateRequest(BaseModel):
    store_id: str = Field(..., min_length=1, max_length=64)


class LoginPromptRequest(BaseModel):
    target: LoginTarget


class SignInRequest(BaseModel):
    """Identity sign-in event: a Firebase ID token, or raw claims where allowed."""

    id_token: str | None = None
    claims: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _one_credential(self) -> "SignInRequest":
        if not self.id_token and not self.claims:
            raise ValueError("Provide id_token or claims")
        return self


class SessionUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    role: Role
    email: str | None = None
    phone_number: str | None = None
    managed_store_ids: list[str] = Field(default_factory=list)
    avatar: str | None = None


class SessionResponse(BaseModel):
    """Everything the client renders for a session; also pushed over the WebSocket."""

    model_config = ConfigDict(from_attributes=True)

    session_id: str
    url: str
    view: View
    screen: Screen
    store: StoreResponse | None = None
    user: SessionUserResponse | None = None
    role_preference: Role | None = None
    login_target: LoginTarget | None = None
    pending_store_id: str | None = None
    products: list[ProductResponse] = Field(default_factory=list)
    active_orders: list[OrderResponse] = Field(default_factory=list)
    completed_orders: list[OrderResponse] = Field(default_factory=list)
    order_history: list[OrderResponse] = Field(default_factory=list)
    tracked_order: OrderResponse | None = None
    tracked_order_pending: bool = False
    payment_url: str = ""
    payment_status: PaymentRequestStatus = PaymentRequestStatus.IDLE
    payment_intent: PaymentIntentResponse | None = None
    awaiting_payment_confirmation: bool = False
    customer_actions: list[OrderAction] = Field(default_factory=list)
