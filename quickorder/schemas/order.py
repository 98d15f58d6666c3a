"""Checkout, payment and order API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quickorder.application.dtos.order import CartItem
from quickorder.domain.entities import CustomerDetails
from quickorder.domain.enums import OrderAction, OrderStatus, UpiApp


class CartItemRequest(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int


class CustomerDetailsRequest(BaseModel):
    name: str = ""
    address: str = ""
    contact: str = ""

    def to_domain(self) -> CustomerDetails:
        return CustomerDetails(
            name=self.name.strip(), address=self.address.strip(), contact=self.contact.strip()
        )


class CheckoutRequest(BaseModel):
    """Request body for POST /sessions/{id}/orders."""

    items: list[CartItemRequest] = Field(default_factory=list)
    customer: CustomerDetailsRequest

    def cart_items(self) -> list[CartItem]:
        return [CartItem(product_id=i.product_id, quantity=i.quantity) for i in self.items]


class PaymentRequestBody(BaseModel):
    payer_vpa: str = Field(..., max_length=255, description="Payer's UPI ID, e.g. name@oksbi")


class VisibilityRequest(BaseModel):
    visible: bool = True


class OrderTransitionRequest(BaseModel):
    """Request body for POST /admin/orders/{firestore_id}/transitions."""

    action: OrderAction
    tracking_number: str | None = Field(default=None, max_length=128)


class CustomerDetailsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    address: str
    contact: str


class ProductSnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float
    description: str = ""
    unit: str = ""
    image_url: str = ""


class OrderLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product: ProductSnapshotResponse
    quantity: int
    subtotal: float


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: str
    store_id: str
    firestore_id: str | None = None
    customer: CustomerDetailsResponse
    lines: list[OrderLineResponse]
    total_amount: float
    status: OrderStatus
    user_id: str | None = None
    tracking_number: str | None = None
    payment_id: str | None = None
    created_at: datetime | None = None
    timestamp_pending: bool = False


class PlacedOrderResponse(BaseModel):
    """Result of checkout: the locally echoed order and its generic UPI link."""

    order: OrderResponse
    payment_url: str


class PaymentIntentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    app: UpiApp
    app_label: str
    link: str
    fallback_link: str
    payer_vpa: str


class VisibilityResponse(BaseModel):
    awaiting_payment_confirmation: bool
