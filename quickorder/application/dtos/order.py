"""DTOs for checkout and payment use cases."""

from dataclasses import dataclass

from quickorder.domain.enums import UpiApp


@dataclass(frozen=True)
class CartItem:
    """Requested quantity of one product in the active store's catalog."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class PaymentIntent:
    """Deep link chosen for the payer, plus the generic fallback link/QR payload."""

    app: UpiApp
    link: str
    fallback_link: str
    payer_vpa: str

    @property
    def app_label(self) -> str:
        return self.app.label
