"""Domain enumerations for the QuickOrder storefront.

Enums represent fixed sets of domain values (order status, roles, views).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class OrderStatus(_ValuesMixin, str, Enum):
    """Order lifecycle status.

    pending -> paid -> confirmed -> shipped -> delivered; cancelled is reachable
    from pending or paid. delivered and cancelled are terminal.
    """

    PENDING = "pending"
    PAID = "paid"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def is_active(self) -> bool:
        """Whether the order still shows on the merchant's active board."""
        return not self.is_terminal


class OrderAction(_ValuesMixin, str, Enum):
    """Actions that move an order between statuses."""

    MARK_PAID = "mark_paid"
    CANCEL = "cancel"
    CONFIRM = "confirm"
    SHIP = "ship"
    DELIVER = "deliver"
    REOPEN = "reopen"


class OrderActor(_ValuesMixin, str, Enum):
    """Who is asking for a transition."""

    MERCHANT = "merchant"
    CUSTOMER = "customer"


class Role(_ValuesMixin, str, Enum):
    """Effective session role."""

    ROOT = "root"
    SELLER = "seller"
    CUSTOMER = "customer"

    @property
    def is_elevated(self) -> bool:
        return self is not Role.CUSTOMER


class View(_ValuesMixin, str, Enum):
    """Top-level application view (driven by the ?store= URL parameter)."""

    LANDING = "landing"
    CUSTOMER = "customer"
    ADMIN = "admin"


class LoginTarget(_ValuesMixin, str, Enum):
    """Intent of a login prompt: shopping or store management."""

    CUSTOMER = "customer"
    ADMIN = "admin"


class Screen(_ValuesMixin, str, Enum):
    """What the client should render for the current (role, view) pair."""

    LANDING = "landing"
    LOGIN = "login"
    STOREFRONT = "storefront"
    ORDER_SUMMARY = "order_summary"
    ROOT_CONSOLE = "root_console"
    STORE_SELECTOR = "store_selector"
    NO_STORES = "no_stores"
    STORE_ADMIN = "store_admin"
    SELECT_STORE = "select_store"
    ACCESS_DENIED = "access_denied"
    ADMIN_LOGIN = "admin_login"


class UpiApp(_ValuesMixin, str, Enum):
    """Payment app guessed from a payer's UPI handle."""

    PHONEPE = "PHONEPE"
    GPAY = "GPAY"
    PAYTM = "PAYTM"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return _UPI_APP_LABELS[self]


_UPI_APP_LABELS = {
    UpiApp.PHONEPE: "PhonePe",
    UpiApp.GPAY: "Google Pay",
    UpiApp.PAYTM: "Paytm",
    UpiApp.OTHER: "UPI App",
}


class PaymentRequestStatus(_ValuesMixin, str, Enum):
    """Progress of the customer's UPI collect request for the tracked order."""

    IDLE = "idle"
    SENT = "sent"
