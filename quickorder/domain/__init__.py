"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from quickorder.domain.entities import (
    CustomerDetails,
    IdentityClaims,
    LocalOrderEcho,
    Order,
    OrderLine,
    Product,
    ProductSnapshot,
    SessionUser,
    Store,
)
from quickorder.domain.enums import (
    LoginTarget,
    OrderAction,
    OrderActor,
    OrderStatus,
    Role,
    Screen,
    UpiApp,
    View,
)
from quickorder.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    BackendUnavailableException,
    EmptyCartException,
    InvalidOrderTransitionException,
    LoginRequiredException,
    QuickOrderException,
    ResourceNotFoundException,
    SessionNotFoundException,
    StoreAlreadyExistsException,
    StoreClosedException,
    StoreNotFoundException,
    ValidationException,
)

__all__ = [
    # Entities
    "CustomerDetails",
    "IdentityClaims",
    "LocalOrderEcho",
    "Order",
    "OrderLine",
    "Product",
    "ProductSnapshot",
    "SessionUser",
    "Store",
    # Enums
    "LoginTarget",
    "OrderAction",
    "OrderActor",
    "OrderStatus",
    "Role",
    "Screen",
    "UpiApp",
    "View",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "BackendUnavailableException",
    "EmptyCartException",
    "InvalidOrderTransitionException",
    "LoginRequiredException",
    "QuickOrderException",
    "ResourceNotFoundException",
    "SessionNotFoundException",
    "StoreAlreadyExistsException",
    "StoreClosedException",
    "StoreNotFoundException",
    "ValidationException",
]
