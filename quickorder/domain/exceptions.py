"""Domain exceptions for the QuickOrder application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class QuickOrderException(Exception):
    """Base exception for all QuickOrder application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(QuickOrderException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class EmptyCartException(ValidationException):
    """Raised when checkout is attempted with no items in the cart."""

    def __init__(self) -> None:
        super().__init__("Your cart is empty. Please add items first.", field="items")


class AuthenticationException(QuickOrderException):
    """Raised when authentication fails (e.g. invalid or expired ID token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class LoginRequiredException(QuickOrderException):
    """Raised when an action needs a signed-in user; the session raises a login prompt."""

    def __init__(self, message: str = "You must be logged in to continue.") -> None:
        super().__init__(message, "LOGIN_REQUIRED")


class AuthorizationException(QuickOrderException):
    """Raised when the session role is insufficient for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'store', 'order').
            action: Optional action that was attempted (e.g. 'create', 'delete').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(QuickOrderException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'store', 'order').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class StoreNotFoundException(ResourceNotFoundException):
    """Raised when a store id does not resolve (never created or deleted)."""

    def __init__(self, store_id: str) -> None:
        super().__init__("store", store_id)


class StoreAlreadyExistsException(QuickOrderException):
    """Raised when creating a store whose slug already exists (case-insensitive)."""

    def __init__(self, store_id: str) -> None:
        """Initialize with the duplicate store slug.

        Args:
            store_id: The slug that collides with an existing store.
        """
        super().__init__(
            "A shop with this name already exists. Please choose a unique name.",
            "STORE_ALREADY_EXISTS",
            {"store_id": store_id},
        )


class StoreClosedException(QuickOrderException):
    """Raised when an order is placed while the store has paused order acceptance."""

    def __init__(self, store_id: str) -> None:
        super().__init__(
            "This store is currently not accepting orders.",
            "STORE_CLOSED",
            {"store_id": store_id},
        )


class InvalidOrderTransitionException(QuickOrderException):
    """Raised when an action is not permitted from the order's current status."""

    def __init__(self, order_id: str, status: str, action: str, actor: str) -> None:
        """Initialize with the rejected transition.

        Args:
            order_id: Human-readable order id.
            status: Current order status.
            action: Requested action.
            actor: Who requested it (merchant or customer).
        """
        super().__init__(
            f"Cannot {action} order {order_id} in status '{status}' as {actor}",
            "INVALID_TRANSITION",
            {"order_id": order_id, "status": status, "action": action, "actor": actor},
        )


class SessionNotFoundException(QuickOrderException):
    """Raised when a storefront session id is unknown or expired."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            "Session not found or expired",
            "SESSION_NOT_FOUND",
            {"session_id": session_id},
        )


class BackendUnavailableException(QuickOrderException):
    """Raised when the document store rejects or fails a request."""

    def __init__(self, operation: str, reason: str | None = None) -> None:
        details: dict[str, Any] = {"operation": operation}
        if reason:
            details["reason"] = reason
        super().__init__(
            f"Storage backend unavailable during {operation}",
            "BACKEND_UNAVAILABLE",
            details,
        )
