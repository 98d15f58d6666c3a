"""Application services: order lifecycle, UPI links, role resolution."""

from quickorder.application.services.order_lifecycle import (
    TRANSITIONS,
    OrderLifecycleService,
    allowed_actions,
    plan,
    split_by_activity,
)
from quickorder.application.services.role_resolver import RoleResolver
from quickorder.application.services.upi_service import (
    build_payment_link,
    detect_upi_app,
    generate_gpay_url,
    generate_paytm_url,
    generate_phonepe_url,
    generate_upi_url,
    order_payment_url,
)

__all__ = [
    "TRANSITIONS",
    "OrderLifecycleService",
    "RoleResolver",
    "allowed_actions",
    "build_payment_link",
    "detect_upi_app",
    "generate_gpay_url",
    "generate_paytm_url",
    "generate_phonepe_url",
    "generate_upi_url",
    "order_payment_url",
    "plan",
    "split_by_activity",
]
