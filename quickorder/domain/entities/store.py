"""Store domain entity.

A store is a merchant tenant: the unit of data isolation for products and orders.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from quickorder.domain.exceptions import ValidationException

STORE_SLUG_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")


def validate_store_slug(slug: str) -> str:
    """Return the trimmed slug or raise ValidationException.

    Slugs are alphanumeric with no spaces; they double as the store's
    document id and the ?store= URL parameter.
    """
    value = (slug or "").strip()
    if not STORE_SLUG_PATTERN.match(value):
        raise ValidationException(
            "Shop Name/ID must be alphanumeric and contain no spaces.",
            field="store_id",
        )
    return value


@dataclass
class Store:
    """Domain entity for a store.

    store_id is the primary key and immutable after creation. A store whose
    is_active flag is False still exists and can be browsed, but is
    temporarily closed for new orders.
    """

    store_id: str
    name: str
    vpa: str
    merchant_name: str
    owner_email: str | None = None
    owner_phone: str | None = None
    created_at: datetime | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate store business rules. Raises ValidationException if invalid."""
        if not self.store_id:
            raise ValidationException("Store ID is required", field="store_id")

    @property
    def slug_key(self) -> str:
        """Case-insensitive identity used for uniqueness checks."""
        return self.store_id.lower()

    @property
    def accepting_orders(self) -> bool:
        return self.is_active is not False

    @property
    def temporarily_closed(self) -> bool:
        return self.is_active is False
