"""Product domain entity."""

import math
from dataclasses import dataclass
from datetime import datetime

from quickorder.domain.exceptions import ValidationException


def validate_product_fields(name: str, price: float) -> None:
    """Raise ValidationException unless name is non-blank and price is a finite number >= 0."""
    if not name or not name.strip():
        raise ValidationException("Product name is required", field="name")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationException("Price must be a number", field="price")
    if math.isnan(price) or math.isinf(price) or price < 0:
        raise ValidationException("Price must be zero or more", field="price")


@dataclass
class Product:
    """Domain entity for a catalog product owned by exactly one store.

    id is the storage-assigned document id and the only key used for
    update/delete. sort_key is an ordering hint (creation epoch millis).
    """

    id: str
    store_id: str
    name: str
    price: float
    description: str = ""
    unit: str = ""
    image_url: str = ""
    sort_key: int = 0
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate product business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Product ID is required", field="id")
        if not self.store_id:
            raise ValidationException("Product must belong to a store", field="store_id")
        validate_product_fields(self.name, self.price)

    def belongs_to_store(self, store_id: str) -> bool:
        return self.store_id == store_id
