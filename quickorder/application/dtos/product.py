"""DTOs for catalog use cases."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductDraft:
    """A product before the store assigns it an id."""

    name: str
    price: float
    description: str = ""
    unit: str = ""
    image_url: str = ""


@dataclass(frozen=True)
class ProductUpdate:
    """Partial product edit; None leaves a field unchanged."""

    name: str | None = None
    price: float | None = None
    description: str | None = None
    unit: str | None = None
    image_url: str | None = None

    def changed_fields(self) -> dict[str, object]:
        return {
            key: value
            for key, value in (
                ("name", self.name),
                ("price", self.price),
                ("description", self.description),
                ("unit", self.unit),
                ("image_url", self.image_url),
            )
            if value is not None
        }
