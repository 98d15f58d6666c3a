"""Product API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quickorder.application.dtos.product import ProductDraft, ProductUpdate


class ProductCreateRequest(BaseModel):
    name: str = Field(..., max_length=255)
    price: float
    description: str = Field(default="", max_length=2000)
    unit: str = Field(default="", max_length=64)
    image_url: str = Field(default="", max_length=2048)

    def to_dto(self) -> ProductDraft:
        return ProductDraft(
            name=self.name,
            price=self.price,
            description=self.description,
            unit=self.unit,
            image_url=self.image_url,
        )


class ProductUpdateRequest(BaseModel):
    """Request body for updating a product (partial)."""

    name: str | None = Field(default=None, max_length=255)
    price: float | None = None
    description: str | None = Field(default=None, max_length=2000)
    unit: str | None = Field(default=None, max_length=64)
    image_url: str | None = Field(default=None, max_length=2048)

    def to_dto(self) -> ProductUpdate:
        return ProductUpdate(
            name=self.name,
            price=self.price,
            description=self.description,
            unit=self.unit,
            image_url=self.image_url,
        )


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    store_id: str
    name: str
    price: float
    description: str = ""
    unit: str = ""
    image_url: str = ""
    sort_key: int = 0
    created_at: datetime | None = None
