"""Store API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quickorder.application.dtos.store import StoreCreate, StoreSettingsUpdate


class StoreCreateRequest(BaseModel):
    """Request body for creating a store (root only).

    store_id is the alphanumeric shop name; it is also the ?store= URL value.
    """

    store_id: str = Field(..., min_length=1, max_length=64)
    vpa: str = Field(..., min_length=1, max_length=255, description="Merchant UPI ID")
    merchant_name: str = Field(..., min_length=1, max_length=255)
    owner_email: str | None = Field(default=None, max_length=255)
    owner_phone: str | None = Field(default=None, max_length=32)

    def to_dto(self) -> StoreCreate:
        return StoreCreate(
            store_id=self.store_id,
            vpa=self.vpa,
            merchant_name=self.merchant_name,
            owner_email=self.owner_email,
            owner_phone=self.owner_phone,
        )


class StoreSettingsRequest(BaseModel):
    """Request body for PATCH /admin/store (partial)."""

    vpa: str | None = Field(default=None, min_length=1, max_length=255)
    merchant_name: str | None = Field(default=None, min_length=1, max_length=255)
    is_active: bool | None = None
    owner_email: str | None = Field(default=None, max_length=255)
    owner_phone: str | None = Field(default=None, max_length=32)

    def to_dto(self) -> StoreSettingsUpdate:
        return StoreSettingsUpdate(
            vpa=self.vpa,
            merchant_name=self.merchant_name,
            is_active=self.is_active,
            owner_email=self.owner_email,
            owner_phone=self.owner_phone,
        )


class StoreAvailabilityRequest(BaseModel):
    accepting_orders: bool


class StoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    store_id: str
    name: str
    vpa: str
    merchant_name: str
    owner_email: str | None = None
    owner_phone: str | None = None
    created_at: datetime | None = None
    is_active: bool = True
    temporarily_closed: bool = False


class PublicStoreResponse(BaseModel):
    """Store as listed to shoppers (no owner contact details)."""

    model_config = ConfigDict(from_attributes=True)

    store_id: str
    name: str
    merchant_name: str
    temporarily_closed: bool = False
