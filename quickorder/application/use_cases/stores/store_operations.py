"""Store operations: list/search, create, settings, toggle, cascade delete."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quickorder.domain.entities import Store, validate_store_slug
from quickorder.domain.exceptions import (
    StoreAlreadyExistsException,
    StoreNotFoundException,
    ValidationException,
)
from quickorder.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from quickorder.application.dtos.store import StoreCreate, StoreSettingsUpdate
    from quickorder.application.interfaces.repositories import (
        IOrderRepository,
        IProductRepository,
        IStoreRepository,
    )

logger = logging.getLogger(__name__)


class StoreService:
    """Store administration. Authorization is checked by the caller (session controller)."""

    def __init__(
        self,
        store_repo: IStoreRepository,
        product_repo: IProductRepository,
        order_repo: IOrderRepository,
    ) -> None:
        self.store_repo = store_repo
        self.product_repo = product_repo
        self.order_repo = order_repo

    async def get_store(self, store_id: str) -> Store:
        store = await self.store_repo.get_by_id(store_id)
        if store is None:
            raise StoreNotFoundException(store_id)
        return store

    async def list_stores(self, query: str | None = None) -> list[Store]:
        """All stores sorted by id; optional case-insensitive substring filter on id/name."""
        stores = await self.store_repo.list_stores()
        needle = (query or "").strip().lower()
        if needle:
            stores = [
                s for s in stores
                if needle in s.store_id.lower() or needle in (s.name or "").lower()
            ]
        return sorted(stores, key=lambda s: s.slug_key)

    async def create_store(self, data: StoreCreate) -> Store:
        """Create a store; the slug is unique ignoring case ("Acme" blocks "acme")."""
        slug = validate_store_slug(data.store_id)
        if not data.vpa or not data.vpa.strip():
            raise ValidationException("UPI ID (VPA) is required", field="vpa")
        if not data.merchant_name or not data.merchant_name.strip():
            raise ValidationException("Merchant name is required", field="merchant_name")

        existing = await self.store_repo.list_stores()
        if any(s.slug_key == slug.lower() for s in existing):
            raise StoreAlreadyExistsException(slug)

        store = Store(
            store_id=slug,
            name=slug,
            vpa=data.vpa.strip(),
            merchant_name=data.merchant_name.strip(),
            owner_email=(data.owner_email or "").strip() or None,
            owner_phone=(data.owner_phone or "").strip() or None,
            created_at=utc_now(),
            is_active=True,
        )
        created = await self.store_repo.create_store(store)
        logger.info("Store %s created", slug)
        return created

    async def update_settings(self, store_id: str, update: StoreSettingsUpdate) -> Store:
        """Merge settings into the store record; returns the refreshed store."""
        await self.get_store(store_id)
        fields = update.changed_fields()
        if "vpa" in fields and not str(fields["vpa"]).strip():
            raise ValidationException("UPI ID (VPA) is required", field="vpa")
        if "merchant_name" in fields and not str(fields["merchant_name"]).strip():
            raise ValidationException("Merchant name is required", field="merchant_name")
        if fields:
            await self.store_repo.update_settings(store_id, fields)
            logger.info("Store %s settings updated: %s", store_id, sorted(fields))
        return await self.get_store(store_id)

    async def set_accepting_orders(self, store_id: str, accepting: bool) -> Store:
        """Pause or resume order acceptance (the isActive flag)."""
        await self.get_store(store_id)
        await self.store_repo.update_settings(store_id, {"is_active": accepting})
        logger.info("Store %s is_active=%s", store_id, accepting)
        return await self.get_store(store_id)

    async def delete_store(self, store_id: str) -> None:
        """Delete a store together with all its products and orders."""
        await self.get_store(store_id)
        products = await self.product_repo.delete_by_store(store_id)
        orders = await self.order_repo.delete_by_store(store_id)
        await self.store_repo.delete_store(store_id)
        logger.info(
            "Store %s deleted (%d products, %d orders)", store_id, products, orders
        )
