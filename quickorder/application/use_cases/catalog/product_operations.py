"""Catalog operations scoped to one store. Products are addressed by storage id only."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quickorder.domain.entities import validate_product_fields
from quickorder.domain.exceptions import ResourceNotFoundException

if TYPE_CHECKING:
    from quickorder.application.dtos.product import ProductDraft, ProductUpdate
    from quickorder.application.interfaces.repositories import IProductRepository
    from quickorder.domain.entities import Product

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, product_repo: IProductRepository) -> None:
        self.product_repo = product_repo

    async def _get_in_store(self, store_id: str, product_id: str) -> Product:
        product = await self.product_repo.get_by_id(product_id)
        if product is None or not product.belongs_to_store(store_id):
            raise ResourceNotFoundException("product", product_id)
        return product

    async def add_product(self, store_id: str, draft: ProductDraft) -> Product:
        validate_product_fields(draft.name, draft.price)
        product = await self.product_repo.add_product(store_id, draft)
        logger.info("Product %s added to store %s", product.id, store_id)
        return product

    async def update_product(
        self, store_id: str, product_id: str, update: ProductUpdate
    ) -> Product:
        """Partial update; the merged result must still be a valid product."""
        current = await self._get_in_store(store_id, product_id)
        fields = update.changed_fields()
        validate_product_fields(
            fields.get("name", current.name), fields.get("price", current.price)
        )
        if fields:
            await self.product_repo.update_product(product_id, fields)
        return await self._get_in_store(store_id, product_id)

    async def delete_product(self, store_id: str, product_id: str) -> None:
        await self._get_in_store(store_id, product_id)
        await self.product_repo.delete_product(product_id)
        logger.info("Product %s deleted from store %s", product_id, store_id)
