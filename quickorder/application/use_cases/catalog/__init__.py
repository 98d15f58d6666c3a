"""Catalog use cases."""

from quickorder.application.use_cases.catalog.product_operations import ProductService

__all__ = ["ProductService"]
