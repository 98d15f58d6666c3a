"""Store use cases."""

from quickorder.application.use_cases.stores.store_operations import StoreService

__all__ = ["StoreService"]
