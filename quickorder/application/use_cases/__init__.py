"""Application use cases (store, catalog and order operations)."""
