"""Infrastructure adapters: document stores, identity, messaging."""
