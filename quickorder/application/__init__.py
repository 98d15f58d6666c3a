"""Application layer: DTOs, ports, services, use cases and the storefront session."""
