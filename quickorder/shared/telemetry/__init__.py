"""Logging setup and OpenTelemetry tracing for the storefront service."""

from quickorder.shared.telemetry.logging import setup_logging
from quickorder.shared.telemetry.telemetry import StorefrontTracing, instrument_app
from quickorder.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "StorefrontTracing",
    "add_span_attributes",
    "instrument_app",
    "setup_logging",
    "traced",
]
