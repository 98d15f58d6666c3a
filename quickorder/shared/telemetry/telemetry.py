"""OpenTelemetry tracer provider for the storefront service.

Exporters: console (development), otlp (gRPC collector) or none.
"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from quickorder.core.config import Settings

logger = logging.getLogger(__name__)

# Polled constantly by load balancers; not worth a span each.
UNTRACED_URLS = "/api/v1/health,/api/v1/health/ready"


def _exporter_for(settings: Settings) -> SpanExporter | None:
    kind = settings.telemetry_exporter
    if kind == "none":
        return None
    if kind == "otlp" and settings.telemetry_otlp_endpoint:
        endpoint = settings.telemetry_otlp_endpoint
        return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
    if kind != "console":
        logger.warning("Unknown telemetry exporter %r, using console", kind)
    return ConsoleSpanExporter()


class StorefrontTracing:
    """Owns the tracer provider between startup and shutdown."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.provider: TracerProvider | None = None

    def start(self) -> None:
        """Install the global tracer provider."""
        s = self.settings
        resource = Resource(
            attributes={
                SERVICE_NAME: s.app_name,
                SERVICE_VERSION: s.app_version,
                "deployment.environment": s.telemetry_environment,
                "quickorder.backend": s.database_backend,
            }
        )
        self.provider = TracerProvider(
            resource=resource, sampler=TraceIdRatioBased(s.telemetry_sample_rate)
        )
        exporter = _exporter_for(s)
        if exporter is not None:
            self.provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(self.provider)
        logger.info(
            "Tracing started: service=%s exporter=%s sample_rate=%s",
            s.app_name,
            s.telemetry_exporter,
            s.telemetry_sample_rate,
        )

    def stop(self) -> None:
        """Flush pending spans."""
        if self.provider is None:
            return
        try:
            self.provider.shutdown()
        except Exception:
            logger.exception("Tracer provider shutdown failed")
        self.provider = None
        logger.info("Tracing stopped")


def instrument_app(app: FastAPI) -> None:
    """Add request spans to every route.

    Must run before the app serves its first request; spans go to whichever
    provider is global when the request arrives.
    """
    FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)
