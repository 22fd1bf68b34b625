"""OpenTelemetry setup for observability."""

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from qr_api.config import Settings

logger = structlog.get_logger()


def setup_telemetry(settings: Settings) -> None:
    """Configure OpenTelemetry tracing.

    Spans are always recorded; they are only exported when an OTLP
    endpoint is configured.
    """
    resource = Resource.create(
        {
            "service.name": "query-router",
            "service.version": settings.app_version,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    if settings.otel_exporter_otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info(
            "OTLP exporter configured",
            endpoint=settings.otel_exporter_otlp_endpoint,
        )

    trace.set_tracer_provider(provider)
    logger.info("OpenTelemetry tracing initialized")


def get_tracer() -> trace.Tracer:
    """Get the tracer used by the routing endpoints."""
    return trace.get_tracer("qr_api.routing")
