"""
OpenTelemetry Tracing

Configures OpenTelemetry for the marketplace engine. When tracing is disabled
the API's no-op tracer is used, so spans can be opened unconditionally.
"""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter

logger = logging.getLogger(__name__)

_initialized = False


def setup_tracing(
    service_name: str = "marketplace-engine",
    enable: bool = True,
    exporter: Optional[SpanExporter] = None,
) -> None:
    """
    Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        enable: Enable/disable tracing
        exporter: Span exporter (defaults to console output)

    Example:
        setup_tracing(service_name="marketplace-engine", enable=settings.MARKETPLACE["TRACING_ENABLED"])
    """
    global _initialized

    if _initialized:
        logger.warning("Tracing already initialized. Skipping.")
        return

    if not enable:
        logger.info("Tracing disabled via configuration")
        return

    try:
        resource = Resource(attributes={SERVICE_NAME: service_name})
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter or ConsoleSpanExporter()))
        trace.set_tracer_provider(tracer_provider)

        _initialized = True
        logger.info(f"OpenTelemetry tracing initialized for service: {service_name}")

    except Exception as e:
        logger.error(f"Failed to initialize tracing: {e}", exc_info=True)


def get_tracer(name: str = __name__) -> trace.Tracer:
    """
    Get tracer instance for creating custom spans.

    Example:
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span("order.create"):
            ...
    """
    return trace.get_tracer(name)


def add_span_attributes(span: trace.Span, **attributes) -> None:
    """Add custom attributes to a span. Values are stringified."""
    for key, value in attributes.items():
        span.set_attribute(key, str(value))
