"""
Tracing for the guidance chat pipeline.

Spans are exported to Application Insights when a connection string is
configured and the Azure Monitor exporter is installed; otherwise they
stay in-process.
"""

import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Span, Status, StatusCode

from wa_guidance.core.config import Settings
from wa_guidance.core.errors import (
    GuidanceServiceError,
    InvalidInputError,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "wa-guidance-service"

_tracer: trace.Tracer | None = None


def _azure_exporter(connection_string: str) -> SpanExporter | None:
    if not connection_string:
        logger.info("No connection string provided. Telemetry export disabled.")
        return None
    try:
        from azure.monitor.opentelemetry.exporter import AzureMonitorTraceExporter
    except ImportError:
        logger.warning(
            "azure-monitor-opentelemetry-exporter not installed. "
            "Telemetry will not be exported."
        )
        return None
    logger.info("Application Insights telemetry enabled.")
    return AzureMonitorTraceExporter(connection_string=connection_string)


def setup_telemetry(settings: Settings) -> None:
    """Install a tracer provider tagged with the service name and guidance model."""
    global _tracer

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": SERVICE_NAME,
                "wa_guidance.model": settings.openai_chat_model,
            }
        )
    )
    exporter = _azure_exporter(settings.applicationinsights_connection_string)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(SERVICE_NAME)


def get_tracer() -> trace.Tracer:
    """Return the application tracer, initializing a no-op if not set up."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(SERVICE_NAME)
    return _tracer


def error_kind(exc: GuidanceServiceError) -> str:
    """Coarse class of a failure: fix the input, or retry the call."""
    if isinstance(exc, InvalidInputError):
        return "input"
    if isinstance(exc, ProviderResponseError):
        return "provider_response"
    return "service"


def record_failure(span: Span, exc: GuidanceServiceError) -> None:
    """Tag a span with the error type and class before the error propagates."""
    span.set_attribute("error.type", type(exc).__name__)
    span.set_attribute("error.kind", error_kind(exc))
    span.set_status(Status(StatusCode.ERROR, str(exc)))
