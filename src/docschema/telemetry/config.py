import logging
import structlog

from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource

from docschema.config import get_settings


# --------------------------------------
# structlog + correlación con trazas
# --------------------------------------


def add_trace_context(logger, method_name, event_dict):
    """Processor de structlog que añade la traza activa al evento."""
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
        event_dict["span_name"] = span.name
    return event_dict


def configure_structlog(level: str = "INFO"):
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            add_trace_context,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# --------------------------------------
# Setup OTel
# --------------------------------------
def setup_telemetry(service_name: str, service_version: str = "1.0.0", level: Optional[str] = None):
    """
    Configura OpenTelemetry y structlog:
    - Resource del servicio
    - SimpleSpanProcessor con exportador de consola
    """
    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)

    configure_structlog(level or get_settings().log_level)

    logger = structlog.get_logger(__name__)
    logger.info("Telemetry initialized", service=service_name, version=service_version)
    return provider


# --------------------------------------
# Helpers públicos
# --------------------------------------
def get_tracer(name: str):
    return trace.get_tracer(name)


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)
