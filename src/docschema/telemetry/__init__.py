from .config import setup_telemetry, configure_structlog, add_trace_context, get_logger, get_tracer
from .decorators import traced_class


__all__ = [
    "setup_telemetry",
    "configure_structlog",
    "add_trace_context",
    "get_logger",
    "get_tracer",
    "traced_class",
]
