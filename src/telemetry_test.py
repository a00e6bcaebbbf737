import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from docschema.metadata import prop
from docschema.schema import ClassCompiler
from docschema.telemetry import add_trace_context, setup_telemetry


@pytest.fixture(scope="module")
def exporter():
    setup_telemetry("docschema-test", level="WARNING")
    exporter = InMemorySpanExporter()
    trace.get_tracer_provider().add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


def test_compile_is_traced(exporter):
    class Cat:
        name: str = prop()

    exporter.clear()
    ClassCompiler().compile(Cat)

    spans = [span for span in exporter.get_finished_spans() if span.name == "ClassCompiler.compile"]
    assert spans
    assert spans[0].attributes["target_class"] == "Cat"
    assert spans[0].attributes["method_name"] == "compile"


def test_log_events_carry_trace_context(exporter):
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("outer"):
        event = add_trace_context(None, "info", {"event": "hello"})

    assert event["span_name"] == "outer"
    assert len(event["trace_id"]) == 32


def test_log_events_without_span_are_untouched():
    assert add_trace_context(None, "info", {"event": "hello"}) == {"event": "hello"}
