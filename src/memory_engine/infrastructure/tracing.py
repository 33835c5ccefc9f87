"""OpenTelemetry tracing for engine operations.

Every ``DatabaseEngine`` call runs inside an ``engine.<operation>`` span whose
attributes describe the table and query shape. Failed operations mark the
span as errored and tag it with the engine error class.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Mapping

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

TRACER_NAME = "memory_engine"

_tracer: trace.Tracer | None = None

_PRIMITIVES = (str, bool, int, float)


def setup_tracing(
    service_name: str = TRACER_NAME,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a tracer provider for the engine process.

    Args:
        service_name: ``service.name`` resource attribute
        otlp_endpoint: OTLP gRPC collector, e.g. "http://localhost:4317";
            spans are only exported when set
        console_export: Also print finished spans to stdout

    Returns:
        The engine tracer
    """
    global _tracer

    from memory_engine import __version__

    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )

    if otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Return the engine tracer, falling back to the global provider."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def span_attributes(prefix: str, values: Mapping[str, Any]) -> dict[str, Any]:
    """Convert arbitrary values into valid span attributes under ``prefix``.

    None values are dropped. Lists of primitives are kept as tuples and
    anything else is rendered with ``str``.
    """
    attributes: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, _PRIMITIVES):
            attributes[f"{prefix}.{key}"] = value
        elif isinstance(value, (list, tuple)) and all(isinstance(v, _PRIMITIVES) for v in value):
            attributes[f"{prefix}.{key}"] = tuple(value)
        else:
            attributes[f"{prefix}.{key}"] = str(value)
    return attributes


@contextmanager
def trace_span(
    name: str,
    attributes: Mapping[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Run a block inside a span.

    Args:
        name: Span name, e.g. ``engine.query``
        attributes: Span attributes; values must already be valid
            OpenTelemetry attribute types (see ``span_attributes``)

    Yields:
        The active span
    """
    with get_tracer().start_as_current_span(name, attributes=attributes) as span:
        try:
            yield span
        except Exception as e:
            span.set_attribute("engine.error", type(e).__name__)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
