"""Infrastructure layer - cross-cutting concerns."""

from memory_engine.infrastructure.config import Config, get_config
from memory_engine.infrastructure.logging import get_logger, operation_context, setup_logging
from memory_engine.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from memory_engine.infrastructure.tracing import get_tracer, setup_tracing, span_attributes, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "operation_context",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "span_attributes",
    "trace_span",
]
