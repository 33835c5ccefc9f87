"""Prometheus metrics for the memory engine."""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)


class MetricsRegistry:
    """Registry of all memory engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "engine_operations_total",
            "Total number of engine operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "engine_operation_latency_seconds",
            "Engine operation latency in seconds",
            ["operation"],  # query, insert, update, delete, truncate
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        self.rows_affected_total = Counter(
            "engine_rows_affected_total",
            "Total rows changed by mutations",
            ["operation"],
            registry=self._registry,
        )

        self.rows_returned = Histogram(
            "engine_rows_returned",
            "Rows returned per query",
            buckets=(0, 1, 10, 100, 1000, 10000, 100000),
            registry=self._registry,
        )

        self.constraint_violations_total = Counter(
            "engine_constraint_violations_total",
            "Total constraint violations rejected by mutations",
            ["kind"],  # unique, not_null
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "engine_transactions_total",
            "Total number of finished transactions",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        self.transactions_active = Gauge(
            "engine_transactions_active",
            "Number of active transactions",
            registry=self._registry,
        )

        self.info = Info(
            "engine",
            "Memory engine information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The collector registry the metrics are registered with."""
        return self._registry


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from memory_engine import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
