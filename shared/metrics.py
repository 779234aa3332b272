"""
Shared metrics configuration for the Drupal page cache reader.
"""

from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, Info, CollectorRegistry


LOOKUP_OUTCOMES = ("hit", "miss", "invalid", "corrupt", "store_error")


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # A private registry per collector keeps repeated app construction
        # from colliding on metric names.
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Cache lookup metrics
        self._metrics["cache_lookups_total"] = Counter(
            "cache_lookups_total",
            "Total cache lookups by outcome",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["cache_lookup_duration_seconds"] = Histogram(
            "cache_lookup_duration_seconds",
            "Cache lookup duration in seconds",
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_lookup(self, outcome: str):
        """Record the outcome of a cache lookup."""
        if outcome not in LOOKUP_OUTCOMES:
            raise ValueError(f"Unknown lookup outcome: {outcome}")
        with self._lock:
            self._metrics["cache_lookups_total"].labels(outcome=outcome).inc()

    @contextmanager
    def time_lookup(self):
        """Context manager to time a cache lookup."""
        start_time = time.time()
        try:
            yield
        finally:
            self._metrics["cache_lookup_duration_seconds"].observe(time.time() - start_time)

    def sample(self, metric_name: str, **labels) -> Optional[float]:
        """Read back a sample value from the registry."""
        return self.registry.get_sample_value(metric_name, labels)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
