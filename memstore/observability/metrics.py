"""
Prometheus metrics for monitoring the memory store.

Defines and exposes metrics for:
- Embedding calls (count, latency, failures)
- Document writes and deletions
- Similarity searches per API version
- Storage latency

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from memstore.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the memory store.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_embedding("single", status="success", latency=0.12)
        metrics.record_search("v3", results=4, latency=0.08)
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        # Embedding metrics
        self.embedding_requests = Counter(
            "memstore_embedding_requests_total",
            "Total calls to the embedding endpoint",
            ["operation", "status"],  # operation: single, batch; status: success, error
        )

        self.embedding_latency = Histogram(
            "memstore_embedding_latency_seconds",
            "Time to generate embeddings",
            ["operation"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
        )

        self.embedding_batch_size = Histogram(
            "memstore_embedding_batch_size",
            "Number of texts per embedding call",
            buckets=(1, 5, 10, 20, 32, 64, 128),
        )

        # Document metrics
        self.documents_written = Counter(
            "memstore_documents_written_total",
            "Total document writes",
            ["operation"],  # insert, batch_insert, file, update
        )

        self.documents_deleted = Counter(
            "memstore_documents_deleted_total",
            "Total documents deleted",
            ["operation"],  # single, bulk, tag
        )

        # Search metrics
        self.searches = Counter(
            "memstore_searches_total",
            "Total similarity searches",
            ["api_version"],
        )

        self.search_results = Histogram(
            "memstore_search_results",
            "Number of hits returned per search",
            buckets=(0, 1, 3, 5, 10, 25, 50, 100),
        )

        self.search_latency = Histogram(
            "memstore_search_latency_seconds",
            "End-to-end search latency (embed + query)",
            buckets=LATENCY_BUCKETS,
        )

        # Storage metrics
        self.storage_errors = Counter(
            "memstore_storage_errors_total",
            "Total storage failures",
            ["error_type"],
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    # Convenience methods

    def record_embedding(
        self,
        operation: str,
        status: str,
        latency: float | None = None,
        batch_size: int | None = None,
    ) -> None:
        """
        Record an embedding endpoint call.

        Args:
            operation: single or batch
            status: success or error
            latency: Call latency in seconds
            batch_size: Number of texts submitted
        """
        self.embedding_requests.labels(operation=operation, status=status).inc()
        if latency is not None:
            self.embedding_latency.labels(operation=operation).observe(latency)
        if batch_size is not None:
            self.embedding_batch_size.observe(batch_size)

    def record_write(self, operation: str, count: int = 1) -> None:
        """Record persisted documents."""
        if count > 0:
            self.documents_written.labels(operation=operation).inc(count)

    def record_delete(self, operation: str, count: int) -> None:
        """Record physically deleted documents."""
        if count > 0:
            self.documents_deleted.labels(operation=operation).inc(count)

    def record_search(self, api_version: str, results: int, latency: float) -> None:
        """
        Record a completed search.

        Args:
            api_version: v3 or v4
            results: Number of hits returned
            latency: End-to-end latency in seconds
        """
        self.searches.labels(api_version=api_version).inc()
        self.search_results.observe(results)
        self.search_latency.observe(latency)

    def record_storage_error(self, error_type: str) -> None:
        """Record a storage failure by exception class name."""
        self.storage_errors.labels(error_type=error_type).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
