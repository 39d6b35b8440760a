"""Tests for the Prometheus metrics collector."""

from prometheus_client import REGISTRY

from memstore.observability.metrics import get_metrics


def _value(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricsCollector:
    def test_singleton(self):
        assert get_metrics() is get_metrics()

    def test_record_write(self):
        before = _value("memstore_documents_written_total", {"operation": "insert"})

        get_metrics().record_write("insert", 2)
        get_metrics().record_write("insert", 0)

        after = _value("memstore_documents_written_total", {"operation": "insert"})
        assert after - before == 2

    def test_record_delete(self):
        before = _value("memstore_documents_deleted_total", {"operation": "tag"})

        get_metrics().record_delete("tag", 3)

        assert _value("memstore_documents_deleted_total", {"operation": "tag"}) - before == 3

    def test_record_search(self):
        before = _value("memstore_searches_total", {"api_version": "v4"})

        get_metrics().record_search("v4", results=2, latency=0.05)

        assert _value("memstore_searches_total", {"api_version": "v4"}) - before == 1

    def test_record_embedding(self):
        labels = {"operation": "batch", "status": "success"}
        before = _value("memstore_embedding_requests_total", labels)

        get_metrics().record_embedding("batch", status="success", latency=0.2, batch_size=4)

        assert _value("memstore_embedding_requests_total", labels) - before == 1

    def test_record_storage_error(self):
        labels = {"error_type": "TimeoutError"}
        before = _value("memstore_storage_errors_total", labels)

        get_metrics().record_storage_error("TimeoutError")

        assert _value("memstore_storage_errors_total", labels) - before == 1
