"""Observability layer - logging and metrics."""

from memstore.observability.logging import setup_logging
from memstore.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
