"""Observability layer - logging and metrics."""

from hotboard.observability.logging import setup_logging
from hotboard.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
