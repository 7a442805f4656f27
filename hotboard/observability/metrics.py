"""
Prometheus metrics for monitoring the snapshot pipeline.

Defines and exposes metrics for:
- Per-source fetch outcomes
- Failures by pipeline stage and error type
- Records written per snapshot
- Fetch latency
- Last successful write per source

Metrics can be exposed via HTTP endpoint for Prometheus scraping
(useful with `hotboard watch`).
"""

import logging

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from hotboard.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class MetricsCollector:
    """
    Prometheus metrics collector for hotboard.

    Usage:
        metrics = MetricsCollector()
        metrics.record_source_written("weibo", items=50, latency=0.8)
        metrics.record_source_failed("zhihu", stage="fetching", error_type="NetworkError")
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        """
        Initialize Prometheus metrics.

        Args:
            registry: Registry to register metrics with (tests pass a fresh one)
        """
        self.registry = registry

        self.source_runs = Counter(
            "hotboard_source_runs_total",
            "Source pipeline outcomes",
            ["source", "status"],  # status: written, failed, cached
            registry=registry,
        )

        self.source_failures = Counter(
            "hotboard_source_failures_total",
            "Source pipeline failures",
            ["source", "stage", "error_type"],
            registry=registry,
        )

        self.snapshot_records = Gauge(
            "hotboard_snapshot_records",
            "Records in the most recently written snapshot",
            ["source"],
            registry=registry,
        )

        self.source_latency = Histogram(
            "hotboard_source_latency_seconds",
            "Time from fetch start to snapshot write",
            ["source"],
            buckets=LATENCY_BUCKETS,
            registry=registry,
        )

        self.last_success = Gauge(
            "hotboard_source_last_success_timestamp_seconds",
            "Unix time of the last successful snapshot write",
            ["source"],
            registry=registry,
        )

        self.run_duration = Histogram(
            "hotboard_run_duration_seconds",
            "Duration of a full snapshot run",
            buckets=LATENCY_BUCKETS,
            registry=registry,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to listen on (defaults to settings.metrics_port)
        """
        port = port or get_settings().metrics_port
        start_http_server(port, registry=self.registry)
        logger.info(f"Metrics server started on port {port}")

    def record_source_written(self, source: str, items: int, latency: float) -> None:
        """Record a successful snapshot write."""
        self.source_runs.labels(source=source, status="written").inc()
        self.snapshot_records.labels(source=source).set(items)
        self.source_latency.labels(source=source).observe(latency)
        self.last_success.labels(source=source).set_to_current_time()

    def record_source_failed(self, source: str, stage: str, error_type: str) -> None:
        """Record a source failure at a pipeline stage."""
        self.source_runs.labels(source=source, status="failed").inc()
        self.source_failures.labels(
            source=source,
            stage=stage,
            error_type=error_type,
        ).inc()

    def record_source_cached(self, source: str) -> None:
        """Record a source skipped because its cache entry was fresh."""
        self.source_runs.labels(source=source, status="cached").inc()

    def record_run(self, duration: float) -> None:
        self.run_duration.observe(duration)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
