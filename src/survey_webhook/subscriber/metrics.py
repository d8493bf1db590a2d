"""Prometheus metrics collector."""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and exposes Prometheus metrics."""

    def __init__(self):
        """Initialize metrics."""

        # Completion notifications by dispatch status
        self.dispatches_total = Counter(
            "survey_webhook_dispatches_total",
            "Survey completion notifications handled",
            ["status"],
        )

        # Per-URL deliveries
        self.deliveries_total = Counter(
            "survey_webhook_deliveries_total",
            "Webhook deliveries attempted",
            ["result"],
        )

        self.delivery_seconds = Histogram(
            "survey_webhook_delivery_seconds",
            "Webhook delivery duration in seconds",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
        )

        self.dispatch_seconds = Histogram(
            "survey_webhook_dispatch_seconds",
            "Duration of a whole dispatch (fetch, build, deliver) in seconds",
            buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )

        # Application health
        self.errors_total = Counter(
            "survey_webhook_errors_total", "Total errors encountered", ["component", "error_type"]
        )

    def record_dispatch(self, status: str, seconds: float) -> None:
        """Record a handled completion notification."""
        self.dispatches_total.labels(status=status).inc()
        self.dispatch_seconds.observe(seconds)

    def record_delivery(self, succeeded: bool, seconds: float) -> None:
        """Record a single webhook delivery."""
        self.deliveries_total.labels(result="success" if succeeded else "failure").inc()
        self.delivery_seconds.observe(seconds)

    def record_error(self, component: str, error_type: str) -> None:
        """Record an error."""
        self.errors_total.labels(component=component, error_type=error_type).inc()


# Global metrics collector instance
_metrics: MetricsCollector = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
