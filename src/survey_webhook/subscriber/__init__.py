"""Survey event subscriber and its metrics."""

from .metrics import MetricsCollector, get_metrics

__all__ = ["MetricsCollector", "get_metrics"]
