from .analytics import AnalyticsService, aggregate_analytics, summarize_metrics
from .recorder import MetricsRecorder, metric_from_result

__all__ = [
    "AnalyticsService",
    "MetricsRecorder",
    "aggregate_analytics",
    "metric_from_result",
    "summarize_metrics",
]
