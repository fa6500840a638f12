"""
In-process metrics for the curve pricing engine
Counts quotes and simulated trades, tracks last-seen gauges
"""

from typing import Dict, Optional
from collections import defaultdict


class MetricsCollector:
    """Collects counters and gauges, optionally split by labels"""

    def __init__(self, enabled: bool = True):
        """
        Initialize metrics collector

        Args:
            enabled: When False every write is dropped
        """
        self.enabled = enabled

        # Counters: metric_name -> value
        self._counters: Dict[str, int] = defaultdict(int)

        # Gauges: metric_name -> value
        self._gauges: Dict[str, float] = defaultdict(float)

        # Labels cache: (metric_name, labels_tuple) -> value
        self._labeled_counters: Dict[tuple, int] = defaultdict(int)
        self._labeled_gauges: Dict[tuple, float] = defaultdict(float)

    def increment_counter(
        self,
        metric_name: str,
        value: int = 1,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Increment a counter metric

        Args:
            metric_name: Name of the counter
            value: Amount to increment (default 1)
            labels: Optional labels for the metric
        """
        if not self.enabled:
            return

        if labels:
            label_key = (metric_name, tuple(sorted(labels.items())))
            self._labeled_counters[label_key] += value
        else:
            self._counters[metric_name] += value

    def set_gauge(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Set a gauge metric value

        Args:
            metric_name: Name of the gauge
            value: Value to set
            labels: Optional labels for the metric
        """
        if not self.enabled:
            return

        if labels:
            label_key = (metric_name, tuple(sorted(labels.items())))
            self._labeled_gauges[label_key] = value
        else:
            self._gauges[metric_name] = value

    def get_counter(self, metric_name: str, labels: Optional[Dict[str, str]] = None) -> int:
        """Get current counter value"""
        if labels:
            label_key = (metric_name, tuple(sorted(labels.items())))
            return self._labeled_counters.get(label_key, 0)
        return self._counters.get(metric_name, 0)

    def get_gauge(self, metric_name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Get current gauge value"""
        if labels:
            label_key = (metric_name, tuple(sorted(labels.items())))
            return self._labeled_gauges.get(label_key, 0.0)
        return self._gauges.get(metric_name, 0.0)

    def export_metrics(self) -> Dict:
        """
        Export all metrics as JSON-serializable dict

        Labeled series are flattened to "name{key=value,...}"
        """
        counters = dict(self._counters)
        for (name, labels), value in self._labeled_counters.items():
            counters[self._series_name(name, labels)] = value

        gauges = dict(self._gauges)
        for (name, labels), value in self._labeled_gauges.items():
            gauges[self._series_name(name, labels)] = value

        return {"counters": counters, "gauges": gauges}

    def reset(self) -> None:
        """Reset all metrics (useful for testing)"""
        self._counters.clear()
        self._gauges.clear()
        self._labeled_counters.clear()
        self._labeled_gauges.clear()

    @staticmethod
    def _series_name(name: str, labels: tuple) -> str:
        rendered = ",".join(f"{k}={v}" for k, v in labels)
        return f"{name}{{{rendered}}}"


# Global metrics instance
_global_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance"""
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def init_metrics(enabled: bool = True) -> MetricsCollector:
    """Initialize global metrics collector"""
    global _global_metrics
    _global_metrics = MetricsCollector(enabled)
    return _global_metrics
