"""
Unit tests for Metrics System (pumpcurve/metrics.py)

Tests:
- Counter increment, with and without labels
- Gauge set/get
- Metrics export
- Global collector lifecycle
"""

from pumpcurve.metrics import MetricsCollector, get_metrics, init_metrics


class TestMetricsCollector:
    """Test metrics collection functionality"""

    def test_increment_counter(self):
        collector = MetricsCollector()

        collector.increment_counter("quotes")
        collector.increment_counter("quotes", value=4)

        assert collector.get_counter("quotes") == 5

    def test_counter_with_labels(self):
        collector = MetricsCollector()

        collector.increment_counter("trades", labels={"side": "buy"})
        collector.increment_counter("trades", labels={"side": "sell"})
        collector.increment_counter("trades", labels={"side": "sell"})

        assert collector.get_counter("trades", labels={"side": "buy"}) == 1
        assert collector.get_counter("trades", labels={"side": "sell"}) == 2
        assert collector.get_counter("trades") == 0

    def test_label_order_does_not_matter(self):
        collector = MetricsCollector()

        collector.increment_counter("calc", labels={"side": "buy", "urgency": "low"})

        assert collector.get_counter("calc", labels={"urgency": "low", "side": "buy"}) == 1

    def test_gauges(self):
        collector = MetricsCollector()

        collector.set_gauge("market_cap_sol", 30.5)
        collector.set_gauge("market_cap_sol", 31.0)
        collector.set_gauge("reserve", 7.0, labels={"kind": "real"})

        assert collector.get_gauge("market_cap_sol") == 31.0
        assert collector.get_gauge("reserve", labels={"kind": "real"}) == 7.0
        assert collector.get_gauge("missing") == 0.0

    def test_disabled_collector_drops_writes(self):
        collector = MetricsCollector(enabled=False)

        collector.increment_counter("quotes")
        collector.set_gauge("price", 1.0)

        assert collector.get_counter("quotes") == 0
        assert collector.get_gauge("price") == 0.0

    def test_export_metrics(self):
        collector = MetricsCollector()

        collector.increment_counter("quotes", value=3)
        collector.increment_counter("trades", labels={"side": "buy"})
        collector.set_gauge("price", 2.5)

        exported = collector.export_metrics()

        assert exported["counters"]["quotes"] == 3
        assert exported["counters"]["trades{side=buy}"] == 1
        assert exported["gauges"]["price"] == 2.5

    def test_reset(self):
        collector = MetricsCollector()
        collector.increment_counter("quotes")
        collector.set_gauge("price", 1.0)

        collector.reset()

        assert collector.export_metrics() == {"counters": {}, "gauges": {}}


def test_global_collector_lifecycle():
    first = init_metrics()

    assert get_metrics() is first

    second = init_metrics(enabled=False)

    assert get_metrics() is second
    assert second is not first
    assert second.enabled is False

    init_metrics()
