"""
Tests for the metrics registry and logging setup.
"""

import json
import logging

import pytest

from lohr.logging_config import HumanFormatter, JSONFormatter, setup_logging
from lohr.observability.metrics import Counter, Gauge, Histogram, MetricsRegistry


class TestCounter:

    def test_increment(self):
        counter = Counter("test_counter")
        counter.inc()
        counter.inc(5)
        assert counter.get() == 6

    def test_labels_are_separate(self):
        counter = Counter("test_counter")
        counter.inc(labels={"status": "ok"})
        counter.inc(labels={"status": "failed"})
        counter.inc(labels={"status": "ok"})
        assert counter.get({"status": "ok"}) == 2
        assert counter.get({"status": "failed"}) == 1
        assert counter.get() == 0


class TestGauge:

    def test_set(self):
        gauge = Gauge("queue")
        gauge.set(4)
        gauge.set(2)
        assert gauge.get() == 2


class TestHistogram:

    def test_buckets_are_cumulative(self):
        histogram = Histogram("duration", buckets=(1, 10, float("inf")))
        histogram.observe(0.5)
        histogram.observe(5)
        histogram.observe(50)

        samples = {(name, key): value for name, key, value in histogram.samples()}
        assert samples[("duration_bucket", (("le", "1"),))] == 1
        assert samples[("duration_bucket", (("le", "10"),))] == 2
        assert samples[("duration_bucket", (("le", "+Inf"),))] == 3
        assert samples[("duration_count", ())] == 3
        assert samples[("duration_sum", ())] == 55.5


class TestMetricsRegistry:

    def test_common_metrics_registered(self):
        registry = MetricsRegistry()
        output = registry.export_prometheus()
        for name in ("webhooks_total", "jobs_total", "pushes_total", "queue_size", "job_duration_seconds"):
            assert f"lohr_{name}" in output

    def test_prometheus_labels(self):
        registry = MetricsRegistry(prefix="test")
        registry.increment("jobs_total", labels={"status": "done"})
        assert 'test_jobs_total{status="done"} 1' in registry.export_prometheus()

    def test_same_metric_returned(self):
        registry = MetricsRegistry()
        assert registry.counter("x") is registry.counter("x")

    def test_kind_conflict(self):
        registry = MetricsRegistry()
        registry.counter("x")
        with pytest.raises(TypeError):
            registry.gauge("x")


class TestLogging:

    def _record(self, **extra):
        record = logging.LogRecord("lohr.mirror.job", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_includes_context(self):
        line = JSONFormatter().format(self._record(repo="owner/proj", job_id="abc", remote=None))
        entry = json.loads(line)
        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["repo"] == "owner/proj"
        assert entry["job_id"] == "abc"
        assert "remote" not in entry

    def test_human_formatter(self):
        line = HumanFormatter().format(self._record())
        assert "[job" in line
        assert line.endswith("hello world")

    def test_setup_logging_json(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(level="debug", format_type="json")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
