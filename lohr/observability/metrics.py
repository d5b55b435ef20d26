"""
Metrics — In-process counters for webhooks, jobs and pushes.

Exposed in Prometheus text format on GET /metrics.

## Usage

    from lohr.observability.metrics import metrics

    metrics.increment("webhooks_total", labels={"outcome": "queued"})
    metrics.timing("job_duration_seconds", 12.3)
    metrics.set_gauge("queue_size", 2)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

LabelKey = Tuple[Tuple[str, str], ...]


def _labels_key(labels: Optional[Dict[str, str]]) -> LabelKey:
    return tuple(sorted((labels or {}).items()))


def _format_labels(key: LabelKey) -> str:
    if not key:
        return ""
    return "{" + ",".join(f'{k}="{v}"' for k, v in key) + "}"


class Counter:
    """A monotonically increasing counter."""

    kind = "counter"

    def __init__(self, name: str, help_text: str = ""):
        self.name = name
        self.help_text = help_text
        self._values: Dict[LabelKey, float] = defaultdict(float)
        self._lock = Lock()

    def inc(self, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        with self._lock:
            self._values[_labels_key(labels)] += value

    def get(self, labels: Optional[Dict[str, str]] = None) -> float:
        return self._values.get(_labels_key(labels), 0)

    def samples(self) -> List[Tuple[str, LabelKey, float]]:
        with self._lock:
            return [(self.name, key, value) for key, value in self._values.items()]


class Gauge(Counter):
    """A value that can go up and down."""

    kind = "gauge"

    def set(self, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        with self._lock:
            self._values[_labels_key(labels)] = value


class Histogram:
    """Cumulative bucketed observations (seconds)."""

    kind = "histogram"
    DEFAULT_BUCKETS = (0.5, 1, 5, 15, 30, 60, 120, 300, 600, float("inf"))

    def __init__(self, name: str, help_text: str = "", buckets: Optional[tuple] = None):
        self.name = name
        self.help_text = help_text
        self.buckets = buckets or self.DEFAULT_BUCKETS
        self._counts: Dict[float, int] = defaultdict(int)
        self._sum = 0.0
        self._total = 0
        self._lock = Lock()

    def observe(self, value: float) -> None:
        with self._lock:
            self._sum += value
            self._total += 1
            for bucket in self.buckets:
                if value <= bucket:
                    self._counts[bucket] += 1

    @property
    def count(self) -> int:
        return self._total

    def samples(self) -> List[Tuple[str, LabelKey, float]]:
        with self._lock:
            points = []
            for bucket in self.buckets:
                le = "+Inf" if bucket == float("inf") else str(bucket)
                points.append((f"{self.name}_bucket", (("le", le),), self._counts.get(bucket, 0)))
            points.append((f"{self.name}_sum", (), self._sum))
            points.append((f"{self.name}_count", (), self._total))
            return points


class MetricsRegistry:
    """Named metrics, prefixed, with a Prometheus text export."""

    def __init__(self, prefix: str = "lohr"):
        self.prefix = prefix
        self._metrics: Dict[str, object] = {}
        self._lock = Lock()
        self._register_common_metrics()

    def _register_common_metrics(self) -> None:
        self.counter("webhooks_total", "Webhook deliveries by outcome")
        self.counter("jobs_total", "Mirror jobs finished, by status")
        self.counter("pushes_total", "Mirror pushes, by status")
        self.gauge("queue_size", "Jobs waiting for the worker")
        self.histogram("job_duration_seconds", "Mirror job duration")

    def _get_or_create(self, cls, name: str, help_text: str):
        full_name = f"{self.prefix}_{name}"
        with self._lock:
            metric = self._metrics.get(full_name)
            if metric is None:
                metric = cls(full_name, help_text)
                self._metrics[full_name] = metric
            elif type(metric) is not cls:
                raise TypeError(f"{full_name} is already registered as a {metric.kind}")
            return metric

    def counter(self, name: str, help_text: str = "") -> Counter:
        return self._get_or_create(Counter, name, help_text)

    def gauge(self, name: str, help_text: str = "") -> Gauge:
        return self._get_or_create(Gauge, name, help_text)

    def histogram(self, name: str, help_text: str = "") -> Histogram:
        return self._get_or_create(Histogram, name, help_text)

    # Convenience methods
    def increment(self, name: str, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        self.counter(name).inc(value, labels)

    def set_gauge(self, name: str, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        self.gauge(name).set(value, labels)

    def timing(self, name: str, seconds: float) -> None:
        self.histogram(name).observe(seconds)

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        lines = []
        with self._lock:
            registered = list(self._metrics.values())
        for metric in registered:
            lines.append(f"# HELP {metric.name} {metric.help_text}")
            lines.append(f"# TYPE {metric.name} {metric.kind}")
            for name, key, value in metric.samples():
                lines.append(f"{name}{_format_labels(key)} {value}")
        return "\n".join(lines) + "\n"


# Global metrics instance
metrics = MetricsRegistry()
