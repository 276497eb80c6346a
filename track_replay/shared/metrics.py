"""
In-process metrics for replay sessions.

Counters and gauges are recorded into a MetricsRegistry owned by the
caller. The registry can render itself in the Prometheus text format so
the HTTP API can expose it for scraping.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MetricType(Enum):
    """Type of metric."""
    COUNTER = "counter"      # Monotonically increasing
    GAUGE = "gauge"          # Can go up and down


@dataclass
class MetricValue:
    """A single metric value with labels."""
    name: str
    value: float
    metric_type: MetricType
    labels: Dict[str, str] = field(default_factory=dict)
    timestamp: Optional[float] = None
    help_text: str = ""


class MetricsRegistry:
    """
    Registry of counters and gauges.

    The replay driver records into one of these; exporters read from it.
    """

    def __init__(self):
        self._metrics: Dict[str, MetricValue] = {}
        self._counters: Dict[str, float] = defaultdict(float)

    def gauge(
        self,
        name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None,
        help_text: str = "",
    ):
        """Set a gauge metric (can go up or down)."""
        key = self._make_key(name, labels)
        self._metrics[key] = MetricValue(
            name=name,
            value=value,
            metric_type=MetricType.GAUGE,
            labels=labels or {},
            timestamp=time.time(),
            help_text=help_text,
        )

    def counter(
        self,
        name: str,
        value: float = 1.0,
        labels: Optional[Dict[str, str]] = None,
        help_text: str = "",
    ):
        """Increment a counter metric."""
        if value < 0:
            logger.debug(f"Ignoring negative increment for counter {name}")
            return
        key = self._make_key(name, labels)
        self._counters[key] += value
        self._metrics[key] = MetricValue(
            name=name,
            value=self._counters[key],
            metric_type=MetricType.COUNTER,
            labels=labels or {},
            timestamp=time.time(),
            help_text=help_text,
        )

    def value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        metric = self._metrics.get(self._make_key(name, labels))
        return metric.value if metric else None

    def _make_key(self, name: str, labels: Optional[Dict[str, str]]) -> str:
        """Create a unique key for a metric with labels."""
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def get_all_metrics(self) -> Dict[str, dict]:
        """All metrics keyed by name (with labels)."""
        return {
            key: {
                "value": metric.value,
                "type": metric.metric_type.value,
                "labels": dict(metric.labels),
                "help": metric.help_text,
            }
            for key, metric in self._metrics.items()
        }

    def render_prometheus(self, prefix: str = "track") -> str:
        """Render metrics in the Prometheus text exposition format."""
        lines = []
        seen = set()

        for metric in sorted(self._metrics.values(), key=lambda m: m.name):
            name = f"{prefix}_{metric.name}"
            if name not in seen:
                seen.add(name)
                if metric.help_text:
                    lines.append(f"# HELP {name} {metric.help_text}")
                lines.append(f"# TYPE {name} {metric.metric_type.value}")

            if metric.labels:
                label_str = ",".join(f'{k}="{v}"' for k, v in sorted(metric.labels.items()))
                lines.append(f"{name}{{{label_str}}} {metric.value}")
            else:
                lines.append(f"{name} {metric.value}")

        return "\n".join(lines) + "\n"

    def clear(self):
        """Clear all metrics (useful for testing)."""
        self._metrics.clear()
        self._counters.clear()
