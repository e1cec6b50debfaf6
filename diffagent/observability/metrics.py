"""
Metrics collection for pipeline timing and counts.

Stores metrics in memory. The analyzer times every stage and counts
files, classifications and degraded results.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class MetricType(str, Enum):
    """Types of metrics."""
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMER = "timer"


@dataclass
class Metric:
    """Individual metric data point."""

    name: str
    metric_type: MetricType
    value: float
    timestamp: datetime
    tags: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'name': self.name,
            'type': self.metric_type.value,
            'value': self.value,
            'timestamp': self.timestamp.isoformat(),
            'tags': self.tags,
        }


class MetricsCollector:
    """
    Collector for pipeline metrics.

    A disabled collector accepts every call and records nothing.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.metrics: List[Metric] = []

    def _record(
        self,
        name: str,
        metric_type: MetricType,
        value: float,
        tags: Optional[Dict[str, str]],
    ) -> None:
        if not self.enabled:
            return

        self.metrics.append(Metric(
            name=name,
            metric_type=metric_type,
            value=value,
            timestamp=datetime.now(timezone.utc),
            tags=tags or {},
        ))
        logger.debug(f"{metric_type.value} recorded: {name}={value} {tags or ''}")

    def record_counter(
        self,
        name: str,
        value: float = 1.0,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a counter increment."""
        self._record(name, MetricType.COUNTER, value, tags)

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a point-in-time value."""
        self._record(name, MetricType.GAUGE, value, tags)

    def record_timer(
        self,
        name: str,
        duration_ms: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a duration in milliseconds."""
        self._record(name, MetricType.TIMER, duration_ms, tags)

    @contextmanager
    def timer_context(
        self,
        name: str,
        tags: Optional[Dict[str, str]] = None,
    ) -> Iterator[None]:
        """
        Context manager for timing code blocks.

        Usage:
            with metrics.timer_context(MetricNames.PARSE_DURATION_MS):
                parser.parse(text)
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.record_timer(name, duration_ms, tags)

    def get_metrics(
        self,
        name: Optional[str] = None,
        metric_type: Optional[MetricType] = None,
    ) -> List[Metric]:
        """Collected metrics, optionally filtered by name and type."""
        filtered = self.metrics
        if name:
            filtered = [m for m in filtered if m.name == name]
        if metric_type:
            filtered = [m for m in filtered if m.metric_type == metric_type]
        return list(filtered)

    def get_metric_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Counter totals by name and timer stats by name
        """
        counters: Dict[str, float] = {}
        timers: Dict[str, List[float]] = {}
        for metric in self.metrics:
            if metric.metric_type == MetricType.COUNTER:
                counters[metric.name] = counters.get(metric.name, 0.0) + metric.value
            elif metric.metric_type == MetricType.TIMER:
                timers.setdefault(metric.name, []).append(metric.value)

        timer_stats = {
            name: {
                'count': len(values),
                'total_ms': sum(values),
                'avg_ms': sum(values) / len(values),
                'max_ms': max(values),
            }
            for name, values in timers.items()
        }

        return {
            'total_metrics': len(self.metrics),
            'counters': counters,
            'timer_stats': timer_stats,
        }

    def clear_metrics(self) -> None:
        """Clear all collected metrics."""
        self.metrics = []

    def export_metrics(self) -> List[Dict[str, Any]]:
        """Export metrics in serializable format."""
        return [m.to_dict() for m in self.metrics]


class MetricNames:
    """Standard metric names used throughout the application."""

    ANALYSIS_STARTED = "analysis.started"
    ANALYSIS_COMPLETED = "analysis.completed"
    ANALYSIS_REJECTED = "analysis.rejected"
    ANALYSIS_DURATION_MS = "analysis.duration_ms"

    PARSE_DURATION_MS = "parse.duration_ms"
    FILES_PARSED = "parse.files"

    CLASSIFY_DURATION_MS = "classify.duration_ms"
    FILES_CLASSIFIED = "classify.files"

    ASSESS_DURATION_MS = "assess.duration_ms"
    RISK_SCORE = "assess.risk_score"

    DEGRADED_FILES = "analysis.degraded_files"
