"""
Observability module for logging, metrics, and error tracking.

This module provides:
- Structured logging setup
- In-memory pipeline metrics
- Per-run tracking of isolated failures
"""

from diffagent.observability.logging import setup_logging, get_logger, LogContext
from diffagent.observability.metrics import MetricsCollector, MetricNames
from diffagent.observability.errors import (
    ErrorTracker,
    error_tracking,
    get_error_tracker,
    capture_exception,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LogContext",
    "MetricsCollector",
    "MetricNames",
    "ErrorTracker",
    "error_tracking",
    "get_error_tracker",
    "capture_exception",
]
