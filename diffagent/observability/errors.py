"""
Error tracking for isolated failures.

The analysis pipeline never lets a single file abort a run. When a file
cannot be classified or scored the exception is captured here instead, so
callers can report which files were degraded.

Trackers are scoped with the error_tracking() context manager. The active
tracker lives in a ContextVar, so concurrent analyses never share records.
"""

import logging
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ErrorRecord:
    """Record of a captured error."""

    error_id: str
    timestamp: datetime
    severity: ErrorSeverity

    exception_type: str
    exception_message: str
    traceback: str

    # Pipeline stage (classify, assess, ...) and the file involved
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def stage(self) -> Optional[str]:
        return self.context.get("stage")

    @property
    def file_path(self) -> Optional[str]:
        return self.context.get("file_path")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'error_id': self.error_id,
            'timestamp': self.timestamp.isoformat(),
            'severity': self.severity.value,
            'exception_type': self.exception_type,
            'exception_message': self.exception_message,
            'traceback': self.traceback,
            'context': self.context,
        }


class ErrorTracker:
    """Collects ErrorRecords for one analysis run."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.errors: List[ErrorRecord] = []

    def capture_exception(
        self,
        exception: BaseException,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Capture an exception.

        Args:
            exception: The exception to capture
            severity: Error severity level
            context: Additional context data (stage, file_path)

        Returns:
            Error ID, or "" when tracking is disabled
        """
        if not self.enabled:
            return ""

        error_id = str(uuid.uuid4())
        record = ErrorRecord(
            error_id=error_id,
            timestamp=datetime.now(timezone.utc),
            severity=severity,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            traceback=''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            )),
            context=dict(context or {}),
        )
        self.errors.append(record)

        logger.log(
            _LOG_LEVELS.get(severity, logging.ERROR),
            f"Error captured: {record.exception_type}: {record.exception_message}",
            extra={'error_id': error_id, 'error_context': record.context},
        )
        return error_id

    def get_errors(
        self,
        severity: Optional[ErrorSeverity] = None,
        stage: Optional[str] = None,
    ) -> List[ErrorRecord]:
        """Captured errors in capture order, optionally filtered."""
        filtered = self.errors
        if severity:
            filtered = [e for e in filtered if e.severity == severity]
        if stage:
            filtered = [e for e in filtered if e.stage == stage]
        return list(filtered)

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get summary of captured errors.

        Returns:
            Counts by stage and by exception type
        """
        stage_counts: Dict[str, int] = {}
        type_counts: Dict[str, int] = {}
        for error in self.errors:
            stage = error.stage or "unknown"
            stage_counts[stage] = stage_counts.get(stage, 0) + 1
            type_counts[error.exception_type] = type_counts.get(error.exception_type, 0) + 1

        return {
            'total_errors': len(self.errors),
            'stage_counts': stage_counts,
            'type_counts': type_counts,
        }

    def clear_errors(self) -> None:
        """Clear all captured errors."""
        self.errors = []


_current_tracker: ContextVar[Optional[ErrorTracker]] = ContextVar(
    '_current_tracker', default=None
)


@contextmanager
def error_tracking(enabled: bool = True) -> Iterator[ErrorTracker]:
    """
    Scope a fresh ErrorTracker to the enclosed block.

    Usage:
        with error_tracking() as tracker:
            classifier.classify(parsed)
        tracker.errors
    """
    tracker = ErrorTracker(enabled=enabled)
    token = _current_tracker.set(tracker)
    try:
        yield tracker
    finally:
        _current_tracker.reset(token)


def get_error_tracker() -> ErrorTracker:
    """
    Get the tracker active in the current context.

    Raises:
        RuntimeError: If no tracker is active
    """
    tracker = _current_tracker.get()
    if tracker is None:
        raise RuntimeError("No error tracker active. Use error_tracking() first.")
    return tracker


def capture_exception(
    exception: BaseException,
    severity: ErrorSeverity = ErrorSeverity.WARNING,
    context: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Convenience function to capture an exception.

    Falls back to logging when no tracker is active.

    Returns:
        Error ID, or "" when nothing recorded it
    """
    try:
        tracker = get_error_tracker()
    except RuntimeError:
        logger.log(
            _LOG_LEVELS.get(severity, logging.ERROR),
            f"{type(exception).__name__}: {exception}",
            extra={'error_context': context},
            exc_info=exception,
        )
        return ""
    return tracker.capture_exception(exception, severity=severity, context=context)
