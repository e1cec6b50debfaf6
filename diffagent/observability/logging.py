"""
Structured logging configuration.

Provides JSON-formatted logging for production and CI, and a
human-readable format for local runs, both carrying context set with
LogContext.
"""

import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict
from contextvars import ContextVar

from diffagent.config import Settings


# Context variable for storing per-analysis context
log_context: ContextVar[Dict[str, Any]] = ContextVar('log_context', default={})

# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord('', 0, '', 0, '', (), None).__dict__.keys()
) | {'message', 'asctime'}


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith('_')
    }


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Formats log records as one JSON object per line.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        context = log_context.get()
        if context:
            log_data['context'] = context

        if record.exc_info and record.exc_info[0] is not None:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        log_data.update(_record_extras(record))

        # Add source location for errors and above
        if record.levelno >= logging.ERROR:
            log_data['source'] = {
                'file': record.pathname,
                'line': record.lineno,
                'function': record.funcName,
            }

        return json.dumps(log_data, default=str)


class ContextFormatter(logging.Formatter):
    """
    Human-readable formatter with context.

    Used for local runs and debugging.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with context and extras appended."""
        base_msg = super().format(record)

        fields = dict(log_context.get())
        fields.update(_record_extras(record))
        if fields:
            context_str = ' '.join(f'{k}={v}' for k, v in fields.items())
            base_msg = f"{base_msg} [{context_str}]"

        return base_msg


def setup_logging(settings: Settings) -> None:
    """
    Configure application logging.

    JSON output when running in production or when LOG_FORMAT=json,
    human-readable output otherwise. Logs go to stderr so stdout stays
    free for reports.

    Args:
        settings: Application settings
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    if settings.ENVIRONMENT == "production" or settings.LOG_FORMAT == "json":
        formatter = JSONFormatter()
    else:
        formatter = ContextFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.debug(
        f"Logging configured: level={settings.LOG_LEVEL}, "
        f"environment={settings.ENVIRONMENT}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Context manager for adding structured context to logs.

    Usage:
        with LogContext(diff_digest="3f2a9c1b0d4e"):
            logger.info("Analyzing diff")  # Includes context in log
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self.token = None

    def __enter__(self):
        """Enter context - merge values into the current context."""
        current = log_context.get().copy()
        current.update(self.context)
        self.token = log_context.set(current)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context - restore previous context."""
        if self.token:
            log_context.reset(self.token)


def get_log_context() -> Dict[str, Any]:
    """
    Get the current log context.

    Returns:
        Current context dictionary
    """
    return log_context.get().copy()
