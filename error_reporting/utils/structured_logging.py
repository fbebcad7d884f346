"""
Structured Logging Utility

Provides JSON-friendly structured logging for the error reporting pipeline.

Before: String-based logging hard to query
    logger.info(f"Slack notification sent for {error_hash}")

After: Structured logging with queryable fields
    log_notification_result('Slack', True, error_hash=error_hash, severity='critical')
    # Query: jsonPayload.error_hash="3fa2..."

Features:
- Structured fields (error_hash, severity, handler, event)
- Thread-local context propagation (one request = one context)
- Backward compatible (plain string logging when disabled)

Enable with ENABLE_STRUCTURED_LOGGING=true.
"""

import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Thread-local storage for context
_context = threading.local()


class StructuredLogger:
    """
    Structured logging wrapper that adds extra fields to log records.

    Usage:
        logger = StructuredLogger(__name__)
        logger.warning("Handler failed", extra={
            'handler': 'Slack',
            'error_hash': '3fa2...',
        })
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.enabled = os.getenv('ENABLE_STRUCTURED_LOGGING', 'false').lower() == 'true'

    def _add_context(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Add thread-local context to extra fields."""
        merged = {}

        if hasattr(_context, 'fields'):
            merged.update(_context.fields)

        if extra:
            merged.update(extra)

        return merged

    def _log(self, level: int, msg: str, extra: Optional[Dict[str, Any]], exc_info: bool = False):
        if self.enabled and (extra or get_logging_context()):
            self.logger.log(level, msg, extra=self._add_context(extra), exc_info=exc_info)
        else:
            self.logger.log(level, msg, exc_info=exc_info)

    def debug(self, msg: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.DEBUG, msg, extra)

    def info(self, msg: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.INFO, msg, extra)

    def warning(self, msg: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.WARNING, msg, extra)

    def error(self, msg: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        self._log(logging.ERROR, msg, extra, exc_info=exc_info)


def set_logging_context(**fields):
    """
    Set thread-local logging context.

    These fields are added to every structured log statement in this thread,
    e.g. the hash and severity of the error currently being reported.
    """
    if not hasattr(_context, 'fields'):
        _context.fields = {}
    _context.fields.update(fields)


def clear_logging_context():
    """Clear thread-local logging context."""
    if hasattr(_context, 'fields'):
        _context.fields.clear()


def get_logging_context() -> Dict[str, Any]:
    """Get current thread-local logging context."""
    if hasattr(_context, 'fields'):
        return _context.fields.copy()
    return {}


# Convenience functions for common pipeline events

def log_pipeline_event(event: str, message: str, error_hash: str = None,
                       severity: str = None, **extra):
    """Log a pipeline decision (filtered, throttled, dispatched)."""
    logger = StructuredLogger('error_reporting.pipeline')
    logger.debug(message, extra={
        'event': event,
        'error_hash': error_hash,
        'severity': severity,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        **extra
    })


def log_notification_result(handler: str, success: bool, error_hash: str = None,
                            severity: str = None, **extra):
    """Log the outcome of one notification handler."""
    logger = StructuredLogger('error_reporting.notifications')
    fields = {
        'event': 'notification_sent' if success else 'notification_failed',
        'handler': handler,
        'error_hash': error_hash,
        'severity': severity,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        **extra
    }
    if success:
        logger.info(f"Notification sent successfully via {handler}", extra=fields)
    else:
        logger.warning(f"Failed to send notification via {handler}", extra=fields)


def log_pipeline_failure(stage: str, error: Exception, error_hash: str = None, **extra):
    """Log an internal failure of the pipeline itself (never re-raised)."""
    logger = StructuredLogger('error_reporting.pipeline')
    logger.error(f"Error reporting failed during {stage}: {error}", extra={
        'event': 'pipeline_failure',
        'stage': stage,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'error_hash': error_hash,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        **extra
    }, exc_info=True)
