"""
Shared utilities for the error reporting pipeline
"""

from .structured_logging import (
    StructuredLogger,
    set_logging_context,
    clear_logging_context,
    get_logging_context,
    log_pipeline_event,
    log_notification_result,
    log_pipeline_failure,
)

__all__ = [
    "StructuredLogger",
    "set_logging_context",
    "clear_logging_context",
    "get_logging_context",
    "log_pipeline_event",
    "log_notification_result",
    "log_pipeline_failure",
]
