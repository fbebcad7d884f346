"""
Error capture and notification pipeline.

Classifies unhandled exceptions, filters and throttles them, and fans the
resulting report out to email, Slack, Microsoft Teams, Telegram and
WhatsApp.
"""

from .config import ErrorReportingConfig, FileConfigStorage, load_config
from .collector import AppContext, ErrorReport, RequestContext
from .reporter import ErrorReporter, ReportScope

__version__ = '1.0.0'

__all__ = [
    'ErrorReportingConfig',
    'FileConfigStorage',
    'load_config',
    'AppContext',
    'ErrorReport',
    'RequestContext',
    'ErrorReporter',
    'ReportScope',
]
