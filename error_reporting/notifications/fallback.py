"""
Fallback composition for notification handlers.

FallbackNotificationHandler wraps a primary handler and exposes a
secondary one as ``fallback_handler``. The wrapper itself only delegates;
the dispatcher decides when the fallback runs (once, after the primary
returned False).
"""

from error_reporting.collector.report import ErrorReport
from error_reporting.notifications.base import NotificationHandler


class FallbackNotificationHandler(NotificationHandler):

    def __init__(self, primary: NotificationHandler, fallback_handler: NotificationHandler = None):
        super().__init__(primary.config)
        self.primary = primary
        self.fallback_handler = fallback_handler

    def is_enabled(self) -> bool:
        return self.primary.is_enabled()

    def get_name(self) -> str:
        return self.primary.get_name()

    def get_minimum_severity(self) -> str:
        return self.primary.get_minimum_severity()

    def should_handle(self, report: ErrorReport) -> bool:
        return self.primary.should_handle(report)

    def send(self, report: ErrorReport) -> bool:
        return self.primary.send(report)
