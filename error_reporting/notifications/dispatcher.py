"""
File: error_reporting/notifications/dispatcher.py

Fan an error report out to every registered notification handler.

Handlers run sequentially in registration order. For each handler:
    disabled             -> skipped (no entry in the result map)
    below severity floor -> skipped
    send() False         -> its fallback_handler (if any) is tried once,
                            and the fallback result becomes the handler's result
    raises               -> logged, recorded as False

No handler failure ever stops the remaining handlers, and dispatch()
itself never raises.
"""

import logging
from typing import Dict, Iterable, List, Optional

from error_reporting.collector.report import ErrorReport
from error_reporting.notifications.base import NotificationHandler
from error_reporting.utils.structured_logging import log_notification_result

logger = logging.getLogger(__name__)


class NotificationDispatcher:

    def __init__(self, handlers: Optional[Iterable[NotificationHandler]] = None):
        self._handlers: List[NotificationHandler] = list(handlers or [])

    def register(self, handler: NotificationHandler):
        self._handlers.append(handler)

    def get_handlers(self) -> List[NotificationHandler]:
        return list(self._handlers)

    def dispatch(self, report: ErrorReport) -> Dict[str, bool]:
        """
        Send the report to all eligible handlers.

        Returns:
            Dictionary mapping handler names to success status
        """
        results = {}

        for handler in self._handlers:
            name = self._handler_name(handler)
            try:
                if not handler.is_enabled():
                    continue
                if not handler.should_handle(report):
                    logger.debug(f"{name} skipped: severity {report.severity} below channel minimum")
                    continue

                success = bool(handler.send(report))

                if not success:
                    fallback = getattr(handler, 'fallback_handler', None)
                    if fallback is not None:
                        fallback_name = self._handler_name(fallback)
                        logger.info(f"{name} failed, trying fallback handler {fallback_name}")
                        success = bool(fallback.send(report))

                results[name] = success

            except Exception as e:
                logger.error(f"Notification handler {name} raised: {e}", exc_info=True)
                results[name] = False

            log_notification_result(name, results[name], error_hash=report.hash, severity=report.severity)

        return results

    @staticmethod
    def _handler_name(handler: NotificationHandler) -> str:
        try:
            return handler.get_name()
        except Exception:
            return type(handler).__name__
