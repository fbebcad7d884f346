"""
File: error_reporting/reporter.py

Pipeline entry point called from the host application's exception boundary.

Flow for one captured exception:
    1. skip everything if error reporting is disabled
    2. once per ReportScope: make sure the config snapshot file exists
    3. collect the ErrorReport
    4. record the occurrence (always, even if later filtered)
    5. ErrorFilter: blacklist, controller scope, minimum severity
    6. ThrottleStore: per-hash throttle window and rate limit
    7. dispatch to notification handlers
    8. mark as notified if at least one handler succeeded

report() never raises. Every internal failure is logged and the call
returns whatever results were available (usually an empty dict).

Usage:
    from error_reporting import ErrorReporter, load_config

    reporter = ErrorReporter.from_config(load_config())
    try:
        handle_request()
    except Exception as e:
        reporter.report(e, request_context)
        raise
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from error_reporting.alerts.throttle_store import FileThrottleStore
from error_reporting.collector.error_data_collector import AppContext, ErrorDataCollector
from error_reporting.collector.request_context import RequestContext
from error_reporting.config.config_storage import FileConfigStorage
from error_reporting.config.settings import ErrorReportingConfig
from error_reporting.filters.error_filter import ErrorFilter
from error_reporting.notifications.dispatcher import NotificationDispatcher
from error_reporting.notifications.email_handler import SesEmailHandler, SmtpEmailHandler
from error_reporting.notifications.fallback import FallbackNotificationHandler
from error_reporting.notifications.slack import SlackNotificationHandler
from error_reporting.notifications.teams import TeamsNotificationHandler
from error_reporting.notifications.telegram import TelegramNotificationHandler
from error_reporting.notifications.whatsapp import WhatsAppNotificationHandler
from error_reporting.utils.structured_logging import (
    clear_logging_context,
    get_logging_context,
    log_pipeline_event,
    log_pipeline_failure,
    set_logging_context,
)

logger = logging.getLogger(__name__)


@dataclass
class ReportScope:
    """
    State that lives for one request (or one job run).

    config_checked guards the "snapshot file exists" check so it runs at
    most once per scope.
    """
    config_checked: bool = False


class ErrorReporter:

    def __init__(
        self,
        config: ErrorReportingConfig,
        collector: ErrorDataCollector,
        error_filter: ErrorFilter,
        throttle_store: FileThrottleStore,
        dispatcher: NotificationDispatcher,
        config_storage: Optional[FileConfigStorage] = None,
    ):
        self.config = config
        self.collector = collector
        self.error_filter = error_filter
        self.throttle_store = throttle_store
        self.dispatcher = dispatcher
        self.config_storage = config_storage

    @classmethod
    def from_config(
        cls,
        config: ErrorReportingConfig,
        storage: Optional[FileConfigStorage] = None,
        app_context: Optional[AppContext] = None,
    ) -> 'ErrorReporter':
        """Wire the default components for a config."""
        return cls(
            config=config,
            collector=ErrorDataCollector(config, app_context=app_context),
            error_filter=ErrorFilter.from_config(config),
            throttle_store=FileThrottleStore(
                config.tracking_dir,
                throttle_period=config.throttle_period,
                max_notifications_per_period=config.max_errors_per_period,
            ),
            dispatcher=NotificationDispatcher(build_handlers(config)),
            config_storage=storage,
        )

    def reconfigure(self, config: ErrorReportingConfig):
        """
        Apply a new configuration and refresh the snapshot file.

        Called when an operator saves new settings.
        """
        fresh = self.from_config(config, storage=self.config_storage,
                                 app_context=self.collector.app_context)
        self.config = fresh.config
        self.collector = fresh.collector
        self.error_filter = fresh.error_filter
        self.throttle_store = fresh.throttle_store
        self.dispatcher = fresh.dispatcher

        if self.config_storage is not None:
            if self.config_storage.export_config(config):
                logger.info("Error reporting configuration exported after update")
            else:
                logger.error("Failed to export error reporting configuration after update")

    def report(
        self,
        exception: BaseException,
        request: Optional[RequestContext] = None,
        scope: Optional[ReportScope] = None,
    ) -> Dict[str, bool]:
        """
        Run the full pipeline for one exception.

        Returns:
            Dictionary mapping handler names to success status; empty when
            nothing was dispatched
        """
        error_hash = None
        # Host request fields (e.g. correlation_id) survive the report
        saved_context = get_logging_context()
        try:
            if not self.config.enabled:
                return {}

            self._ensure_config_snapshot(scope)

            report = self.collector.collect(exception, request)
            error_hash = report.hash
            severity = report.severity
            set_logging_context(error_hash=error_hash, severity=severity)

            self.throttle_store.record_error(error_hash, report)

            if not self.error_filter.should_report(exception, request, severity):
                log_pipeline_event('filtered', f"Error {error_hash[:12]} filtered out",
                                   error_hash=error_hash, severity=severity)
                return {}

            if not self.throttle_store.should_notify(error_hash):
                log_pipeline_event('throttled', f"Error {error_hash[:12]} throttled",
                                   error_hash=error_hash, severity=severity)
                return {}

            results = self.dispatcher.dispatch(report)

            if any(results.values()):
                self.throttle_store.mark_as_notified(error_hash)
                log_pipeline_event('dispatched', f"Error {error_hash[:12]} reported via "
                                   f"{', '.join(name for name, ok in results.items() if ok)}",
                                   error_hash=error_hash, severity=severity, results=results)
            elif results:
                logger.warning(f"No notification handler delivered error {error_hash[:12]}: {results}")
            else:
                logger.debug(f"No notification handler eligible for error {error_hash[:12]}")

            return results

        except Exception as e:
            log_pipeline_failure('report', e, error_hash=error_hash)
            return {}
        finally:
            clear_logging_context()
            set_logging_context(**saved_context)

    def _ensure_config_snapshot(self, scope: Optional[ReportScope]):
        if self.config_storage is None:
            return
        if scope is not None:
            if scope.config_checked:
                return
            scope.config_checked = True

        try:
            if not self.config_storage.has_config():
                logger.warning("Error reporting configuration file missing, attempting to export...")
                if self.config_storage.export_config(self.config):
                    logger.info("Error reporting configuration exported after missing file was detected")
                else:
                    logger.error("Failed to export error reporting configuration")
        except Exception as e:
            logger.error(f"Config snapshot check failed: {e}")


def build_handlers(config: ErrorReportingConfig):
    """Default handler set, in dispatch order."""
    email_handler = SmtpEmailHandler(config)
    if config.email_fallback_enabled:
        email_handler = FallbackNotificationHandler(email_handler, SesEmailHandler(config))

    return [
        email_handler,
        SlackNotificationHandler(config),
        TeamsNotificationHandler(config),
        TelegramNotificationHandler(config),
        WhatsAppNotificationHandler(config),
    ]
