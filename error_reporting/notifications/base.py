"""
Base notification handler.

All handlers inherit from NotificationHandler and implement is_enabled(),
get_name() and send(). send() must never raise: network, serialization
and API failures are caught, logged and turned into False.

WebhookNotificationHandler covers the channels that are a single JSON POST
(Slack, Teams, Telegram, WhatsApp); subclasses only build the URL and the
payload.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from error_reporting.collector.report import ErrorReport
from error_reporting.config.settings import ErrorReportingConfig, SEVERITY_ERROR
from error_reporting.filters.severity_filter import meets_minimum_severity

logger = logging.getLogger(__name__)

SEVERITY_EMOJI = {
    'critical': '🚨',
    'error': '⚠️',
    'warning': '🔶',
}
DEFAULT_EMOJI = '❓'


class NotificationHandler(ABC):
    """Base class for notification channels."""

    def __init__(self, config: ErrorReportingConfig):
        self.config = config

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    def get_name(self) -> str:
        pass

    def get_minimum_severity(self) -> str:
        return SEVERITY_ERROR

    def should_handle(self, report: ErrorReport) -> bool:
        """True if the report meets this channel's severity floor."""
        return meets_minimum_severity(report.severity, self.get_minimum_severity())

    @abstractmethod
    def send(self, report: ErrorReport) -> bool:
        """
        Deliver the report.

        Returns:
            True if the channel accepted the notification, False otherwise
        """
        pass


class WebhookNotificationHandler(NotificationHandler):
    """Handler that delivers one JSON document with requests.post()."""

    @abstractmethod
    def get_url(self) -> Optional[str]:
        pass

    def get_headers(self) -> Dict[str, str]:
        return {'Content-Type': 'application/json'}

    @abstractmethod
    def build_payload(self, report: ErrorReport) -> Dict[str, Any]:
        pass

    def send(self, report: ErrorReport) -> bool:
        name = self.get_name()
        try:
            url = self.get_url()
            if not url:
                logger.warning(f"Cannot send {name} notification: channel is not fully configured")
                return False

            payload = self.build_payload(report)
            response = requests.post(
                url,
                json=payload,
                headers=self.get_headers(),
                timeout=self.config.http_timeout
            )

            if 200 <= response.status_code < 300:
                logger.info(f"{name} notification sent for error {report.hash[:12]}")
                return True

            logger.warning(
                f"{name} API returned HTTP {response.status_code} for error {report.hash[:12]}: "
                f"{response.text[:500]}"
            )
            return False

        except requests.exceptions.RequestException as e:
            logger.warning(f"Failed to send {name} notification due to HTTP error: {e}")
            return False
        except Exception as e:
            logger.warning(f"Failed to send {name} notification: {e}")
            return False


# Shared formatting helpers

def severity_emoji(severity: str) -> str:
    return SEVERITY_EMOJI.get(severity, DEFAULT_EMOJI)


def format_location(report: ErrorReport) -> str:
    """'basename:line' of the raising frame."""
    file_name = os.path.basename(report.error.file) if report.error.file else 'Unknown'
    return f"{file_name}:{report.error.line}"


def format_store(report: ErrorReport) -> str:
    return f"{report.store.name or 'Unknown'} ({report.store.code or 'unknown'})"


def format_environment(report: ErrorReport) -> Optional[str]:
    env = report.environment
    if not env:
        return None
    return (
        f"Python: {env.get('python_version', 'Unknown')} | "
        f"Memory: {env.get('memory_usage', 'Unknown')} / {env.get('memory_limit', 'Unknown')}"
    )


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + '...'
