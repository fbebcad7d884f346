"""
File: error_reporting/notifications/slack.py

Slack incoming-webhook notifications.

Configuration:
    ERROR_REPORTING_SLACK_ENABLED=true
    ERROR_REPORTING_SLACK_WEBHOOK_URL=https://hooks.slack.com/services/...
    ERROR_REPORTING_SLACK_CHANNEL=#errors        (optional override)
    ERROR_REPORTING_SLACK_USERNAME=Error Monitor (optional override)
    ERROR_REPORTING_SLACK_MINIMUM_SEVERITY=error
"""

import time
from typing import Any, Dict, Optional

from error_reporting.collector.report import ErrorReport
from error_reporting.notifications.base import (
    WebhookNotificationHandler,
    format_environment,
    format_location,
    format_store,
)

COLOR_MAP = {
    'critical': 'danger',
    'error': 'warning',
    'warning': '#ffcc00',
}

EMOJI_MAP = {
    'critical': ':rotating_light:',
    'error': ':warning:',
    'warning': ':large_orange_diamond:',
}


class SlackNotificationHandler(WebhookNotificationHandler):

    def is_enabled(self) -> bool:
        return self.config.slack_enabled

    def get_name(self) -> str:
        return 'Slack'

    def get_minimum_severity(self) -> str:
        return self.config.slack_minimum_severity

    def get_url(self) -> Optional[str]:
        return self.config.slack_webhook_url

    def build_payload(self, report: ErrorReport) -> Dict[str, Any]:
        error = report.error
        severity = error.severity or 'error'

        fields = [
            {"title": "Error Type", "value": error.type or 'Unknown', "short": True},
            {"title": "Severity", "value": severity.upper(), "short": True},
            {"title": "Message", "value": f"```{error.message or 'Unknown error'}```", "short": False},
            {"title": "Location", "value": f"`{format_location(report)}`", "short": False},
            {"title": "Full Path", "value": f"```{error.file or 'Unknown'}```", "short": False},
            {"title": "URL", "value": report.request.url or 'N/A', "short": False},
            {"title": "Method", "value": report.request.method or 'N/A', "short": True},
            {"title": "Store", "value": format_store(report), "short": True},
            {"title": "User", "value": report.user.display_name(), "short": True},
            {"title": "IP Address", "value": report.client.ip or 'Unknown', "short": True},
            {"title": "Timestamp", "value": report.timestamp_formatted, "short": True},
        ]

        environment = format_environment(report)
        if environment:
            fields.append({"title": "Environment", "value": environment, "short": False})

        attachment = {
            "color": COLOR_MAP.get(severity, '#808080'),
            "fallback": f"{error.type or 'Error'}: {error.message or 'Unknown error'}",
            "fields": fields,
            "footer": f"Error Hash: {error.hash} | Area: {report.area}",
            "ts": int(time.time()),
        }

        payload = {
            "text": f"{EMOJI_MAP.get(severity, ':grey_question:')} *{severity.capitalize()} Error Detected*",
            "attachments": [attachment],
        }

        if self.config.slack_channel:
            payload["channel"] = self.config.slack_channel
        if self.config.slack_username:
            payload["username"] = self.config.slack_username

        return payload
