"""
File: error_reporting/notifications/teams.py

Microsoft Teams incoming-webhook notifications (legacy MessageCard format).
"""

from typing import Any, Dict, Optional

from error_reporting.collector.report import ErrorReport
from error_reporting.notifications.base import (
    WebhookNotificationHandler,
    format_location,
    format_store,
    severity_emoji,
)

THEME_COLORS = {
    'critical': 'FF0000',
    'error': 'FFA500',
    'warning': 'FFCC00',
}


class TeamsNotificationHandler(WebhookNotificationHandler):

    def is_enabled(self) -> bool:
        return self.config.teams_enabled

    def get_name(self) -> str:
        return 'Microsoft Teams'

    def get_minimum_severity(self) -> str:
        return self.config.teams_minimum_severity

    def get_url(self) -> Optional[str]:
        return self.config.teams_webhook_url

    def build_payload(self, report: ErrorReport) -> Dict[str, Any]:
        error = report.error
        severity = error.severity or 'error'
        message = error.message or 'Unknown error'

        facts = [
            {"name": "Severity:", "value": severity.upper()},
            {"name": "Message:", "value": message},
            {"name": "Location:", "value": format_location(report)},
            {"name": "Full Path:", "value": error.file or 'Unknown'},
            {"name": "URL:", "value": report.request.url or 'N/A'},
            {"name": "Method:", "value": report.request.method or 'N/A'},
            {"name": "Store:", "value": format_store(report)},
            {"name": "User:", "value": report.user.display_name()},
            {"name": "IP Address:", "value": report.client.ip or 'Unknown'},
            {"name": "User Agent:", "value": (report.client.user_agent or 'Unknown')[:100]},
            {"name": "Area:", "value": report.area},
            {"name": "Error Hash:", "value": error.hash},
        ]

        card = {
            "@type": "MessageCard",
            "@context": "https://schema.org/extensions",
            "summary": f"{error.type or 'Error'}: {message[:100]}",
            "themeColor": THEME_COLORS.get(severity, '808080'),
            "title": f"{severity_emoji(severity)} {severity.capitalize()} Error Detected",
            "sections": [{
                "activityTitle": error.type or 'Unknown Error',
                "activitySubtitle": report.timestamp_formatted,
                "facts": facts,
                "markdown": True,
            }],
        }

        env = report.environment
        if env:
            card["sections"].append({
                "title": "🖥️ Environment Details",
                "facts": [
                    {"name": "Python Version:", "value": env.get('python_version', 'Unknown')},
                    {"name": "Memory Usage:", "value": env.get('memory_usage', 'Unknown')},
                    {"name": "Memory Peak:", "value": env.get('memory_peak', 'Unknown')},
                    {"name": "Memory Limit:", "value": env.get('memory_limit', 'Unknown')},
                ],
            })

        if report.store.base_url:
            card["potentialAction"] = [{
                "@type": "OpenUri",
                "name": "View Store",
                "targets": [{"os": "default", "uri": report.store.base_url}],
            }]

        return card
