"""
File: error_reporting/notifications/whatsapp.py

WhatsApp Business Cloud API notifications.

POST https://graph.facebook.com/<version>/<phone_number_id>/messages
Authorization: Bearer <access token>

Message bodies are capped at WhatsApp's 4096 character limit.
"""

from typing import Any, Dict, Optional

from error_reporting.collector.report import ErrorReport
from error_reporting.notifications.base import (
    WebhookNotificationHandler,
    format_environment,
    format_location,
    format_store,
    severity_emoji,
    truncate,
)

GRAPH_API_BASE_URL = 'https://graph.facebook.com'
MAX_BODY_LENGTH = 4096


class WhatsAppNotificationHandler(WebhookNotificationHandler):

    def is_enabled(self) -> bool:
        return self.config.whatsapp_enabled

    def get_name(self) -> str:
        return 'WhatsApp'

    def get_minimum_severity(self) -> str:
        return self.config.whatsapp_minimum_severity

    def get_url(self) -> Optional[str]:
        config = self.config
        if not (config.whatsapp_access_token and config.whatsapp_phone_number_id
                and config.whatsapp_recipient_phone):
            return None
        return (
            f"{GRAPH_API_BASE_URL}/{config.whatsapp_api_version or 'v18.0'}/"
            f"{config.whatsapp_phone_number_id}/messages"
        )

    def get_headers(self) -> Dict[str, str]:
        headers = super().get_headers()
        headers['Authorization'] = f"Bearer {self.config.whatsapp_access_token}"
        return headers

    def build_payload(self, report: ErrorReport) -> Dict[str, Any]:
        error = report.error
        severity = error.severity or 'error'

        text = f"{severity_emoji(severity)} *{severity.upper()} Error Detected*\n\n"
        text += f"*Type:* {error.type or 'Unknown'}\n"
        text += f"*Severity:* {severity.upper()}\n"
        text += f"*Message:* {truncate(error.message or 'Unknown error', 200)}\n\n"
        text += f"*Location:* {format_location(report)}\n"
        text += f"*Full Path:* {truncate(error.file or 'Unknown', 100)}\n\n"
        text += f"*URL:* {truncate(report.request.url or 'N/A', 100)}\n"
        text += f"*Method:* {report.request.method or 'N/A'}\n"
        text += f"*Store:* {format_store(report)}\n"
        text += f"*User:* {report.user.display_name()}\n"
        text += f"*IP Address:* {report.client.ip or 'Unknown'}\n"
        text += f"*Area:* {report.area}\n"
        text += f"*Timestamp:* {report.timestamp_formatted}\n"

        environment = format_environment(report)
        if environment:
            text += f"\n*🖥 Environment:*\n{environment}\n"

        text += f"\n_Error Hash: {error.hash}_"

        if len(text) > MAX_BODY_LENGTH:
            text = text[:MAX_BODY_LENGTH - 6] + '...'

        return {
            "messaging_product": "whatsapp",
            "to": self.config.whatsapp_recipient_phone,
            "type": "text",
            "text": {"body": text},
        }
