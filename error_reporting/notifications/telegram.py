"""
File: error_reporting/notifications/telegram.py

Telegram Bot API notifications. Text is sent with parse_mode=HTML, so every
report value is HTML-escaped.
"""

import html
from typing import Any, Dict, Optional

from error_reporting.collector.report import ErrorReport
from error_reporting.notifications.base import (
    WebhookNotificationHandler,
    format_environment,
    format_location,
    format_store,
    severity_emoji,
)

TELEGRAM_API_URL = 'https://api.telegram.org/bot{token}/sendMessage'


class TelegramNotificationHandler(WebhookNotificationHandler):

    def is_enabled(self) -> bool:
        return self.config.telegram_enabled

    def get_name(self) -> str:
        return 'Telegram'

    def get_minimum_severity(self) -> str:
        return self.config.telegram_minimum_severity

    def get_url(self) -> Optional[str]:
        if not self.config.telegram_bot_token or not self.config.telegram_chat_id:
            return None
        return TELEGRAM_API_URL.format(token=self.config.telegram_bot_token)

    def build_payload(self, report: ErrorReport) -> Dict[str, Any]:
        error = report.error
        severity = error.severity or 'error'
        esc = html.escape

        text = f"{severity_emoji(severity)} <b>{severity.capitalize()} Error Detected</b>\n\n"
        text += f"<b>Type:</b> {esc(error.type or 'Unknown')}\n"
        text += f"<b>Severity:</b> {severity.upper()}\n"
        text += f"<b>Message:</b> {esc(error.message or 'Unknown error')}\n\n"
        text += f"<b>Location:</b> {esc(format_location(report))}\n"
        text += f"<b>Full Path:</b> <code>{esc(error.file or 'Unknown')}</code>\n\n"
        text += f"<b>URL:</b> {esc(report.request.url or 'N/A')}\n"
        text += f"<b>Method:</b> {esc(report.request.method or 'N/A')}\n"
        text += f"<b>Store:</b> {esc(format_store(report))}\n"
        text += f"<b>User:</b> {esc(report.user.display_name())}\n"
        text += f"<b>IP Address:</b> {esc(report.client.ip or 'Unknown')}\n"
        text += f"<b>Area:</b> {esc(report.area)}\n"
        text += f"<b>Timestamp:</b> {esc(report.timestamp_formatted)}\n"

        environment = format_environment(report)
        if environment:
            text += f"\n<b>🖥 Environment:</b>\n{esc(environment)}\n"

        text += f"\n<i>Error Hash: {esc(error.hash)}</i>"

        return {
            "chat_id": self.config.telegram_chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
