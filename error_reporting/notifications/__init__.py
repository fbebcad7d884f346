"""
Notification channels and the dispatcher that fans reports out to them.
"""

from .base import NotificationHandler, WebhookNotificationHandler
from .slack import SlackNotificationHandler
from .teams import TeamsNotificationHandler
from .telegram import TelegramNotificationHandler
from .whatsapp import WhatsAppNotificationHandler
from .email_handler import (
    EmailNotificationHandler,
    SmtpEmailHandler,
    SesEmailHandler,
    parse_emails,
)
from .fallback import FallbackNotificationHandler
from .dispatcher import NotificationDispatcher

__all__ = [
    'NotificationHandler',
    'WebhookNotificationHandler',
    'SlackNotificationHandler',
    'TeamsNotificationHandler',
    'TelegramNotificationHandler',
    'WhatsAppNotificationHandler',
    'EmailNotificationHandler',
    'SmtpEmailHandler',
    'SesEmailHandler',
    'parse_emails',
    'FallbackNotificationHandler',
    'NotificationDispatcher',
]
