#!/usr/bin/env python3
"""
File: error_reporting/notifications/email_handler.py

Email notifications for captured errors.

Two audiences:
    - developers: full technical report (trace, request, environment)
    - clients:    short non-technical notice, only when
                  client_notification_enabled is set

Two transports:
    - SmtpEmailHandler ("Email"): smtplib with STARTTLS + login
    - SesEmailHandler ("Email (SES)"): AWS SES via boto3

SES is normally wired as the fallback of SMTP:

    handler = FallbackNotificationHandler(SmtpEmailHandler(config),
                                          SesEmailHandler(config))
"""

import html
import logging
import re
import smtplib
from abc import abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, parseaddr
from typing import List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from error_reporting.collector.report import ErrorReport
from error_reporting.config.settings import ErrorReportingConfig
from error_reporting.exceptions import ConfigurationError
from error_reporting.notifications.base import NotificationHandler, format_location, format_store

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r'^[A-Za-z0-9.!#$%&\'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?'
                       r'(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$')

SEVERITY_COLORS = {
    'critical': '#d32f2f',
    'error': '#f57c00',
    'warning': '#fbc02d',
}


def parse_emails(value: str) -> List[str]:
    """Comma separated list -> valid addresses only."""
    emails = []
    for candidate in (value or '').split(','):
        candidate = candidate.strip()
        if not candidate:
            continue
        _, address = parseaddr(candidate)
        if address and address == candidate and _EMAIL_RE.match(address):
            emails.append(address)
        else:
            logger.debug(f"Ignoring invalid email address: {candidate}")
    return emails


def build_subject(report: ErrorReport) -> str:
    store_name = report.store.name or 'Error Reporting System'
    return f"[{report.severity.upper()}] {report.error.type or 'Unknown Error'} on {store_name}"


def _row(label: str, value) -> str:
    return (
        f'<tr><td style="padding: 8px 12px; background-color: #f8f9fa; color: #666; width: 30%;">'
        f'<strong>{html.escape(label)}</strong></td>'
        f'<td style="padding: 8px 12px; color: #333; word-break: break-word;">{html.escape(str(value))}</td></tr>'
    )


def build_developer_email_body(report: ErrorReport) -> str:
    """Full technical report. Every report value is HTML-escaped."""
    error = report.error
    color = SEVERITY_COLORS.get(error.severity, '#616161')

    rows = [
        _row('Type', error.type),
        _row('Severity', error.severity.upper()),
        _row('Message', error.message),
        _row('Location', format_location(report)),
        _row('Full Path', error.file or 'Unknown'),
        _row('URL', report.request.url or 'N/A'),
        _row('Method', report.request.method or 'N/A'),
        _row('Area', report.area),
        _row('Store', format_store(report)),
        _row('User', report.user.display_name()),
        _row('Client IP', report.client.ip or 'Unknown'),
        _row('User Agent', report.client.user_agent or 'Unknown'),
        _row('Referer', report.client.referer or 'N/A'),
        _row('Timestamp', report.timestamp_formatted),
        _row('Error Hash', error.hash),
    ]

    sections = ""

    if report.environment:
        env_rows = ''.join(_row(key.replace('_', ' ').title(), value)
                           for key, value in report.environment.items())
        sections += f"<h3>Environment</h3><table style=\"width: 100%; border-collapse: collapse;\">{env_rows}</table>"

    if report.previous_exceptions:
        items = ''.join(
            f"<li><strong>#{prev.index} {html.escape(prev.type)}:</strong> {html.escape(prev.message)} "
            f"<code>{html.escape(prev.file)}:{prev.line}</code></li>"
            for prev in report.previous_exceptions
        )
        sections += f"<h3>Previous Exceptions</h3><ul>{items}</ul>"

    if report.trace:
        sections += (
            "<h3>Stack Trace</h3>"
            f"<pre style=\"background-color: #f4f4f4; padding: 12px; overflow-x: auto; font-size: 12px;\">"
            f"{html.escape(report.trace)}</pre>"
        )

    if report.post_data:
        post_rows = ''.join(_row(str(key), value) for key, value in report.post_data.items())
        sections += f"<h3>POST Data</h3><table style=\"width: 100%; border-collapse: collapse;\">{post_rows}</table>"

    return f"""
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px;">
            <h2 style="color: {color};">{html.escape(error.severity.capitalize())} Error Detected</h2>
            <table style="width: 100%; border-collapse: collapse;">{''.join(rows)}</table>

            {sections}

            <hr style="margin-top: 30px; border: none; border-top: 1px solid #ccc;">
            <p style="color: #666; font-size: 12px;">
                This is an automated error report. Similar errors are throttled per error hash.
            </p>
        </body>
        </html>
        """


def build_client_email_body(report: ErrorReport) -> str:
    """Non-technical notice: no message, trace, user or environment data."""
    store_name = html.escape(report.store.name or 'our website')

    return f"""
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <h2 style="color: #f57c00;">Website Issue Detected</h2>
            <p>This is an automated notification from {store_name}.</p>
            <p style="background-color: #fff3cd; border-left: 4px solid #ff9800; padding: 12px;">
                An issue has been detected on the website and our technical team has been automatically notified.
            </p>
            <table style="width: 100%; border-collapse: collapse;">
                {_row('Detected At', report.timestamp_formatted)}
                {_row('Location', report.request.url or '')}
                {_row('Store', report.store.name or 'our website')}
            </table>
            <p style="color: #555; font-size: 13px;">
                Our team is working to resolve this issue as quickly as possible.
                You do not need to take any action at this time.
            </p>
            <hr style="margin-top: 30px; border: none; border-top: 1px solid #ccc;">
            <p style="color: #999; font-size: 11px;">This is an automated message. Please do not reply to this email.</p>
        </body>
        </html>
        """


class EmailNotificationHandler(NotificationHandler):
    """
    Shared audience logic; subclasses provide the transport.

    send() returns True only if every attempted audience was delivered.
    """

    def is_enabled(self) -> bool:
        return self.config.email_enabled

    def get_minimum_severity(self) -> str:
        return self.config.email_minimum_severity

    def _sender(self) -> str:
        return formataddr((self.config.email_sender_name, self.config.email_sender))

    def validate_config(self):
        if not self.config.email_sender:
            raise ConfigurationError(f"{self.get_name()} requires email_sender")

    def send(self, report: ErrorReport) -> bool:
        try:
            self.validate_config()

            audiences = []
            developer_emails = parse_emails(self.config.developer_emails)
            if developer_emails:
                audiences.append(('developer', developer_emails, build_developer_email_body(report)))

            if self.config.client_notification_enabled:
                client_emails = parse_emails(self.config.client_emails)
                if client_emails:
                    audiences.append(('client', client_emails, build_client_email_body(report)))

            if not audiences:
                logger.warning(f"No valid recipients for {self.get_name()} notification")
                return False

            subject = build_subject(report)
            result = True
            for audience, recipients, body_html in audiences:
                result = self._send_email(subject, body_html, recipients, audience) and result
            return result

        except ConfigurationError as e:
            logger.warning(f"Cannot send {self.get_name()} notification: {e}")
            return False
        except Exception as e:
            logger.warning(f"Failed to send {self.get_name()} notification: {e}")
            return False

    @abstractmethod
    def _send_email(self, subject: str, body_html: str, recipients: List[str], audience: str) -> bool:
        pass


class SmtpEmailHandler(EmailNotificationHandler):
    """Send email via SMTP."""

    def get_name(self) -> str:
        return 'Email'

    def validate_config(self):
        super().validate_config()
        if not self.config.smtp_host:
            raise ConfigurationError("Email requires smtp_host")

    def _send_email(self, subject: str, body_html: str, recipients: List[str], audience: str) -> bool:
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = self._sender()
            msg['To'] = ', '.join(recipients)
            msg.attach(MIMEText(body_html, 'html'))

            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port,
                              timeout=self.config.smtp_timeout) as server:
                if self.config.smtp_use_tls:
                    server.starttls()
                if self.config.smtp_username:
                    server.login(self.config.smtp_username, self.config.smtp_password)
                server.send_message(msg)

            logger.info(f"Sent {audience} error email '{subject}' to {len(recipients)} recipients")
            return True

        except smtplib.SMTPException as e:
            logger.warning(f"SMTP error sending {audience} error email '{subject}': {e}")
            return False
        except Exception as e:
            logger.warning(f"Failed to send {audience} error email '{subject}': {e}")
            return False


class SesEmailHandler(EmailNotificationHandler):
    """Send email via AWS SES."""

    def __init__(self, config: ErrorReportingConfig):
        super().__init__(config)
        self._ses_client = None

    def get_name(self) -> str:
        return 'Email (SES)'

    def is_enabled(self) -> bool:
        return self.config.email_enabled and self.config.email_fallback_enabled

    @property
    def ses_client(self):
        if self._ses_client is None:
            # Credentials fall back to the default boto3 chain when unset
            self._ses_client = boto3.client(
                'ses',
                region_name=self.config.ses_region,
                aws_access_key_id=self.config.ses_access_key_id or None,
                aws_secret_access_key=self.config.ses_secret_access_key or None
            )
            logger.info(f"AWS SES client initialized for region: {self.config.ses_region}")
        return self._ses_client

    def _send_email(self, subject: str, body_html: str, recipients: List[str], audience: str) -> bool:
        try:
            response = self.ses_client.send_email(
                Source=self._sender(),
                Destination={
                    'ToAddresses': recipients
                },
                Message={
                    'Subject': {
                        'Data': subject,
                        'Charset': 'UTF-8'
                    },
                    'Body': {
                        'Html': {
                            'Data': body_html,
                            'Charset': 'UTF-8'
                        }
                    }
                }
            )

            logger.info(f"Sent {audience} error email '{subject}' to {len(recipients)} recipients via SES. "
                        f"MessageId: {response.get('MessageId')}")
            return True

        except ClientError as e:
            logger.warning(f"AWS SES error sending {audience} error email '{subject}': "
                           f"{e.response.get('Error', {}).get('Message')}")
            return False
        except BotoCoreError as e:
            logger.warning(f"AWS SES transport error sending {audience} error email '{subject}': {e}")
            return False
        except Exception as e:
            logger.warning(f"Failed to send {audience} error email '{subject}' via SES: {e}")
            return False
