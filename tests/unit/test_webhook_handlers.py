"""
Unit tests for the webhook notification handlers.

requests.post is patched; tests check the payload contract for each
channel and that send() converts every failure into False.

Related: error_reporting/notifications/{slack,teams,telegram,whatsapp}.py
"""

from unittest.mock import Mock, patch

import pytest
import requests

from error_reporting.config.settings import ErrorReportingConfig
from error_reporting.notifications import (
    SlackNotificationHandler,
    TeamsNotificationHandler,
    TelegramNotificationHandler,
    WebhookNotificationHandler,
    WhatsAppNotificationHandler,
)

POST_PATH = 'error_reporting.notifications.base.requests.post'


def _response(status_code=200, text='ok'):
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def slack_config():
    return ErrorReportingConfig(
        slack_enabled=True,
        slack_webhook_url='https://hooks.slack.com/services/T000/B000/XXXX',
        slack_minimum_severity='error',
        http_timeout=3,
    )


class TestSlackHandler:

    def test_identity_and_gating(self, slack_config, make_report):
        handler = SlackNotificationHandler(slack_config)

        assert handler.get_name() == 'Slack'
        assert handler.is_enabled() is True
        assert handler.should_handle(make_report(severity='critical')) is True
        assert handler.should_handle(make_report(severity='error')) is True
        assert handler.should_handle(make_report(severity='warning')) is False

    def test_send_success(self, slack_config, make_report):
        report = make_report(severity='critical')

        with patch(POST_PATH, return_value=_response(200)) as mock_post:
            assert SlackNotificationHandler(slack_config).send(report) is True

        url = mock_post.call_args[0][0]
        kwargs = mock_post.call_args[1]
        assert url == slack_config.slack_webhook_url
        assert kwargs['timeout'] == 3

        payload = kwargs['json']
        assert payload['text'] == ':rotating_light: *Critical Error Detected*'
        attachment = payload['attachments'][0]
        assert attachment['color'] == 'danger'
        assert attachment['footer'] == f"Error Hash: {report.hash} | Area: frontend"
        assert isinstance(attachment['ts'], int)

        fields = {field['title']: field['value'] for field in attachment['fields']}
        assert fields['Error Type'] == 'RuntimeError'
        assert fields['Severity'] == 'CRITICAL'
        assert fields['Location'] == '`views.py:42`'
        assert fields['Store'] == 'Main Store (default)'
        assert fields['User'] == 'Guest'
        assert fields['IP Address'] == '203.0.113.7'
        assert 'Environment' not in fields
        assert 'channel' not in payload
        assert 'username' not in payload

    def test_optional_channel_username_environment(self, slack_config, make_report):
        slack_config.slack_channel = '#shop-errors'
        slack_config.slack_username = 'Error Monitor'
        report = make_report(severity='warning', environment={
            'python_version': '3.12.1', 'memory_usage': '80.00 MB', 'memory_limit': 'unlimited'})

        payload = SlackNotificationHandler(slack_config).build_payload(report)

        assert payload['channel'] == '#shop-errors'
        assert payload['username'] == 'Error Monitor'
        assert payload['attachments'][0]['color'] == '#ffcc00'
        fields = {field['title']: field['value'] for field in payload['attachments'][0]['fields']}
        assert fields['Environment'] == 'Python: 3.12.1 | Memory: 80.00 MB / unlimited'

    def test_non_2xx_is_failure(self, slack_config, make_report):
        with patch(POST_PATH, return_value=_response(500, 'invalid_payload')):
            assert SlackNotificationHandler(slack_config).send(make_report()) is False

    def test_network_error_is_failure(self, slack_config, make_report):
        with patch(POST_PATH, side_effect=requests.exceptions.ConnectionError("refused")):
            assert SlackNotificationHandler(slack_config).send(make_report()) is False

    def test_unexpected_error_is_failure(self, slack_config, make_report):
        with patch(POST_PATH, side_effect=ValueError("not serializable")):
            assert SlackNotificationHandler(slack_config).send(make_report()) is False

    def test_missing_webhook_skips_post(self, make_report):
        handler = SlackNotificationHandler(ErrorReportingConfig(slack_enabled=True))

        with patch(POST_PATH) as mock_post:
            assert handler.send(make_report()) is False
        mock_post.assert_not_called()


class TestTeamsHandler:

    def test_message_card(self, make_report):
        config = ErrorReportingConfig(teams_enabled=True, teams_webhook_url='https://example.webhook.office.com/x')
        report = make_report(severity='error', message='m' * 150)

        with patch(POST_PATH, return_value=_response(200)) as mock_post:
            assert TeamsNotificationHandler(config).send(report) is True

        card = mock_post.call_args[1]['json']
        assert card['@type'] == 'MessageCard'
        assert card['themeColor'] == 'FFA500'
        assert card['summary'] == 'RuntimeError: ' + 'm' * 100
        facts = {fact['name']: fact['value'] for fact in card['sections'][0]['facts']}
        assert facts['Location:'] == 'views.py:42'
        assert facts['Error Hash:'] == report.hash
        assert card['potentialAction'][0]['targets'][0]['uri'] == 'https://shop.example.com'

    def test_name_and_severity_floor(self, make_report):
        config = ErrorReportingConfig(teams_enabled=True, teams_minimum_severity='critical')
        handler = TeamsNotificationHandler(config)

        assert handler.get_name() == 'Microsoft Teams'
        assert handler.should_handle(make_report(severity='error')) is False


class TestTelegramHandler:

    def test_payload_is_html_escaped(self, make_report):
        config = ErrorReportingConfig(telegram_enabled=True, telegram_bot_token='123:ABC',
                                      telegram_chat_id='-100987')
        report = make_report(message='<script>alert(1)</script>')

        with patch(POST_PATH, return_value=_response(200)) as mock_post:
            assert TelegramNotificationHandler(config).send(report) is True

        assert mock_post.call_args[0][0] == 'https://api.telegram.org/bot123:ABC/sendMessage'
        payload = mock_post.call_args[1]['json']
        assert payload['chat_id'] == '-100987'
        assert payload['parse_mode'] == 'HTML'
        assert payload['disable_web_page_preview'] is True
        assert '&lt;script&gt;alert(1)&lt;/script&gt;' in payload['text']
        assert '<script>' not in payload['text']
        assert f"<i>Error Hash: {report.hash}</i>" in payload['text']

    def test_requires_token_and_chat(self, make_report):
        config = ErrorReportingConfig(telegram_enabled=True, telegram_bot_token='123:ABC')

        with patch(POST_PATH) as mock_post:
            assert TelegramNotificationHandler(config).send(make_report()) is False
        mock_post.assert_not_called()


class TestWhatsAppHandler:

    @pytest.fixture
    def whatsapp_config(self):
        return ErrorReportingConfig(
            whatsapp_enabled=True,
            whatsapp_access_token='EAAB-token',
            whatsapp_phone_number_id='1098765',
            whatsapp_recipient_phone='+15551234567',
        )

    def test_request(self, whatsapp_config, make_report):
        with patch(POST_PATH, return_value=_response(200)) as mock_post:
            assert WhatsAppNotificationHandler(whatsapp_config).send(make_report()) is True

        assert mock_post.call_args[0][0] == 'https://graph.facebook.com/v18.0/1098765/messages'
        kwargs = mock_post.call_args[1]
        assert kwargs['headers']['Authorization'] == 'Bearer EAAB-token'
        payload = kwargs['json']
        assert payload['messaging_product'] == 'whatsapp'
        assert payload['to'] == '+15551234567'
        assert payload['type'] == 'text'

    def test_field_truncation(self, whatsapp_config, make_report):
        body = WhatsAppNotificationHandler(whatsapp_config).build_payload(
            make_report(message='x' * 500))['text']['body']

        assert f"*Message:* {'x' * 197}...\n" in body

    def test_body_capped_at_transport_limit(self, whatsapp_config, make_report):
        report = make_report()
        report.store.name = 's' * 5000

        body = WhatsAppNotificationHandler(whatsapp_config).build_payload(report)['text']['body']

        assert len(body) == 4093
        assert body.endswith('...')

    def test_incomplete_config(self, make_report):
        config = ErrorReportingConfig(whatsapp_enabled=True, whatsapp_access_token='t')

        with patch(POST_PATH) as mock_post:
            assert WhatsAppNotificationHandler(config).send(make_report()) is False
        mock_post.assert_not_called()


class TestWebhookBase:

    def test_incomplete_subclass_cannot_be_instantiated(self):
        class UrlOnlyHandler(WebhookNotificationHandler):
            def is_enabled(self):
                return True

            def get_name(self):
                return 'Half Done'

            def get_url(self):
                return 'https://example.com/hook'

        with pytest.raises(TypeError):
            UrlOnlyHandler(ErrorReportingConfig())
