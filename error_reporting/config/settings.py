"""
File: error_reporting/config/settings.py

Centralized configuration for the error reporting pipeline.

Every tunable lives on ErrorReportingConfig under the same flat key that
the persisted snapshot uses, so the snapshot file, the environment and the
dataclass never drift apart.

Usage:
    from error_reporting.config import ErrorReportingConfig

    config = ErrorReportingConfig.from_env()
    if config.slack_enabled:
        ...

Environment Variables:
    ERROR_REPORTING_<KEY> for any field, e.g.
    - ERROR_REPORTING_ENABLED=true
    - ERROR_REPORTING_THROTTLE_PERIOD=60
    - ERROR_REPORTING_SLACK_WEBHOOK_URL=https://hooks.slack.com/...
"""

import logging
import os
from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = 'ERROR_REPORTING_'

SEVERITY_WARNING = 'warning'
SEVERITY_ERROR = 'error'
SEVERITY_CRITICAL = 'critical'

# Numeric ordering shared by the severity filter and every handler gate
SEVERITY_LEVELS: Dict[str, int] = {
    SEVERITY_WARNING: 1,
    SEVERITY_ERROR: 2,
    SEVERITY_CRITICAL: 3,
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class ErrorReportingConfig:
    """
    All error reporting tunables.

    Pattern lists (blacklist, controllers) are kept as raw newline separated
    text; PatternMatcher.parse_patterns turns them into lists at use time.
    """

    # ========================================
    # General
    # ========================================
    enabled: bool = False
    minimum_severity: str = SEVERITY_ERROR
    include_detailed_info: bool = True
    include_post_data: bool = False
    sensitive_fields: str = ''

    # ========================================
    # Filtering
    # ========================================
    error_blacklist: str = ''
    excluded_controllers: str = ''
    included_only_controllers: str = ''

    # ========================================
    # Throttling
    # ========================================
    throttle_period: int = 60  # minutes
    max_errors_per_period: int = 5
    tracking_dir: str = 'var/error_reporting'

    # Outbound HTTP calls to notification channels (seconds)
    http_timeout: int = 5

    # ========================================
    # Email
    # ========================================
    email_enabled: bool = False
    email_minimum_severity: str = SEVERITY_ERROR
    developer_emails: str = ''
    client_notification_enabled: bool = False
    client_emails: str = ''
    email_sender: str = ''
    email_sender_name: str = 'Error Monitor'
    smtp_host: str = 'localhost'
    smtp_port: int = 587
    smtp_username: str = ''
    smtp_password: str = ''
    smtp_use_tls: bool = True
    smtp_timeout: int = 10
    email_fallback_enabled: bool = False
    ses_region: str = 'us-west-2'
    ses_access_key_id: str = ''
    ses_secret_access_key: str = ''

    # ========================================
    # Slack
    # ========================================
    slack_enabled: bool = False
    slack_webhook_url: str = ''
    slack_channel: str = ''
    slack_username: str = ''
    slack_minimum_severity: str = SEVERITY_ERROR

    # ========================================
    # Microsoft Teams
    # ========================================
    teams_enabled: bool = False
    teams_webhook_url: str = ''
    teams_minimum_severity: str = SEVERITY_ERROR

    # ========================================
    # Telegram
    # ========================================
    telegram_enabled: bool = False
    telegram_bot_token: str = ''
    telegram_chat_id: str = ''
    telegram_minimum_severity: str = SEVERITY_ERROR

    # ========================================
    # WhatsApp (Meta Cloud API)
    # ========================================
    whatsapp_enabled: bool = False
    whatsapp_access_token: str = ''
    whatsapp_phone_number_id: str = ''
    whatsapp_recipient_phone: str = ''
    whatsapp_minimum_severity: str = SEVERITY_ERROR
    whatsapp_api_version: str = 'v18.0'

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'ErrorReportingConfig':
        """
        Build a config from a flat key/value map (snapshot or admin export).

        Values are coerced to the field type. Unknown keys are ignored and
        values that cannot be coerced keep the default.
        """
        config = cls()
        if not data:
            return config

        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            default = getattr(config, f.name)
            try:
                setattr(config, f.name, _coerce(raw, default))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid value for '{f.name}': {raw!r}")

        return config

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ErrorReportingConfig':
        """Load configuration from ERROR_REPORTING_* environment variables."""
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            env_key = f'{ENV_PREFIX}{f.name.upper()}'
            if env_key in environ:
                values[f.name] = environ[env_key]
        return cls.from_dict(values)

    @classmethod
    def has_env_settings(cls, environ: Optional[Mapping[str, str]] = None) -> bool:
        """True if any ERROR_REPORTING_* variable is set."""
        environ = os.environ if environ is None else environ
        return any(key.startswith(ENV_PREFIX) for key in environ)

    def to_dict(self) -> Dict[str, Any]:
        """Flat key/value snapshot of every tunable."""
        return asdict(self)


def _coerce(raw: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in _TRUE_VALUES
        return bool(raw)
    if isinstance(default, int):
        if isinstance(raw, bool):
            return int(raw)
        return int(str(raw).strip())
    if raw is None:
        return default
    return str(raw)
