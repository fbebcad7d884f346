"""
Redaction of sensitive request fields before they leave the process.
"""

import re
from typing import Any, Iterable, List, Optional

REDACTED_TEXT = '***REDACTED***'

DEFAULT_SENSITIVE_PATTERNS = [
    'password',
    'passwd',
    'pwd',
    'secret',
    'token',
    'api_key',
    'apikey',
    'access_token',
    'refresh_token',
    'private_key',
    'cc_number',
    'cc_cid',
    'cc_cvv',
    'cvv',
    'card_number',
    'card_cvv',
    'ssn',
    'social_security',
]


class DataSanitizer:
    """
    Recursively replace values whose key looks sensitive.

    A key is sensitive if it contains any pattern (case-insensitive).
    Nested dicts and lists are walked; the input is never mutated.
    """

    def __init__(self, additional_patterns: Optional[Iterable[str]] = None, config_patterns: str = ''):
        patterns: List[str] = list(DEFAULT_SENSITIVE_PATTERNS)
        patterns.extend(additional_patterns or [])
        patterns.extend(parse_field_list(config_patterns))

        # Remove duplicates, keep order
        seen = set()
        self.patterns = []
        for pattern in patterns:
            lowered = pattern.strip().lower()
            if lowered and lowered not in seen:
                seen.add(lowered)
                self.patterns.append(lowered)

    def is_sensitive_key(self, key: Any) -> bool:
        lower_key = str(key).lower()
        return any(pattern in lower_key for pattern in self.patterns)

    def sanitize(self, data: Any) -> Any:
        if isinstance(data, dict):
            sanitized = {}
            for key, value in data.items():
                if self.is_sensitive_key(key):
                    sanitized[key] = REDACTED_TEXT
                else:
                    sanitized[key] = self.sanitize(value)
            return sanitized

        if isinstance(data, (list, tuple)):
            return [self.sanitize(item) for item in data]

        return data


def parse_field_list(value: str) -> List[str]:
    """Split a comma or newline separated list."""
    if not value:
        return []
    return [item.strip() for item in re.split(r'[,\n\r]+', value) if item.strip()]
