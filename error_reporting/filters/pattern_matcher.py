"""
Pattern matching shared by the exception and controller filters.

Patterns are entered one per line in configuration. Each pattern is tried
against every target as:
    1. exact string match
    2. regex search, if the pattern compiles (bare 'checkout_.*' or
       delimited '/checkout_.*/i')
    3. case-insensitive substring

A pattern that is not a valid regex never raises; it simply falls through
to substring matching.
"""

import logging
import re
from typing import Iterable, List, Optional, Pattern

logger = logging.getLogger(__name__)

_COMMENT_PREFIXES = ('#', '//')
_DELIMITED_RE = re.compile(r'^/(?P<body>.+)/(?P<flags>[imsx]*)$', re.DOTALL)
_FLAG_MAP = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'x': re.VERBOSE,
}


class PatternMatcher:
    """Parse and evaluate newline separated match patterns."""

    def __init__(self):
        self._compiled = {}

    @staticmethod
    def parse_patterns(raw_text: Optional[str]) -> List[str]:
        """
        Split raw config text into patterns.

        Blank lines and lines starting with '#' or '//' are dropped;
        order is preserved.
        """
        if not raw_text:
            return []

        patterns = []
        for line in raw_text.splitlines():
            line = line.strip()
            if not line or line.startswith(_COMMENT_PREFIXES):
                continue
            patterns.append(line)
        return patterns

    def matches_any(self, patterns: Iterable[str], targets: Iterable[str]) -> bool:
        targets = [target for target in targets if target]
        if not targets:
            return False

        for pattern in patterns:
            if self.matches_pattern(pattern, targets):
                return True
        return False

    def matches_pattern(self, pattern: str, targets: Iterable[str]) -> bool:
        targets = list(targets)

        if pattern in targets:
            return True

        regex = self._compile(pattern)
        if regex is not None:
            if any(regex.search(target) for target in targets):
                return True

        lowered = pattern.lower()
        return any(lowered in target.lower() for target in targets)

    def _compile(self, pattern: str) -> Optional[Pattern]:
        if pattern in self._compiled:
            return self._compiled[pattern]

        body, flags = pattern, 0
        delimited = _DELIMITED_RE.match(pattern)
        if delimited:
            body = delimited.group('body')
            for flag in delimited.group('flags'):
                flags |= _FLAG_MAP[flag]

        try:
            regex = re.compile(body, flags)
        except re.error as e:
            logger.debug(f"Pattern '{pattern}' is not a valid regex, using substring match: {e}")
            regex = None

        self._compiled[pattern] = regex
        return regex
